# config_manager.py
"""
配置管理器
- 负责处理全局项目别名 (data/projects.json)
- 负责处理项目级默认配置 (data/<Project>/config.json)
- 包含一个交互式向导 (run_interactive_config_wizard)
"""

import os
import json
import logging
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

PROJECTS_JSON_FILE = "projects.json"
CONFIG_JSON_FILE = "config.json"
DIFF_FILE_PROJECT_NAME = "diff_file_project"


def load_project_aliases(data_root_path: str) -> Dict[str, str]:
    """加载全局别名文件 (data/projects.json)"""
    aliases_path = os.path.join(data_root_path, PROJECTS_JSON_FILE)
    if not os.path.exists(aliases_path):
        return {}
    try:
        with open(aliases_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"❌ 加载别名文件 {aliases_path} 失败: {e}")
        return {}


def save_project_aliases(data_root_path: str, aliases: Dict[str, str]):
    """保存全局别名文件 (data/projects.json)"""
    aliases_path = os.path.join(data_root_path, PROJECTS_JSON_FILE)
    try:
        os.makedirs(data_root_path, exist_ok=True)
        with open(aliases_path, "w", encoding="utf-8") as f:
            json.dump(aliases, f, indent=4, ensure_ascii=False)
    except OSError as e:
        logger.error(f"❌ 保存别名文件 {aliases_path} 失败: {e}")


def get_path_from_alias(data_root_path: str, alias: str) -> Optional[str]:
    """通过别名获取仓库的绝对路径"""
    return load_project_aliases(data_root_path).get(alias)


def load_project_config(project_data_path: str) -> Dict[str, Any]:
    """加载特定项目的配置文件 (data/<Project>/config.json)"""
    config_path = os.path.join(project_data_path, CONFIG_JSON_FILE)
    if not os.path.exists(config_path):
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"❌ 加载项目配置 {config_path} 失败: {e}")
        return {}


def save_project_config(project_data_path: str, config_data: Dict[str, Any]):
    """保存特定项目的配置文件 (data/<Project>/config.json)"""
    config_path = os.path.join(project_data_path, CONFIG_JSON_FILE)
    try:
        os.makedirs(project_data_path, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_data, f, indent=4, ensure_ascii=False)
    except OSError as e:
        logger.error(f"❌ 保存项目配置 {config_path} 失败: {e}")


def get_project_data_path(data_root_path: str, repo_path: Optional[str]) -> str:
    """根据仓库路径获取其数据存储路径；没有仓库 (回放 diff 文件) 时使用固定目录"""
    if not repo_path:
        return os.path.join(data_root_path, DIFF_FILE_PROJECT_NAME)
    project_name = os.path.basename(os.path.abspath(repo_path)) or "root_project"
    return os.path.join(data_root_path, project_name)


def _input_with_default(prompt: str, default: str) -> str:
    """获取带默认值的用户输入"""
    return input(f"{prompt} [{default}]: ") or default


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("y", "yes", "true", "1")


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def run_interactive_config_wizard(data_root_path: str, repo_path: str):
    """
    运行交互式配置向导
    """
    logger.info("--- 🚀 欢迎使用 Code Statistic 配置向导 ---")
    repo_path_abs = os.path.abspath(repo_path)
    if not os.path.isdir(repo_path_abs):
        logger.error(f"路径 {repo_path_abs} 不是一个有效的目录。")
        return

    project_data_path = get_project_data_path(data_root_path, repo_path_abs)
    project_name_default = os.path.basename(project_data_path)

    logger.info(f"  [目标仓库]: {repo_path_abs}")
    logger.info(f"  [数据目录]: {project_data_path}")

    aliases = load_project_aliases(data_root_path)
    current_config = load_project_config(project_data_path)

    print("\n--- 1. 项目别名配置 ---")
    current_alias = next(
        (alias for alias, path in aliases.items() if path == repo_path_abs),
        project_name_default,
    )
    alias = _input_with_default("  设置一个简短的别名 (用于 -p ...)", current_alias)
    aliases[alias] = repo_path_abs
    save_project_aliases(data_root_path, aliases)
    logger.info(f"✅ 别名 '{alias}' 已保存至 {PROJECTS_JSON_FILE}")

    print("\n--- 2. 项目默认值配置 ---")
    print("  (提示：保留默认值或直接按 Enter 键跳过)")
    config_data: Dict[str, Any] = {}
    config_data["default_format"] = _input_with_default(
        "  默认报告格式 (table, markdown, json, html)",
        current_config.get("default_format", "table"),
    )
    config_data["default_fetch"] = _parse_bool(
        _input_with_default(
            "  统计前是否拉取远程最新提交 (y/n)",
            "y" if current_config.get("default_fetch", True) else "n",
        )
    )
    days_str = _input_with_default(
        "  默认统计最近几天 (1 表示仅今天)", str(current_config.get("default_days", 1))
    )
    config_data["default_days"] = max(int(days_str), 1) if days_str.isdigit() else 1

    excluded_str = _input_with_default(
        "  排除的作者 (多个请用逗号,分隔)",
        ", ".join(current_config.get("exclude_authors", [])),
    )
    config_data["exclude_authors"] = _split_csv(excluded_str)

    save_project_config(project_data_path, config_data)
    logger.info(f"✅ 项目配置已保存至 {project_data_path}/{CONFIG_JSON_FILE}")

    print("\n--- ✅ 配置完成！ ---")
    print(f"  现在你可以使用 'code-statistic -p {alias}' 来运行统计。")
