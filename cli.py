# cli.py
"""
命令行界面 (Interface) 层
负责参数解析、配置合并 (CLI > 项目 config.json > GlobalConfig) 并组装 RunContext。
"""
import argparse
import logging
import os
from typing import Any, Dict, List, Optional

import config_manager
import utils
from config import GlobalConfig
from context import RunContext
from orchestrator import StatisticOrchestrator

logger = logging.getLogger(__name__)

# 与 Ctrl+C 中断进程时的退出码保持一致
CANCELLED_EXIT_CODE = 130


def setup_parser() -> argparse.ArgumentParser:
    """
    负责所有 argparse 的定义。
    """
    parser = argparse.ArgumentParser(
        prog="code-statistic",
        description="Git 代码提交统计 (过滤空行、注释、import 等无效变更)",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--configure",
        action="store_true",
        help="运行交互式配置向导。\n   (需要 -r 指定要配置的仓库路径)",
    )

    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument(
        "-p",
        "--project",
        type=str,
        help="使用已配置的项目别名运行统计。",
    )
    source_group.add_argument(
        "-r",
        "--repo-path",
        type=str,
        default=None,
        help="指定要统计的 Git 仓库根目录。\n   (默认: 当前目录)",
    )
    source_group.add_argument(
        "--diff-file",
        type=str,
        default=None,
        help="回放事先保存的 diff 文本，而不是调用 git。\n"
        "   ('-' 表示从标准输入读取)",
    )

    # --- 日期范围 ---
    parser.add_argument(
        "-s", "--since", type=str, help="开始日期 YYYY-MM-DD (默认: 今天)"
    )
    parser.add_argument(
        "-u", "--until", type=str, help="结束日期 YYYY-MM-DD (默认: 今天)"
    )
    range_group = parser.add_mutually_exclusive_group()
    range_group.add_argument(
        "--today", action="store_true", help="只统计今天的提交 (忽略 -s/-u)"
    )
    range_group.add_argument(
        "-d", "--days", type=int, help="统计最近 N 天 (含今天，忽略 -s/-u)"
    )

    parser.add_argument(
        "-b",
        "--branch",
        type=str,
        default=None,
        help="指定要统计的分支 (默认: 仓库当前分支)",
    )
    parser.add_argument(
        "-f",
        "--format",
        type=str,
        choices=list(GlobalConfig.OUTPUT_FORMATS),
        default=None,
        help="报告格式 (默认: 项目 config.json 或 CODESTAT_DEFAULT_FORMAT)",
    )

    # --- 标志 (Flags) ---
    parser.add_argument(
        "--no-fetch", action="store_true", help="统计前不从远程拉取最新提交"
    )
    parser.add_argument(
        "--no-file-filter",
        action="store_true",
        help="不跳过锁文件、构建产物、图片等文件的变更",
    )
    parser.add_argument(
        "--no-browser", action="store_true", help="不自动在浏览器中打开 HTML 报告"
    )

    return parser


def _resolve_repo_path(
    args: argparse.Namespace, data_root_path: str
) -> Optional[str]:
    if args.project:
        repo_path = config_manager.get_path_from_alias(data_root_path, args.project)
        if not repo_path:
            logger.error(f"❌ 别名 '{args.project}' 未在 projects.json 中找到。")
            logger.error("   请先使用 --configure -r ... 来配置它。")
            return None
        logger.info(f"ℹ️ 使用别名 '{args.project}' (路径: {repo_path})")
        return repo_path
    return os.path.abspath(args.repo_path or os.getcwd())


def build_context(
    args: argparse.Namespace, global_config: GlobalConfig
) -> Optional[RunContext]:
    """合并命令行参数与项目配置，返回 RunContext；参数错误返回 None"""
    data_root_path = global_config.data_root_path

    repo_path: Optional[str] = None
    if not args.diff_file:
        repo_path = _resolve_repo_path(args, data_root_path)
        if not repo_path:
            return None

    project_data_path = config_manager.get_project_data_path(data_root_path, repo_path)
    project_config: Dict[str, Any] = config_manager.load_project_config(
        project_data_path
    )

    # 日期范围
    days = args.days
    if args.today:
        days = 1
    elif days is None and not (args.since or args.until):
        days = project_config.get("default_days")
    try:
        since_date, until_date = utils.resolve_date_range(args.since, args.until, days)
    except ValueError as e:
        logger.error(f"❌ 日期参数错误: {e}")
        return None

    output_format = (
        args.format or project_config.get("default_format") or global_config.DEFAULT_FORMAT
    )
    if not global_config.is_valid_format(output_format):
        logger.error(f"❌ 不支持的报告格式: {output_format}")
        return None

    fetch = global_config.AUTO_FETCH and project_config.get("default_fetch", True)
    if args.no_fetch:
        fetch = False

    exclude_authors: List[str] = project_config.get("exclude_authors", [])

    return RunContext(
        repo_path=repo_path,
        project_data_path=project_data_path,
        since_date=since_date,
        until_date=until_date,
        global_config=global_config,
        diff_file=args.diff_file,
        branch=args.branch,
        fetch=fetch,
        output_format=output_format,
        apply_file_filter=not args.no_file_filter,
        exclude_authors=exclude_authors,
        no_browser=args.no_browser,
    )


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    主入口点，返回进程退出码。
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    global_config = GlobalConfig()
    data_root_path = global_config.data_root_path
    os.makedirs(data_root_path, exist_ok=True)

    # 特殊模式：--configure
    if args.configure:
        if not args.repo_path:
            logger.error("❌ --configure 标志需要 -r / --repo-path 指定目标仓库路径。")
            return 1
        logger.info(f"⚙️ 启动交互式配置向导: {args.repo_path}")
        config_manager.run_interactive_config_wizard(
            data_root_path, os.path.abspath(args.repo_path)
        )
        return 0

    run_context = build_context(args, global_config)
    if run_context is None:
        return 1

    logger.info("=" * 50)
    logger.info("🚀 Code Statistic 启动...")
    logger.info(f"   [数据来源]: {run_context.diff_file or run_context.repo_path}")
    logger.info(f"   [统计范围]: {run_context.time_range_desc}")
    logger.info(f"   [报告格式]: {run_context.output_format}")
    logger.info("=" * 50)

    orchestrator = StatisticOrchestrator(run_context)
    statistics = orchestrator.run()
    if orchestrator.cancel_token.is_cancelled:
        logger.warning("⚠️ 统计已被用户取消。")
        return CANCELLED_EXIT_CODE
    if statistics is None:
        logger.error("❌ 统计失败，请检查上方日志中的错误信息。")
        return 1

    logger.info("✅ 统计完成。")
    return 0
