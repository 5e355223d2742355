# report_builder.py
"""
[V1.1] 报告生成器
负责将统计结果渲染为终端表格、Markdown、JSON 或 HTML (Jinja2 模板)。
"""
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import markdown
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import GlobalConfig
from context import RunContext
from models import AuthorStatistic
from noise_rules import describe_rules_markdown

logger = logging.getLogger(__name__)

COLUMN_NAMES = ["排名", "作者", "提交次数", "新增行数", "删除行数", "总变更行数"]
EMPTY_MESSAGE = "所选时间范围内没有找到符合条件的提交记录"

FILE_EXTENSIONS = {"markdown": "md", "json": "json", "html": "html"}


def build_rows(statistics: List[AuthorStatistic]) -> List[Dict[str, Any]]:
    """将统计列表转换为带排名的行 (排名即列表中的位置)"""
    rows = []
    for rank, stat in enumerate(statistics, start=1):
        row = stat.to_dict()
        row["rank"] = rank
        rows.append(row)
    return rows


def _row_values(row: Dict[str, Any]) -> List[str]:
    return [
        str(row["rank"]),
        row["author"],
        str(row["commit_count"]),
        str(row["additions"]),
        str(row["deletions"]),
        str(row["total_changes"]),
    ]


def generate_text_report(
    statistics: List[AuthorStatistic], branch: Optional[str], context: RunContext
) -> str:
    """
    生成纯文本表格 (用于终端输出)。
    """
    lines = [
        "=" * 80,
        "                            Git 代码提交统计",
        "=" * 80,
        f"生成时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"统计分支: {branch or '未知'}",
        f"统计范围: {context.time_range_desc}",
        "",
    ]
    if not statistics:
        lines.append(f"⚠️  {EMPTY_MESSAGE}")
        lines.append("=" * 80)
        return "\n".join(lines)

    rows = [COLUMN_NAMES] + [_row_values(row) for row in build_rows(statistics)]
    widths = [max(len(r[i]) for r in rows) for i in range(len(COLUMN_NAMES))]
    for index, values in enumerate(rows):
        lines.append(
            " | ".join(value.ljust(widths[i]) for i, value in enumerate(values))
        )
        if index == 0:
            lines.append("-" * 80)

    total = sum(stat.total_changes for stat in statistics)
    commits = sum(stat.commit_count for stat in statistics)
    lines.append("-" * 80)
    lines.append(f"合计: {len(statistics)} 位作者, {commits} 次提交, {total} 行有效变更")
    lines.append("=" * 80)
    return "\n".join(lines)


def generate_markdown_report(
    statistics: List[AuthorStatistic], branch: Optional[str], context: RunContext
) -> str:
    """生成 Markdown 表格报告"""
    lines = [
        f"# Git 代码提交统计 ({context.time_range_desc})",
        "",
        f"- 统计分支: `{branch or '未知'}`",
        f"- 生成时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
    ]
    if not statistics:
        lines.append(f"> {EMPTY_MESSAGE}")
        return "\n".join(lines) + "\n"

    lines.append("| " + " | ".join(COLUMN_NAMES) + " |")
    lines.append("|" + "---|" * len(COLUMN_NAMES))
    for row in build_rows(statistics):
        values = _row_values(row)
        # 作者名中的竖线会破坏表格
        values[1] = values[1].replace("|", "\\|")
        lines.append("| " + " | ".join(values) + " |")
    return "\n".join(lines) + "\n"


def generate_json_report(
    statistics: List[AuthorStatistic], branch: Optional[str], context: RunContext
) -> str:
    """生成 JSON 报告 (便于下游程序消费)"""
    document = {
        "branch": branch,
        "since": context.since_date.isoformat(),
        "until": context.until_date.isoformat(),
        "generated_at": datetime.now().isoformat(timespec="seconds"),
        "statistics": build_rows(statistics),
    }
    return json.dumps(document, ensure_ascii=False, indent=2)


def _get_css_styles(global_config: GlobalConfig) -> str:
    """读取 CSS 文件内容"""
    css_path = os.path.join(global_config.templates_path, "styles.css")
    try:
        with open(css_path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        logger.error(f"❌ 加载 CSS 模板失败 ({css_path}): {e}")
        return "/* CSS 模板文件未找到 */"


def generate_html_report(
    statistics: List[AuthorStatistic], branch: Optional[str], context: RunContext
) -> str:
    """
    使用 Jinja2 模板引擎生成 HTML 报告。
    """
    global_config = context.global_config

    # 1. 准备模板环境
    env = Environment(
        loader=FileSystemLoader(global_config.templates_path),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )

    # 2. 准备数据上下文
    rules_html = markdown.markdown(describe_rules_markdown(), extensions=["sane_lists"])
    template_context = {
        "title": f"Git 代码提交统计 - {context.time_range_desc}",
        "generation_time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "css_content": _get_css_styles(global_config),
        "branch": branch or "未知",
        "time_range": context.time_range_desc,
        "column_names": COLUMN_NAMES,
        "rows": build_rows(statistics),
        "total_commits": sum(stat.commit_count for stat in statistics),
        "total_changes": sum(stat.total_changes for stat in statistics),
        "empty_message": EMPTY_MESSAGE,
        "rules_html": rules_html,
    }

    # 3. 加载并渲染模板
    try:
        template = env.get_template(global_config.HTML_TEMPLATE_NAME)
        logger.info(f"🎨 正在渲染 Jinja2 模板: {global_config.HTML_TEMPLATE_NAME}")
        return template.render(**template_context)
    except Exception as e:
        logger.error(f"❌ Jinja2 模板渲染失败: {e}", exc_info=True)
        return f"<h1>错误：模板渲染失败</h1><pre>{e}</pre>"


RENDERERS = {
    "table": generate_text_report,
    "markdown": generate_markdown_report,
    "json": generate_json_report,
    "html": generate_html_report,
}


def render_report(
    output_format: str,
    statistics: List[AuthorStatistic],
    branch: Optional[str],
    context: RunContext,
) -> str:
    renderer = RENDERERS.get(output_format)
    if renderer is None:
        raise ValueError(f"不支持的报告格式: {output_format}")
    return renderer(statistics, branch, context)


def save_report(content: str, output_format: str, context: RunContext) -> Optional[str]:
    """保存报告到项目数据目录，返回完整路径；失败返回 None"""
    extension = FILE_EXTENSIONS.get(output_format, "txt")
    filename = (
        f"{context.global_config.OUTPUT_FILENAME_PREFIX}_"
        f"{datetime.now().strftime('%Y%m%d_%H%M%S')}.{extension}"
    )
    full_path = os.path.join(context.project_data_path, filename)

    try:
        os.makedirs(context.project_data_path, exist_ok=True)
        with open(full_path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info(f"✅ 报告已保存: {full_path}")
        return full_path
    except OSError as e:
        logger.error(f"❌ 保存报告失败 ({full_path}): {e}")
        return None
