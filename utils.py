import logging
import os
import subprocess
import sys
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

DATE_FORMAT = "%Y-%m-%d"


# 日志配置，必须在其他模块导入之前调用
def setup_logging(level: int = logging.INFO):
    """配置全局日志"""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def parse_date(value: str) -> date:
    """解析 YYYY-MM-DD 格式的日期，格式错误抛出 ValueError"""
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


def resolve_date_range(
    since: Optional[str] = None,
    until: Optional[str] = None,
    days: Optional[int] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    计算统计的日期范围 (闭区间)。
    - 指定 days 时：最近 N 天 (含今天)
    - 否则 since/until 缺省均为今天
    """
    today = today or date.today()
    if days is not None:
        if days < 1:
            raise ValueError(f"天数必须大于 0: {days}")
        return today - timedelta(days=days - 1), today

    since_date = parse_date(since) if since else today
    until_date = parse_date(until) if until else today
    if since_date > until_date:
        raise ValueError(f"开始日期 {since_date} 晚于结束日期 {until_date}")
    return since_date, until_date


def open_report_in_browser(filename: str):
    """在浏览器中打开报告"""
    logger = logging.getLogger(__name__)
    try:
        if os.name == "nt":  # Windows
            os.startfile(filename)
        elif sys.platform == "darwin":
            subprocess.run(["open", filename], check=False)
        else:
            subprocess.run(["xdg-open", filename], check=False)
        logger.info(f"🌐 已在浏览器中打开报告: {filename}")
    except OSError as e:
        logger.warning(f"无法自动打开报告，请手动打开: {filename}, 错误: {e}")
