# orchestrator.py
"""
[V1.1] 业务逻辑编排器
- 数据源 (DiffSource) -> 分类 + 聚合 (statistic_service) -> Hook 过滤 -> 报告输出
- 统计过程支持 Ctrl+C 协作式取消，取消后不展示部分结果
"""
import logging
import signal
import threading
from contextlib import closing, contextmanager
from typing import List, Optional

from context import RunContext
from data_sources.base import DiffSource, DiffSourceUnavailable
from data_sources.factory import get_diff_source
from hooks.manager import PluginManager
from models import AuthorStatistic
from statistic_service import CancelToken, compute_statistics
import report_builder
import utils

logger = logging.getLogger(__name__)


class StatisticOrchestrator:
    """
    负责执行一次代码统计的完整流程。

    run() 的返回值区分三种结果：
    - None: 统计失败 (数据源不可用等)，失败原因已记录到日志
    - []: 所选范围内没有符合条件的提交，或统计被取消
    - 列表: 按总变更行数降序排列的统计结果
    """

    def __init__(
        self,
        context: RunContext,
        diff_source: Optional[DiffSource] = None,
        plugin_manager: Optional[PluginManager] = None,
    ):
        self.context = context
        self.global_config = context.global_config

        self.diff_source = diff_source or get_diff_source(context)

        if plugin_manager is None:
            plugin_manager = PluginManager(context)
            plugin_manager.load_plugins()
        self.plugin_manager = plugin_manager

        self.cancel_token = CancelToken()
        self.branch: Optional[str] = None
        self.report_content: Optional[str] = None
        self.report_path: Optional[str] = None

        logger.info("✅ StatisticOrchestrator 已初始化")

    def run(self) -> Optional[List[AuthorStatistic]]:
        """
        执行核心业务流程。
        """
        self.plugin_manager.trigger("on_start")
        statistics = self._collect_statistics()
        if statistics is not None and not self.cancel_token.is_cancelled:
            self._publish(statistics)
        self.plugin_manager.trigger("on_finish")
        return statistics

    def cancel(self):
        """请求取消正在进行的统计 (可在其他线程中调用)"""
        self.cancel_token.cancel()

    def _collect_statistics(self) -> Optional[List[AuthorStatistic]]:
        # --- 1. 验证数据源 ---
        if not self.diff_source.validate():
            logger.error("❌ 数据源验证失败，终止运行。")
            return None

        # --- 2. 确定分支 ---
        self.branch = self.diff_source.get_branch()
        if not self.branch and not self.context.diff_file:
            logger.error("❌ 无法获取当前 Git 分支，终止运行。")
            return None

        # --- 3. 拉取最新提交 (失败不影响统计) ---
        if self.context.fetch:
            self.diff_source.refresh(self.branch)

        # --- 4. 流式读取 + 分类 + 聚合 ---
        excluded_patterns = (
            self.global_config.FILTER_FILE_PATTERNS
            if self.context.apply_file_filter
            else None
        )
        logger.info(
            f"📊 正在统计 {self.context.time_range_desc} 的提交 (分支: {self.branch or '未知'})..."
        )
        try:
            lines = self.diff_source.iter_diff_lines(
                self.branch, self.context.since_date, self.context.until_date
            )
            with closing(lines), self._cancel_on_sigint():
                statistics = compute_statistics(
                    lines,
                    cancel_token=self.cancel_token,
                    progress_callback=self._report_progress,
                    excluded_file_patterns=excluded_patterns,
                )
        except DiffSourceUnavailable as e:
            if self.cancel_token.is_cancelled:
                # Ctrl+C 同时会中断 git 进程，此时的非零退出属于取消
                logger.warning("⚠️ 统计已取消，不展示部分结果。")
                return []
            logger.error(f"❌ 获取提交记录失败: {e}")
            return None

        if self.cancel_token.is_cancelled:
            logger.warning("⚠️ 统计已取消，不展示部分结果。")
            return []

        # --- 5. 排除作者 + 插件过滤 ---
        if self.context.exclude_authors:
            excluded = set(self.context.exclude_authors)
            statistics = [s for s in statistics if s.author not in excluded]

        statistics = self.plugin_manager.filter("on_statistics_computed", statistics)
        return sorted(statistics, key=lambda s: s.total_changes, reverse=True)

    def _publish(self, statistics: List[AuthorStatistic]):
        output_format = self.context.output_format
        if not statistics:
            logger.warning(f"⚠️ {report_builder.EMPTY_MESSAGE}")

        content = report_builder.render_report(
            output_format, statistics, self.branch, self.context
        )

        if output_format == "html":
            # 允许插件注入水印、脚本等
            content = self.plugin_manager.filter("on_html_generated", content)
        self.report_content = content

        if output_format == "table":
            print(content)
            return

        self.report_path = report_builder.save_report(
            content, output_format, self.context
        )
        if not self.report_path:
            logger.error("❌ 报告文件生成失败。")
            return

        if output_format == "html" and not self.context.no_browser:
            utils.open_report_in_browser(self.report_path)

    def _report_progress(self, line_count: int):
        logger.info(f"⏳ 正在处理提交记录... (已处理 {line_count} 行)")

    @contextmanager
    def _cancel_on_sigint(self):
        """统计期间将 Ctrl+C 转换为协作式取消 (仅主线程可安装信号处理函数)"""
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def _handler(signum, frame):
            logger.warning("⚠️ 收到中断信号，正在取消统计...")
            self.cancel_token.cancel()

        previous = signal.signal(signal.SIGINT, _handler)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous)
