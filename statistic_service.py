# statistic_service.py
"""
[V1.1] 统计聚合服务
将分类器产生的事件累加为"作者 -> 统计"的映射，并输出按总变更行数降序排列的结果。
"""
import logging
import threading
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from diff_classifier import DiffLineClassifier
from models import AuthorStatistic, ChangeDirection, CommitStarted, DiffEvent, LineChange

logger = logging.getLogger(__name__)

# 每处理多少行输入回调一次进度
PROGRESS_REPORT_INTERVAL = 100


class CancelToken:
    """协作式取消标记，可在其他线程 (或信号处理函数) 中调用 cancel()"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


class StatisticsAggregator:
    """按作者累加提交次数与有效新增/删除行数"""

    def __init__(self):
        self.statistics: Dict[str, AuthorStatistic] = {}
        self.current_author: Optional[str] = None

    def _get_or_create(self, author: str) -> AuthorStatistic:
        if author not in self.statistics:
            self.statistics[author] = AuthorStatistic(author=author)
        return self.statistics[author]

    def apply(self, event: DiffEvent):
        if isinstance(event, CommitStarted):
            self.current_author = event.author
            self._get_or_create(event.author).increment_commit_count()
        elif isinstance(event, LineChange):
            if not event.effective:
                return
            if self.current_author is None:
                # 第一个提交边界之前出现的变更行 (异常输入)，直接忽略
                logger.debug("忽略提交边界之前的变更行")
                return
            stat = self._get_or_create(self.current_author)
            if event.direction is ChangeDirection.ADDED:
                stat.add_changes(additions=1)
            else:
                stat.add_changes(deletions=1)

    def apply_all(self, events: Iterable[DiffEvent]) -> "StatisticsAggregator":
        for event in events:
            self.apply(event)
        return self

    def results(self) -> List[AuthorStatistic]:
        """按总变更行数降序排列 (稳定排序，相同总数保持首次出现的顺序)"""
        return sorted(
            self.statistics.values(), key=lambda s: s.total_changes, reverse=True
        )


def compute_statistics(
    lines: Iterable[Any],
    cancel_token: Optional[CancelToken] = None,
    progress_callback: Optional[Callable[[int], None]] = None,
    excluded_file_patterns: Optional[Sequence[str]] = None,
) -> List[AuthorStatistic]:
    """
    对一次调用的 diff 文本行执行"分类 + 聚合"。

    结果要么是完整且已排序的列表，要么 (被取消时) 是空列表，不会返回部分结果。
    行生产者抛出的异常原样向上传播。
    """
    if lines is None:
        raise TypeError("lines 不能为 None，请传入 diff 文本行的可迭代对象")

    classifier = DiffLineClassifier(excluded_file_patterns=excluded_file_patterns)
    aggregator = StatisticsAggregator()
    line_count = 0

    def _watched(raw_lines: Iterable[Any]) -> Iterator[Any]:
        # 每读取一行前检查取消标记，并按固定间隔回调进度
        nonlocal line_count
        for raw_line in raw_lines:
            if cancel_token is not None and cancel_token.is_cancelled:
                return
            yield raw_line
            line_count += 1
            if progress_callback is not None and line_count % PROGRESS_REPORT_INTERVAL == 0:
                progress_callback(line_count)

    aggregator.apply_all(classifier.scan(_watched(lines)))

    if cancel_token is not None and cancel_token.is_cancelled:
        logger.warning("⚠️ 统计已取消，丢弃已累积的部分结果")
        return []

    results = aggregator.results()
    logger.info(f"✅ 共处理 {line_count} 行，统计到 {len(results)} 位作者")
    return results
