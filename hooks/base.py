from abc import ABC
from typing import List
from context import RunContext
from models import AuthorStatistic


class BasePlugin(ABC):
    """
    插件基类
    定义所有生命周期钩子。用户自定义插件应继承此类。
    """

    # 插件名称 (建议子类覆盖)
    name: str = "BasePlugin"

    def on_start(self, context: RunContext):
        """
        [钩子] 流程开始时调用。
        """
        pass

    def on_statistics_computed(
        self, context: RunContext, statistics: List[AuthorStatistic]
    ) -> List[AuthorStatistic]:
        """
        [Filter 钩子] 统计完成、生成报告之前调用。
        **必须返回列表**。可用于剔除机器人账号、合并同一人的多个作者名等。
        返回的列表会被重新按总变更行数排序。
        """
        return statistics

    def on_html_generated(self, context: RunContext, html_content: str) -> str:
        """
        [Filter 钩子] HTML 生成后，保存前调用。
        可用于注入自定义 script 标签或 footer。
        """
        return html_content

    def on_finish(self, context: RunContext):
        """
        [钩子] 流程结束时调用（无论是否有统计结果，只要未崩溃）。
        """
        pass
