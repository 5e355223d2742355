import fnmatch
import logging
from typing import List

from hooks.base import BasePlugin
from context import RunContext
from models import AuthorStatistic

logger = logging.getLogger(__name__)


class BotAuthorFilterPlugin(BasePlugin):
    """
    [插件] 机器人账号过滤
    自动化账号 (依赖升级、CI 回写等) 的提交不代表真实的开发工作量。
    """

    name = "BotAuthorFilter"

    BOT_AUTHOR_PATTERNS = ["*[[]bot[]]", "dependabot*", "renovate*"]

    def on_statistics_computed(
        self, context: RunContext, statistics: List[AuthorStatistic]
    ) -> List[AuthorStatistic]:
        kept = [
            stat
            for stat in statistics
            if not any(
                fnmatch.fnmatch(stat.author.lower(), pattern)
                for pattern in self.BOT_AUTHOR_PATTERNS
            )
        ]
        removed = len(statistics) - len(kept)
        if removed:
            logger.info(f"🤖 [BotAuthorFilter] 已移除 {removed} 个机器人账号。")
        return kept
