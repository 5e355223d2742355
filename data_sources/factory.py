import logging
from context import RunContext
from .base import DiffSource
from .file_source import FileDiffSource
from .local_git import LocalGitDiffSource

logger = logging.getLogger(__name__)


def get_diff_source(context: RunContext) -> DiffSource:
    """
    数据源工厂
    指定了 diff 文件时回放文件内容，否则读取本地 Git 仓库。
    """
    if context.diff_file:
        logger.info(f"🔌 [Factory] 初始化数据源: Diff 文件 ({context.diff_file})")
        return FileDiffSource(context)

    logger.info("🔌 [Factory] 初始化数据源: Local Git")
    return LocalGitDiffSource(context)
