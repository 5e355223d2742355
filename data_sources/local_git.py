import logging
import os
from datetime import date
from typing import Iterator, Optional

from .base import DiffSource, DiffSourceUnavailable
from context import RunContext
import git_utils

logger = logging.getLogger(__name__)


class LocalGitDiffSource(DiffSource):
    """
    本地 Git 数据源实现。
    通过调用 git 命令行工具读取本地仓库的提交 diff。
    """

    def __init__(self, context: RunContext):
        self.context = context
        self.global_config = context.global_config

    def validate(self) -> bool:
        repo_path = self.context.repo_path
        if not repo_path or not os.path.exists(repo_path):
            logger.error(f"❌ 路径不存在: {repo_path}")
            return False
        if not git_utils.is_git_repository(repo_path):
            logger.error(f"❌ 指定路径不是 Git 仓库: {repo_path}")
            return False
        return True

    def get_branch(self) -> Optional[str]:
        if self.context.branch:
            return self.context.branch
        return git_utils.get_current_branch(self.context.repo_path, self.global_config)

    def refresh(self, branch: Optional[str]) -> bool:
        if not branch:
            return False
        logger.info(f"🔄 正在拉取最新提交记录 (分支: {branch})...")
        if git_utils.fetch_latest_commits(
            self.context.repo_path, branch, self.global_config
        ):
            logger.info("✅ 成功拉取最新提交记录")
            return True
        logger.warning("⚠️ 拉取最新提交记录失败，将使用本地现有数据进行统计")
        return False

    def iter_diff_lines(
        self, branch: Optional[str], since: date, until: date
    ) -> Iterator[str]:
        if not branch:
            raise DiffSourceUnavailable("无法确定要统计的 Git 分支")
        cmd = git_utils.build_stat_log_command(branch, since, until, self.global_config)
        try:
            yield from git_utils.stream_git_lines(
                cmd, self.context.repo_path, f"读取提交记录 (分支: {branch})"
            )
        except git_utils.GitCommandError as e:
            raise DiffSourceUnavailable(str(e)) from e
