import logging
import os
import sys
from datetime import date
from typing import Iterator, Optional

from .base import DiffSource, DiffSourceUnavailable
from context import RunContext

logger = logging.getLogger(__name__)

STDIN_PATH = "-"


class FileDiffSource(DiffSource):
    """
    离线数据源：回放事先保存的 diff 文本，例如
    `git log --no-merges -p --unified=0 --pretty=format:"COMMIT:%an" > history.diff`
    日期范围仅作展示用途，文件内容被视为已经按范围筛选过。
    """

    def __init__(self, context: RunContext):
        self.context = context
        self.diff_file = context.diff_file

    def validate(self) -> bool:
        if self.diff_file == STDIN_PATH:
            return True
        if not self.diff_file or not os.path.isfile(self.diff_file):
            logger.error(f"❌ diff 文件不存在: {self.diff_file}")
            return False
        return True

    def get_branch(self) -> Optional[str]:
        return self.context.branch

    def iter_diff_lines(
        self, branch: Optional[str], since: date, until: date
    ) -> Iterator[str]:
        if self.diff_file == STDIN_PATH:
            logger.info("📥 正在从标准输入读取 diff 文本...")
            for line in sys.stdin:
                yield line.rstrip("\r\n")
            return

        logger.info(f"📥 正在读取 diff 文件: {self.diff_file}")
        try:
            with open(self.diff_file, "r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    yield line.rstrip("\r\n")
        except OSError as e:
            raise DiffSourceUnavailable(f"读取 diff 文件失败 ({self.diff_file}): {e}") from e
