# models.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


@dataclass
class AuthorStatistic:
    """单个作者的有效代码统计数据模型"""

    author: str
    commit_count: int = 0
    additions: int = 0
    deletions: int = 0

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions

    def increment_commit_count(self):
        """每遇到一次提交边界时调用 (一次提交只算一次)"""
        self.commit_count += 1

    def add_changes(self, additions: int = 0, deletions: int = 0):
        """只累加代码变更行数，不增加提交次数"""
        self.additions += additions
        self.deletions += deletions

    def to_dict(self) -> dict:
        return {
            "author": self.author,
            "commit_count": self.commit_count,
            "additions": self.additions,
            "deletions": self.deletions,
            "total_changes": self.total_changes,
        }


class ChangeDirection(Enum):
    ADDED = "+"
    REMOVED = "-"


@dataclass(frozen=True)
class CommitStarted:
    """提交边界事件：`COMMIT:<作者>`"""

    author: str


@dataclass(frozen=True)
class LineChange:
    """新增/删除行事件，effective 表示是否计为有效代码"""

    direction: ChangeDirection
    effective: bool


DiffEvent = Union[CommitStarted, LineChange]


@dataclass
class ScanState:
    """
    扫描器在单个提交内的状态。
    每遇到一个新的提交边界都必须 reset()，注释状态不会跨提交延续。
    """

    in_block_comment: bool = False
    in_markup_comment: bool = False
    current_file: Optional[str] = None
    # hunk 内剩余的旧/新行数；None 表示 @@ 行无法解析，直到下一个文件才结束
    in_hunk: bool = False
    hunk_old_remaining: Optional[int] = None
    hunk_new_remaining: Optional[int] = None

    def reset(self):
        self.in_block_comment = False
        self.in_markup_comment = False
        self.current_file = None
        self.end_hunk()

    def start_hunk(self, old_count: Optional[int], new_count: Optional[int]):
        self.in_hunk = True
        self.hunk_old_remaining = old_count
        self.hunk_new_remaining = new_count

    def end_hunk(self):
        self.in_hunk = False
        self.hunk_old_remaining = None
        self.hunk_new_remaining = None

    def consume_hunk_line(self, old: bool, new: bool):
        """记录 hunk 内消耗的一行 (删除行只占旧文件，新增行只占新文件，上下文两者都占)"""
        if not self.in_hunk or self.hunk_old_remaining is None:
            return
        if old:
            self.hunk_old_remaining -= 1
        if new:
            self.hunk_new_remaining -= 1
        if self.hunk_old_remaining <= 0 and self.hunk_new_remaining <= 0:
            self.end_hunk()
