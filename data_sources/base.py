from abc import ABC, abstractmethod
from datetime import date
from typing import Iterator, Optional


class DiffSourceUnavailable(Exception):
    """
    数据源无法提供 diff 文本 (不是 Git 仓库、git 不可用、命令失败、文件不存在等)。
    与"统计结果为空"是两种不同的结果，调用方需要向用户给出可读的失败信息。
    """


class DiffSource(ABC):
    """
    Diff 文本数据源抽象基类
    对统计核心而言，数据源只有一个能力：
    为 (分支, 开始日期, 结束日期) 产出一个有限的、可取消的 diff 文本行序列。
    """

    @abstractmethod
    def validate(self) -> bool:
        """
        验证数据源是否可用。
        例如：本地路径是否存在且为 Git 仓库，或者 diff 文件是否存在。
        """
        pass

    @abstractmethod
    def get_branch(self) -> Optional[str]:
        """
        获取要统计的分支名。无分支概念的数据源返回 None。
        """
        pass

    def refresh(self, branch: Optional[str]) -> bool:
        """
        (可选) 在统计前拉取最新数据。默认不做任何事。
        """
        return True

    @abstractmethod
    def iter_diff_lines(
        self, branch: Optional[str], since: date, until: date
    ) -> Iterator[str]:
        """
        按顺序产出 diff 文本行：`COMMIT:<作者>` 提交边界行以及随后的 diff 行。
        关闭返回的迭代器即取消底层生产者。
        失败时抛出 DiffSourceUnavailable。
        """
        pass
