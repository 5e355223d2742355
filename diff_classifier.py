# diff_classifier.py
"""
[V1.1] Diff 行分类器
逐行扫描 `git log -p` 的输出，识别提交边界，并判断每一条新增/删除行是否为"有效代码"。

扫描规则 (按顺序):
1. `COMMIT:<作者>` 行 -> CommitStarted，并重置注释状态
2. hunk 之外的 `+++` / `---` 文件头行 -> 忽略 (只记录当前文件路径)；
   hunk 内按 `@@ -a,b +c,d @@` 的行数计数，`--- x` 仍是删除行
3. `+` / `-` 开头的行 -> 变更候选，去掉标记符后分类
4. 其余行 (hunk 头、上下文、diff --git 等) -> 忽略
"""
import fnmatch
import logging
import re
from typing import Any, Iterable, Iterator, List, Optional, Sequence

from models import ChangeDirection, CommitStarted, DiffEvent, LineChange, ScanState
from noise_rules import (
    BLOCK_COMMENT_CLOSE,
    BLOCK_COMMENT_OPEN,
    MARKUP_COMMENT_CLOSE,
    MARKUP_COMMENT_OPEN,
    find_noise_rule,
)

logger = logging.getLogger(__name__)

COMMIT_MARKER = "COMMIT:"
ADDED_FILE_HEADER = "+++"
REMOVED_FILE_HEADER = "---"
NULL_DEVICE = "/dev/null"
DIFF_GIT_PREFIX = "diff --git "
HUNK_PREFIX = "@@"
CONTEXT_PREFIX = " "
# @@ -旧起始[,旧行数] +新起始[,新行数] @@，行数省略时为 1
HUNK_HEADER_RE = re.compile(r"^@@ -\d+(?:,(\d+))? \+\d+(?:,(\d+))? @@")


def normalize_line(raw_line: Any) -> Optional[str]:
    """统一输入行：bytes 按 UTF-8 (替换非法字符) 解码，去掉行尾换行符"""
    if isinstance(raw_line, bytes):
        raw_line = raw_line.decode("utf-8", errors="replace")
    if not isinstance(raw_line, str):
        return None
    return raw_line.rstrip("\r\n")


def _is_file_header(line: str) -> bool:
    for marker in (ADDED_FILE_HEADER, REMOVED_FILE_HEADER):
        if line == marker or line.startswith(marker + " "):
            return True
    return False


def _header_path(line: str) -> Optional[str]:
    """从 `+++ b/path` / `--- a/path` 中取出文件路径"""
    path = line[len(ADDED_FILE_HEADER) :].strip()
    # 文件名包含空格时 git 会在末尾追加制表符
    path = path.split("\t", 1)[0].strip('"')
    if not path or path == NULL_DEVICE:
        return None
    if path.startswith(("a/", "b/")):
        path = path[2:]
    return path


class DiffLineClassifier:
    """
    单遍、有状态的 diff 行扫描器。

    注释状态 (ScanState) 只在一个提交内有效，每遇到提交边界就重置。
    分类只依赖当前行和注释状态，不会回头修改已经做出的判断。

    :param commit_marker: 提交边界行的固定前缀
    :param excluded_file_patterns: (可选) fnmatch 模式列表，命中的文件中的变更行一律不计
    """

    def __init__(
        self,
        commit_marker: str = COMMIT_MARKER,
        excluded_file_patterns: Optional[Sequence[str]] = None,
    ):
        self.commit_marker = commit_marker
        self.excluded_file_patterns: List[str] = list(excluded_file_patterns or [])
        self.state = ScanState()

    def scan(self, lines: Iterable[Any]) -> Iterator[DiffEvent]:
        """
        惰性地将输入行转换为事件序列。
        lines 为 None 属于调用方的编程错误，直接抛出 TypeError。
        """
        if lines is None:
            raise TypeError("lines 不能为 None，请传入 diff 文本行的可迭代对象")
        return self._scan(lines)

    def _scan(self, lines: Iterable[Any]) -> Iterator[DiffEvent]:
        self.state.reset()
        for raw_line in lines:
            line = normalize_line(raw_line)
            if line is None:
                logger.debug(f"跳过无法识别的输入行: {raw_line!r}")
                continue
            event = self.process_line(line)
            if event is not None:
                yield event

    def process_line(self, line: str) -> Optional[DiffEvent]:
        """处理单行，返回对应事件；不产生事件的行返回 None"""
        if line.startswith(self.commit_marker):
            self.state.reset()
            return CommitStarted(author=line[len(self.commit_marker) :])

        if line.startswith(DIFF_GIT_PREFIX):
            # 新文件开始，上一个文件的 hunk 与路径都失效
            self.state.end_hunk()
            self.state.current_file = None
            return None

        if line.startswith(HUNK_PREFIX):
            self._start_hunk(line)
            return None

        # hunk 内容中的 `--- x` 是内容为 `-- x` 的删除行，不是文件头
        if not self.state.in_hunk and _is_file_header(line):
            self._track_file_header(line)
            return None

        if line.startswith(ChangeDirection.ADDED.value):
            direction = ChangeDirection.ADDED
        elif line.startswith(ChangeDirection.REMOVED.value):
            direction = ChangeDirection.REMOVED
        else:
            if line.startswith(CONTEXT_PREFIX):
                self.state.consume_hunk_line(old=True, new=True)
            return None

        event = LineChange(direction=direction, effective=self.is_effective(line[1:]))
        self.state.consume_hunk_line(
            old=direction is ChangeDirection.REMOVED,
            new=direction is ChangeDirection.ADDED,
        )
        return event

    def is_effective(self, content: str) -> bool:
        """判断去掉 +/- 标记后的内容是否为有效代码 (会更新注释状态)"""
        if self._in_excluded_file():
            return False

        state = self.state

        # 未闭合的注释块：整行吞掉，只用于检测闭合 (闭合行本身也不计)
        if state.in_block_comment:
            if BLOCK_COMMENT_CLOSE in content:
                state.in_block_comment = False
            return False
        if state.in_markup_comment:
            if MARKUP_COMMENT_CLOSE in content:
                state.in_markup_comment = False
            return False

        stripped = content.lstrip()
        if stripped.startswith(BLOCK_COMMENT_OPEN):
            if BLOCK_COMMENT_CLOSE not in stripped[len(BLOCK_COMMENT_OPEN) :]:
                state.in_block_comment = True
            return False
        if stripped.startswith(MARKUP_COMMENT_OPEN):
            if MARKUP_COMMENT_CLOSE not in stripped[len(MARKUP_COMMENT_OPEN) :]:
                state.in_markup_comment = True
            return False

        rule = find_noise_rule(content)
        if rule is not None:
            logger.debug(f"[{rule.name}] 过滤: {content!r}")
            return False
        return True

    def _start_hunk(self, line: str):
        match = HUNK_HEADER_RE.match(line)
        if match is None:
            logger.debug(f"无法解析的 hunk 头，直到下一个文件前不再识别文件头: {line!r}")
            self.state.start_hunk(None, None)
            return
        old_count, new_count = (
            int(count) if count is not None else 1 for count in match.groups()
        )
        if old_count or new_count:
            self.state.start_hunk(old_count, new_count)

    def _track_file_header(self, line: str):
        path = _header_path(line)
        if line.startswith(ADDED_FILE_HEADER):
            # 删除文件时 +++ 为 /dev/null，沿用 --- 中的旧路径
            if path is not None:
                self.state.current_file = path
        else:
            self.state.current_file = path

    def _in_excluded_file(self) -> bool:
        current_file = self.state.current_file
        if not current_file or not self.excluded_file_patterns:
            return False
        return any(
            fnmatch.fnmatch(current_file, pattern)
            for pattern in self.excluded_file_patterns
        )
