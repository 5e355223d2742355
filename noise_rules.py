# noise_rules.py
"""
[V1.1] 无效代码 (噪声) 判定规则表
- 每条规则都是一个独立的、针对单行内容的正则谓词。
- 规则之间互不依赖，命中任意一条即视为噪声 (不计入新增/删除行数)。
- 新增一种语言的注释约定只需调用 register_noise_rule()，无需修改扫描器。

注意：这里是基于行模式的启发式判断，并不是语法解析器。
例如 Python 的装饰器 (@decorator) 会被当作注解行过滤。
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Union

# 块注释 / 标记注释的起止符号 (扫描器用它们维护跨行状态)
BLOCK_COMMENT_OPEN = "/*"
BLOCK_COMMENT_CLOSE = "*/"
MARKUP_COMMENT_OPEN = "<!--"
MARKUP_COMMENT_CLOSE = "-->"


@dataclass(frozen=True)
class NoiseRule:
    """一条噪声规则：名称 + 正则 + 说明 (说明用于报告中的规则列表)"""

    name: str
    pattern: Pattern[str]
    description: str = ""

    def matches(self, content: str) -> bool:
        return self.pattern.search(content) is not None


# 全局规则表 (有序)，存储所有已注册的噪声规则
NOISE_RULES: List[NoiseRule] = []


def register_noise_rule(
    name: str, pattern: Union[str, Pattern[str]], description: str = ""
) -> NoiseRule:
    """
    向全局规则表追加一条噪声规则。

    使用示例:
        register_noise_rule("lua_comment", r"^\\s*--", "Lua 单行注释")
    """
    if any(rule.name == name for rule in NOISE_RULES):
        raise ValueError(f"噪声规则 '{name}' 已经被注册过")
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    rule = NoiseRule(name=name, pattern=compiled, description=description)
    NOISE_RULES.append(rule)
    return rule


def unregister_noise_rule(name: str) -> bool:
    """按名称移除规则，返回是否确实移除了"""
    for index, rule in enumerate(NOISE_RULES):
        if rule.name == name:
            del NOISE_RULES[index]
            return True
    return False


def find_noise_rule(content: str) -> Optional[NoiseRule]:
    """返回第一条命中的规则，未命中返回 None"""
    for rule in NOISE_RULES:
        if rule.matches(content):
            return rule
    return None


def is_noise(content: str) -> bool:
    return find_noise_rule(content) is not None


def describe_rules_markdown() -> str:
    """生成规则列表的 Markdown 文本 (用于 HTML 报告)"""
    lines = ["以下变更行不计入统计：", ""]
    for rule in NOISE_RULES:
        lines.append(f"- **{rule.name}**: {rule.description}")
    return "\n".join(lines)


# --- 内置规则 ---
register_noise_rule("blank", r"^\s*$", "空行或仅包含空白字符的行")
register_noise_rule(
    "single_line_comment", r"^\s*(//|#)", "以 `//` 或 `#` 开头的单行注释"
)
register_noise_rule(
    "block_comment_open", r"^\s*/\*", "以 `/*` 开头的块注释起始行"
)
register_noise_rule(
    "doc_tag", r"^\s*\*\s*@\w+", "块注释中的文档标签行 (如 `* @param`)"
)
register_noise_rule(
    "block_comment_interior", r"^\s*\*(?!/)", "以 `*` 开头的块注释中间行"
)
register_noise_rule("block_comment_close", r"\*/\s*$", "以 `*/` 结尾的块注释结束行")
register_noise_rule(
    "markup_comment",
    r"^\s*<!--|-->\s*$",
    "`<!-- -->` 形式的标记注释 (起始、单行或结束)",
)
register_noise_rule(
    "brackets_only",
    r"^\s*[\[\](){}]+(?:\s+[\[\](){}]+)*\s*$",
    "仅包含括号 (`{}`、`[]`、`()`) 的行",
)
register_noise_rule("import", r"^\s*import\s+\S+", "`import` 语句")
register_noise_rule("package", r"^\s*package\s+\S+", "`package` 声明")
register_noise_rule("semicolon_only", r"^\s*;\s*$", "仅包含分号的行")
register_noise_rule("annotation", r"^\s*@[A-Za-z_]\w*", "注解行 (如 `@Override`)")
register_noise_rule("empty_body", r"^\s*\{\}\s*$", "空代码块 `{}`")
