# test_noise_rules.py
import unittest

from noise_rules import (
    NOISE_RULES,
    describe_rules_markdown,
    find_noise_rule,
    is_noise,
    register_noise_rule,
    unregister_noise_rule,
)


class TestNoiseRuleTable(unittest.TestCase):

    def tearDown(self):
        unregister_noise_rule("lua_comment")

    def test_builtin_rules_registered(self):
        """内置规则都已注册"""
        names = [rule.name for rule in NOISE_RULES]
        for expected in (
            "blank",
            "single_line_comment",
            "block_comment_open",
            "block_comment_interior",
            "block_comment_close",
            "markup_comment",
            "doc_tag",
            "brackets_only",
            "import",
            "package",
            "semicolon_only",
            "annotation",
            "empty_body",
        ):
            self.assertIn(expected, names)

    def test_noise_lines(self):
        for content in (
            "",
            "   \t",
            "// comment",
            "    # python comment",
            "/* open",
            " * middle",
            " * @param name the name",
            "  end */",
            "<!-- html -->",
            "<!-- open",
            "close -->",
            "}",
            "  });".replace(";", ""),
            "  ) ]",
            "import java.util.List;",
            "import os",
            "package com.example;",
            "  ;",
            "@Override",
            "    @dataclass",
            "{}",
        ):
            with self.subTest(content=content):
                self.assertTrue(is_noise(content), f"应被判定为噪声: {content!r}")

    def test_effective_lines(self):
        for content in (
            "public int x = 1;",
            "return a * b;",
            "});",
            "x = 1  # trailing comment",
            "importer = load()",
            "packages = []",
            "email = 'a@b.c'",
            "if (a) {",
        ):
            with self.subTest(content=content):
                self.assertFalse(is_noise(content), f"不应被判定为噪声: {content!r}")

    def test_import_requires_argument(self):
        """单独的 import 关键字不算 import 语句"""
        self.assertIsNone(find_noise_rule("import"))

    def test_register_new_language_rule(self):
        """新增语言的注释约定只是一次数据变更"""
        self.assertFalse(is_noise("-- lua comment"))
        register_noise_rule("lua_comment", r"^\s*--", "Lua 单行注释")
        self.assertTrue(is_noise("-- lua comment"))
        self.assertEqual(find_noise_rule("-- lua comment").name, "lua_comment")

    def test_duplicate_rule_rejected(self):
        with self.assertRaises(ValueError):
            register_noise_rule("blank", r"^$")

    def test_unregister_unknown_rule(self):
        self.assertFalse(unregister_noise_rule("does_not_exist"))

    def test_describe_rules_markdown(self):
        text = describe_rules_markdown()
        self.assertIn("**blank**", text)
        self.assertEqual(text.count("\n- "), len(NOISE_RULES))


if __name__ == "__main__":
    unittest.main()
