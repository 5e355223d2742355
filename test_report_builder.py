# test_report_builder.py
import json
import os
import tempfile
import unittest
from datetime import date

import report_builder
from config import GlobalConfig
from context import RunContext
from models import AuthorStatistic


def _stats():
    return [
        AuthorStatistic(author="b", commit_count=3, additions=20, deletions=5),
        AuthorStatistic(author="<script>a|x</script>", commit_count=1, additions=7, deletions=3),
    ]


class TestReportBuilder(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.context = RunContext(
            repo_path=self._tmp.name,
            project_data_path=os.path.join(self._tmp.name, "data"),
            since_date=date(2024, 5, 1),
            until_date=date(2024, 5, 7),
            global_config=GlobalConfig(),
            no_browser=True,
        )

    def tearDown(self):
        self._tmp.cleanup()

    def test_build_rows_ranks_by_position(self):
        rows = report_builder.build_rows(_stats())
        self.assertEqual([row["rank"] for row in rows], [1, 2])
        self.assertEqual(rows[0]["total_changes"], 25)

    def test_text_report(self):
        text = report_builder.generate_text_report(_stats(), "main", self.context)
        for column in report_builder.COLUMN_NAMES:
            self.assertIn(column, text)
        self.assertIn("2024-05-01 ~ 2024-05-07", text)
        self.assertIn("合计: 2 位作者, 4 次提交, 35 行有效变更", text)

    def test_text_report_empty(self):
        text = report_builder.generate_text_report([], "main", self.context)
        self.assertIn(report_builder.EMPTY_MESSAGE, text)

    def test_markdown_report(self):
        text = report_builder.generate_markdown_report(_stats(), "main", self.context)
        self.assertIn("| 1 | b | 3 | 20 | 5 | 25 |", text)
        self.assertIn("a\\|x", text)

    def test_json_report(self):
        document = json.loads(report_builder.generate_json_report(_stats(), "main", self.context))
        self.assertEqual(document["branch"], "main")
        self.assertEqual(document["since"], "2024-05-01")
        self.assertEqual(document["until"], "2024-05-07")
        self.assertEqual(document["statistics"][0]["author"], "b")
        self.assertEqual(document["statistics"][1]["rank"], 2)

    def test_html_report_escapes_authors(self):
        html = report_builder.generate_html_report(_stats(), "main", self.context)
        self.assertIn("<table", html)
        self.assertIn("&lt;script&gt;", html)
        self.assertNotIn("<script>a", html)
        # 过滤规则说明由 Markdown 渲染
        self.assertIn("<strong>blank</strong>", html)

    def test_html_report_empty(self):
        html = report_builder.generate_html_report([], None, self.context)
        self.assertIn(report_builder.EMPTY_MESSAGE, html)
        self.assertNotIn("<table", html)

    def test_render_report_rejects_unknown_format(self):
        with self.assertRaises(ValueError):
            report_builder.render_report("pdf", [], "main", self.context)

    def test_save_report(self):
        path = report_builder.save_report("{}", "json", self.context)
        self.assertTrue(path.endswith(".json"))
        self.assertTrue(os.path.basename(path).startswith("CodeStatistic_"))
        with open(path, encoding="utf-8") as f:
            self.assertEqual(f.read(), "{}")


if __name__ == "__main__":
    unittest.main()
