# test_cli.py
import json
import os
import tempfile
import unittest
from datetime import date, timedelta
from unittest import mock

import cli
import config_manager
import utils
from config import GlobalConfig

DIFF_TEXT = "COMMIT:alice\n+++ b/app.py\n+value = compute()\n+# note\n"


class CliTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_root = self._tmp.name
        self.global_config = GlobalConfig()
        # 绝对路径会覆盖脚本目录前缀
        self.global_config.DATA_ROOT_DIR_NAME = self.data_root
        self.global_config.DEFAULT_FORMAT = "table"
        self.global_config.AUTO_FETCH = True
        self.parser = cli.setup_parser()

    def tearDown(self):
        self._tmp.cleanup()

    def _context(self, *argv):
        return cli.build_context(self.parser.parse_args(list(argv)), self.global_config)


class TestSetupParser(CliTestCase):

    def test_source_options_are_mutually_exclusive(self):
        with self.assertRaises(SystemExit), mock.patch("sys.stderr"):
            self.parser.parse_args(["-r", ".", "--diff-file", "x.diff"])

    def test_today_and_days_are_mutually_exclusive(self):
        with self.assertRaises(SystemExit), mock.patch("sys.stderr"):
            self.parser.parse_args(["--today", "-d", "3"])

    def test_rejects_unknown_format(self):
        with self.assertRaises(SystemExit), mock.patch("sys.stderr"):
            self.parser.parse_args(["-f", "pdf"])


class TestBuildContext(CliTestCase):

    def test_defaults(self):
        context = self._context("-r", self.data_root)
        self.assertEqual(context.since_date, date.today())
        self.assertEqual(context.until_date, date.today())
        self.assertEqual(context.output_format, "table")
        self.assertTrue(context.fetch)
        self.assertTrue(context.apply_file_filter)
        self.assertEqual(context.repo_path, os.path.abspath(self.data_root))

    def test_explicit_range_and_flags(self):
        context = self._context(
            "-r", self.data_root, "-s", "2024-06-01", "-u", "2024-06-30",
            "-b", "develop", "--no-fetch", "--no-file-filter", "-f", "json",
        )
        self.assertEqual(context.since_date, date(2024, 6, 1))
        self.assertEqual(context.until_date, date(2024, 6, 30))
        self.assertEqual(context.branch, "develop")
        self.assertFalse(context.fetch)
        self.assertFalse(context.apply_file_filter)
        self.assertEqual(context.output_format, "json")

    def test_days_option(self):
        context = self._context("-r", self.data_root, "-d", "7")
        self.assertEqual(context.until_date - context.since_date, timedelta(days=6))

    def test_invalid_dates_fail(self):
        self.assertIsNone(self._context("-s", "2024-13-01"))
        self.assertIsNone(self._context("-s", "2024-06-02", "-u", "2024-06-01"))
        self.assertIsNone(self._context("-d", "0"))

    def test_unknown_alias_fails(self):
        self.assertIsNone(self._context("-p", "nope"))

    def test_project_config_supplies_defaults(self):
        repo_path = os.path.join(self.data_root, "web")
        os.makedirs(repo_path)
        config_manager.save_project_aliases(self.data_root, {"web": repo_path})
        config_manager.save_project_config(
            config_manager.get_project_data_path(self.data_root, repo_path),
            {
                "default_format": "markdown",
                "default_fetch": False,
                "default_days": 3,
                "exclude_authors": ["ci-bot"],
            },
        )

        context = self._context("-p", "web")
        self.assertEqual(context.repo_path, repo_path)
        self.assertEqual(context.output_format, "markdown")
        self.assertFalse(context.fetch)
        self.assertEqual(context.until_date - context.since_date, timedelta(days=2))
        self.assertEqual(context.exclude_authors, ["ci-bot"])

        # 命令行参数优先于项目配置
        context = self._context("-p", "web", "-f", "html", "--today")
        self.assertEqual(context.output_format, "html")
        self.assertEqual(context.since_date, context.until_date)

    def test_diff_file_has_no_repo(self):
        context = self._context("--diff-file", "history.diff")
        self.assertIsNone(context.repo_path)
        self.assertEqual(context.diff_file, "history.diff")
        self.assertEqual(
            os.path.basename(context.project_data_path),
            config_manager.DIFF_FILE_PROJECT_NAME,
        )

    def test_auto_fetch_disabled_globally(self):
        self.global_config.AUTO_FETCH = False
        self.assertFalse(self._context("-r", self.data_root).fetch)


class TestRunCli(CliTestCase):

    def setUp(self):
        super().setUp()
        patcher = mock.patch.object(GlobalConfig, "DATA_ROOT_DIR_NAME", self.data_root)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_diff_file_run_succeeds(self):
        diff_path = os.path.join(self.data_root, "history.diff")
        with open(diff_path, "w", encoding="utf-8") as f:
            f.write(DIFF_TEXT)

        exit_code = cli.run_cli(["--diff-file", diff_path, "-f", "json", "--no-browser"])

        self.assertEqual(exit_code, 0)
        report_dir = os.path.join(self.data_root, config_manager.DIFF_FILE_PROJECT_NAME)
        reports = [name for name in os.listdir(report_dir) if name.endswith(".json")]
        self.assertEqual(len(reports), 1)
        with open(os.path.join(report_dir, reports[0]), encoding="utf-8") as f:
            document = json.load(f)
        self.assertEqual(document["statistics"][0]["author"], "alice")
        self.assertEqual(document["statistics"][0]["additions"], 1)

    def test_missing_diff_file_fails(self):
        missing = os.path.join(self.data_root, "missing.diff")
        self.assertEqual(cli.run_cli(["--diff-file", missing, "-f", "json"]), 1)

    def test_cancelled_run_exits_with_interrupt_code(self):
        with mock.patch("cli.StatisticOrchestrator") as orchestrator_cls:
            orchestrator = orchestrator_cls.return_value
            orchestrator.run.return_value = []
            orchestrator.cancel_token.is_cancelled = True
            exit_code = cli.run_cli(["--diff-file", "history.diff", "-f", "json"])
        self.assertEqual(exit_code, cli.CANCELLED_EXIT_CODE)
        self.assertEqual(exit_code, 130)

    def test_bad_dates_fail(self):
        self.assertEqual(cli.run_cli(["-s", "yesterday"]), 1)

    def test_configure_requires_repo_path(self):
        self.assertEqual(cli.run_cli(["--configure"]), 1)

    def test_configure_runs_wizard(self):
        with mock.patch("cli.config_manager.run_interactive_config_wizard") as wizard:
            self.assertEqual(cli.run_cli(["--configure", "-r", self.data_root]), 0)
        wizard.assert_called_once_with(self.data_root, os.path.abspath(self.data_root))


class TestResolveDateRange(unittest.TestCase):

    def test_resolve_date_range(self):
        today = date(2024, 6, 15)
        self.assertEqual(utils.resolve_date_range(today=today), (today, today))
        self.assertEqual(
            utils.resolve_date_range(days=3, today=today), (date(2024, 6, 13), today)
        )
        self.assertEqual(
            utils.resolve_date_range("2024-06-01", today=today), (date(2024, 6, 1), today)
        )
        with self.assertRaises(ValueError):
            utils.resolve_date_range(until="2024-06-01", since="2024-06-02", today=today)


if __name__ == "__main__":
    unittest.main()
