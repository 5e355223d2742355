# test_config_manager.py
import os
import tempfile
import unittest
from unittest import mock

import config_manager


class TestConfigManager(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_root = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_aliases_roundtrip(self):
        self.assertEqual(config_manager.load_project_aliases(self.data_root), {})
        config_manager.save_project_aliases(self.data_root, {"web": "/src/web"})
        self.assertEqual(config_manager.get_path_from_alias(self.data_root, "web"), "/src/web")
        self.assertIsNone(config_manager.get_path_from_alias(self.data_root, "api"))

    def test_corrupt_config_returns_empty(self):
        project_path = os.path.join(self.data_root, "web")
        os.makedirs(project_path)
        with open(os.path.join(project_path, config_manager.CONFIG_JSON_FILE), "w") as f:
            f.write("{not json")
        self.assertEqual(config_manager.load_project_config(project_path), {})

    def test_project_data_path(self):
        self.assertEqual(
            config_manager.get_project_data_path(self.data_root, "/src/web/"),
            os.path.join(self.data_root, "web"),
        )
        self.assertEqual(
            config_manager.get_project_data_path(self.data_root, None),
            os.path.join(self.data_root, config_manager.DIFF_FILE_PROJECT_NAME),
        )

    def test_interactive_wizard(self):
        repo_path = os.path.join(self.data_root, "repo")
        os.makedirs(repo_path)
        answers = iter(["myrepo", "json", "n", "7", "ci-bot, robot"])
        with mock.patch("builtins.input", lambda _prompt: next(answers)), mock.patch(
            "builtins.print"
        ):
            config_manager.run_interactive_config_wizard(self.data_root, repo_path)

        self.assertEqual(config_manager.get_path_from_alias(self.data_root, "myrepo"), repo_path)
        saved = config_manager.load_project_config(
            config_manager.get_project_data_path(self.data_root, repo_path)
        )
        self.assertEqual(
            saved,
            {
                "default_format": "json",
                "default_fetch": False,
                "default_days": 7,
                "exclude_authors": ["ci-bot", "robot"],
            },
        )


if __name__ == "__main__":
    unittest.main()
