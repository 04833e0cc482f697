"""Tests for distbench.config -- optional CLI defaults file."""

import json
import os
import tempfile
import unittest
from unittest import mock

from distbench.config import DEFAULTS, load_config


class TestConfigDefaults(unittest.TestCase):
    def test_defaults_have_required_keys(self):
        for key in ("size", "runs", "read_duration_ms"):
            self.assertIn(key, DEFAULTS)


class TestLoadConfig(unittest.TestCase):
    def test_load_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("distbench.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg, DEFAULTS)

    def test_user_values_override(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                json.dump({"runs": 5, "size": 1000}, f)
            with mock.patch("distbench.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["runs"], 5)
                self.assertEqual(cfg["size"], 1000)
                # Defaults still present
                self.assertEqual(cfg["read_duration_ms"], DEFAULTS["read_duration_ms"])

    def test_unknown_keys_dropped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                json.dump({"plan": 100}, f)
            with mock.patch("distbench.config._config_path", return_value=path):
                self.assertNotIn("plan", load_config())

    def test_corrupt_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                f.write("NOT JSON")
            with mock.patch("distbench.config._config_path", return_value=path):
                with self.assertLogs("distbench.config", level="WARNING"):
                    cfg = load_config()
                self.assertEqual(cfg["runs"], DEFAULTS["runs"])

    def test_non_dict_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                json.dump([1, 2, 3], f)
            with mock.patch("distbench.config._config_path", return_value=path):
                self.assertEqual(load_config(), DEFAULTS)


if __name__ == "__main__":
    unittest.main()
