import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner
from PIL import Image

from regcheck.cli import main
from regcheck.utils.restcountries import StaticReferenceProvider

try:
    import tomllib
except ImportError:
    import tomli as tomllib


class TestCli(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_email_pass_and_fail(self):
        result = self.runner.invoke(main, ["email", "test@example.com"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("PASS", result.output)

        result = self.runner.invoke(main, ["email", "invalid-email"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("FAIL", result.output)

    def test_phone_alias(self):
        result = self.runner.invoke(main, ["tel", "+1234567890123"])
        self.assertEqual(result.exit_code, 0)

    def test_unparseable_age_exits_with_error(self):
        result = self.runner.invoke(main, ["age", "not-a-date"])
        self.assertEqual(result.exit_code, 2)

    def test_age(self):
        self.assertEqual(self.runner.invoke(main, ["dob", "1990-01-01"]).exit_code, 0)

    def test_missing_image_exits_with_error(self):
        result = self.runner.invoke(main, ["image", str(self.tmp_dir / "missing.png")])
        self.assertEqual(result.exit_code, 2)

    def test_extension(self):
        result = self.runner.invoke(main, ["ext", "IMAGE.JPG", "-a", "jpg", "-a", "png"])
        self.assertEqual(result.exit_code, 0)
        result = self.runner.invoke(main, ["extension", "doc.exe", "--allow", "pdf"])
        self.assertEqual(result.exit_code, 1)

    def test_size_bounds(self):
        path = self.tmp_dir / "upload.bin"
        path.write_bytes(b"1234")
        self.assertEqual(self.runner.invoke(main, ["size", str(path), "--max", "4"]).exit_code, 0)
        self.assertEqual(self.runner.invoke(main, ["size", str(path), "--max", "3"]).exit_code, 1)
        self.assertEqual(self.runner.invoke(main, ["size", str(path), "--min", "5"]).exit_code, 1)

    def test_size_requires_a_bound(self):
        path = self.tmp_dir / "upload.bin"
        path.write_bytes(b"1234")
        result = self.runner.invoke(main, ["size", str(path)])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("--min and/or --max", result.output)

    def test_dimensions(self):
        path = self.tmp_dir / "photo.png"
        Image.new("RGB", (300, 200)).save(path)
        result = self.runner.invoke(main, ["dimensions", str(path), "--min", "100", "100", "--max", "400", "400"])
        self.assertEqual(result.exit_code, 0)
        result = self.runner.invoke(main, ["dimensions", str(path), "--max", "250", "250"])
        self.assertEqual(result.exit_code, 1)

    def test_malware_reports_signature(self):
        path = self.tmp_dir / "upload.txt"
        path.write_text("<?php eval($_GET['c']); ?>", encoding="utf-8")
        result = self.runner.invoke(main, ["malware", str(path)])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("eval", result.output)

    def test_country_and_language(self):
        provider = StaticReferenceProvider([{"name": "Bangladesh", "languages": ["Bengali"]}])
        with patch("regcheck.core.checker.build_reference_provider", return_value=provider):
            self.assertEqual(self.runner.invoke(main, ["country", "Bangladesh"]).exit_code, 0)
            self.assertEqual(self.runner.invoke(main, ["country", "Atlantis"]).exit_code, 1)
            self.assertEqual(self.runner.invoke(main, ["language", "Bengali"]).exit_code, 0)

    def test_config_get(self):
        config_file = self.tmp_dir / "custom.toml"
        config_file.write_text("[identity]\nminimum_age = 21\n", encoding="utf-8")
        result = self.runner.invoke(main, ["--config", str(config_file), "config", "get", "identity.minimum_age"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("21", result.output)

    def test_config_set_casts_value(self):
        user_config_path = self.tmp_dir / "user" / "config.toml"
        with patch("regcheck.core.config.USER_CONFIG_PATH", user_config_path):
            result = self.runner.invoke(main, ["config", "set", "identity.minimum_age", "--", "-1"])
            self.assertEqual(result.exit_code, 0)
            with open(user_config_path, "rb") as f:
                saved = tomllib.load(f)
        self.assertEqual(saved, {"identity": {"minimum_age": -1}})

    def test_config_set_rejects_invalid_integer(self):
        user_config_path = self.tmp_dir / "user" / "config.toml"
        with patch("regcheck.core.config.USER_CONFIG_PATH", user_config_path):
            result = self.runner.invoke(main, ["config", "set", "reference.timeout", "soon"])
        self.assertEqual(result.exit_code, 1)
        self.assertFalse(user_config_path.exists())


if __name__ == '__main__':
    unittest.main()
