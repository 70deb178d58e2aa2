import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from regcheck.core.checker import RegistrationDataChecker, build_reference_provider
from regcheck.core.config import Config
from regcheck.utils.restcountries import RestCountriesProvider, StaticReferenceProvider


class TestRegistrationDataChecker(unittest.TestCase):

    def setUp(self):
        self.config = Config(load_defaults=False)
        self.provider = StaticReferenceProvider([
            {"name": "Bangladesh", "languages": ["Bengali"]},
            {"name": "United Kingdom", "languages": ["English"]},
        ])
        self.checker = RegistrationDataChecker(config=self.config, provider=self.provider)
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_identity_checks(self):
        self.assertTrue(self.checker.is_valid_email("test@example.com"))
        self.assertFalse(self.checker.is_valid_email("invalid-email"))
        self.assertTrue(self.checker.is_valid_password("password123"))
        self.assertFalse(self.checker.is_valid_password("short"))
        self.assertTrue(self.checker.is_valid_phone_number("+1234567890123"))
        self.assertFalse(self.checker.is_valid_phone_number("1234567890"))
        self.assertTrue(self.checker.is_age_valid("1990-01-01"))

    def test_configured_identity_limits(self):
        self.config.set("identity.password_min_length", 12)
        self.config.set("identity.minimum_age", 200)
        self.assertFalse(self.checker.is_valid_password("password123"))
        self.assertFalse(self.checker.is_age_valid("1990-01-01"))

    def test_configured_size_limits(self):
        path = self.tmp_dir / "avatar.png"
        path.write_bytes(b"x" * 2048)
        self.assertTrue(self.checker.is_valid_image(str(path)))

        self.config.set("files.max_image_size", 1024)
        self.assertFalse(self.checker.is_valid_image(str(path)))
        self.assertTrue(self.checker.is_valid_image(str(path), max_size=4096))

    def test_file_checks(self):
        path = self.tmp_dir / "cv.pdf"
        path.write_bytes(b"%PDF-1.4 clean")
        self.assertTrue(self.checker.is_valid_document(str(path)))
        self.assertTrue(self.checker.is_valid_custom_extension(str(path), ["PDF"]))
        self.assertTrue(self.checker.meets_minimum_size(str(path), 1))
        self.assertFalse(self.checker.exceeds_maximum_size(str(path), 1024))
        self.assertFalse(self.checker.contains_malware(str(path)))

    def test_reference_checks_use_injected_provider(self):
        self.assertTrue(self.checker.is_valid_country("Bangladesh"))
        self.assertFalse(self.checker.is_valid_country("InvalidCountry"))
        self.assertTrue(self.checker.is_valid_language("English"))
        self.assertFalse(self.checker.is_valid_language("InvalidLanguage"))

    def test_provider_is_built_lazily(self):
        with patch("regcheck.core.checker.build_reference_provider", return_value=self.provider) as build:
            checker = RegistrationDataChecker(config=self.config)
            build.assert_not_called()
            self.assertTrue(checker.is_valid_country("Bangladesh"))
            self.assertTrue(checker.is_valid_language("Bengali"))
        build.assert_called_once_with(self.config)

    def test_build_reference_provider_from_config(self):
        self.config.set("reference.cache_enabled", False)
        self.config.set("reference.timeout", 4)
        provider = build_reference_provider(self.config)

        self.assertIsInstance(provider, RestCountriesProvider)
        self.assertEqual(provider.timeout, 4)
        self.assertIsNone(provider.cache)


if __name__ == '__main__':
    unittest.main()
