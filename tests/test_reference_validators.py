import unittest
from unittest.mock import MagicMock

from regcheck.core.errors import ReferenceDataError
from regcheck.utils.restcountries import StaticReferenceProvider
from regcheck.validators.reference import (
    country_names,
    is_valid_country,
    is_valid_language,
    language_names,
)

RECORDS = [
    {"name": "Bangladesh", "languages": ["Bengali"]},
    {"name": "Canada", "languages": ["English", "French"]},
    {"name": "Antarctica", "languages": []},
]


class TestReferenceChecks(unittest.TestCase):

    def setUp(self):
        self.provider = StaticReferenceProvider(RECORDS)

    def test_known_country(self):
        self.assertTrue(is_valid_country("Bangladesh", self.provider))
        self.assertTrue(is_valid_country("Antarctica", self.provider))

    def test_unknown_country(self):
        self.assertFalse(is_valid_country("InvalidCountry", self.provider))

    def test_country_match_is_exact(self):
        self.assertFalse(is_valid_country("bangladesh", self.provider))
        self.assertFalse(is_valid_country("Bangladesh ", self.provider))

    def test_known_language(self):
        self.assertTrue(is_valid_language("English", self.provider))
        self.assertTrue(is_valid_language("French", self.provider))
        self.assertTrue(is_valid_language("Bengali", self.provider))

    def test_unknown_language(self):
        self.assertFalse(is_valid_language("InvalidLanguage", self.provider))
        self.assertFalse(is_valid_language("Canada", self.provider))

    def test_name_helpers(self):
        self.assertEqual(country_names(RECORDS), {"Bangladesh", "Canada", "Antarctica"})
        self.assertEqual(language_names(RECORDS), {"Bengali", "English", "French"})

    def test_provider_failure_fails_closed_and_logs(self):
        """A fetch error yields False and a warning carrying the cause."""
        provider = MagicMock()
        provider.fetch.side_effect = ReferenceDataError("connection refused")

        with self.assertLogs("regcheck.validators.reference", level="WARNING") as logs:
            self.assertFalse(is_valid_country("Bangladesh", provider))
            self.assertFalse(is_valid_language("English", provider))

        self.assertEqual(len(logs.output), 2)
        self.assertIn("connection refused", logs.output[0])

    def test_unexpected_errors_propagate(self):
        provider = MagicMock()
        provider.fetch.side_effect = RuntimeError("bug")
        with self.assertRaises(RuntimeError):
            is_valid_country("Bangladesh", provider)


if __name__ == '__main__':
    unittest.main()
