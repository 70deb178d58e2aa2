"""Reference-data providers for the country and language checks.

A provider is any object with a `fetch()` method returning a list of
country records, each a dict with a "name" (the country's common name) and
a "languages" list (the names of the languages spoken there). The live
`RestCountriesProvider` downloads them from the REST Countries API;
`StaticReferenceProvider` serves a fixed list for offline use and tests.
"""

import logging
import time
from typing import Any, Iterable, List, Optional, Protocol, TypedDict

import requests

from ..core.config import DEFAULT_REFERENCE_URL
from ..core.errors import ReferenceDataError
from .cache_manager import CacheManager

logger = logging.getLogger(__name__)


class CountryRecord(TypedDict):
    name: str
    languages: List[str]


class ReferenceDataProvider(Protocol):
    """Anything that can supply the country reference dataset."""

    def fetch(self) -> List[CountryRecord]:
        ...


def normalize_countries(raw: Any) -> List[CountryRecord]:
    """Converts a REST Countries v3 payload into `CountryRecord`s.

    Each raw entry looks like ``{"name": {"common": "Peru", ...},
    "languages": {"spa": "Spanish", "que": "Quechua", ...}}``. Entries
    without a common name are skipped; a missing language map yields an
    empty list.

    Raises:
        ReferenceDataError: If the payload is not a list of objects.
    """
    if not isinstance(raw, list):
        raise ReferenceDataError(f"Expected a JSON array of countries, got {type(raw).__name__}")

    records: List[CountryRecord] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise ReferenceDataError("Country entry is not a JSON object")
        name = entry.get("name")
        common = name.get("common") if isinstance(name, dict) else name
        if not isinstance(common, str):
            continue
        languages = entry.get("languages") or {}
        if isinstance(languages, dict):
            language_list = [str(v) for v in languages.values()]
        else:
            language_list = [str(v) for v in languages]
        records.append({"name": common, "languages": language_list})
    return records


def is_record_list(data: Any) -> bool:
    """Checks that `data` has the shape of a list of `CountryRecord`s."""
    return isinstance(data, list) and all(
        isinstance(record, dict)
        and isinstance(record.get("name"), str)
        and isinstance(record.get("languages"), list)
        and all(isinstance(language, str) for language in record["languages"])
        for record in data
    )


class RestCountriesProvider:
    """Fetches country records from the REST Countries API.

    Requests use a timeout and are retried with exponential backoff on rate
    limiting (HTTP 429) and transport errors. When a `CacheManager` is
    given, the normalized records are reused for `cache_ttl` seconds.
    """

    def __init__(
        self,
        url: str = DEFAULT_REFERENCE_URL,
        timeout: float = 10,
        retries: int = 3,
        cache: Optional[CacheManager] = None,
        cache_ttl: int = 3600,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.retries = max(1, retries)
        self.cache = cache
        self.cache_ttl = cache_ttl

    @property
    def cache_key(self) -> str:
        return f"restcountries:{self.url}"

    def fetch(self) -> List[CountryRecord]:
        """Returns the country records, from the cache when fresh.

        Raises:
            ReferenceDataError: If the dataset cannot be downloaded or parsed.
        """
        if self.cache is not None:
            cached = self.cache.get(self.cache_key, ttl=self.cache_ttl)
            if is_record_list(cached):
                logger.info(f"Using cached country dataset for {self.url}")
                return cached
            if cached is not None:
                logger.warning(f"Ignoring malformed cached country dataset for {self.url}")

        records = normalize_countries(self._download())
        if self.cache is not None:
            self.cache.set(self.cache_key, records)
        return records

    def _download(self) -> Any:
        logger.info(f"Fetching country dataset from {self.url}")
        last_error: Optional[Exception] = None

        for attempt in range(self.retries):
            try:
                response = requests.get(self.url, timeout=self.timeout)
                if response.status_code == 429:  # Handle rate limiting
                    last_error = ReferenceDataError(f"Rate limited by {self.url}")
                    self._backoff(attempt, "Rate limited")
                    continue
                response.raise_for_status()
            except requests.exceptions.HTTPError as e:
                # Other HTTP errors are not transient; don't retry them.
                raise ReferenceDataError(f"Country API returned an error: {e}") from e
            except requests.exceptions.RequestException as e:
                last_error = e
                self._backoff(attempt, f"Request failed ({e})")
                continue

            try:
                return response.json()
            except ValueError as e:
                raise ReferenceDataError(f"Country API returned invalid JSON: {e}") from e

        raise ReferenceDataError(
            f"Failed to fetch country dataset after {self.retries} attempts: {last_error}"
        ) from last_error

    def _backoff(self, attempt: int, reason: str) -> None:
        if attempt == self.retries - 1:
            return
        sleep_time = 2 ** attempt
        logger.warning(f"{reason}. Retrying in {sleep_time} seconds...")
        time.sleep(sleep_time)


class StaticReferenceProvider:
    """Serves a fixed list of country records."""

    def __init__(self, records: Iterable[CountryRecord]) -> None:
        self.records = [
            {"name": r["name"], "languages": list(r.get("languages", []))} for r in records
        ]

    def fetch(self) -> List[CountryRecord]:
        return list(self.records)
