"""Country and language checks backed by a reference-data provider.

Both checks fail closed: when the provider cannot deliver the dataset the
verdict is False. The underlying error is logged as a warning so that
"the API is down" can still be told apart from "no such country" by anyone
watching the logs.
"""

import logging
from typing import Iterable, Set

from ..core.errors import ReferenceDataError
from ..utils.restcountries import CountryRecord, ReferenceDataProvider

logger = logging.getLogger(__name__)


def country_names(records: Iterable[CountryRecord]) -> Set[str]:
    """Returns the common names of all countries in `records`."""
    return {record["name"] for record in records}


def language_names(records: Iterable[CountryRecord]) -> Set[str]:
    """Returns every language name spoken in any country of `records`."""
    return {language for record in records for language in record["languages"]}


def is_valid_country(name: str, provider: ReferenceDataProvider) -> bool:
    """Checks that `name` is the exact common name of a known country.

    Args:
        name (str): The country name, e.g. "Bangladesh". Matching is exact
            and case-sensitive.
        provider (ReferenceDataProvider): The source of the country dataset.

    Returns:
        bool: True if a country with that name exists; False if not, or if
        the dataset could not be fetched.
    """
    try:
        records = provider.fetch()
    except ReferenceDataError as e:
        logger.warning(f"Country check for {name!r} failed closed: {e}")
        return False
    return name in country_names(records)


def is_valid_language(name: str, provider: ReferenceDataProvider) -> bool:
    """Checks that `name` is a language spoken in at least one country.

    Matching is exact against the English language names of the dataset
    (e.g. "English", "Bengali"). Returns False if the dataset could not be
    fetched.
    """
    try:
        records = provider.fetch()
    except ReferenceDataError as e:
        logger.warning(f"Language check for {name!r} failed closed: {e}")
        return False
    return name in language_names(records)
