"""The `RegistrationDataChecker` service object.

This module binds a `Config` and a reference-data provider to the free
check functions in `regcheck.validators`, so that an application can build
one checker at start-up and call every check on it with its configured
defaults. The checker holds no mutable state and is safe to share between
threads.
"""

import logging
from typing import Iterable, Optional

from ..utils.cache_manager import CacheManager
from ..utils.restcountries import ReferenceDataProvider, RestCountriesProvider
from ..validators import files, identity, malware, reference
from ..validators.files import PathLike
from .config import Config

logger = logging.getLogger(__name__)


def build_reference_provider(config: Config) -> ReferenceDataProvider:
    """Builds the live REST Countries provider described by `config`.

    Args:
        config (Config): The configuration to read the "reference.*" keys from.

    Returns:
        ReferenceDataProvider: A `RestCountriesProvider`, backed by an
        on-disk cache when "reference.cache_enabled" is true.
    """
    cache = None
    if config.get("reference.cache_enabled", True):
        try:
            cache = CacheManager()
        except OSError as e:
            logger.warning(f"Reference data cache disabled: {e}")
    return RestCountriesProvider(
        url=config.get("reference.url"),
        timeout=config.get("reference.timeout", 10),
        retries=config.get("reference.retries", 3),
        cache=cache,
        cache_ttl=config.get("reference.cache_ttl", 3600),
    )


class RegistrationDataChecker:
    """Runs registration-data checks with configured defaults.

    Every method returns a plain bool verdict or raises one of the errors in
    `regcheck.core.errors`; see the matching function in `regcheck.validators`
    for the exact rule.

    Attributes:
        config (Config): The configuration supplying default limits.
        provider (ReferenceDataProvider): The source of country/language data.
    """

    def __init__(self, config: Optional[Config] = None, provider: Optional[ReferenceDataProvider] = None) -> None:
        self.config = config or Config()
        self._provider = provider

    @property
    def provider(self) -> ReferenceDataProvider:
        # Built lazily so purely local checks never create a cache directory.
        if self._provider is None:
            self._provider = build_reference_provider(self.config)
        return self._provider

    # Identity

    def is_valid_email(self, email: str) -> bool:
        return identity.is_valid_email(email)

    def is_valid_password(self, password: str) -> bool:
        min_length = self.config.get("identity.password_min_length", identity.DEFAULT_PASSWORD_MIN_LENGTH)
        return identity.is_valid_password(password, min_length=min_length)

    def is_valid_phone_number(self, phone_number: str) -> bool:
        return identity.is_valid_phone_number(phone_number)

    def is_age_valid(self, date_of_birth: str) -> bool:
        minimum_age = self.config.get("identity.minimum_age", identity.DEFAULT_MINIMUM_AGE)
        return identity.is_age_valid(date_of_birth, minimum_age=minimum_age)

    # Files

    def is_valid_image(self, path: PathLike, max_size: Optional[int] = None) -> bool:
        if max_size is None:
            max_size = self.config.get("files.max_image_size", files.DEFAULT_MAX_IMAGE_SIZE)
        return files.is_valid_image(path, max_size=max_size)

    def is_valid_document(self, path: PathLike, max_size: Optional[int] = None) -> bool:
        if max_size is None:
            max_size = self.config.get("files.max_document_size", files.DEFAULT_MAX_DOCUMENT_SIZE)
        return files.is_valid_document(path, max_size=max_size)

    def is_valid_custom_extension(self, path: PathLike, allowed_extensions: Iterable[str]) -> bool:
        return files.is_valid_custom_extension(path, allowed_extensions)

    def has_minimum_dimensions(self, path: PathLike, min_width: int, min_height: int) -> bool:
        return files.has_minimum_dimensions(path, min_width, min_height)

    def exceeds_maximum_dimensions(self, path: PathLike, max_width: int, max_height: int) -> bool:
        return files.exceeds_maximum_dimensions(path, max_width, max_height)

    def meets_minimum_size(self, path: PathLike, min_size: int) -> bool:
        return files.meets_minimum_size(path, min_size)

    def exceeds_maximum_size(self, path: PathLike, max_size: int) -> bool:
        return files.exceeds_maximum_size(path, max_size)

    def contains_malware(self, path: PathLike) -> bool:
        """Heuristic signature scan; see `regcheck.validators.malware`."""
        return malware.contains_malware(path)

    # Reference data

    def is_valid_country(self, country: str) -> bool:
        return reference.is_valid_country(country, self.provider)

    def is_valid_language(self, language: str) -> bool:
        return reference.is_valid_language(language, self.provider)
