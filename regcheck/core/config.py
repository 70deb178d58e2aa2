"""Manages configuration for regcheck.

This module is responsible for loading, managing, and saving the settings
that the checks fall back on when a caller does not pass an explicit value:
size limits, the minimum age and password length, and how the country
reference dataset is fetched and cached. Settings come from default values,
TOML files, and environment variables.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional

try:
    import tomllib  # Available in Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python versions < 3.11

import tomli_w

logger = logging.getLogger(__name__)

# The default path for the user-specific global configuration file.
USER_CONFIG_PATH = Path.home() / ".config" / "regcheck" / "config.toml"

# Project-level configuration file looked up in the working directory.
PROJECT_CONFIG_NAME = "regcheck.toml"

DEFAULT_REFERENCE_URL = "https://restcountries.com/v3.1/all?fields=name,languages"


class Config:
    """Handles the configuration for regcheck.

    This class loads configuration from multiple sources with a defined
    precedence:
    1.  Default values (lowest precedence).
    2.  Project-specific `regcheck.toml` file.
    3.  User-level `~/.config/regcheck/config.toml` file.
    4.  A custom configuration file specified at runtime.
    5.  Environment variables (highest precedence).

    Attributes:
        DEFAULT_CONFIG (Dict[str, Any]): A dictionary containing the default
            configuration values.
    """

    DEFAULT_CONFIG: Dict[str, Any] = {
        "identity": {
            "minimum_age": 18,
            "password_min_length": 8,
        },
        "files": {
            "max_image_size": 2 * 1024 * 1024,
            "max_document_size": 5 * 1024 * 1024,
        },
        "reference": {
            "url": DEFAULT_REFERENCE_URL,
            "timeout": 10,  # Network request timeout in seconds.
            "retries": 3,
            "cache_enabled": True,
            "cache_ttl": 3600,
        },
    }

    ENV_MAPPING = {
        "REGCHECK_MINIMUM_AGE": "identity.minimum_age",
        "REGCHECK_PASSWORD_MIN_LENGTH": "identity.password_min_length",
        "REGCHECK_MAX_IMAGE_SIZE": "files.max_image_size",
        "REGCHECK_MAX_DOCUMENT_SIZE": "files.max_document_size",
        "REGCHECK_REFERENCE_URL": "reference.url",
        "REGCHECK_TIMEOUT": "reference.timeout",
        "REGCHECK_RETRIES": "reference.retries",
        "REGCHECK_CACHE_ENABLED": "reference.cache_enabled",
        "REGCHECK_CACHE_TTL": "reference.cache_ttl",
    }

    BOOL_KEYS = {"cache_enabled"}
    INT_KEYS = {
        "minimum_age", "password_min_length", "max_image_size",
        "max_document_size", "timeout", "retries", "cache_ttl",
    }

    def __init__(self, config_path: Optional[Path] = None, load_defaults: bool = True) -> None:
        """Initializes the configuration manager.

        Args:
            config_path (Optional[Path]): An optional path to a specific
                configuration file to load. If provided, it takes precedence
                over default file locations.
            load_defaults (bool): Whether to read the project and user
                configuration files. Disable this to get an isolated
                configuration (defaults plus environment only).
        """
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        if config_path:
            self._load_file_config(Path(config_path))
        elif load_defaults:
            self._load_default_configs()
        self._load_env_config()

    def _load_default_configs(self) -> None:
        """Loads configs from standard locations if they exist."""
        project_config = Path.cwd() / PROJECT_CONFIG_NAME
        if project_config.exists():
            self._load_file_config(project_config)

        if USER_CONFIG_PATH.exists():
            self._load_file_config(USER_CONFIG_PATH)

    def _merge_configs(self, base: Dict[str, Any], new: Dict[str, Any]) -> None:
        """Recursively merges a new config dict into a base dict."""
        for key, value in new.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._merge_configs(base[key], value)
            else:
                base[key] = value

    def _load_file_config(self, config_path: Path) -> None:
        """Loads and merges configuration from a TOML file.

        String values for typed keys (e.g. `timeout = "10"`) are cast the
        same way environment values are.

        Args:
            config_path (Path): The path to the TOML configuration file.
        """
        try:
            with open(config_path, "rb") as f:
                file_config = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Could not load config from {config_path}: {e}")
            return
        self._apply_file_values(file_config)

    def _apply_file_values(self, values: Dict[str, Any], prefix: str = "") -> None:
        for key, value in values.items():
            key_path = f"{prefix}{key}"
            if isinstance(value, dict):
                self._apply_file_values(value, f"{key_path}.")
            elif isinstance(value, str) and self._is_typed_key(key_path):
                self.set_from_string(key_path, value)
            else:
                self.set(key_path, value)

    def _load_env_config(self) -> None:
        """Loads and merges configuration from environment variables."""
        for env_var, config_key in self.ENV_MAPPING.items():
            value = os.getenv(env_var)
            if value is not None:
                self.set_from_string(config_key, value)

    def _is_typed_key(self, key_path: str) -> bool:
        leaf_key = key_path.split(".")[-1]
        return leaf_key in self.BOOL_KEYS or leaf_key in self.INT_KEYS

    def set_from_string(self, key_path: str, value: str) -> bool:
        """Sets a value given as a string, casting it by key.

        Known boolean and integer keys are cast to their type; an invalid
        integer is logged and leaves the current value in place. For other
        keys, "true"/"false" become booleans and integers (including
        negative ones) become ints.

        Args:
            key_path (str): The dot-separated key (e.g., "reference.timeout").
            value (str): The raw string value.

        Returns:
            bool: False if the value was rejected, True otherwise.
        """
        leaf_key = key_path.split(".")[-1]
        if leaf_key in self.BOOL_KEYS:
            self.set(key_path, value.strip().lower() in ("true", "1", "yes", "on"))
        elif leaf_key in self.INT_KEYS:
            try:
                self.set(key_path, int(value))
            except ValueError:
                logger.warning(f"Invalid integer value for {leaf_key}: {value}")
                return False
        elif value.lower() in ("true", "false"):
            self.set(key_path, value.lower() == "true")
        else:
            try:
                self.set(key_path, int(value))
            except ValueError:
                self.set(key_path, value)
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieves a configuration value using a dot-separated key.

        Args:
            key (str): The dot-separated key (e.g., "files.max_image_size").
            default (Any): The default value to return if the key is not found.

        Returns:
            Any: The configuration value or the default.
        """
        value: Any = self.config
        try:
            for k in key.split("."):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Sets a configuration value in memory.

        Args:
            key (str): The dot-separated key (e.g., "reference.cache_ttl").
            value (Any): The value to set.
        """
        keys = key.split(".")
        target_config = self.config
        for k in keys[:-1]:
            if not isinstance(target_config.get(k), dict):
                target_config[k] = {}
            target_config = target_config[k]
        target_config[keys[-1]] = value

    def _get_user_config(self) -> Dict[str, Any]:
        """Returns the contents of the user config file, or an empty dict."""
        if not USER_CONFIG_PATH.exists():
            return {}
        try:
            with open(USER_CONFIG_PATH, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError):
            return {}

    def _diff_from_defaults(self, current: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
        """Returns the subset of `current` that differs from `defaults`."""
        changed: Dict[str, Any] = {}
        for key, value in current.items():
            default = defaults.get(key)
            if isinstance(value, dict) and isinstance(default, dict):
                nested = self._diff_from_defaults(value, default)
                if nested:
                    changed[key] = nested
            elif value != default:
                changed[key] = value
        return changed

    def save_user_config(self) -> None:
        """Saves settings that differ from the defaults to the user config file.

        Raises:
            IOError: If the configuration file cannot be written.
        """
        user_config = self._get_user_config()
        self._merge_configs(user_config, self._diff_from_defaults(self.config, self.DEFAULT_CONFIG))

        try:
            USER_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
            with open(USER_CONFIG_PATH, "wb") as f:
                tomli_w.dump(user_config, f)
        except OSError as e:
            raise IOError(f"Failed to save configuration to {USER_CONFIG_PATH}: {e}") from e

    @staticmethod
    def reset_user_config() -> bool:
        """Deletes the user config file.

        Returns:
            bool: True if a file was removed, False if there was none.
        """
        if not USER_CONFIG_PATH.exists():
            return False
        USER_CONFIG_PATH.unlink()
        return True

    def __str__(self) -> str:
        return f"Config({self.config})"
