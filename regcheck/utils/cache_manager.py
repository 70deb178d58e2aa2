"""Provides a small file cache with TTL and size-based eviction.

This module contains the `CacheManager` class, used to keep the country
reference dataset on disk between calls so that the country and language
checks do not download it every time.
"""
import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class CacheManager:
    """A file-based JSON cache with Time-To-Live (TTL) and size-limiting policies.

    Each entry is a JSON file in the cache directory. Entries older than the
    TTL passed to `get` are misses, and the directory is kept below a size
    limit by evicting the oldest files first.

    Attributes:
        cache_dir (Path): The directory where cache files are stored.
        max_size (int): The maximum size of the cache in bytes.
    """

    def __init__(self, max_size_mb: int = 10, cache_dir: Optional[Path] = None):
        """Initializes the CacheManager.

        Args:
            max_size_mb (int): The maximum size of the cache in megabytes.
                Defaults to 10.
            cache_dir (Optional[Path]): The path to the cache directory. If
                None, `~/.cache/regcheck` is used.
        """
        self.cache_dir = Path(cache_dir) if cache_dir else Path.home() / ".cache" / "regcheck"
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.max_size = max_size_mb * 1024 * 1024

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{digest}.json"

    def get(self, key: str, ttl: int = 3600) -> Optional[Any]:
        """Retrieves an item from the cache if it exists and is not expired.

        Args:
            key (str): The key identifying the cached item (any string; it is
                hashed into a file name).
            ttl (int): The Time-To-Live for the item in seconds. Defaults
                to 3600.

        Returns:
            Optional[Any]: The decoded value if found and fresh, otherwise None.
        """
        cache_file = self._path_for(key)
        if not cache_file.exists():
            return None

        try:
            age = time.time() - cache_file.stat().st_mtime
            if age < ttl:
                with cache_file.open("r", encoding="utf-8") as f:
                    return json.load(f)
        except (ValueError, OSError) as e:
            logger.warning(f"Discarding unreadable cache entry {cache_file}: {e}")
            cache_file.unlink(missing_ok=True)

        return None

    def set(self, key: str, value: Any) -> None:
        """Saves a JSON-serializable item to the cache.

        Failing to write is not an error: the item is simply not cached.
        """
        self._cleanup_if_needed()
        cache_file = self._path_for(key)
        try:
            with cache_file.open("w", encoding="utf-8") as f:
                json.dump(value, f)
        except (TypeError, ValueError, OSError) as e:
            logger.warning(f"Could not write cache entry {cache_file}: {e}")
            cache_file.unlink(missing_ok=True)

    def _cleanup_if_needed(self) -> None:
        """Removes the oldest cache files if the total size exceeds the limit."""
        try:
            files_with_stats = [(f, f.stat()) for f in self.cache_dir.glob("*.json")]
            total_size = sum(s.st_size for _, s in files_with_stats)
            if total_size <= self.max_size:
                return

            files_with_stats.sort(key=lambda item: item[1].st_mtime)
            while total_size > self.max_size and files_with_stats:
                oldest_file, oldest_stat = files_with_stats.pop(0)
                total_size -= oldest_stat.st_size
                oldest_file.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Cache cleanup failed in {self.cache_dir}: {e}")

    def clear(self) -> None:
        """Removes all files from the cache directory."""
        for cache_file in self.cache_dir.glob("*.json"):
            cache_file.unlink(missing_ok=True)
