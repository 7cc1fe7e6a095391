# ABOUTME: Last-known-data cache for dashboard resilience
# ABOUTME: Persists the last good station lists to disk and monitors slow calls

import json
import logging
import time
from datetime import datetime, timedelta
from functools import wraps
from pathlib import Path

logger = logging.getLogger(__name__)

# Cache directory
CACHE_DIR = Path(__file__).parent.parent / "cache" / "dashboard"

# Cache expiration times
CACHE_EXPIRY = {
    "station_lists": timedelta(days=1),
}

SLOW_CALL_SECONDS = 5


def is_cache_valid(cache_file, expiry_delta):
    """Check if a cache file exists and is still valid."""
    if not cache_file.exists():
        return False

    file_age = datetime.now() - datetime.fromtimestamp(cache_file.stat().st_mtime)
    return file_age < expiry_delta


class LastKnownCache:
    """
    Disk copy of the last successfully fetched overview sections.

    Lets a freshly started dashboard fall back to recent real readings
    instead of the static station lists when a source is down.
    """

    def __init__(self, cache_dir=None, cache_type="station_lists"):
        self.cache_dir = Path(cache_dir) if cache_dir else CACHE_DIR
        self.expiry = CACHE_EXPIRY[cache_type]

    def _path(self, section):
        return self.cache_dir / f"last_known_{section}.json"

    def save(self, section, records):
        """Store records for a section. Failures are logged, never raised."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(self._path(section), "w") as f:
                json.dump(records, f)
        except (OSError, TypeError) as e:
            logger.warning(f"Failed to cache {section}: {e}")

    def load(self, section):
        """Return cached records for a section, or None if missing, expired or unreadable."""
        cache_file = self._path(section)
        if not is_cache_valid(cache_file, self.expiry):
            return None
        try:
            with open(cache_file, "r") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            # Cache file may be corrupted; callers fall back to static data
            logger.warning(f"Cache load failed for {section}: {e}")
            return None


def monitor_performance(func):
    """Decorator to log slow coroutine calls (backend fetches)."""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return await func(*args, **kwargs)
        finally:
            execution_time = time.perf_counter() - start_time
            if execution_time > SLOW_CALL_SECONDS:
                logger.warning(f"{func.__name__} took {execution_time:.1f}s to execute")

    return wrapper


__all__ = [
    "CACHE_DIR",
    "CACHE_EXPIRY",
    "is_cache_valid",
    "LastKnownCache",
    "monitor_performance",
]
