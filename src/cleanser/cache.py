"""JSON file cache for the most recent scan."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

from cleanser.models.scan_config import ScanConfig
from cleanser.models.scan_result import ScanResult
from cleanser.utils import xdg_cache_home

log = logging.getLogger(__name__)

_CACHE_DIR = xdg_cache_home() / "cleanser"

CACHE_FILE = _CACHE_DIR / "last-scan.json"

FRESHNESS_WINDOW = timedelta(hours=1)

_FORMAT_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A persisted scan and when it was taken."""

    scan_result: ScanResult
    created_at: datetime
    config_key: str | None = None


class ScanCache:
    """Stores one scan result on disk and serves it back while fresh.

    A missing, unreadable, stale or differently configured cache file is
    always reported as a plain miss.  Writers replace the file atomically,
    but only one writer per cache path is expected at a time.
    """

    def __init__(
        self,
        path: Path | None = None,
        freshness_window: timedelta = FRESHNESS_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.path = path or CACHE_FILE
        self.freshness_window = freshness_window
        self._clock = clock

    def load(self, config: ScanConfig | None = None) -> CacheEntry | None:
        """Return the cached entry, or None on any kind of miss.

        When *config* is given, an entry saved under a different
        configuration is a miss too.
        """
        entry = self._read()
        if entry is None:
            return None

        age = self._clock() - entry.created_at
        if age >= self.freshness_window:
            log.info("Scan cache is stale (%s old)", age)
            return None

        if config is not None and entry.config_key != config.cache_key():
            log.info("Scan cache was built with different scan settings")
            return None

        return entry

    def save(self, scan_result: ScanResult, config: ScanConfig | None = None) -> CacheEntry:
        """Write *scan_result* to disk, replacing any previous entry."""
        entry = CacheEntry(
            scan_result=scan_result,
            created_at=self._clock(),
            config_key=config.cache_key() if config is not None else None,
        )
        data = {
            "version": _FORMAT_VERSION,
            "created_at": entry.created_at.isoformat(),
            "config_key": entry.config_key,
            "scan_result": scan_result.to_dict(),
        }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".last-scan-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        log.debug("Saved scan cache: %s (%d items)", self.path, len(scan_result.items))
        return entry

    def invalidate(self) -> None:
        """Remove the cache file if present."""
        try:
            self.path.unlink()
            log.debug("Removed scan cache: %s", self.path)
        except FileNotFoundError:
            pass

    def age(self) -> timedelta | None:
        """Age of the cached entry, fresh or not; None if there is none."""
        entry = self._read()
        if entry is None:
            return None
        return self._clock() - entry.created_at

    def _read(self) -> CacheEntry | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data: dict[str, Any] = json.load(f)
            created_at = datetime.fromisoformat(data["created_at"])
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            return CacheEntry(
                scan_result=ScanResult.from_dict(data["scan_result"]),
                created_at=created_at,
                config_key=data.get("config_key"),
            )
        except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError, AttributeError) as e:
            log.info("Ignoring unreadable scan cache %s: %s", self.path, e)
            return None
