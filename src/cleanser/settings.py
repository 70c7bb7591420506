"""JSON-backed user settings."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from cleanser.models.scan_config import MIB, ScanConfig, ScanSpeed
from cleanser.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "cleanser"
_SETTINGS_FILE = "settings.json"

_DEFAULT_MIN_SIZE_MB = 100


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("scan.speed")            # reads data["scan"]["speed"]
        settings.set("scan.speed", "quick")   # writes + saves

    Recognized keys: ``scan.speed``, ``scan.paths``, ``scan.min_size_mb``,
    ``scan.skip_system``, ``cache.enabled`` and ``clean.size_tolerance``.
    """

    _instance: Settings | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @classmethod
    def instance(cls) -> Settings:
        """Return the singleton settings instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    # ── typed accessors ──────────────────────────────────────────────────

    @property
    def scan_speed(self) -> ScanSpeed:
        raw = self.get("scan.speed", ScanSpeed.NORMAL.value)
        try:
            return ScanSpeed(str(raw).lower())
        except ValueError:
            log.warning("Ignoring unknown scan.speed %r in %s", raw, self._path)
            return ScanSpeed.NORMAL

    @property
    def scan_paths(self) -> tuple[Path, ...]:
        raw = self.get("scan.paths") or []
        if not isinstance(raw, list):
            log.warning("Ignoring non-list scan.paths in %s", self._path)
            return ()
        return tuple(Path(p).expanduser() for p in raw)

    @property
    def min_size_mb(self) -> int:
        return self._number("scan.min_size_mb", _DEFAULT_MIN_SIZE_MB, int)

    @property
    def skip_system(self) -> bool:
        return bool(self.get("scan.skip_system", True))

    @property
    def cache_enabled(self) -> bool:
        return bool(self.get("cache.enabled", True))

    @property
    def size_tolerance(self) -> float:
        return self._number("clean.size_tolerance", 0.0, float)

    def scan_config(self) -> ScanConfig:
        """A ScanConfig built from these settings, defaults elsewhere."""
        paths = self.scan_paths
        return ScanConfig(
            roots=paths or ScanConfig().roots,
            speed=self.scan_speed,
            min_large_file_size=self.min_size_mb * MIB,
            skip_system=self.skip_system,
        )

    def _number(self, key: str, default: Any, kind: type) -> Any:
        raw = self.get(key, default)
        try:
            value = kind(raw)
        except (TypeError, ValueError):
            log.warning("Ignoring invalid %s %r in %s", key, raw, self._path)
            return default
        return value if value >= 0 else default

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if isinstance(data, dict):
            self._data = data
        else:
            log.warning("Ignoring settings file without a JSON object: %s", self._path)

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)
