"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

import cleanser.cache as cache
from cleanser.settings import Settings


@pytest.fixture
def isolate_cache(tmp_path_factory, monkeypatch):
    """Redirect the scan cache to a temp directory outside any scan root."""
    cache_dir = tmp_path_factory.mktemp("state") / "cleanser"
    cache_dir.mkdir()
    cache_file = cache_dir / "last-scan.json"
    monkeypatch.setattr(cache, "CACHE_FILE", cache_file)
    monkeypatch.setattr(cache, "_CACHE_DIR", cache_dir)
    return cache_file


@pytest.fixture
def isolate_settings(tmp_path_factory, monkeypatch):
    """Point settings at an empty config home and reset the singleton."""
    config_home = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setattr(Settings, "_instance", None)
    return config_home / "cleanser" / "settings.json"


@pytest.fixture
def write_file() -> Callable[..., Path]:
    """Create a file of *size* bytes (or with *content*), making parents."""

    def _write(path: Path, size: int = 0, content: bytes | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if content is None:
            content = b"x" * size
        path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def sparse_file() -> Callable[[Path, int], Path]:
    """Create a file with a large apparent size without writing its bytes."""

    def _sparse(path: Path, size: int) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as f:
            f.truncate(size)
        return path

    return _sparse
