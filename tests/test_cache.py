"""Tests for the scan result cache."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from cleanser.cache import ScanCache
from cleanser.models.category import Category
from cleanser.models.scan_config import ScanConfig, ScanSpeed
from cleanser.models.scan_result import ScanItem, ScanResult

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return _Clock(T0)


@pytest.fixture
def result():
    return ScanResult(
        items=[
            ScanItem(Path("/home/u/.cache"), Category.SYSTEM_CACHE, 5_000_000, True, "cache", True),
            ScanItem(Path("/home/u/app/node_modules"), Category.NODE_MODULES, 9_000_000, True, "deps", True),
            ScanItem(Path("/home/u/old.iso"), Category.LARGE_FILE, 200_000_000, True, "iso"),
        ],
        duplicate_groups={"ab" * 32: [Path("/home/u/a.bin"), Path("/home/u/b.bin")]},
        generated_at=T0,
        warnings=["/home/u/locked: Permission denied"],
        speed=ScanSpeed.QUICK,
    )


class TestScanCache:
    def test_missing_file_is_miss(self, isolate_cache):
        assert ScanCache().load() is None
        assert ScanCache().age() is None

    def test_default_path_is_patchable(self, isolate_cache):
        assert ScanCache().path == isolate_cache

    def test_save_then_load(self, isolate_cache, clock, result):
        cache = ScanCache(clock=clock)
        cache.save(result)

        entry = cache.load()

        assert entry is not None
        assert entry.created_at == T0
        assert entry.scan_result == result
        assert entry.scan_result.total_size_bytes == result.total_size_bytes

    def test_fresh_at_59_minutes(self, isolate_cache, clock, result):
        cache = ScanCache(clock=clock)
        cache.save(result)
        clock.now = T0 + timedelta(minutes=59)
        assert cache.load() is not None

    def test_stale_at_61_minutes(self, isolate_cache, clock, result):
        cache = ScanCache(clock=clock)
        cache.save(result)
        clock.now = T0 + timedelta(minutes=61)
        assert cache.load() is None
        assert cache.age() == timedelta(minutes=61)

    def test_custom_window(self, isolate_cache, clock, result):
        cache = ScanCache(freshness_window=timedelta(minutes=5), clock=clock)
        cache.save(result)
        clock.now = T0 + timedelta(minutes=6)
        assert cache.load() is None

    def test_config_mismatch_is_miss(self, isolate_cache, clock, result, tmp_path):
        quick = ScanConfig(roots=(tmp_path,), speed=ScanSpeed.QUICK)
        thorough = ScanConfig(roots=(tmp_path,), speed=ScanSpeed.THOROUGH)
        cache = ScanCache(clock=clock)
        cache.save(result, quick)

        assert cache.load(quick) is not None
        assert cache.load(thorough) is None
        assert cache.load() is not None

    def test_corrupt_file_is_miss(self, isolate_cache):
        isolate_cache.write_text("{not json")
        assert ScanCache().load() is None

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"version": 1},
            {"created_at": "yesterday", "scan_result": {}},
            {"created_at": T0.isoformat(), "scan_result": {"generated_at": T0.isoformat(), "items": [{"path": "/x"}]}},
        ],
    )
    def test_wrong_shape_is_miss(self, isolate_cache, payload):
        isolate_cache.write_text(json.dumps(payload))
        assert ScanCache().load() is None

    def test_save_replaces_previous_entry(self, isolate_cache, clock, result):
        cache = ScanCache(clock=clock)
        cache.save(result)
        cache.save(ScanResult(generated_at=T0))
        entry = cache.load()
        assert entry is not None
        assert entry.scan_result.items == []
        assert [p.name for p in isolate_cache.parent.iterdir()] == ["last-scan.json"]

    def test_save_creates_directory(self, tmp_path, clock, result):
        cache = ScanCache(path=tmp_path / "nested" / "dir" / "scan.json", clock=clock)
        cache.save(result)
        assert cache.load() is not None

    def test_invalidate(self, isolate_cache, clock, result):
        cache = ScanCache(clock=clock)
        cache.save(result)
        cache.invalidate()
        assert not isolate_cache.exists()
        assert cache.load() is None
        cache.invalidate()

    def test_file_is_json(self, isolate_cache, clock, result):
        ScanCache(clock=clock).save(result)
        data = json.loads(isolate_cache.read_text())
        assert data["scan_result"]["total_size_bytes"] == 214_000_000
        assert data["scan_result"]["items"][0]["risk"] == "safe"
