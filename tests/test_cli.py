"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from cleanser.cli import main
from cleanser.models.scan_config import MIB


@pytest.fixture
def runner(isolate_cache, isolate_settings):
    return CliRunner()


@pytest.fixture
def home(tmp_path, write_file):
    write_file(tmp_path / ".cache" / "thumbs" / "blob", 2 * MIB)
    write_file(tmp_path / "app" / "package.json", content=b"{}")
    write_file(tmp_path / "app" / "node_modules" / "dep" / "index.js", 2 * MIB)
    write_file(tmp_path / "notes.txt", content=b"keep me")
    return tmp_path


class TestScanCommand:
    def test_text_output(self, runner, home):
        result = runner.invoke(main, ["scan", "-p", str(home)])
        assert result.exit_code == 0, result.output
        assert "Total reclaimable: 4.0 MB" in result.output
        assert "System Cache" in result.output
        assert "Node Modules" in result.output

    def test_json_output(self, runner, home):
        result = runner.invoke(main, ["scan", "-p", str(home), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["total_size_bytes"] == 4 * MIB
        assert {i["category"] for i in data["items"]} == {"system_cache", "node_modules"}
        assert {i["risk"] for i in data["items"]} == {"safe", "moderate"}

    def test_saves_cache(self, runner, home, isolate_cache):
        runner.invoke(main, ["scan", "-p", str(home)])
        assert isolate_cache.exists()

    def test_no_cache(self, runner, home, isolate_cache):
        runner.invoke(main, ["scan", "-p", str(home), "--no-cache"])
        assert not isolate_cache.exists()

    def test_missing_root_fails(self, runner, tmp_path):
        result = runner.invoke(main, ["scan", "-p", str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "No accessible scan roots" in result.output

    def test_nothing_found(self, runner, tmp_path):
        result = runner.invoke(main, ["scan", "-p", str(tmp_path)])
        assert result.exit_code == 0
        assert "Nothing to clean." in result.output

    def test_bad_speed(self, runner, home):
        result = runner.invoke(main, ["scan", "-p", str(home), "--speed", "warp"])
        assert result.exit_code == 2


class TestCleanCommand:
    def test_dry_run_deletes_nothing(self, runner, home):
        result = runner.invoke(main, ["clean", "-p", str(home), "--risk", "risky", "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "DRY RUN: No files were deleted." in result.output
        assert (home / ".cache").exists()
        assert (home / "app" / "node_modules").exists()

    def test_safe_clean(self, runner, home, isolate_cache):
        result = runner.invoke(main, ["clean", "-p", str(home), "--yes"])
        assert result.exit_code == 0, result.output
        assert not (home / ".cache").exists()
        assert (home / "app" / "node_modules").exists()
        assert (home / "notes.txt").exists()
        assert "Space freed: 2.0 MB" in result.output
        assert not isolate_cache.exists()

    def test_moderate_clean_json(self, runner, home):
        result = runner.invoke(main, ["clean", "-p", str(home), "-r", "moderate", "-y", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "cleaned"
        assert data["bytes_freed"] == 4 * MIB
        assert {a["outcome"] for a in data["attempted"]} == {"cleaned"}
        assert not (home / "app" / "node_modules").exists()

    def test_confirmation_declined(self, runner, home):
        result = runner.invoke(main, ["clean", "-p", str(home)], input="n\n")
        assert result.exit_code == 0
        assert "Aborted." in result.output
        assert (home / ".cache").exists()

    def test_confirmation_accepted(self, runner, home):
        result = runner.invoke(main, ["clean", "-p", str(home)], input="y\n")
        assert result.exit_code == 0, result.output
        assert not (home / ".cache").exists()

    def test_json_requires_yes_or_dry_run(self, runner, home):
        result = runner.invoke(main, ["clean", "-p", str(home), "--json"])
        assert result.exit_code == 2
        assert (home / ".cache").exists()

    def test_uses_matching_cached_scan(self, runner, home):
        runner.invoke(main, ["scan", "-p", str(home)])
        result = runner.invoke(main, ["clean", "-p", str(home), "--dry-run"])
        assert "Using cached scan results" in result.output

    def test_ignores_cache_from_other_options(self, runner, home):
        runner.invoke(main, ["scan", "-p", str(home), "--speed", "quick"])
        result = runner.invoke(main, ["clean", "-p", str(home), "--dry-run"])
        assert "Using cached scan results" not in result.output

    def test_force_scan(self, runner, home):
        runner.invoke(main, ["scan", "-p", str(home)])
        result = runner.invoke(main, ["clean", "-p", str(home), "--dry-run", "--force-scan"])
        assert "Using cached scan results" not in result.output
        assert "Scanning" in result.output

    def test_stale_item_from_cache_fails_cleanly(self, runner, home, write_file):
        runner.invoke(main, ["scan", "-p", str(home)])
        write_file(home / ".cache" / "thumbs" / "new", 10)

        result = runner.invoke(main, ["clean", "-p", str(home), "--yes", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [a["outcome"] for a in data["attempted"]] == ["failed"]
        assert "size changed" in data["attempted"][0]["reason"]
        assert (home / ".cache").exists()

    def test_nothing_to_clean(self, runner, tmp_path):
        result = runner.invoke(main, ["clean", "-p", str(tmp_path), "--yes"])
        assert result.exit_code == 0
        assert "No items found to clean." in result.output


class TestCacheCommand:
    def test_info_without_cache(self, runner):
        result = runner.invoke(main, ["cache", "info"])
        assert result.exit_code == 0
        assert "No cached scan." in result.output

    def test_info_and_clear(self, runner, home, isolate_cache):
        runner.invoke(main, ["scan", "-p", str(home)])
        info = runner.invoke(main, ["cache", "info"])
        assert "fresh" in info.output

        cleared = runner.invoke(main, ["cache", "clear"])
        assert cleared.exit_code == 0
        assert "Scan cache cleared." in cleared.output
        assert not isolate_cache.exists()
