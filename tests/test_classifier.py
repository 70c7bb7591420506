"""Tests for path classification."""

from __future__ import annotations

import pytest

from cleanser.core.classifier import classify, risk_for
from cleanser.models.category import Category, RiskLevel


class TestDirectoryRules:
    @pytest.mark.parametrize(
        ("name", "parent", "expected"),
        [
            ("node_modules", "/home/u/app", Category.NODE_MODULES),
            ("target", "/home/u/crate", Category.RUST_TARGET),
            ("dist", "/home/u/app", Category.BUILD_OUTPUT),
            ("out", "/home/u/app", Category.BUILD_OUTPUT),
            ("__pycache__", "/home/u/app/pkg", Category.PYTHON_ARTIFACT),
            (".tox", "/home/u/app", Category.PYTHON_ARTIFACT),
            (".gradle", "/home/u/android", Category.JAVA_BUILD_CACHE),
            (".next", "/home/u/site", Category.FRAMEWORK_CACHE),
            (".cache", "/home/u", Category.SYSTEM_CACHE),
            ("Caches", "/Users/u/Library", Category.SYSTEM_CACHE),
        ],
    )
    def test_known_names(self, name, parent, expected):
        assert classify(name, parent, is_dir=True) is expected

    def test_specific_cache_names_win_over_generic_rule(self):
        # Both end in "cache" and would otherwise be plain caches.
        assert classify(".pytest_cache", "/home/u/app", is_dir=True) is Category.PYTHON_ARTIFACT
        assert classify(".parcel-cache", "/home/u/app", is_dir=True) is Category.FRAMEWORK_CACHE
        assert classify(".mypy_cache", "/home/u/app", is_dir=True) is Category.PYTHON_ARTIFACT

    def test_browser_cache_by_parent(self):
        assert classify("Cache", "/home/u/.config/google-chrome/Default", True) is Category.BROWSER_CACHE
        assert classify("cache2", "/home/u/.mozilla/firefox/abc.default", True) is Category.BROWSER_CACHE
        assert classify("Cache", "/Users/u/Library/Application Support/Google Chrome", True) is (
            Category.BROWSER_CACHE
        )

    def test_browser_word_inside_other_name_is_not_a_browser(self):
        assert classify("Cache", "/home/u/knowledge", is_dir=True) is Category.SYSTEM_CACHE
        assert classify("Cache", "/home/u/cooperation", is_dir=True) is Category.SYSTEM_CACHE

    def test_package_cache_by_parent(self):
        assert classify("_cacache", "/home/u/.npm", is_dir=True) is Category.PACKAGE_CACHE
        assert classify("cache", "/home/u/.cargo/registry", is_dir=True) is Category.PACKAGE_CACHE
        assert classify("cache", "/home/u/go/pkg/mod", is_dir=True) is Category.PACKAGE_CACHE

    def test_unrecognized_directory(self):
        assert classify("src", "/home/u/app", is_dir=True) is None
        assert classify("Documents", "/home/u", is_dir=True) is None
        assert classify("cachedata", "/home/u", is_dir=True) is None


class TestFileRules:
    @pytest.mark.parametrize("name", ["app.log", "server.LOG", "app.log.1", "app.log.3.gz"])
    def test_log_files(self, name):
        assert classify(name, "/home/u/logs", is_dir=False) is Category.LOG_FILE

    @pytest.mark.parametrize("name", ["x.tmp", "y.temp", "movie.mkv.part", "setup.exe.crdownload"])
    def test_temp_files(self, name):
        assert classify(name, "/home/u/Downloads", is_dir=False) is Category.TEMP_FILE

    def test_directory_names_do_not_match_files(self):
        assert classify("node_modules", "/home/u/app", is_dir=False) is None
        assert classify("cache", "/home/u", is_dir=False) is None

    def test_file_rules_do_not_match_directories(self):
        assert classify("old.log", "/home/u", is_dir=True) is None

    def test_plain_file(self):
        assert classify("notes.txt", "/home/u", is_dir=False) is None
        assert classify("catalog", "/home/u", is_dir=False) is None


class TestRisk:
    def test_static_mapping(self):
        assert risk_for(Category.BROWSER_CACHE) is RiskLevel.SAFE
        assert risk_for(Category.PYTHON_ARTIFACT) is RiskLevel.SAFE
        assert risk_for(Category.NODE_MODULES) is RiskLevel.MODERATE
        assert risk_for(Category.FRAMEWORK_CACHE) is RiskLevel.MODERATE
        assert risk_for(Category.LARGE_FILE) is RiskLevel.RISKY
        assert risk_for(Category.DUPLICATE_FILE) is RiskLevel.RISKY

    def test_every_category_has_a_risk_and_label(self):
        for category in Category:
            assert isinstance(category.risk, RiskLevel)
            assert category.label

    def test_risk_ordering(self):
        assert RiskLevel.SAFE < RiskLevel.MODERATE < RiskLevel.RISKY

    def test_parse(self):
        assert RiskLevel.parse("Moderate") is RiskLevel.MODERATE
        assert RiskLevel.parse(RiskLevel.RISKY) is RiskLevel.RISKY
        with pytest.raises(ValueError):
            RiskLevel.parse("extreme")
