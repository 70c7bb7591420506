"""Pattern-based classification of filesystem entries.

The rule table is evaluated top to bottom and the first matching rule
wins.  Order matters: specific directory names such as ``node_modules``,
``.pytest_cache`` or ``.parcel-cache`` must be checked before the generic
``*cache`` rule or they would be filed as plain caches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath

from cleanser.models.category import Category, RiskLevel


@dataclass(frozen=True, slots=True)
class _Rule:
    name: re.Pattern[str]
    category: Category
    is_dir: bool
    parent: re.Pattern[str] | None = None

    def matches(self, name: str, parent: str, is_dir: bool) -> bool:
        if is_dir != self.is_dir:
            return False
        if not self.name.search(name):
            return False
        return self.parent is None or bool(self.parent.search(parent))


def _names(*names: str) -> re.Pattern[str]:
    return re.compile("^(?:" + "|".join(re.escape(n) for n in names) + ")$")


# A path component naming a browser profile tree, e.g. "Google Chrome",
# "google-chrome", ".mozilla", "com.apple.Safari", "BraveSoftware".
_BROWSER_PARENT = re.compile(
    r"(?i)(?:^|/)(?:[^/]*[ .-])?"
    r"(?:chrome|chromium|firefox|mozilla|safari|brave|bravesoftware|edge|opera|vivaldi)"
    r"(?:[ .-][^/]*)?(?:/|$)"
)
# Path components owned by language package managers.
_PACKAGE_PARENT = re.compile(
    r"(?i)(?:^|/)(?:\.?pip|\.npm|\.?yarn|\.?pnpm(?:-store)?|\.cargo|homebrew|\.bun|\.m2|go|\.gem|\.nuget|composer)(?:/|$)"
)
_CACHE_NAME = re.compile(r"(?i)caches?$")
_BROWSER_CACHE_NAME = re.compile(r"(?i)(?:caches?\d*|GPUCache)$")

_RULES: tuple[_Rule, ...] = (
    # Build-tool directories, validated against a sibling manifest
    _Rule(_names("node_modules"), Category.NODE_MODULES, is_dir=True),
    _Rule(_names("target"), Category.RUST_TARGET, is_dir=True),
    _Rule(_names("build", "dist", "out"), Category.BUILD_OUTPUT, is_dir=True),
    # Tool caches with unambiguous names
    _Rule(
        _names("__pycache__", ".pytest_cache", ".mypy_cache", ".ruff_cache", ".tox", ".nox", ".hypothesis"),
        Category.PYTHON_ARTIFACT,
        is_dir=True,
    ),
    _Rule(_names(".gradle", ".maven"), Category.JAVA_BUILD_CACHE, is_dir=True),
    _Rule(
        _names(".next", ".nuxt", ".angular", ".svelte-kit", ".parcel-cache", ".turbo", ".docusaurus"),
        Category.FRAMEWORK_CACHE,
        is_dir=True,
    ),
    # Caches identified by where they live
    _Rule(_BROWSER_CACHE_NAME, Category.BROWSER_CACHE, is_dir=True, parent=_BROWSER_PARENT),
    _Rule(re.compile(r"(?i)(?:caches?|_cacache)$"), Category.PACKAGE_CACHE, is_dir=True, parent=_PACKAGE_PARENT),
    # Everything else named like a cache
    _Rule(_CACHE_NAME, Category.SYSTEM_CACHE, is_dir=True),
    # Files
    _Rule(re.compile(r"(?i)\.log(?:\.\d+)?(?:\.gz)?$"), Category.LOG_FILE, is_dir=False),
    _Rule(re.compile(r"(?i)\.(?:tmp|temp|crdownload|part)$"), Category.TEMP_FILE, is_dir=False),
)


def classify(name: str, parent: str | PurePath, is_dir: bool) -> Category | None:
    """Return the category of an entry, or None if it is not recognized.

    Args:
        name: The entry's own name (last path component).
        parent: Path of the directory containing the entry.
        is_dir: Whether the entry is a directory.
    """
    parent_str = PurePath(parent).as_posix()
    for rule in _RULES:
        if rule.matches(name, parent_str, is_dir):
            return rule.category
    return None


def risk_for(category: Category) -> RiskLevel:
    """Static risk tier of a category."""
    return category.risk
