"""Item categories and risk tiers."""

from __future__ import annotations

from enum import Enum, IntEnum


class RiskLevel(IntEnum):
    """How much review an item needs before deletion.

    Ordered so that ``RiskLevel.SAFE < RiskLevel.MODERATE < RiskLevel.RISKY``;
    a clean with a given ceiling includes every tier at or below it.
    """

    SAFE = 0
    MODERATE = 1
    RISKY = 2

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str | RiskLevel) -> RiskLevel:
        """Parse 'safe', 'moderate' or 'risky' (case-insensitive)."""
        if isinstance(value, RiskLevel):
            return value
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown risk level: {value!r}") from None


class Category(str, Enum):
    """What kind of reclaimable storage an item is."""

    SYSTEM_CACHE = "system_cache"
    BROWSER_CACHE = "browser_cache"
    PACKAGE_CACHE = "package_cache"
    LOG_FILE = "log_file"
    TEMP_FILE = "temp_file"
    PYTHON_ARTIFACT = "python_artifact"
    NODE_MODULES = "node_modules"
    BUILD_OUTPUT = "build_output"
    RUST_TARGET = "rust_target"
    JAVA_BUILD_CACHE = "java_build_cache"
    FRAMEWORK_CACHE = "framework_cache"
    LARGE_FILE = "large_file"
    DUPLICATE_FILE = "duplicate_file"

    @property
    def risk(self) -> RiskLevel:
        return _RISK[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_RISK: dict[Category, RiskLevel] = {
    Category.SYSTEM_CACHE: RiskLevel.SAFE,
    Category.BROWSER_CACHE: RiskLevel.SAFE,
    Category.PACKAGE_CACHE: RiskLevel.SAFE,
    Category.LOG_FILE: RiskLevel.SAFE,
    Category.TEMP_FILE: RiskLevel.SAFE,
    Category.PYTHON_ARTIFACT: RiskLevel.SAFE,
    Category.NODE_MODULES: RiskLevel.MODERATE,
    Category.BUILD_OUTPUT: RiskLevel.MODERATE,
    Category.RUST_TARGET: RiskLevel.MODERATE,
    Category.JAVA_BUILD_CACHE: RiskLevel.MODERATE,
    Category.FRAMEWORK_CACHE: RiskLevel.MODERATE,
    Category.LARGE_FILE: RiskLevel.RISKY,
    Category.DUPLICATE_FILE: RiskLevel.RISKY,
}

_LABELS: dict[Category, str] = {
    Category.SYSTEM_CACHE: "System Cache",
    Category.BROWSER_CACHE: "Browser Cache",
    Category.PACKAGE_CACHE: "Package Cache",
    Category.LOG_FILE: "Log Files",
    Category.TEMP_FILE: "Temporary Files",
    Category.PYTHON_ARTIFACT: "Python Artifacts",
    Category.NODE_MODULES: "Node Modules",
    Category.BUILD_OUTPUT: "Build Output",
    Category.RUST_TARGET: "Rust Target",
    Category.JAVA_BUILD_CACHE: "Java Build Cache",
    Category.FRAMEWORK_CACHE: "Framework Cache",
    Category.LARGE_FILE: "Large Files",
    Category.DUPLICATE_FILE: "Duplicate Files",
}

# Categories whose directory names are too generic to trust without a
# sibling project manifest.
VALIDATED_CATEGORIES = frozenset({
    Category.NODE_MODULES,
    Category.BUILD_OUTPUT,
    Category.RUST_TARGET,
})
