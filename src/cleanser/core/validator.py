"""False-positive guard for generically named build directories."""

from __future__ import annotations

from collections.abc import Collection

from cleanser.models.category import VALIDATED_CATEGORIES, Category


# Files whose presence marks a directory as the root of a software project.
PROJECT_MARKERS = frozenset({
    "package.json",
    "Cargo.toml",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "settings.gradle",
    "go.mod",
    "pyproject.toml",
    "setup.py",
    "CMakeLists.txt",
    "Makefile",
    "meson.build",
    "composer.json",
    "Gemfile",
    "mix.exs",
    "pubspec.yaml",
})
_MARKER_SUFFIXES = (".csproj", ".sln", ".fsproj")


def validate(category: Category, parent_listing: Collection[str]) -> bool:
    """Check a candidate directory against its parent directory's entries.

    ``node_modules`` needs a sibling ``package.json``, ``target`` a sibling
    ``Cargo.toml`` and ``build``/``dist``/``out`` any project marker.  Every
    other category passes unconditionally.
    """
    if category not in VALIDATED_CATEGORIES:
        return True
    match category:
        case Category.NODE_MODULES:
            return "package.json" in parent_listing
        case Category.RUST_TARGET:
            return "Cargo.toml" in parent_listing
        case Category.BUILD_OUTPUT:
            return any(
                name in PROJECT_MARKERS or name.endswith(_MARKER_SUFFIXES)
                for name in parent_listing
            )
        case _:
            return False
