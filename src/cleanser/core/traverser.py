"""Bounded, parallel directory traversal producing candidate items."""

from __future__ import annotations

import logging
import os
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Iterable, Iterator

from cleanser.core.classifier import classify
from cleanser.core.validator import validate
from cleanser.models.category import Category
from cleanser.models.scan_config import MIB
from cleanser.models.scan_result import ScanItem
from cleanser.utils import bytes_to_human, dir_info

log = logging.getLogger(__name__)

# Never scanned, whatever the configuration says.
PROTECTED_PREFIXES = (
    "/System",
    "/Library",
    "/Applications",
    "/bin",
    "/sbin",
    "/usr",
    "/etc",
    "/dev",
    "/proc",
    "/sys",
    "/boot",
    "/private/etc",
)

# User data that looks cache-like but is not safe to touch. Skipped when
# ``skip_system`` is on.
CAUTION_PATHS = (
    "Library/Application Support",
    "Library/Mobile Documents",
    "Library/Mail",
    "Library/Keychains",
    "Library/Containers",
    ".ssh",
    ".gnupg",
    ".local/share/keyrings",
)

LOG_SIZE_THRESHOLD = 10 * MIB

_NEVER_DESCEND = frozenset({".git", ".hg", ".svn"})


def is_protected(path: Path | str) -> bool:
    """Whether *path* lies under one of the fixed system prefixes."""
    posix = PurePath(path).as_posix()
    return any(posix == prefix or posix.startswith(prefix + "/") for prefix in PROTECTED_PREFIXES)


def resolves_into_protected(path: Path | str) -> bool:
    """Like :func:`is_protected`, but also true when a symlink along *path*
    leads into a protected tree."""
    return is_protected(path) or is_protected(os.path.realpath(path))


def is_caution(path: Path | str) -> bool:
    """Whether *path* contains one of the user-library caution paths."""
    wrapped = "/" + PurePath(path).as_posix().strip("/") + "/"
    return any(f"/{part}/" in wrapped for part in CAUTION_PATHS)


@dataclass(slots=True)
class _Listing:
    """Everything learned from reading one directory."""

    items: list[ScanItem] = field(default_factory=list)
    to_measure: list[tuple[Path, Category]] = field(default_factory=list)
    subdirs: list[tuple[Path, int]] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(slots=True)
class _Measured:
    item: ScanItem | None
    warnings: list[str]


class Traverser:
    """Walks directory trees and yields classified candidates.

    Every directory listing and every candidate-size measurement runs as
    its own task on a thread pool.  Tasks only return values; the thread
    consuming :meth:`traverse` schedules follow-up work and gathers
    warnings and collected files, so workers share no mutable state.

    A directory that is classified and validated is emitted as a single
    item sized by its whole subtree and is never descended into.  One that
    fails validation is walked like any other directory.
    """

    def __init__(
        self,
        max_depth: int | None = None,
        *,
        skip_system: bool = True,
        min_candidate_size: int = MIB,
        min_large_file_size: int = 0,
        collect_min_size: int | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._max_depth = max_depth
        self._skip_system = skip_system
        self._min_candidate_size = min_candidate_size
        self._min_large_file_size = min_large_file_size
        self._collect_min_size = collect_min_size
        self._max_workers = max_workers or os.cpu_count() or 1
        self.warnings: list[str] = []
        self.files: list[Path] = []

    def traverse(self, roots: Iterable[Path | str]) -> Iterator[ScanItem]:
        """Lazily yield candidate items found below *roots*."""
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            pending: set[Future] = set()
            for root in roots:
                root_path = Path(os.path.abspath(os.path.expanduser(root)))
                if self._is_skipped(root_path) or self._is_skipped(Path(os.path.realpath(root_path))):
                    self._warn(f"{root_path}: protected path, not scanned")
                    continue
                if self._within_depth(0):
                    pending.add(executor.submit(self._list_dir, root_path, 0))

            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    result = future.result()
                    self.warnings.extend(result.warnings)
                    if isinstance(result, _Measured):
                        if result.item is not None:
                            yield result.item
                        continue
                    self.files.extend(result.files)
                    for path, depth in result.subdirs:
                        pending.add(executor.submit(self._list_dir, path, depth))
                    for path, category in result.to_measure:
                        pending.add(executor.submit(self._measure, path, category))
                    yield from result.items

    def _within_depth(self, depth: int) -> bool:
        return self._max_depth is None or depth < self._max_depth

    def _is_skipped(self, path: Path) -> bool:
        if is_protected(path):
            return True
        return self._skip_system and is_caution(path)

    def _warn(self, message: str) -> None:
        log.debug("Traversal warning: %s", message)
        self.warnings.append(message)

    def _list_dir(self, path: Path, depth: int) -> _Listing:
        listing = _Listing()
        try:
            with os.scandir(path) as it:
                entries = list(it)
        except OSError as e:
            log.debug("Cannot read directory %s: %s", path, e)
            listing.warnings.append(f"{path}: {e.strerror or e}")
            return listing

        names = {entry.name for entry in entries}
        child_depth = depth + 1

        for entry in entries:
            entry_path = Path(entry.path)
            try:
                if entry.is_symlink():
                    continue
                if entry.is_dir(follow_symlinks=False):
                    if entry.name in _NEVER_DESCEND or self._is_skipped(entry_path):
                        continue
                    category = classify(entry.name, path, is_dir=True)
                    if category is not None and validate(category, names):
                        listing.to_measure.append((entry_path, category))
                        continue
                    if category is not None:
                        # Not a candidate itself, but may hold projects.
                        log.debug("Not a %s without project manifest: %s", category.value, entry_path)
                    if self._within_depth(child_depth):
                        listing.subdirs.append((entry_path, child_depth))
                elif entry.is_file(follow_symlinks=False):
                    size = entry.stat(follow_symlinks=False).st_size
                    item = self._file_item(entry_path, path, size)
                    if item is not None:
                        listing.items.append(item)
                    if self._should_collect(item, size):
                        listing.files.append(entry_path)
            except OSError as e:
                log.debug("Cannot access %s: %s", entry_path, e)
                listing.warnings.append(f"{entry_path}: {e.strerror or e}")

        return listing

    def _file_item(self, path: Path, parent: Path, size: int) -> ScanItem | None:
        category = classify(path.name, parent, is_dir=False)
        if category is not None:
            threshold = LOG_SIZE_THRESHOLD if category is Category.LOG_FILE else self._min_candidate_size
            if size > 0 and size >= threshold:
                return ScanItem(
                    path=path,
                    category=category,
                    size_bytes=size,
                    validated=True,
                    description=f"{category.label}: {path.name} ({bytes_to_human(size)})",
                )

        large = self._min_large_file_size
        if large and size >= large and not path.name.startswith("."):
            return ScanItem(
                path=path,
                category=Category.LARGE_FILE,
                size_bytes=size,
                validated=True,
                description=f"Large file ({bytes_to_human(size)})",
            )
        return None

    def _should_collect(self, item: ScanItem | None, size: int) -> bool:
        if self._collect_min_size is None or size <= 0 or size < self._collect_min_size:
            return False
        return item is None or item.category is Category.LARGE_FILE

    def _measure(self, path: Path, category: Category) -> _Measured:
        size, count, warnings = dir_info(path)
        for warning in warnings:
            log.debug("Cannot read while sizing %s: %s", path, warning)
        if size <= 0 or size < self._min_candidate_size:
            return _Measured(None, warnings)
        item = ScanItem(
            path=path,
            category=category,
            size_bytes=size,
            validated=True,
            description=f"{category.label}: {path.name} ({count:,} files)",
            is_dir=True,
        )
        return _Measured(item, warnings)
