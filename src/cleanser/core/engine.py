"""Scan orchestration engine."""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from cleanser.core.dedupe import dedupe
from cleanser.core.hasher import HashEngine
from cleanser.core.traverser import Traverser, resolves_into_protected
from cleanser.models.category import Category
from cleanser.models.scan_config import ScanConfig
from cleanser.models.scan_result import ScanItem, ScanResult
from cleanser.utils import bytes_to_human

log = logging.getLogger(__name__)


class ScanError(Exception):
    """Raised when a scan cannot even start, e.g. no root is readable."""


class ScanState(str, Enum):
    IDLE = "idle"
    TRAVERSING = "traversing"
    DEDUPLICATING = "deduplicating"
    HASHING = "hashing"
    COMPLETE = "complete"


ProgressCallback = Callable[[ScanState], None]


class ScanEngine:
    """Runs traversal, deduplication and optional hashing into one ScanResult.

    Errors below the root level (unreadable subtrees, files that vanish
    while hashing) are collected as warnings on the result; only a scan
    with no usable root at all raises :class:`ScanError`.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self._max_workers = max_workers
        self.state = ScanState.IDLE

    def scan(self, config: ScanConfig, on_progress: ProgressCallback | None = None) -> ScanResult:
        """Scan the configured roots.

        Args:
            config: What to scan and how deep.
            on_progress: Optional callback fired on every state change.

        Returns:
            The completed scan result.

        Raises:
            ScanError: If none of the roots can be scanned.
        """
        self._set_state(ScanState.IDLE, on_progress)
        roots, warnings = _usable_roots(config.roots)

        traverser = Traverser(
            config.effective_depth,
            skip_system=config.skip_system,
            min_candidate_size=config.min_candidate_size,
            min_large_file_size=config.min_large_file_size,
            collect_min_size=config.min_duplicate_size if config.find_duplicates else None,
            max_workers=self._max_workers,
        )

        self._set_state(ScanState.TRAVERSING, on_progress)
        candidates = list(traverser.traverse(roots))
        warnings.extend(traverser.warnings)

        self._set_state(ScanState.DEDUPLICATING, on_progress)
        items = dedupe(candidates)
        if len(items) != len(candidates):
            log.debug("Dropped %d nested candidates", len(candidates) - len(items))

        duplicate_groups: dict[str, list[Path]] = {}
        if config.find_duplicates:
            self._set_state(ScanState.HASHING, on_progress)
            hasher = HashEngine(max_workers=self._max_workers)
            groups = hasher.hash_duplicates(traverser.files, min_size=config.min_duplicate_size)
            warnings.extend(hasher.warnings)
            duplicate_groups, duplicate_items = _keep_oldest(groups, warnings)
            items = dedupe([*items, *duplicate_items])

        result = ScanResult(
            items=items,
            duplicate_groups=duplicate_groups,
            warnings=warnings,
            speed=config.speed,
        )
        self._set_state(ScanState.COMPLETE, on_progress)
        log.info(
            "Scan complete: %d items, %s reclaimable, %d warnings",
            len(result.items),
            bytes_to_human(result.total_size_bytes),
            len(warnings),
        )
        return result

    def _set_state(self, state: ScanState, on_progress: ProgressCallback | None) -> None:
        self.state = state
        if on_progress:
            on_progress(state)


def _usable_roots(roots: Iterable[Path | str]) -> tuple[list[Path], list[str]]:
    """Split roots into scannable directories and warnings about the rest."""
    usable: list[Path] = []
    warnings: list[str] = []
    for root in roots:
        path = Path(os.path.abspath(os.path.expanduser(root)))
        if resolves_into_protected(path):
            warnings.append(f"{path}: protected path, not scanned")
        elif not path.is_dir():
            warnings.append(f"{path}: not a directory")
        elif not os.access(path, os.R_OK | os.X_OK):
            warnings.append(f"{path}: permission denied")
        else:
            usable.append(path)

    if not usable:
        detail = "; ".join(warnings) or "no roots given"
        raise ScanError(f"No accessible scan roots ({detail})")
    for warning in warnings:
        log.warning("Skipping scan root: %s", warning)
    return usable, warnings


def _keep_oldest(
    groups: dict[str, list[Path]],
    warnings: list[str],
) -> tuple[dict[str, list[Path]], list[ScanItem]]:
    """Order each group oldest copy first and turn the other copies into items."""
    ordered_groups: dict[str, list[Path]] = {}
    items: list[ScanItem] = []

    for digest, paths in groups.items():
        stats: list[tuple[float, Path, int]] = []
        for path in paths:
            try:
                st = path.lstat()
            except OSError as e:
                warnings.append(f"{path}: {e.strerror or e}")
                continue
            stats.append((st.st_mtime, path, st.st_size))
        if len(stats) < 2:
            continue

        stats.sort(key=lambda s: (s[0], str(s[1])))
        kept = stats[0][1]
        ordered_groups[digest] = [path for _, path, _ in stats]
        for _, path, size in stats[1:]:
            items.append(
                ScanItem(
                    path=path,
                    category=Category.DUPLICATE_FILE,
                    size_bytes=size,
                    validated=True,
                    description=f"Duplicate of {kept} ({bytes_to_human(size)})",
                )
            )

    return ordered_groups, items
