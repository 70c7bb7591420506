"""Deletion engine consuming scan results."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from cleanser.core.traverser import resolves_into_protected
from cleanser.models.category import Category, RiskLevel
from cleanser.models.clean_report import CleanAttempt, CleanReport, Outcome
from cleanser.models.scan_result import ScanItem, ScanResult
from cleanser.utils import bytes_to_human, path_size, remove_path

log = logging.getLogger(__name__)

AttemptCallback = Callable[[CleanAttempt], None]


class CleanEngine:
    """Deletes (or pretends to delete) the items of a scan up to a risk ceiling.

    Items are handled one at a time and independently: a failure is
    recorded and the next item is attempted.  Nothing is rolled back, so
    ``on_attempt`` is called after every item to let callers report
    progress as it happens.

    A duplicate is only deleted while the copy it duplicates still exists
    and is not itself selected in the same run, so at least one copy of
    every duplicate group survives.

    Args:
        size_tolerance: Allowed relative drift between the scanned size and
            the size measured right before deletion.  0 means the sizes
            must match exactly.
    """

    def __init__(self, size_tolerance: float = 0.0) -> None:
        if size_tolerance < 0:
            raise ValueError("size_tolerance must not be negative")
        self.size_tolerance = size_tolerance

    @staticmethod
    def select(scan_result: ScanResult, risk_ceiling: RiskLevel | str) -> list[ScanItem]:
        """Items at or below *risk_ceiling*, in scan order."""
        ceiling = RiskLevel.parse(risk_ceiling)
        return [item for item in scan_result.items if item.risk <= ceiling]

    def clean(
        self,
        scan_result: ScanResult,
        risk_ceiling: RiskLevel | str,
        dry_run: bool = True,
        on_attempt: AttemptCallback | None = None,
    ) -> CleanReport:
        """Clean every selected item and report what happened to each."""
        report = CleanReport(dry_run=dry_run)
        selected = self.select(scan_result, risk_ceiling)
        selected_paths = {item.path for item in selected}
        kept_copies = _kept_copies(scan_result)

        for item in selected:
            if dry_run:
                attempt = CleanAttempt(item, Outcome.SKIPPED_DRY_RUN)
            elif item.category is Category.DUPLICATE_FILE:
                attempt = self._delete_duplicate(item, kept_copies.get(item.path), selected_paths)
            else:
                attempt = self._delete(item)
            report.attempted.append(attempt)
            if on_attempt:
                on_attempt(attempt)

        if not dry_run:
            log.info(
                "Cleaned %d items, freed %s, %d failures",
                len(report.cleaned),
                bytes_to_human(report.bytes_freed),
                len(report.failed),
            )
        return report

    def _delete_duplicate(self, item: ScanItem, kept: Path | None, selected: set[Path]) -> CleanAttempt:
        if kept is None:
            return self._failed(item, "no kept copy recorded for this duplicate")
        if kept in selected or any(parent in selected for parent in kept.parents):
            return self._failed(item, f"kept copy {kept} is selected for deletion too")
        if kept.is_symlink() or not kept.is_file():
            return self._failed(item, f"kept copy {kept} no longer exists")
        return self._delete(item)

    def _delete(self, item: ScanItem) -> CleanAttempt:
        path = item.path
        if resolves_into_protected(path):
            return self._failed(item, "protected system path")

        try:
            if path.is_symlink():
                return self._failed(item, "path is now a symlink")
            if not path.exists():
                return self._failed(item, "path no longer exists")
            if path.is_dir() != item.is_dir:
                return self._failed(item, "path changed type since scan")

            current = path_size(path)
            if not self._size_matches(item.size_bytes, current):
                return self._failed(
                    item,
                    f"size changed since scan ({item.size_bytes} -> {current} bytes)",
                )

            remove_path(path)
        except OSError as e:
            return self._failed(item, e.strerror or str(e))

        log.debug("Removed %s (%s)", path, bytes_to_human(item.size_bytes))
        return CleanAttempt(item, Outcome.CLEANED)

    def _size_matches(self, expected: int, current: int) -> bool:
        return abs(current - expected) <= expected * self.size_tolerance

    @staticmethod
    def _failed(item: ScanItem, reason: str) -> CleanAttempt:
        log.warning("Could not clean %s: %s", item.path, reason)
        return CleanAttempt(item, Outcome.FAILED, reason)


def _kept_copies(scan_result: ScanResult) -> dict[Path, Path]:
    """Map every non-kept member of a duplicate group to the kept (first) path."""
    kept: dict[Path, Path] = {}
    for paths in scan_result.duplicate_groups.values():
        for path in paths[1:]:
            kept[path] = paths[0]
    return kept
