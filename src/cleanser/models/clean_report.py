"""Cleaning report dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from cleanser.models.scan_result import ScanItem


class Outcome(str, Enum):
    """What happened to one selected item."""

    CLEANED = "cleaned"
    FAILED = "failed"
    SKIPPED_DRY_RUN = "skipped_dry_run"


@dataclass(frozen=True, slots=True)
class CleanAttempt:
    """One selected item and its outcome. ``reason`` is set for failures."""

    item: ScanItem
    outcome: Outcome
    reason: str = ""


@dataclass(slots=True)
class CleanReport:
    """Result of a cleaning operation, in the order items were attempted."""

    attempted: list[CleanAttempt] = field(default_factory=list)
    dry_run: bool = False

    @property
    def bytes_freed(self) -> int:
        """Bytes of items actually deleted. Dry-run and failures count zero."""
        return sum(a.item.size_bytes for a in self.attempted if a.outcome is Outcome.CLEANED)

    @property
    def cleaned(self) -> list[CleanAttempt]:
        return [a for a in self.attempted if a.outcome is Outcome.CLEANED]

    @property
    def failed(self) -> list[CleanAttempt]:
        return [a for a in self.attempted if a.outcome is Outcome.FAILED]

    @property
    def skipped(self) -> list[CleanAttempt]:
        return [a for a in self.attempted if a.outcome is Outcome.SKIPPED_DRY_RUN]

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "bytes_freed": self.bytes_freed,
            "attempted": [
                {
                    "path": str(a.item.path),
                    "category": a.item.category.value,
                    "size_bytes": a.item.size_bytes,
                    "outcome": a.outcome.value,
                    "reason": a.reason,
                }
                for a in self.attempted
            ],
        }
