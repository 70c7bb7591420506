"""Scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from cleanser.models.category import Category, RiskLevel
from cleanser.models.scan_config import ScanSpeed


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ScanItem:
    """Single file or directory that can be cleaned.

    ``size_bytes`` is measured once at discovery time.  For directories it
    is the apparent size of every regular file in the subtree.  The risk
    tier is derived from the category and cannot be set per item.
    """

    path: Path
    category: Category
    size_bytes: int
    validated: bool = False
    description: str = ""
    is_dir: bool = False

    @property
    def risk(self) -> RiskLevel:
        return self.category.risk

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "category": self.category.value,
            "risk": str(self.risk),
            "size_bytes": self.size_bytes,
            "validated": self.validated,
            "description": self.description,
            "is_dir": self.is_dir,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanItem:
        # "risk" is written for readers but always re-derived from category.
        return cls(
            path=Path(data["path"]),
            category=Category(data["category"]),
            size_bytes=int(data["size_bytes"]),
            validated=bool(data.get("validated", False)),
            description=data.get("description", ""),
            is_dir=bool(data.get("is_dir", False)),
        )


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Result of a complete scan.

    ``items`` never contains two paths where one is an ancestor of (or
    equal to) the other, so ``total_size_bytes`` never counts a subtree
    twice.  ``duplicate_groups`` maps a SHA-256 hex digest to the paths
    sharing it; the first path of each group is the copy that is kept.
    """

    items: list[ScanItem] = field(default_factory=list)
    duplicate_groups: dict[str, list[Path]] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=_utcnow)
    warnings: list[str] = field(default_factory=list)
    speed: ScanSpeed = ScanSpeed.NORMAL

    @property
    def total_size_bytes(self) -> int:
        return sum(item.size_bytes for item in self.items)

    def by_risk(self) -> dict[RiskLevel, list[ScanItem]]:
        """Group items by risk tier, safest first."""
        grouped: dict[RiskLevel, list[ScanItem]] = {}
        for risk in RiskLevel:
            members = [i for i in self.items if i.risk == risk]
            if members:
                grouped[risk] = members
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "speed": self.speed.value,
            "total_size_bytes": self.total_size_bytes,
            "items": [item.to_dict() for item in self.items],
            "duplicate_groups": {
                digest: [str(p) for p in paths]
                for digest, paths in self.duplicate_groups.items()
            },
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanResult:
        return cls(
            items=[ScanItem.from_dict(raw) for raw in data.get("items", [])],
            duplicate_groups={
                digest: [Path(p) for p in paths]
                for digest, paths in data.get("duplicate_groups", {}).items()
            },
            generated_at=datetime.fromisoformat(data["generated_at"]),
            warnings=list(data.get("warnings", [])),
            speed=ScanSpeed(data.get("speed", ScanSpeed.NORMAL.value)),
        )
