"""Scan configuration dataclass."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

MIB = 1024 * 1024


class ScanSpeed(str, Enum):
    """How deep the traversal goes below each root."""

    QUICK = "quick"
    NORMAL = "normal"
    THOROUGH = "thorough"

    def __str__(self) -> str:
        return self.value

    @property
    def max_depth(self) -> int | None:
        """Depth limit for this speed, or None for unlimited."""
        match self:
            case ScanSpeed.QUICK:
                return 3
            case ScanSpeed.NORMAL:
                return 6
            case _:
                return None


def _default_roots() -> tuple[Path, ...]:
    return (Path.home(),)


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Parameters for a single scan.

    Two configs with the same ``cache_key()`` produce interchangeable
    scan results, so the scan cache is keyed on it.
    """

    roots: tuple[Path, ...] = field(default_factory=_default_roots)
    speed: ScanSpeed = ScanSpeed.NORMAL
    max_depth: int | None = None
    min_large_file_size: int = 100 * MIB
    find_duplicates: bool = False
    skip_system: bool = True
    min_candidate_size: int = MIB
    min_duplicate_size: int = MIB

    @property
    def effective_depth(self) -> int | None:
        """Explicit max_depth if set, otherwise the speed's depth."""
        if self.max_depth is not None:
            return self.max_depth
        return self.speed.max_depth

    def cache_key(self) -> str:
        """Stable fingerprint of every field that affects scan output."""
        payload = {
            "roots": sorted(str(Path(r).expanduser().resolve()) for r in self.roots),
            "speed": self.speed.value,
            "max_depth": self.effective_depth,
            "min_large_file_size": self.min_large_file_size,
            "find_duplicates": self.find_duplicates,
            "skip_system": self.skip_system,
            "min_candidate_size": self.min_candidate_size,
            "min_duplicate_size": self.min_duplicate_size,
        }
        raw = json.dumps(payload, sort_keys=True).encode("utf-8")
        return hashlib.sha256(raw).hexdigest()
