"""Removal of nested and overlapping candidates."""

from __future__ import annotations

from typing import Iterable

from cleanser.models.scan_result import ScanItem


def dedupe(candidates: Iterable[ScanItem]) -> list[ScanItem]:
    """Drop every candidate that lies inside (or is) an already kept one.

    Candidates are visited shallowest first, so a parent directory always
    wins over anything below it and a subtree is never counted twice.
    Ties keep the earlier candidate.  Running this on its own output
    returns the same items.
    """
    ordered = sorted(candidates, key=lambda item: len(item.path.parts))
    kept: list[ScanItem] = []
    kept_paths: set[tuple[str, ...]] = set()

    for item in ordered:
        parts = item.path.parts
        # Any kept ancestor is one of this path's prefixes.
        if any(parts[:n] in kept_paths for n in range(1, len(parts) + 1)):
            continue
        kept.append(item)
        kept_paths.add(parts)

    return kept
