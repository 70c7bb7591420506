"""Content hashing for duplicate detection."""

from __future__ import annotations

import hashlib
import logging
import os
import stat
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable

log = logging.getLogger(__name__)

_CHUNK_SIZE = 8192  # 8 KB


def sha256_file(path: Path, chunk_size: int = _CHUNK_SIZE) -> str:
    """Compute SHA-256 of a file using chunked reads."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        while chunk := f.read(chunk_size):
            h.update(chunk)
    return h.hexdigest()


class HashEngine:
    """Groups files with identical content.

    Files are bucketed by size first, since files of different sizes can
    never match; every remaining file is hashed in full.  One file per
    task on a thread pool, each with its own read buffer.
    """

    def __init__(self, max_workers: int | None = None, chunk_size: int = _CHUNK_SIZE) -> None:
        self._max_workers = max_workers or os.cpu_count() or 1
        self._chunk_size = chunk_size
        self.warnings: list[str] = []

    def hash_duplicates(self, files: Iterable[Path], min_size: int = 1) -> dict[str, list[Path]]:
        """Return ``{digest: [paths]}`` for every set of two or more identical files.

        Only regular files (symlinks excluded) of at least ``min_size``
        bytes are considered; zero-byte files never are.  A file that
        cannot be read is left out and noted in :attr:`warnings`.
        """
        min_size = max(min_size, 1)
        by_size: dict[int, list[Path]] = {}
        for path in dict.fromkeys(files):
            try:
                st = path.lstat()
            except OSError as e:
                self._warn(path, e)
                continue
            if stat.S_ISREG(st.st_mode) and st.st_size >= min_size:
                by_size.setdefault(st.st_size, []).append(path)

        candidates = [p for paths in by_size.values() if len(paths) > 1 for p in paths]
        if not candidates:
            return {}

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            digests = list(executor.map(self._hash_one, candidates))

        groups: dict[str, list[Path]] = {}
        for path, digest in zip(candidates, digests):
            if isinstance(digest, OSError):
                self._warn(path, digest)
            else:
                groups.setdefault(digest, []).append(path)

        duplicates = {digest: sorted(paths) for digest, paths in groups.items() if len(paths) > 1}
        log.info("Hashed %d files, found %d duplicate groups", len(candidates), len(duplicates))
        return duplicates

    def _hash_one(self, path: Path) -> str | OSError:
        try:
            return sha256_file(path, self._chunk_size)
        except OSError as e:
            return e

    def _warn(self, path: Path, error: OSError) -> None:
        log.debug("Cannot hash %s: %s", path, error)
        self.warnings.append(f"{path}: {error.strerror or error}")
