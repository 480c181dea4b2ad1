"""Checksum helpers for build archives."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True, slots=True)
class FileDigests:
    sha256: str
    md5: str


def compute_digests(path: Path) -> FileDigests:
    """Return SHA-256 and MD5 hex digests computed in a single read pass."""

    sha256 = hashlib.sha256()
    md5 = hashlib.md5()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            sha256.update(chunk)
            md5.update(chunk)
    return FileDigests(sha256=sha256.hexdigest(), md5=md5.hexdigest())
