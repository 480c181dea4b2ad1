"""Scoped scratch directories."""

from __future__ import annotations

import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional


@contextmanager
def scratch_directory(prefix: str = "ipa-release-", *, parent: Optional[Path] = None) -> Iterator[Path]:
    """Create a uniquely named directory and remove it recursively on exit."""

    path = Path(tempfile.mkdtemp(prefix=prefix, dir=str(parent) if parent else None))
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
