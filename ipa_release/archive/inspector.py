"""Archive inspection backed by external tools.

The verifier never opens the IPA itself beyond hashing it: listing,
extraction and property-list conversion are delegated to ``unzip`` and
``plutil`` through a :class:`~ipa_release.process.ProcessRunner`, so tests
and non-macOS hosts can substitute their own implementation.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..errors import InfrastructureError
from ..process import ProcessRunner

logger = logging.getLogger(__name__)

INFO_PLIST_PATTERN = re.compile(r"^Payload/[^/]+\.app/Info\.plist$")


class ArchiveInspector:
    """Lists and extracts zip entries and converts embedded property lists."""

    def __init__(self, runner: ProcessRunner) -> None:
        self.runner = runner

    def list_entries(self, archive: Path) -> List[str]:
        result = self.runner.run("unzip", ["-Z1", str(archive)])
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def extract(self, archive: Path, patterns: Sequence[str], destination: Path) -> None:
        self.runner.run("unzip", ["-q", "-o", str(archive), *patterns, "-d", str(destination)])

    def read_plist(self, plist_path: Path) -> Dict[str, Any]:
        result = self.runner.run("plutil", ["-convert", "json", "-o", "-", str(plist_path)])
        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise InfrastructureError(f"Info.plist could not be converted to JSON: {plist_path}", exc) from exc
        if not isinstance(payload, dict):
            raise InfrastructureError(f"Info.plist did not contain a dictionary: {plist_path}")
        return payload


def find_info_plist(entries: Sequence[str]) -> tuple[Optional[str], int]:
    """Return the first application manifest entry and the number of candidates."""

    matches = [entry for entry in entries if INFO_PLIST_PATTERN.match(entry)]
    if not matches:
        return None, 0
    if len(matches) > 1:
        logger.warning("Archive contains %d Info.plist candidates; using %s", len(matches), matches[0])
    return matches[0], len(matches)


def entry_to_path(root: Path, entry: str) -> Path:
    return root.joinpath(*entry.split("/"))


def literal_pattern(entry: str) -> str:
    """Escape ``unzip`` wildcards so ``entry`` only matches itself."""

    return re.sub(r"([*?\[])", r"[\1]", entry)
