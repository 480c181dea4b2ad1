"""Bundle identity extraction from the embedded Info.plist."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..archive.inspector import ArchiveInspector, entry_to_path, literal_pattern
from ..archive.scratch import scratch_directory

BUNDLE_ID_KEY = "CFBundleIdentifier"
VERSION_KEY = "CFBundleShortVersionString"
BUILD_NUMBER_KEY = "CFBundleVersion"


@dataclass(frozen=True, slots=True)
class BundleIdentity:
    bundle_id: Optional[str] = None
    version: Optional[str] = None
    build_number: Optional[str] = None


class MetadataExtractor:
    """Reads identifier, short version and build number from one manifest entry."""

    def __init__(self, inspector: ArchiveInspector) -> None:
        self.inspector = inspector

    def extract(self, archive: Path, info_plist_entry: str) -> BundleIdentity:
        with scratch_directory("ipa-release-info-") as workdir:
            self.inspector.extract(archive, [literal_pattern(info_plist_entry)], workdir)
            payload = self.inspector.read_plist(entry_to_path(workdir, info_plist_entry))

        return BundleIdentity(
            bundle_id=_nullable_string(payload.get(BUNDLE_ID_KEY)),
            version=_nullable_string(payload.get(VERSION_KEY)),
            build_number=_nullable_string(payload.get(BUILD_NUMBER_KEY)),
        )


def _nullable_string(value: object) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None
