"""Digest computation and archive inspection."""

from .digests import FileDigests, compute_digests
from .inspector import INFO_PLIST_PATTERN, ArchiveInspector, find_info_plist, literal_pattern
from .scratch import scratch_directory

__all__ = [
    "FileDigests",
    "compute_digests",
    "ArchiveInspector",
    "INFO_PLIST_PATTERN",
    "find_info_plist",
    "literal_pattern",
    "scratch_directory",
]
