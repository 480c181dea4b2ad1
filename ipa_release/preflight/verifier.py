"""Strict preflight verification of an IPA before upload."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import List, Optional

from ..archive.digests import compute_digests
from ..archive.inspector import ArchiveInspector, find_info_plist
from ..errors import InfrastructureError
from ..process import ProcessRunner, SubprocessRunner
from ..schemas.preflight import PreflightReport
from .metadata import BUILD_NUMBER_KEY, BUNDLE_ID_KEY, VERSION_KEY, BundleIdentity, MetadataExtractor
from .signing import SigningValidator

logger = logging.getLogger(__name__)

IPA_EXTENSION = ".ipa"

_RECOVERABLE = (InfrastructureError, OSError, ValueError)


class PreflightVerifier:
    """Runs file, archive, metadata and signing checks and collects the findings.

    Recoverable problems never raise; they end up in ``PreflightReport.errors``.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        *,
        inspector: Optional[ArchiveInspector] = None,
        extractor: Optional[MetadataExtractor] = None,
        signing: Optional[SigningValidator] = None,
    ) -> None:
        runner = runner or SubprocessRunner()
        self.inspector = inspector or ArchiveInspector(runner)
        self.extractor = extractor or MetadataExtractor(self.inspector)
        self.signing = signing or SigningValidator(self.inspector, runner)

    def verify(
        self,
        path: str | Path,
        expected_bundle_id: Optional[str] = None,
        expected_version: Optional[str] = None,
        expected_build_number: Optional[str] = None,
    ) -> PreflightReport:
        ipa_path = _absolute(path)
        errors: List[str] = []
        warnings: List[str] = []

        size_bytes = 0
        sha256: Optional[str] = None
        md5: Optional[str] = None
        identity = BundleIdentity()
        signing_validated = False

        file_stat = _stat(ipa_path)
        if file_stat is None:
            errors.append(f"IPA file does not exist: {ipa_path}")
        elif not stat.S_ISREG(file_stat.st_mode):
            errors.append(f"IPA path is not a file: {ipa_path}")
        else:
            size_bytes = file_stat.st_size

        if not _readable(ipa_path):
            errors.append(f"IPA file is not readable: {ipa_path}")

        if ipa_path.suffix != IPA_EXTENSION:
            errors.append("IPA file must have .ipa extension.")

        if size_bytes <= 0:
            errors.append("IPA file is empty.")

        if not errors:
            try:
                digests = compute_digests(ipa_path)
                sha256, md5 = digests.sha256, digests.md5
            except _RECOVERABLE as exc:
                errors.append(_message(exc, "Failed to compute IPA checksums."))

        info_plist_entry: Optional[str] = None
        if not errors:
            try:
                entries = self.inspector.list_entries(ipa_path)
                info_plist_entry, candidates = find_info_plist(entries)
                if info_plist_entry is None:
                    errors.append("IPA is missing Payload/*.app/Info.plist.")
                elif candidates > 1:
                    warnings.append(
                        f"IPA contains {candidates} Info.plist candidates; using {info_plist_entry}."
                    )
            except _RECOVERABLE as exc:
                errors.append(_message(exc, "Failed to inspect IPA archive contents."))

        if info_plist_entry:
            try:
                identity = self.extractor.extract(ipa_path, info_plist_entry)
            except _RECOVERABLE as exc:
                errors.append(_message(exc, "Failed to read Info.plist from IPA."))

        for key, expected, actual in (
            (BUNDLE_ID_KEY, expected_bundle_id, identity.bundle_id),
            (VERSION_KEY, expected_version, identity.version),
            (BUILD_NUMBER_KEY, expected_build_number, identity.build_number),
        ):
            issue = _identity_issue(key, expected, actual)
            if issue:
                errors.append(issue)

        if info_plist_entry:
            try:
                self.signing.validate(ipa_path, info_plist_entry)
                signing_validated = True
            except _RECOVERABLE as exc:
                errors.append(_message(exc, "Code signing verification failed."))

        if errors:
            logger.info("Preflight for %s found %d error(s)", ipa_path, len(errors))

        return PreflightReport(
            ipa_path=str(ipa_path),
            bundle_id=identity.bundle_id,
            version=identity.version,
            build_number=identity.build_number,
            size_bytes=size_bytes,
            sha256=sha256,
            md5=md5,
            signing_validated=signing_validated,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )


def _identity_issue(key: str, expected: Optional[str], actual: Optional[str]) -> Optional[str]:
    if expected:
        if actual != expected:
            return f'{key} mismatch. Expected "{expected}", got "{actual if actual is not None else "null"}".'
        return None
    if not actual:
        return f"{key} is missing in Info.plist."
    return None


def _absolute(path: str | Path) -> Path:
    try:
        return Path(path).resolve()
    except (OSError, ValueError):
        return Path(os.path.abspath(path))


def _stat(path: Path) -> Optional[os.stat_result]:
    """Any stat failure reads as an absent file."""

    try:
        return path.stat()
    except (OSError, ValueError):
        return None


def _readable(path: Path) -> bool:
    try:
        return os.access(path, os.R_OK)
    except (OSError, ValueError):
        return False


def _message(exc: BaseException, fallback: str) -> str:
    text = str(exc).strip()
    return text or fallback
