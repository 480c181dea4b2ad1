"""Build upload orchestration.

One ``execute`` call walks the upload state machine in order:

    resolve artifact -> verify -> (dry-run plan | create upload -> create file
    -> transfer chunks -> mark uploaded -> read or poll state)

Nothing is retried. Remote resource creation is the only non-idempotent
step, so a caller that wants resilience re-invokes ``execute`` and accepts
that a fresh build-upload record is created on each attempt.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional

from ..artifacts.providers import IpaArtifactProvider
from ..errors import DomainError
from ..preflight.verifier import PreflightVerifier
from .executor import ChunkedUploadExecutor
from .models import (
    FAILED,
    MODE_APPLIED,
    MODE_DRY_RUN,
    BuildUploadState,
    UploadRequest,
    UploadResult,
)
from .repository import ASSET_TYPE, IOS_PLATFORM, IPA_UTI, BuildUploadsRepository

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_POLL_TIMEOUT = 10 * 60.0


def build_upload_plan(app_id: str, ipa_path: str | Path, wait_processing: bool) -> List[str]:
    """Describe the remote steps an applied upload performs, in order."""

    return [
        f"Create build upload for app {app_id}",
        f"Create build upload file for {ipa_path}",
        "Upload chunks using App Store Connect upload operations",
        "Mark build upload file as uploaded with checksums",
        "Poll build upload until terminal state" if wait_processing else "Fetch current build upload state once",
    ]


class BuildUploadOrchestrator:
    def __init__(
        self,
        *,
        artifact_provider: IpaArtifactProvider,
        verifier: PreflightVerifier,
        repository: BuildUploadsRepository,
        executor: ChunkedUploadExecutor,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.artifact_provider = artifact_provider
        self.verifier = verifier
        self.repository = repository
        self.executor = executor
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.sleep = sleep
        self.clock = clock

    def execute(self, request: UploadRequest) -> UploadResult:
        artifact = self.artifact_provider.resolve(request.source)
        try:
            return self._run(request, Path(artifact.ipa_path))
        finally:
            if artifact.dispose is not None:
                artifact.dispose()

    def _run(self, request: UploadRequest, ipa_path: Path) -> UploadResult:
        report = self.verifier.verify(
            ipa_path,
            expected_bundle_id=request.expected_bundle_id,
            expected_version=request.expected_version,
            expected_build_number=request.expected_build_number,
        )
        if report.errors:
            raise DomainError(f"IPA preflight verification failed: {' | '.join(report.errors)}")

        plan = build_upload_plan(request.app_id, ipa_path, request.wait_processing)
        if not request.apply:
            logger.info("Dry run: preflight passed for %s; no upload performed", ipa_path)
            return UploadResult(mode=MODE_DRY_RUN, preflight_report=report, planned_operations=plan)

        upload = self.repository.create_build_upload(
            request.app_id,
            request.expected_version,
            request.expected_build_number,
            IOS_PLATFORM,
        )
        logger.info("Created build upload %s", upload.id)

        upload_file = self.repository.create_build_upload_file(
            upload.id,
            ipa_path.name,
            report.size_bytes,
            IPA_UTI,
            ASSET_TYPE,
        )
        logger.info(
            "Created build upload file %s with %d upload operation(s)",
            upload_file.id,
            len(upload_file.upload_operations),
        )

        self.executor.execute(ipa_path, upload_file.upload_operations)
        logger.info("Transferred %s", ipa_path.name)

        if not report.sha256 or not report.md5:
            raise DomainError("Missing checksums in preflight report; cannot mark build upload file as uploaded.")
        self.repository.mark_build_upload_file_uploaded(upload_file.id, report.sha256, report.md5)
        logger.info("Marked build upload file %s as uploaded", upload_file.id)

        if request.wait_processing:
            final_state = self._poll_until_terminal(upload.id)
        else:
            final_state = self.repository.get_build_upload(upload.id).state

        if final_state.state == FAILED:
            message = "Build upload failed in App Store Connect."
            if final_state.errors:
                message = f"{message} {' | '.join(final_state.errors)}"
            raise DomainError(message)

        return UploadResult(
            mode=MODE_APPLIED,
            preflight_report=report,
            planned_operations=plan,
            build_upload_id=upload.id,
            final_state=final_state,
        )

    def _poll_until_terminal(self, build_upload_id: str) -> BuildUploadState:
        started = self.clock()
        while True:
            state = self.repository.get_build_upload(build_upload_id).state
            if state.is_terminal:
                return state
            if self.clock() - started > self.poll_timeout:
                raise DomainError(f"Timed out while waiting for build upload processing ({build_upload_id}).")
            logger.debug("Build upload %s is %s; waiting %.1fs", build_upload_id, state.state, self.poll_interval)
            self.sleep(self.poll_interval)
