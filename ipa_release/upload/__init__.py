"""Build upload protocol: repository, chunk executor and orchestration."""

from .executor import ChunkedUploadExecutor
from .models import (
    BuildUploadFileSummary,
    BuildUploadState,
    BuildUploadSummary,
    UploadHeader,
    UploadOperation,
    UploadRequest,
    UploadResult,
)
from .orchestrator import BuildUploadOrchestrator, build_upload_plan
from .repository import ApiBuildUploadsRepository, BuildUploadsRepository

__all__ = [
    "ChunkedUploadExecutor",
    "BuildUploadFileSummary",
    "BuildUploadState",
    "BuildUploadSummary",
    "UploadHeader",
    "UploadOperation",
    "UploadRequest",
    "UploadResult",
    "BuildUploadOrchestrator",
    "build_upload_plan",
    "ApiBuildUploadsRepository",
    "BuildUploadsRepository",
]
