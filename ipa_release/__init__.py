"""Preflight verification and App Store Connect upload tooling for IPA files."""

__version__ = "0.1.0"
from .archive import compute_digests, scratch_directory
from .artifacts import (
    CustomCommandIpaSource,
    DefaultIpaArtifactProvider,
    IpaArtifact,
    PrebuiltIpaSource,
    XcodebuildIpaSource,
)
from .errors import DomainError, InfrastructureError, ReleaseError
from .preflight import PreflightVerifier
from .process import ProcessResult, ProcessRunner, SubprocessRunner
from .schemas.preflight import PreflightReport
from .upload import (
    ApiBuildUploadsRepository,
    BuildUploadOrchestrator,
    ChunkedUploadExecutor,
    UploadOperation,
    UploadRequest,
    UploadResult,
    build_upload_plan,
)

__all__ = [
    "__version__",
    "compute_digests",
    "scratch_directory",
    "CustomCommandIpaSource",
    "DefaultIpaArtifactProvider",
    "IpaArtifact",
    "PrebuiltIpaSource",
    "XcodebuildIpaSource",
    "DomainError",
    "InfrastructureError",
    "ReleaseError",
    "PreflightVerifier",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "PreflightReport",
    "ApiBuildUploadsRepository",
    "BuildUploadOrchestrator",
    "ChunkedUploadExecutor",
    "UploadOperation",
    "UploadRequest",
    "UploadResult",
    "build_upload_plan",
]
