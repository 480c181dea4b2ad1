"""Schema exports."""

from .connect import BuildUploadFileResponse, BuildUploadResponse
from .preflight import PreflightReport

__all__ = ["PreflightReport", "BuildUploadResponse", "BuildUploadFileResponse"]
