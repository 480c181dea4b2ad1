"""Wire contracts for App Store Connect build-upload resources.

Every field is optional so that presence checks happen in the repository,
where a missing value becomes an ``InfrastructureError`` with a precise
message instead of a validation dump.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Contract(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StateDetail(_Contract):
    code: Optional[str] = None
    description: Optional[str] = None


class BuildUploadStatePayload(_Contract):
    state: Optional[str] = None
    errors: List[StateDetail] = Field(default_factory=list)
    warnings: List[StateDetail] = Field(default_factory=list)
    infos: List[StateDetail] = Field(default_factory=list)


class BuildUploadAttributes(_Contract):
    state: Optional[BuildUploadStatePayload] = None


class BuildUploadData(_Contract):
    id: Optional[str] = None
    attributes: Optional[BuildUploadAttributes] = None


class BuildUploadResponse(_Contract):
    data: BuildUploadData


class RequestHeaderPayload(_Contract):
    name: Optional[str] = None
    value: Optional[str] = None


class UploadOperationPayload(_Contract):
    method: Optional[str] = None
    url: Optional[str] = None
    offset: Optional[int] = None
    length: Optional[int] = None
    request_headers: List[RequestHeaderPayload] = Field(default_factory=list, alias="requestHeaders")


class BuildUploadFileAttributes(_Contract):
    upload_operations: List[UploadOperationPayload] = Field(default_factory=list, alias="uploadOperations")


class BuildUploadFileData(_Contract):
    id: Optional[str] = None
    attributes: Optional[BuildUploadFileAttributes] = None


class BuildUploadFileResponse(_Contract):
    data: BuildUploadFileData
