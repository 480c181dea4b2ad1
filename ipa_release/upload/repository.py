"""Remote build-upload repository."""

from __future__ import annotations

from typing import List, Protocol

from pydantic import ValidationError

from ..connect.http import HttpClient
from ..errors import InfrastructureError
from ..schemas.connect import (
    BuildUploadFileResponse,
    BuildUploadResponse,
    BuildUploadStatePayload,
)
from .endpoints import (
    create_build_upload_file_request,
    create_build_upload_request,
    get_build_upload_request,
    mark_build_upload_file_uploaded_request,
)
from .models import (
    BuildUploadFileSummary,
    BuildUploadState,
    BuildUploadSummary,
    UploadHeader,
    UploadOperation,
)

IOS_PLATFORM = "IOS"
IPA_UTI = "com.apple.ipa"
ASSET_TYPE = "ASSET"


class BuildUploadsRepository(Protocol):
    def create_build_upload(
        self, app_id: str, version: str, build_number: str, platform: str = IOS_PLATFORM
    ) -> BuildUploadSummary:  # pragma: no cover - interface
        ...

    def create_build_upload_file(
        self,
        build_upload_id: str,
        file_name: str,
        file_size: int,
        uti: str = IPA_UTI,
        asset_type: str = ASSET_TYPE,
    ) -> BuildUploadFileSummary:  # pragma: no cover - interface
        ...

    def mark_build_upload_file_uploaded(self, file_id: str, sha256: str, md5: str) -> None:  # pragma: no cover
        ...

    def get_build_upload(self, build_upload_id: str) -> BuildUploadSummary:  # pragma: no cover - interface
        ...


class ApiBuildUploadsRepository:
    """Maps build-upload endpoints of the App Store Connect API onto summaries."""

    def __init__(self, http_client: HttpClient) -> None:
        self.http_client = http_client

    def create_build_upload(
        self, app_id: str, version: str, build_number: str, platform: str = IOS_PLATFORM
    ) -> BuildUploadSummary:
        response = self.http_client.request(create_build_upload_request(app_id, version, build_number, platform))
        return _map_build_upload(response.data)

    def create_build_upload_file(
        self,
        build_upload_id: str,
        file_name: str,
        file_size: int,
        uti: str = IPA_UTI,
        asset_type: str = ASSET_TYPE,
    ) -> BuildUploadFileSummary:
        response = self.http_client.request(
            create_build_upload_file_request(build_upload_id, file_name, file_size, uti, asset_type)
        )
        payload = _parse(BuildUploadFileResponse, response.data, "build upload file")
        if not payload.data.id:
            raise InfrastructureError("Malformed build upload file payload: missing id.")

        attributes = payload.data.attributes
        operations: List[UploadOperation] = []
        for item in attributes.upload_operations if attributes else []:
            if not item.method or not item.url or item.length is None or item.offset is None:
                raise InfrastructureError("Malformed build upload file payload: invalid upload operation.")
            headers = []
            for header in item.request_headers:
                if not header.name or header.value is None:
                    raise InfrastructureError(
                        "Malformed build upload file payload: invalid upload operation header."
                    )
                headers.append(UploadHeader(name=header.name, value=header.value))
            operations.append(
                UploadOperation(
                    method=item.method,
                    url=item.url,
                    offset=item.offset,
                    length=item.length,
                    request_headers=tuple(headers),
                )
            )
        return BuildUploadFileSummary(id=payload.data.id, upload_operations=tuple(operations))

    def mark_build_upload_file_uploaded(self, file_id: str, sha256: str, md5: str) -> None:
        self.http_client.request(mark_build_upload_file_uploaded_request(file_id, sha256, md5))

    def get_build_upload(self, build_upload_id: str) -> BuildUploadSummary:
        response = self.http_client.request(get_build_upload_request(build_upload_id))
        return _map_build_upload(response.data)


def _parse(model, data, label):
    if not isinstance(data, dict):
        raise InfrastructureError(f"Malformed {label} payload: expected a JSON object.")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InfrastructureError(f"Malformed {label} payload: {exc.error_count()} invalid field(s).", exc) from exc


def _map_build_upload(data: object) -> BuildUploadSummary:
    payload = _parse(BuildUploadResponse, data, "build upload")
    if not payload.data.id:
        raise InfrastructureError("Malformed build upload payload: missing id.")
    state = payload.data.attributes.state if payload.data.attributes else None
    return BuildUploadSummary(id=payload.data.id, state=_map_state(state))


def _map_state(state: BuildUploadStatePayload | None) -> BuildUploadState:
    if state is None or not state.state:
        raise InfrastructureError("Malformed build upload payload: missing state.")
    return BuildUploadState(
        state=state.state,
        errors=tuple(item.description or "Unknown error" for item in state.errors),
        warnings=tuple(item.description or "Unknown warning" for item in state.warnings),
        infos=tuple(item.description or "Unknown info" for item in state.infos),
    )
