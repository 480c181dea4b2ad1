"""Transfers file byte ranges according to server-issued upload operations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Sequence

import requests
from requests import Session
from requests.exceptions import RequestException

from ..errors import InfrastructureError
from .models import UploadOperation

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120


class ChunkedUploadExecutor:
    """Executes upload operations one at a time against a single open file handle.

    Any non-2xx response, transport failure or short read aborts the whole
    call. Nothing is retried here.
    """

    def __init__(self, session: Optional[Session] = None, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def execute(self, file_path: str | Path, operations: Sequence[UploadOperation]) -> None:
        try:
            handle = Path(file_path).open("rb")
        except OSError as exc:
            raise InfrastructureError(f"Failed to read upload file: {file_path}", exc) from exc

        with handle:
            for index, operation in enumerate(operations, start=1):
                logger.debug(
                    "Upload operation %d/%d: %s offset=%d length=%d",
                    index,
                    len(operations),
                    operation.method,
                    operation.offset,
                    operation.length,
                )
                self._execute_operation(handle, operation)

    def _execute_operation(self, handle: BinaryIO, operation: UploadOperation) -> None:
        if operation.offset < 0 or operation.length < 0:
            raise InfrastructureError("Upload operation has invalid offset/length.")

        headers: Dict[str, str] = {}
        for header in operation.request_headers:
            headers[header.name] = header.value

        body = None if operation.length == 0 else _read_chunk(handle, operation.offset, operation.length)

        try:
            response = self.session.request(
                operation.method,
                operation.url,
                headers=headers,
                data=body,
                timeout=self.timeout,
            )
        except RequestException as exc:
            raise InfrastructureError(f"Upload operation failed: {exc}", exc) from exc

        if not 200 <= response.status_code < 300:
            raise InfrastructureError(
                f"Upload operation failed ({response.status_code}): {response.text or response.reason}"
            )


def _read_chunk(handle: BinaryIO, offset: int, length: int) -> bytes:
    try:
        handle.seek(offset)
        chunk = handle.read(length)
    except OSError as exc:
        raise InfrastructureError(f"Failed to read upload file: {handle.name}", exc) from exc
    if len(chunk) != length:
        raise InfrastructureError(
            f"Upload operation expected {length} bytes but read {len(chunk)} bytes."
        )
    return chunk
