from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError

from ipa_release.errors import InfrastructureError
from ipa_release.upload.executor import ChunkedUploadExecutor
from ipa_release.upload.models import UploadHeader, UploadOperation


class _FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text
        self.reason = "OK" if status_code < 400 else "Error"


class _FakeSession:
    def __init__(self, statuses: Optional[List[int]] = None, error: Optional[Exception] = None) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.statuses = list(statuses or [])
        self.error = error

    def request(self, method: str, url: str, headers: Dict[str, str], data: Optional[bytes], timeout: float):
        if self.error is not None:
            raise self.error
        self.calls.append({"method": method, "url": url, "headers": headers, "data": data})
        status = self.statuses.pop(0) if self.statuses else 200
        return _FakeResponse(status, text="denied" if status >= 400 else "")


@pytest.fixture()
def payload_file(tmp_path: Path) -> Path:
    target = tmp_path / "demo.ipa"
    target.write_bytes(b"0123456789abcdef")
    return target


def _op(offset: int, length: int, **kwargs: Any) -> UploadOperation:
    return UploadOperation(
        method=kwargs.get("method", "PUT"),
        url=kwargs.get("url", f"https://upload.example.test/part/{offset}"),
        offset=offset,
        length=length,
        request_headers=kwargs.get("headers", ()),
    )


def test_operations_run_in_order_with_byte_ranges(payload_file: Path) -> None:
    session = _FakeSession()
    operations = [
        _op(0, 10, headers=(UploadHeader("Content-Type", "application/octet-stream"),)),
        _op(10, 6),
    ]

    ChunkedUploadExecutor(session=session).execute(payload_file, operations)  # type: ignore[arg-type]

    assert [call["data"] for call in session.calls] == [b"0123456789", b"abcdef"]
    assert session.calls[0]["headers"] == {"Content-Type": "application/octet-stream"}
    assert session.calls[1]["url"].endswith("/part/10")


def test_zero_length_operation_sends_no_body(payload_file: Path) -> None:
    session = _FakeSession()

    ChunkedUploadExecutor(session=session).execute(payload_file, [_op(0, 0, method="POST")])  # type: ignore[arg-type]

    assert session.calls[0]["method"] == "POST"
    assert session.calls[0]["data"] is None


def test_later_header_overrides_earlier_one(payload_file: Path) -> None:
    session = _FakeSession()
    headers = (UploadHeader("X-Part", "1"), UploadHeader("X-Part", "2"))

    ChunkedUploadExecutor(session=session).execute(payload_file, [_op(0, 1, headers=headers)])  # type: ignore[arg-type]

    assert session.calls[0]["headers"] == {"X-Part": "2"}


def test_non_success_status_aborts_remaining_operations(payload_file: Path) -> None:
    session = _FakeSession(statuses=[200, 500, 200])

    with pytest.raises(InfrastructureError) as excinfo:
        ChunkedUploadExecutor(session=session).execute(  # type: ignore[arg-type]
            payload_file, [_op(0, 4), _op(4, 4), _op(8, 4)]
        )

    assert "(500)" in str(excinfo.value)
    assert "denied" in str(excinfo.value)
    assert len(session.calls) == 2


def test_short_read_aborts_before_request(payload_file: Path) -> None:
    session = _FakeSession()

    with pytest.raises(InfrastructureError) as excinfo:
        ChunkedUploadExecutor(session=session).execute(payload_file, [_op(10, 32)])  # type: ignore[arg-type]

    assert "expected 32 bytes but read 6 bytes" in str(excinfo.value)
    assert session.calls == []


def test_negative_range_is_rejected(payload_file: Path) -> None:
    session = _FakeSession()

    with pytest.raises(InfrastructureError):
        ChunkedUploadExecutor(session=session).execute(payload_file, [_op(-1, 4)])  # type: ignore[arg-type]

    assert session.calls == []


def test_transport_error_is_wrapped(payload_file: Path) -> None:
    session = _FakeSession(error=RequestsConnectionError("reset by peer"))

    with pytest.raises(InfrastructureError) as excinfo:
        ChunkedUploadExecutor(session=session).execute(payload_file, [_op(0, 4)])  # type: ignore[arg-type]

    assert isinstance(excinfo.value.__cause__, RequestsConnectionError)


def test_missing_file_is_infrastructure_error(tmp_path: Path) -> None:
    missing = tmp_path / "gone.ipa"

    with pytest.raises(InfrastructureError) as excinfo:
        ChunkedUploadExecutor(session=_FakeSession()).execute(missing, [])  # type: ignore[arg-type]

    assert str(excinfo.value) == f"Failed to read upload file: {missing}"
    assert isinstance(excinfo.value.cause, FileNotFoundError)


def test_read_failure_is_infrastructure_error(payload_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    session = _FakeSession()

    class _BrokenHandle:
        name = str(payload_file)

        def __enter__(self):
            return self

        def __exit__(self, *exc_info):
            return False

        def seek(self, offset: int) -> None:
            raise OSError(5, "Input/output error")

    monkeypatch.setattr(Path, "open", lambda self, mode="r": _BrokenHandle())

    with pytest.raises(InfrastructureError, match="Failed to read upload file: "):
        ChunkedUploadExecutor(session=session).execute(payload_file, [_op(0, 4)])  # type: ignore[arg-type]

    assert session.calls == []
