"""Data models used while uploading a build."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..artifacts.models import IpaSource
from ..schemas.preflight import PreflightReport

AWAITING_UPLOAD = "AWAITING_UPLOAD"
PROCESSING = "PROCESSING"
COMPLETE = "COMPLETE"
FAILED = "FAILED"

TERMINAL_STATES = frozenset({COMPLETE, FAILED})

MODE_DRY_RUN = "dry-run"
MODE_APPLIED = "applied"


@dataclass(frozen=True, slots=True)
class UploadHeader:
    name: str
    value: str


@dataclass(frozen=True, slots=True)
class UploadOperation:
    """A server-issued byte-range transfer instruction."""

    method: str
    url: str
    offset: int
    length: int
    request_headers: Tuple[UploadHeader, ...] = ()


@dataclass(frozen=True, slots=True)
class BuildUploadState:
    state: str
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    infos: Tuple[str, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_dict(self) -> Dict[str, object]:
        return {
            "state": self.state,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "infos": list(self.infos),
        }


@dataclass(frozen=True, slots=True)
class BuildUploadSummary:
    id: str
    state: BuildUploadState


@dataclass(frozen=True, slots=True)
class BuildUploadFileSummary:
    id: str
    upload_operations: Tuple[UploadOperation, ...] = ()


@dataclass(slots=True)
class UploadRequest:
    """Caller intent for one orchestration run."""

    source: IpaSource
    app_id: str
    expected_bundle_id: str
    expected_version: str
    expected_build_number: str
    wait_processing: bool = False
    apply: bool = False


@dataclass(slots=True)
class UploadResult:
    mode: str
    preflight_report: PreflightReport
    planned_operations: List[str]
    build_upload_id: Optional[str] = None
    final_state: Optional[BuildUploadState] = None

    @property
    def final_build_upload_state(self) -> Optional[str]:
        return self.final_state.state if self.final_state else None

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "mode": self.mode,
            "preflight_report": self.preflight_report.to_dict(),
            "planned_operations": list(self.planned_operations),
            "build_upload_id": self.build_upload_id,
            "final_build_upload_state": self.final_build_upload_state,
        }
        if self.final_state is not None:
            payload["final_state_details"] = self.final_state.to_dict()
        return payload
