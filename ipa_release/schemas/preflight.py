"""Pydantic model describing a preflight verification pass."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class PreflightReport(BaseModel):
    ipa_path: str
    bundle_id: Optional[str] = None
    version: Optional[str] = None
    build_number: Optional[str] = None
    size_bytes: int = 0
    sha256: Optional[str] = Field(default=None, description="SHA-256 hex digest of the IPA.")
    md5: Optional[str] = Field(default=None, description="MD5 hex digest of the IPA.")
    signing_validated: bool = False
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def is_clean(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
