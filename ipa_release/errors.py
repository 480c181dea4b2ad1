"""Error types shared by verification and upload tooling."""

from __future__ import annotations

from typing import Optional


class ReleaseError(RuntimeError):
    """Base class for failures raised by ipa_release."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class DomainError(ReleaseError):
    """Raised when a business rule is violated (invalid artifact, remote failure, timeout)."""


class InfrastructureError(ReleaseError):
    """Raised when I/O, network, or an external tool fails."""


__all__ = ["ReleaseError", "DomainError", "InfrastructureError"]
