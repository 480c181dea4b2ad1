"""ES256 bearer tokens for the App Store Connect API."""

from __future__ import annotations

import time
from typing import Callable, Optional, Sequence

import jwt

from ..errors import InfrastructureError

DEFAULT_AUDIENCE = "appstoreconnect-v1"
MAX_TOKEN_TTL = 1200
REFRESH_WINDOW = 30


class JwtTokenProvider:
    """Signs short-lived JWTs and reuses them until shortly before expiry."""

    def __init__(
        self,
        issuer_id: str,
        key_id: str,
        private_key: str,
        *,
        audience: str = DEFAULT_AUDIENCE,
        scope: Optional[Sequence[str]] = None,
        token_ttl: int = MAX_TOKEN_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not issuer_id.strip():
            raise InfrastructureError("issuer_id is required for App Store Connect authentication.")
        if not key_id.strip():
            raise InfrastructureError("key_id is required for App Store Connect authentication.")
        if not private_key.strip():
            raise InfrastructureError("private_key is required for App Store Connect authentication.")
        if not 0 < token_ttl <= MAX_TOKEN_TTL:
            raise InfrastructureError(f"token_ttl must be between 1 and {MAX_TOKEN_TTL} seconds.")

        self.issuer_id = issuer_id
        self.key_id = key_id
        self.private_key = private_key
        self.audience = audience
        self.scope = list(scope or [])
        self.token_ttl = token_ttl
        self.clock = clock
        self._token: Optional[str] = None
        self._expires_at = 0

    def get_token(self) -> str:
        now = int(self.clock())
        if self._token and now < self._expires_at - REFRESH_WINDOW:
            return self._token

        payload: dict[str, object] = {
            "iss": self.issuer_id,
            "iat": now,
            "exp": now + self.token_ttl,
            "aud": self.audience,
        }
        if self.scope:
            payload["scope"] = self.scope

        try:
            token = jwt.encode(
                payload,
                self.private_key,
                algorithm="ES256",
                headers={"kid": self.key_id, "typ": "JWT"},
            )
        except (ValueError, TypeError, jwt.PyJWTError) as exc:
            raise InfrastructureError("Failed to sign App Store Connect token.", exc) from exc

        self._token = token
        self._expires_at = now + self.token_ttl
        return token
