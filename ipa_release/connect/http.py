"""Authenticated JSON transport for the App Store Connect API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol
from urllib.parse import urljoin

import requests
from requests import Response, Session
from requests.exceptions import RequestException

from ..errors import InfrastructureError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class TokenProvider(Protocol):
    def get_token(self) -> str:  # pragma: no cover - interface
        ...


@dataclass(frozen=True, slots=True)
class HttpRequest:
    method: str
    path: str
    query: Optional[Mapping[str, Any]] = None
    headers: Optional[Mapping[str, str]] = None
    body: Any = None


@dataclass(slots=True)
class HttpResponse:
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    data: Any = None


class HttpClient(Protocol):
    def request(self, request: HttpRequest) -> HttpResponse:  # pragma: no cover - interface
        ...


class ConnectHttpClient:
    """Sends JSON requests with a bearer token and raises on non-2xx responses."""

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        *,
        session: Optional[Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(self, request: HttpRequest) -> HttpResponse:
        url = urljoin(self.base_url, request.path.lstrip("/"))
        params = {key: str(value) for key, value in (request.query or {}).items() if value is not None}

        headers = dict(request.headers or {})
        headers["Authorization"] = f"Bearer {self.token_provider.get_token()}"
        data = None
        if request.body is not None:
            if not any(name.lower() == "content-type" for name in headers):
                headers["Content-Type"] = "application/json"
            data = json.dumps(request.body)

        logger.debug("%s %s", request.method, url)
        try:
            response: Response = self.session.request(
                request.method,
                url,
                params=params or None,
                headers=headers,
                data=data,
                timeout=self.timeout,
            )
        except RequestException as exc:
            raise InfrastructureError(f"App Store Connect request failed: {exc}", exc) from exc

        if not 200 <= response.status_code < 300:
            raise InfrastructureError(
                f"App Store Connect request failed ({response.status_code}): {response.text or response.reason}"
            )

        if response.status_code == 204 or not response.text:
            return HttpResponse(status=response.status_code, headers=dict(response.headers), data=None)

        try:
            payload = json.loads(response.text)
        except ValueError as exc:
            raise InfrastructureError("Received invalid JSON from App Store Connect.", exc) from exc

        return HttpResponse(status=response.status_code, headers=dict(response.headers), data=payload)
