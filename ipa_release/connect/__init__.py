"""App Store Connect transport, authentication and environment."""

from .auth import JwtTokenProvider
from .environment import ConnectEnvironment, resolve_environment
from .http import ConnectHttpClient, HttpClient, HttpRequest, HttpResponse

__all__ = [
    "JwtTokenProvider",
    "ConnectEnvironment",
    "resolve_environment",
    "ConnectHttpClient",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
]
