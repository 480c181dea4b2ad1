"""Credential resolution for App Store Connect access.

Credentials are looked up through an ordered list of resolvers (process
environment first, then any registered ``.env`` files) and every lookup
records which resolvers were tried, so a missing key can be reported with
where it was searched for.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol


@dataclass(frozen=True)
class CredentialSpec:
    name: str
    description: str = ""


class CredentialResolver(Protocol):
    def resolve(self, spec: CredentialSpec) -> Optional[str]:  # pragma: no cover - interface
        ...


@dataclass(frozen=True)
class ResolverAttempt:
    resolver: str
    source: str
    success: bool
    details: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class CredentialInfo:
    name: str
    value: Optional[str]
    source: Optional[str]
    attempts: List[ResolverAttempt]

    def describe_attempts(self) -> str:
        labels = []
        for attempt in self.attempts:
            label = attempt.source
            path = attempt.details.get("path")
            if path:
                label = f"{label}@{path}"
            labels.append(f"{label} ({'resolved' if attempt.success else 'missing'})")
        return ", ".join(labels) if labels else "none"


@dataclass
class _Registration:
    priority: int
    resolver: CredentialResolver
    name: str
    source: str


_credential_specs: dict[str, CredentialSpec] = {}
_resolvers: List[_Registration] = []


def register_credential(spec: CredentialSpec) -> None:
    _credential_specs.setdefault(spec.name, spec)


def register_resolver(
    resolver: CredentialResolver,
    priority: int = 0,
    *,
    name: Optional[str] = None,
    source: Optional[str] = None,
) -> None:
    label = name or resolver.__class__.__name__
    _resolvers.append(_Registration(priority=priority, resolver=resolver, name=label, source=source or label))
    _resolvers.sort(key=lambda item: item.priority, reverse=True)


class EnvResolver:
    """Resolve credentials from process environment variables."""

    def resolve(self, spec: CredentialSpec) -> Optional[str]:
        return os.getenv(spec.name) or None

    def describe(self) -> dict[str, object]:
        return {"type": "env"}


register_resolver(EnvResolver(), priority=0, name="env", source="env")


class DotEnvResolver:
    """Reads ``KEY=value`` lines from a ``.env`` file on first use."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.warnings: List[str] = []
        self._values: Optional[Dict[str, str]] = None

    def resolve(self, spec: CredentialSpec) -> Optional[str]:
        if self._values is None:
            self._values = self._load()
        return self._values.get(spec.name) or None

    def reset(self) -> None:
        self.warnings = []
        self._values = None

    def describe(self) -> dict[str, object]:
        return {
            "type": "dotenv",
            "path": str(self.path),
            "exists": self.path.exists(),
            "warnings": list(self.warnings),
        }

    def _load(self) -> Dict[str, str]:
        values: Dict[str, str] = {}
        if not self.path.exists():
            return values
        for number, line in enumerate(self.path.read_text(encoding="utf-8").splitlines(), start=1):
            raw = line.strip()
            if not raw or raw.startswith("#"):
                continue
            if raw.lower().startswith("export "):
                raw = raw[len("export ") :].strip()
            key, sep, value_part = raw.partition("=")
            key = key.strip()
            if not sep or not key:
                self.warnings.append(f"line {number}: expected KEY=value")
                continue
            try:
                tokens = shlex.split(value_part, posix=True, comments=True)
            except ValueError as exc:
                self.warnings.append(f"line {number}: {exc}")
                continue
            values[key] = " ".join(tokens)
        return values


def use_dotenv(path: str | Path, *, priority: int = -10) -> DotEnvResolver:
    dotenv_path = Path(path)
    for entry in _resolvers:
        if isinstance(entry.resolver, DotEnvResolver) and entry.resolver.path == dotenv_path:
            # already registered; re-read the file on next lookup
            entry.resolver.reset()
            return entry.resolver

    resolver = DotEnvResolver(dotenv_path)
    register_resolver(resolver, priority=priority, name=f"dotenv:{resolver.path}", source="dotenv")
    return resolver


def resolve_credential_info(name: str) -> CredentialInfo:
    spec = _credential_specs.get(name, CredentialSpec(name=name))
    attempts: List[ResolverAttempt] = []
    for entry in _resolvers:
        value = entry.resolver.resolve(spec)
        describe = getattr(entry.resolver, "describe", None)
        details = describe() if callable(describe) else {}
        attempts.append(ResolverAttempt(resolver=entry.name, source=entry.source, success=bool(value), details=details))
        if value:
            return CredentialInfo(name=spec.name, value=value, source=entry.source, attempts=attempts)
    return CredentialInfo(name=spec.name, value=None, source=None, attempts=attempts)
