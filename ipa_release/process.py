"""External command execution used by archive tooling and artifact builders."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Protocol, Sequence

from .errors import InfrastructureError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProcessResult:
    stdout: str
    stderr: str


class ProcessRunner(Protocol):
    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ProcessResult:  # pragma: no cover - interface
        ...


class SubprocessRunner:
    """Run commands with ``subprocess`` and raise on non-zero exit."""

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ProcessResult:
        rendered = format_command(command, args)
        logger.debug("Running %s", rendered)
        try:
            proc = subprocess.run(
                [command, *args],
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env is not None else None,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise InfrastructureError(f"Failed to run command: {rendered}", exc) from exc

        stdout = proc.stdout or ""
        stderr = proc.stderr or ""
        if proc.returncode != 0:
            lines = [
                f"Command exited with status {proc.returncode}.",
                f"Command: {rendered}",
            ]
            if stderr.strip():
                lines.append(f"stderr: {stderr.strip()}")
            if stdout.strip():
                lines.append(f"stdout: {stdout.strip()}")
            raise InfrastructureError("\n".join(lines))

        return ProcessResult(stdout=stdout, stderr=stderr)


def format_command(command: str, args: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in [command, *args])


__all__ = ["ProcessResult", "ProcessRunner", "SubprocessRunner", "format_command"]
