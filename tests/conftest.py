from __future__ import annotations

import fnmatch
import json
import plistlib
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pytest

from ipa_release import credentials
from ipa_release.errors import InfrastructureError
from ipa_release.process import ProcessResult

DEMO_INFO: Dict[str, Any] = {
    "CFBundleIdentifier": "com.example.demo",
    "CFBundleShortVersionString": "1.0.0",
    "CFBundleVersion": "42",
}


def build_ipa(
    path: Path,
    info: Optional[Mapping[str, Any]] = None,
    *,
    app_name: str = "Demo",
    extra_entries: Optional[Mapping[str, bytes]] = None,
    include_info_plist: bool = True,
) -> Path:
    """Write a minimal zip laid out like an IPA."""

    app_root = f"Payload/{app_name}.app"
    with zipfile.ZipFile(path, "w") as archive:
        if include_info_plist:
            archive.writestr(f"{app_root}/Info.plist", plistlib.dumps(dict(info if info is not None else DEMO_INFO)))
        archive.writestr(f"{app_root}/{app_name}", b"\xcf\xfa\xed\xfe" + b"\x00" * 64)
        archive.writestr(f"{app_root}/_CodeSignature/CodeResources", b"<plist/>")
        for name, content in (extra_entries or {}).items():
            archive.writestr(name, content)
    return path


class FakeToolRunner:
    """Serves unzip, plutil and codesign from real archives on disk."""

    def __init__(self, *, fail_codesign_verify: bool = False, fail_listing: bool = False) -> None:
        self.fail_codesign_verify = fail_codesign_verify
        self.fail_listing = fail_listing
        self.calls: List[tuple[str, List[str]]] = []
        self.extracted_to: List[Path] = []

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ProcessResult:
        args = list(args)
        self.calls.append((command, args))

        if command == "unzip" and args[0] == "-Z1":
            if self.fail_listing:
                raise InfrastructureError("unzip: cannot find zipfile directory")
            with zipfile.ZipFile(args[1]) as archive:
                return ProcessResult(stdout="\n".join(archive.namelist()) + "\n", stderr="")

        if command == "unzip":
            archive_path, patterns, destination = args[2], args[3:-2], Path(args[-1])
            self.extracted_to.append(destination)
            with zipfile.ZipFile(archive_path) as archive:
                for name in archive.namelist():
                    if any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns):
                        archive.extract(name, destination)
            return ProcessResult(stdout="", stderr="")

        if command == "plutil":
            with Path(args[-1]).open("rb") as handle:
                payload = plistlib.load(handle)
            return ProcessResult(stdout=json.dumps(payload), stderr="")

        if command == "codesign":
            if not Path(args[-1]).is_dir():
                raise InfrastructureError(f"codesign: {args[-1]}: No such file or directory")
            if args[0] == "--verify" and self.fail_codesign_verify:
                raise InfrastructureError("codesign verification failed: a sealed resource is missing or invalid")
            return ProcessResult(stdout="", stderr="Executable=Demo\nIdentifier=com.example.demo\n")

        raise InfrastructureError(f"Unexpected command in test double: {command}")

    def commands(self) -> List[str]:
        return [command for command, _ in self.calls]


@pytest.fixture()
def tool_runner() -> FakeToolRunner:
    return FakeToolRunner()


@pytest.fixture()
def demo_ipa(tmp_path: Path) -> Path:
    return build_ipa(tmp_path / "demo.ipa")


@pytest.fixture()
def isolated_credentials(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(credentials, "_resolvers", [])
    credentials.register_resolver(credentials.EnvResolver(), priority=0, name="env", source="env")
    for name in ("ASC_ISSUER_ID", "ASC_KEY_ID", "ASC_PRIVATE_KEY", "ASC_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    return credentials
