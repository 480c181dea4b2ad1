"""Artifact providers that turn an ``IpaSource`` into an IPA on disk."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..errors import InfrastructureError
from ..process import ProcessRunner, SubprocessRunner
from .models import (
    CustomCommandIpaSource,
    IpaArtifact,
    IpaSource,
    PrebuiltIpaSource,
    XcodebuildIpaSource,
)

logger = logging.getLogger(__name__)


class IpaArtifactProvider(ABC):
    name: str

    @abstractmethod
    def resolve(self, source: IpaSource) -> IpaArtifact:
        ...


class PrebuiltIpaArtifactProvider(IpaArtifactProvider):
    name = "prebuilt"

    def resolve(self, source: IpaSource) -> IpaArtifact:
        if not isinstance(source, PrebuiltIpaSource):
            raise InfrastructureError(f"{type(self).__name__} cannot handle source kind '{source.kind}'.")
        ipa_path = Path(source.ipa_path).resolve()
        _require_readable(ipa_path, "IPA file is not readable")
        return IpaArtifact(ipa_path=ipa_path)


class CustomCommandIpaArtifactProvider(IpaArtifactProvider):
    name = "custom-command"

    def __init__(self, runner: Optional[ProcessRunner] = None) -> None:
        self.runner = runner or SubprocessRunner()

    def resolve(self, source: IpaSource) -> IpaArtifact:
        if not isinstance(source, CustomCommandIpaSource):
            raise InfrastructureError(f"{type(self).__name__} cannot handle source kind '{source.kind}'.")
        if not source.build_command.strip():
            raise InfrastructureError("build_command is required for custom command IPA source.")

        logger.info("Running custom build command")
        self.runner.run("zsh", ["-lc", source.build_command])

        generated = Path(source.generated_ipa_path).resolve()
        _require_readable(generated, "Generated IPA file is not readable")

        if not source.output_ipa_path:
            return IpaArtifact(ipa_path=generated)
        return IpaArtifact(ipa_path=_copy_to(generated, Path(source.output_ipa_path)))


class XcodebuildIpaArtifactProvider(IpaArtifactProvider):
    name = "xcodebuild"

    def __init__(self, runner: Optional[ProcessRunner] = None) -> None:
        self.runner = runner or SubprocessRunner()

    def resolve(self, source: IpaSource) -> IpaArtifact:
        if not isinstance(source, XcodebuildIpaSource):
            raise InfrastructureError(f"{type(self).__name__} cannot handle source kind '{source.kind}'.")
        if not source.scheme.strip():
            raise InfrastructureError("scheme is required for xcodebuild IPA source.")
        if not str(source.export_options_plist).strip():
            raise InfrastructureError("export_options_plist is required for xcodebuild IPA source.")
        if bool(source.workspace_path) == bool(source.project_path):
            raise InfrastructureError("Exactly one of workspace_path or project_path must be provided.")

        export_options = Path(source.export_options_plist).resolve()
        _require_readable(export_options, "Export options plist is not readable")

        root = Path(tempfile.mkdtemp(prefix="ipa-release-build-"))
        try:
            exported = self._archive_and_export(source, root, export_options)
        except BaseException:
            shutil.rmtree(root, ignore_errors=True)
            raise

        if not source.output_ipa_path:
            return IpaArtifact(ipa_path=exported, dispose=lambda: shutil.rmtree(root, ignore_errors=True))

        try:
            output = _copy_to(exported, Path(source.output_ipa_path))
        finally:
            shutil.rmtree(root, ignore_errors=True)
        return IpaArtifact(ipa_path=output)

    def _archive_and_export(self, source: XcodebuildIpaSource, root: Path, export_options: Path) -> Path:
        archive_path = Path(source.archive_path).resolve() if source.archive_path else root / "archive.xcarchive"
        export_dir = root / "export"

        logger.info("Archiving scheme %s", source.scheme)
        self.runner.run("xcodebuild", self._archive_args(source, archive_path))

        export_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Exporting %s", archive_path)
        self.runner.run(
            "xcodebuild",
            [
                "-exportArchive",
                "-archivePath",
                str(archive_path),
                "-exportOptionsPlist",
                str(export_options),
                "-exportPath",
                str(export_dir),
            ],
        )

        candidates = sorted(path for path in export_dir.iterdir() if path.is_file() and path.suffix == ".ipa")
        if not candidates:
            raise InfrastructureError(f"xcodebuild export did not produce an .ipa file in: {export_dir}")
        return candidates[0]

    def _archive_args(self, source: XcodebuildIpaSource, archive_path: Path) -> List[str]:
        args = [
            "archive",
            "-scheme",
            source.scheme,
            "-configuration",
            source.configuration or "Release",
            "-archivePath",
            str(archive_path),
        ]
        if source.workspace_path:
            args.extend(["-workspace", str(Path(source.workspace_path).resolve())])
        if source.project_path:
            args.extend(["-project", str(Path(source.project_path).resolve())])
        if source.derived_data_path:
            args.extend(["-derivedDataPath", str(Path(source.derived_data_path).resolve())])
        return args


class DefaultIpaArtifactProvider(IpaArtifactProvider):
    """Dispatches to the provider matching the source kind."""

    name = "default"

    def __init__(
        self,
        prebuilt: Optional[IpaArtifactProvider] = None,
        xcodebuild: Optional[IpaArtifactProvider] = None,
        custom_command: Optional[IpaArtifactProvider] = None,
        *,
        runner: Optional[ProcessRunner] = None,
    ) -> None:
        runner = runner or SubprocessRunner()
        self.providers = {
            "prebuilt": prebuilt or PrebuiltIpaArtifactProvider(),
            "xcodebuild": xcodebuild or XcodebuildIpaArtifactProvider(runner),
            "custom-command": custom_command or CustomCommandIpaArtifactProvider(runner),
        }

    def resolve(self, source: IpaSource) -> IpaArtifact:
        provider = self.providers.get(getattr(source, "kind", ""))
        if provider is None:
            raise InfrastructureError(f"Unsupported IPA source kind: {source!r}")
        return provider.resolve(source)


def _require_readable(path: Path, message: str) -> None:
    if not path.is_file() or not os.access(path, os.R_OK):
        raise InfrastructureError(f"{message}: {path}")


def _copy_to(source: Path, destination: Path) -> Path:
    target = destination.resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target)
    return target
