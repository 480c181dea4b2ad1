"""Descriptors for the ways an IPA can be obtained."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union


@dataclass(frozen=True, slots=True)
class PrebuiltIpaSource:
    ipa_path: Path
    kind: str = "prebuilt"


@dataclass(frozen=True, slots=True)
class XcodebuildIpaSource:
    scheme: str
    export_options_plist: Path
    workspace_path: Optional[Path] = None
    project_path: Optional[Path] = None
    configuration: str = "Release"
    archive_path: Optional[Path] = None
    derived_data_path: Optional[Path] = None
    output_ipa_path: Optional[Path] = None
    kind: str = "xcodebuild"


@dataclass(frozen=True, slots=True)
class CustomCommandIpaSource:
    build_command: str
    generated_ipa_path: Path
    output_ipa_path: Optional[Path] = None
    kind: str = "custom-command"


IpaSource = Union[PrebuiltIpaSource, XcodebuildIpaSource, CustomCommandIpaSource]


@dataclass(slots=True)
class IpaArtifact:
    """A resolved IPA on disk plus an optional cleanup hook owned by its provider."""

    ipa_path: Path
    dispose: Optional[Callable[[], None]] = None
