"""IPA acquisition strategies."""

from .models import (
    CustomCommandIpaSource,
    IpaArtifact,
    IpaSource,
    PrebuiltIpaSource,
    XcodebuildIpaSource,
)
from .providers import (
    CustomCommandIpaArtifactProvider,
    DefaultIpaArtifactProvider,
    IpaArtifactProvider,
    PrebuiltIpaArtifactProvider,
    XcodebuildIpaArtifactProvider,
)

__all__ = [
    "CustomCommandIpaSource",
    "IpaArtifact",
    "IpaSource",
    "PrebuiltIpaSource",
    "XcodebuildIpaSource",
    "CustomCommandIpaArtifactProvider",
    "DefaultIpaArtifactProvider",
    "IpaArtifactProvider",
    "PrebuiltIpaArtifactProvider",
    "XcodebuildIpaArtifactProvider",
]
