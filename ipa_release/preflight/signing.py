"""Code-signing verification of the application bundle inside an IPA."""

from __future__ import annotations

import logging
from pathlib import Path

from ..archive.inspector import ArchiveInspector, entry_to_path, literal_pattern
from ..archive.scratch import scratch_directory
from ..process import ProcessRunner

logger = logging.getLogger(__name__)


class SigningValidator:
    def __init__(self, inspector: ArchiveInspector, runner: ProcessRunner) -> None:
        self.inspector = inspector
        self.runner = runner

    def validate(self, archive: Path, info_plist_entry: str) -> None:
        """Extract the ``.app`` subtree and run ``codesign`` against it.

        Raises ``InfrastructureError`` when extraction or either codesign
        pass fails.
        """

        app_entry = info_plist_entry.rsplit("/", 1)[0]
        with scratch_directory("ipa-release-signing-") as workdir:
            self.inspector.extract(archive, [f"{literal_pattern(app_entry)}/*"], workdir)
            app_path = entry_to_path(workdir, app_entry)
            self.runner.run("codesign", ["--verify", "--strict", "--deep", str(app_path)])
            details = self.runner.run("codesign", ["-dv", str(app_path)])
        # codesign -dv reports on stderr
        logger.debug("codesign details for %s: %s", app_entry, details.stderr.strip())
