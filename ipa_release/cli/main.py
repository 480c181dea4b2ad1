"""Command-line entry point for IPA verification and upload."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Mapping, Optional, Sequence

from ..artifacts.models import CustomCommandIpaSource, IpaSource, PrebuiltIpaSource, XcodebuildIpaSource
from ..artifacts.providers import DefaultIpaArtifactProvider
from ..connect.auth import JwtTokenProvider
from ..connect.environment import resolve_environment
from ..connect.http import ConnectHttpClient
from ..credentials import use_dotenv
from ..errors import DomainError, InfrastructureError
from ..preflight.verifier import PreflightVerifier
from ..process import SubprocessRunner
from ..upload.executor import ChunkedUploadExecutor
from ..upload.models import UploadRequest
from ..upload.orchestrator import DEFAULT_POLL_INTERVAL, DEFAULT_POLL_TIMEOUT, BuildUploadOrchestrator
from ..upload.repository import ApiBuildUploadsRepository, BuildUploadsRepository

EXIT_OK = 0
EXIT_INFRASTRUCTURE = 1
EXIT_DOMAIN = 2


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "verify":
            return _handle_verify(args)
        if args.command == "upload":
            return _handle_upload(args, parser)
    except DomainError as exc:
        _print_json({"error": {"kind": "domain", "message": str(exc)}})
        return EXIT_DOMAIN
    except InfrastructureError as exc:
        _print_json({"error": {"kind": "infrastructure", "message": str(exc)}})
        return EXIT_INFRASTRUCTURE

    parser.error(f"Unknown command '{args.command}'")
    return EXIT_INFRASTRUCTURE


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ipa-release", description="Verify and upload iOS build archives.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging on stderr.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    verify = subparsers.add_parser("verify", help="Run preflight checks against an IPA.")
    verify.add_argument("--ipa", required=True)
    verify.add_argument("--bundle-id")
    verify.add_argument("--version")
    verify.add_argument("--build-number")

    upload = subparsers.add_parser("upload", help="Verify an IPA and upload it to App Store Connect.")
    upload.add_argument("--app-id", required=True)
    upload.add_argument("--bundle-id", required=True)
    upload.add_argument("--version", required=True)
    upload.add_argument("--build-number", required=True)

    source = upload.add_argument_group("IPA source")
    source.add_argument("--ipa", help="Path to a prebuilt IPA.")
    source.add_argument("--xcode-scheme")
    source.add_argument("--export-options-plist")
    source.add_argument("--xcode-workspace")
    source.add_argument("--xcode-project")
    source.add_argument("--configuration", default="Release")
    source.add_argument("--archive-path")
    source.add_argument("--derived-data-path")
    source.add_argument("--build-command", help="Shell command that produces the IPA.")
    source.add_argument("--generated-ipa", help="IPA path produced by --build-command.")
    source.add_argument("--output-ipa", help="Copy the built IPA to this path.")

    upload.add_argument("--wait", action=argparse.BooleanOptionalAction, default=False)
    upload.add_argument("--apply", action=argparse.BooleanOptionalAction, default=False)
    upload.add_argument("--poll-interval", type=float, default=DEFAULT_POLL_INTERVAL)
    upload.add_argument("--poll-timeout", type=float, default=DEFAULT_POLL_TIMEOUT)
    upload.add_argument("--env-file", help="Read ASC_* credentials from a .env file.")

    return parser


def _handle_verify(args: argparse.Namespace) -> int:
    report = PreflightVerifier(SubprocessRunner()).verify(
        args.ipa,
        expected_bundle_id=args.bundle_id,
        expected_version=args.version,
        expected_build_number=args.build_number,
    )
    _print_json(report.to_dict())
    return EXIT_OK if report.is_clean else EXIT_DOMAIN


def _handle_upload(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    source = _resolve_source(args, parser)
    runner = SubprocessRunner()

    if args.env_file:
        use_dotenv(args.env_file)

    repository: BuildUploadsRepository
    if args.apply:
        repository = _build_repository()
    else:
        repository = _DryRunRepository()

    orchestrator = BuildUploadOrchestrator(
        artifact_provider=DefaultIpaArtifactProvider(runner=runner),
        verifier=PreflightVerifier(runner),
        repository=repository,
        executor=ChunkedUploadExecutor(),
        poll_interval=args.poll_interval,
        poll_timeout=args.poll_timeout,
    )
    result = orchestrator.execute(
        UploadRequest(
            source=source,
            app_id=args.app_id,
            expected_bundle_id=args.bundle_id,
            expected_version=args.version,
            expected_build_number=args.build_number,
            wait_processing=args.wait,
            apply=args.apply,
        )
    )
    _print_json(result.to_dict())
    return EXIT_OK


def _resolve_source(args: argparse.Namespace, parser: argparse.ArgumentParser) -> IpaSource:
    chosen = [value for value in (args.ipa, args.xcode_scheme, args.build_command) if value]
    if len(chosen) != 1:
        parser.error("exactly one of --ipa, --xcode-scheme or --build-command is required")

    output = Path(args.output_ipa) if args.output_ipa else None
    if args.ipa:
        return PrebuiltIpaSource(ipa_path=Path(args.ipa))
    if args.xcode_scheme:
        if not args.export_options_plist:
            parser.error("--export-options-plist is required with --xcode-scheme")
        return XcodebuildIpaSource(
            scheme=args.xcode_scheme,
            export_options_plist=Path(args.export_options_plist),
            workspace_path=Path(args.xcode_workspace) if args.xcode_workspace else None,
            project_path=Path(args.xcode_project) if args.xcode_project else None,
            configuration=args.configuration,
            archive_path=Path(args.archive_path) if args.archive_path else None,
            derived_data_path=Path(args.derived_data_path) if args.derived_data_path else None,
            output_ipa_path=output,
        )
    if not args.generated_ipa:
        parser.error("--generated-ipa is required with --build-command")
    return CustomCommandIpaSource(
        build_command=args.build_command,
        generated_ipa_path=Path(args.generated_ipa),
        output_ipa_path=output,
    )


def _build_repository() -> ApiBuildUploadsRepository:
    environment = resolve_environment()
    token_provider = JwtTokenProvider(environment.issuer_id, environment.key_id, environment.private_key)
    return ApiBuildUploadsRepository(ConnectHttpClient(environment.base_url, token_provider))


class _DryRunRepository:
    """Stands in for the API repository when no mutation is requested."""

    def __getattr__(self, name: str):
        raise InfrastructureError(f"Dry run must not call the App Store Connect API ({name}).")


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))
