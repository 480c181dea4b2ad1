"""IPA preflight verification."""

from .metadata import BundleIdentity, MetadataExtractor
from .signing import SigningValidator
from .verifier import PreflightVerifier

__all__ = ["BundleIdentity", "MetadataExtractor", "SigningValidator", "PreflightVerifier"]
