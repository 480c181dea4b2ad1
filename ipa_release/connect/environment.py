"""Resolve App Store Connect settings from registered credential resolvers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..credentials import CredentialInfo, CredentialSpec, register_credential, resolve_credential_info
from ..errors import InfrastructureError

DEFAULT_BASE_URL = "https://api.appstoreconnect.apple.com/"

ISSUER_ID = "ASC_ISSUER_ID"
KEY_ID = "ASC_KEY_ID"
PRIVATE_KEY = "ASC_PRIVATE_KEY"
BASE_URL = "ASC_BASE_URL"

register_credential(CredentialSpec(name=ISSUER_ID, description="App Store Connect API issuer id."))
register_credential(CredentialSpec(name=KEY_ID, description="App Store Connect API key id."))
register_credential(CredentialSpec(name=PRIVATE_KEY, description="PEM-encoded .p8 private key contents."))
register_credential(CredentialSpec(name=BASE_URL, description="Override for the API base URL."))


@dataclass(frozen=True, slots=True)
class ConnectEnvironment:
    issuer_id: str
    key_id: str
    private_key: str
    base_url: str = DEFAULT_BASE_URL


def resolve_environment() -> ConnectEnvironment:
    infos = {name: resolve_credential_info(name) for name in (ISSUER_ID, KEY_ID, PRIVATE_KEY)}
    values = {name: (info.value or "").strip() for name, info in infos.items()}

    missing: List[CredentialInfo] = [infos[name] for name, value in values.items() if not value]
    if missing:
        names = ", ".join(info.name for info in missing)
        raise InfrastructureError(
            f"Missing required environment variables: {names}. "
            f"Checked resolvers: {missing[0].describe_attempts()}."
        )

    base_url = (resolve_credential_info(BASE_URL).value or "").strip() or DEFAULT_BASE_URL
    return ConnectEnvironment(
        issuer_id=values[ISSUER_ID],
        key_id=values[KEY_ID],
        private_key=normalize_private_key(values[PRIVATE_KEY]),
        base_url=base_url,
    )


def normalize_private_key(raw: str) -> str:
    return raw.replace("\\n", "\n") if "\\n" in raw else raw
