from __future__ import annotations

import logging

import keyring
from keyring.errors import KeyringError

from slk.errors import SecretNotFound
from slk.types import InstallKind

logger = logging.getLogger(__name__)

SERVICE_NAME = "Slack Safe Storage"

# App Store builds store the key under their own account name; direct
# downloads have used both "Slack Key" and "Slack" over time.
ACCOUNT_ALIASES: dict[InstallKind, tuple[str, ...]] = {
    InstallKind.APP_STORE: ("Slack App Store Key", "Slack Key", "Slack"),
    InstallKind.DIRECT: ("Slack Key", "Slack", "Slack App Store Key"),
}


class SecretStore:
    def __init__(self, service: str = SERVICE_NAME) -> None:
        self._service = service

    def get_master_secret(self, install_kind: InstallKind) -> bytes:
        aliases = ACCOUNT_ALIASES[install_kind]
        for account in aliases:
            try:
                secret = keyring.get_password(self._service, account)
            except KeyringError as exc:
                logger.debug("Keychain lookup failed for account %r: %s", account, exc)
                continue
            if secret:
                logger.debug("Found %r secret under account %r", self._service, account)
                return secret.encode("utf-8")
            logger.debug("No %r secret under account %r", self._service, account)

        tried = ", ".join(repr(a) for a in aliases)
        raise SecretNotFound(
            f"Could not find {self._service!r} key in the Keychain (tried accounts {tried})"
        )
