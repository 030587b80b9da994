from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Awaitable, Callable, Protocol

from slk.config import Config
from slk.cookies import CookieVault, MasterSecretSource
from slk.errors import ValidationTimeout
from slk.keychain import SecretStore
from slk.scanner import TokenScanner
from slk.slack_client import validate_credentials
from slk.text import mask_secret
from slk.token_cache import CredentialCache
from slk.types import CandidateToken, Credentials, Workspace
from slk.workspace import WorkspaceLocator

logger = logging.getLogger(__name__)

Validator = Callable[[str, str], Awaitable[bool]]


class SessionCookieSource(Protocol):
    def decrypt_session_cookie(self) -> str: ...


class CandidateSource(Protocol):
    def scan(self) -> list[CandidateToken]: ...


class CredentialResolver:
    """Pair the desktop app's session cookie with a working ``xoxc-`` token.

    Order of preference: the in-memory result, the cached token, then fresh
    candidates from local storage, each checked with ``auth.test``.

    When no candidate passes validation the top-ranked one is still returned,
    with ``validated=False``. Such a token may be stale or garbage; the first
    real API call made with it is what reports the authentication failure.
    """

    def __init__(
        self,
        locator: WorkspaceLocator,
        *,
        cache: CredentialCache,
        validator: Validator,
        secrets: MasterSecretSource | None = None,
        vault: SessionCookieSource | None = None,
        scanner: CandidateSource | None = None,
    ) -> None:
        self._locator = locator
        self._cache = cache
        self._validator = validator
        self._secrets = secrets or SecretStore()
        self._vault = vault
        self._scanner = scanner
        self._credentials: Credentials | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: Config) -> CredentialResolver:
        return cls(
            WorkspaceLocator(),
            cache=CredentialCache(config.token_cache_path),
            validator=partial(validate_credentials, timeout=config.validate_timeout),
        )

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    async def resolve(self, force_refresh: bool = False) -> Credentials:
        async with self._lock:
            if self._credentials is not None and not force_refresh:
                return self._credentials
            self._credentials = await self._resolve(force_refresh)
            return self._credentials

    async def refresh(self) -> Credentials:
        self._credentials = None
        return await self.resolve(force_refresh=True)

    async def _resolve(self, force_refresh: bool) -> Credentials:
        # Keychain prompts and file I/O stay off the event loop.
        cookie = await asyncio.to_thread(self._cookie_vault().decrypt_session_cookie)

        if not force_refresh:
            entry = self._cache.load()
            if entry is not None:
                if await self._is_valid(entry.token, cookie):
                    logger.info("Using cached token %s", mask_secret(entry.token))
                    return Credentials(token=entry.token, cookie=cookie)
                logger.info("Cached token %s is no longer valid", mask_secret(entry.token))
                self._cache.clear()

        candidates = await asyncio.to_thread(self._token_scanner().scan)
        for candidate in candidates:
            if await self._is_valid(candidate.value, cookie):
                logger.info(
                    "Validated token %s from %s (%s pass)",
                    mask_secret(candidate.value),
                    candidate.source.name,
                    candidate.method,
                )
                self._cache.save(candidate.value)
                return Credentials(token=candidate.value, cookie=cookie)

        best = candidates[0]
        logger.warning(
            "None of %d token candidate(s) passed auth.test; falling back to %s unvalidated",
            len(candidates),
            mask_secret(best.value),
        )
        return Credentials(token=best.value, cookie=cookie, validated=False)

    async def _is_valid(self, token: str, cookie: str) -> bool:
        try:
            return await self._validator(token, cookie)
        except ValidationTimeout as exc:
            logger.warning("%s", exc)
            return False

    def _workspace(self) -> Workspace:
        return self._locator.locate()

    def _cookie_vault(self) -> SessionCookieSource:
        if self._vault is None:
            self._vault = CookieVault(self._workspace(), self._secrets)
        return self._vault

    def _token_scanner(self) -> CandidateSource:
        if self._scanner is None:
            self._scanner = TokenScanner(self._workspace().leveldb_dir)
        return self._scanner
