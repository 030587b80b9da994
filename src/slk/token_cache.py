from __future__ import annotations

import logging
import os
import tempfile
import time

from pydantic import ValidationError

from slk.types import TokenCacheEntry

logger = logging.getLogger(__name__)


class CredentialCache:
    """On-disk record of the last token that passed ``auth.test``.

    Only the token is kept; the cookie is re-derived from the running app on
    every resolution.
    """

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> TokenCacheEntry | None:
        if not self._path:
            return None
        try:
            with open(self._path) as f:
                raw = f.read()
            return TokenCacheEntry.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, ValidationError):
            return None

    def save(self, token: str) -> None:
        if not self._path:
            return
        entry = TokenCacheEntry(token=token, captured_at=int(time.time() * 1000))
        cache_dir = os.path.dirname(self._path) or "."
        tmp = ""
        try:
            os.makedirs(cache_dir, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".token-cache-", suffix=".tmp", dir=cache_dir)
            with os.fdopen(fd, "w") as f:
                f.write(entry.model_dump_json(by_alias=True))
            os.chmod(tmp, 0o600)
            os.replace(tmp, self._path)
            tmp = ""
        except OSError:
            logger.warning("Failed to save token cache to disk")
        finally:
            if tmp:
                try:
                    os.unlink(tmp)
                except OSError:
                    pass

    def clear(self) -> None:
        if not self._path:
            return
        try:
            os.unlink(self._path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Failed to remove stale token cache %s", self._path)
