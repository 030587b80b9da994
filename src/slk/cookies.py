"""Decryption of the Slack desktop ``d`` session cookie.

Slack is an Electron app, so its cookie store is a Chromium ``Cookies``
SQLite database whose values are AES-128-CBC encrypted with a key derived
from the "Slack Safe Storage" Keychain secret.
"""

from __future__ import annotations

import logging
import os
import shutil
import sqlite3
import tempfile
from contextlib import closing
from pathlib import Path
from typing import Protocol

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from slk.errors import CookieDecryptFailed, CookieNotFound, UnsupportedCookieFormat
from slk.types import EncryptedCookieRecord, InstallKind, Workspace

logger = logging.getLogger(__name__)

COOKIE_NAME = "d"
COOKIE_HOST = ".slack.com"
COOKIE_MARKER = "xoxd-"

# Fixed by Chromium's macOS OSCrypt implementation.
FORMAT_TAG = b"v10"
SALT = b"saltysalt"
ITERATIONS = 1003
KEY_LENGTH = 16
IV = b" " * 16
BLOCK_SIZE = 16

_COOKIE_QUERY = (
    "SELECT encrypted_value FROM cookies WHERE name = ? AND host_key = ? LIMIT 1"
)


class MasterSecretSource(Protocol):
    def get_master_secret(self, install_kind: InstallKind) -> bytes: ...


def derive_key(master_secret: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA1(),
        length=KEY_LENGTH,
        salt=SALT,
        iterations=ITERATIONS,
    )
    return kdf.derive(master_secret)


def strip_padding(data: bytes) -> bytes:
    if not data:
        return data
    pad_len = data[-1]
    if pad_len > BLOCK_SIZE:
        # Some builds store the value without padding.
        return data
    return data[: len(data) - pad_len]


def check_format(record: EncryptedCookieRecord) -> None:
    if record.version_tag != FORMAT_TAG:
        raise UnsupportedCookieFormat(
            f"Unknown cookie encryption format {record.version_tag!r} (expected {FORMAT_TAG!r})"
        )


def decrypt_cookie_value(record: EncryptedCookieRecord, key: bytes) -> str:
    check_format(record)
    return _decrypt_ciphertext(record.ciphertext, key)


def _decrypt_ciphertext(ciphertext: bytes, key: bytes) -> str:
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise CookieDecryptFailed(
            f"Cookie ciphertext has invalid length {len(ciphertext)}"
        )

    decryptor = Cipher(algorithms.AES(key), modes.CBC(IV)).decryptor()
    plaintext = strip_padding(decryptor.update(ciphertext) + decryptor.finalize())
    if not plaintext:
        raise CookieDecryptFailed("Cookie decryption produced no data")

    # Newer cookie databases prefix the value with a SHA-256 of the host,
    # which is not valid UTF-8; the marker search skips over it.
    text = plaintext.decode("utf-8", errors="replace")
    idx = text.find(COOKIE_MARKER)
    if idx < 0:
        raise CookieDecryptFailed(f"No {COOKIE_MARKER} found in decrypted cookie")
    return text[idx:]


class CookieVault:
    def __init__(self, workspace: Workspace, secrets: MasterSecretSource) -> None:
        self._workspace = workspace
        self._secrets = secrets

    def decrypt_session_cookie(self) -> str:
        record = self.read_encrypted_cookie()
        check_format(record)
        key = derive_key(self._secrets.get_master_secret(self._workspace.kind))
        cookie = _decrypt_ciphertext(record.ciphertext, key)
        logger.debug("Decrypted session cookie from %s", self._workspace.cookies_db)
        return cookie

    def read_encrypted_cookie(self) -> EncryptedCookieRecord:
        source = self._workspace.cookies_db
        if not source.is_file():
            raise CookieNotFound(f"Slack cookie database not found at {source}")

        # Slack keeps the database open; work on a private copy.
        fd, tmp = tempfile.mkstemp(prefix="slk_cookies_", suffix=".db")
        os.close(fd)
        try:
            os.chmod(tmp, 0o600)
            try:
                shutil.copyfile(source, tmp)
            except OSError as exc:
                raise CookieNotFound(f"Could not copy Slack cookie database {source}: {exc}") from exc
            blob = _query_cookie(Path(tmp), source)
        finally:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass

        if isinstance(blob, str):
            blob = blob.encode("latin-1")
        return EncryptedCookieRecord.from_blob(bytes(blob))


def _query_cookie(db_path: Path, source: Path) -> bytes:
    try:
        with closing(sqlite3.connect(db_path)) as conn:
            row = conn.execute(_COOKIE_QUERY, (COOKIE_NAME, COOKIE_HOST)).fetchone()
    except sqlite3.Error as exc:
        raise CookieNotFound(f"Could not read Slack cookie database {source}: {exc}") from exc

    if not row or not row[0]:
        raise CookieNotFound(
            f"No {COOKIE_NAME!r} cookie for {COOKIE_HOST} in Slack cookie store {source}"
        )
    return row[0]
