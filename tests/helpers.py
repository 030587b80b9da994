from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from slk.cookies import IV, derive_key
from slk.types import CandidateToken, InstallKind

MASTER_SECRET = b"c2xhY2stc2FmZS1zdG9yYWdlLWtleQ=="
HEX_TAIL = "0123456789abcdef" * 4
TOKEN = f"xoxc-1234567890-2345678901234-3456789012345-{HEX_TAIL}"
OTHER_TOKEN = f"xoxc-9876543210-8765432109876-7654321098765-{'fedcba9876543210' * 4}"
COOKIE = "xoxd-AbCdEf%2B123%2FghIjK%3D%3D"


class StubSecrets:
    def __init__(self, secret: bytes = MASTER_SECRET) -> None:
        self.secret = secret
        self.calls: list[InstallKind] = []

    def get_master_secret(self, install_kind: InstallKind) -> bytes:
        self.calls.append(install_kind)
        return self.secret


class FakeVault:
    def __init__(self, cookie: str = COOKIE) -> None:
        self.cookie = cookie
        self.calls = 0

    def decrypt_session_cookie(self) -> str:
        self.calls += 1
        return self.cookie


class FakeScanner:
    def __init__(self, tokens: list[str]) -> None:
        self.tokens = tokens
        self.calls = 0

    def scan(self) -> list[CandidateToken]:
        self.calls += 1
        return [CandidateToken(t, Path("000003.log"), "direct") for t in self.tokens]


def encrypt_cookie(
    value: bytes,
    secret: bytes = MASTER_SECRET,
    *,
    tag: bytes = b"v10",
    pad: bool = True,
) -> bytes:
    if pad:
        padder = padding.PKCS7(128).padder()
        value = padder.update(value) + padder.finalize()
    encryptor = Cipher(algorithms.AES(derive_key(secret)), modes.CBC(IV)).encryptor()
    return tag + encryptor.update(value) + encryptor.finalize()


def write_cookie_db(path: Path, rows: list[tuple[str, str, bytes]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(path)) as conn:
        conn.execute(
            "CREATE TABLE cookies (creation_utc INTEGER, host_key TEXT, name TEXT, "
            "value TEXT, encrypted_value BLOB)"
        )
        conn.executemany(
            "INSERT INTO cookies (creation_utc, host_key, name, value, encrypted_value) "
            "VALUES (0, ?, ?, '', ?)",
            rows,
        )
        conn.commit()
    return path
