from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field

from slk.text import mask_secret


class InstallKind(str, enum.Enum):
    DIRECT = "direct"
    APP_STORE = "app_store"


@dataclass(frozen=True)
class Workspace:
    root: Path
    kind: InstallKind

    @property
    def cookies_db(self) -> Path:
        return self.root / "Cookies"

    @property
    def leveldb_dir(self) -> Path:
        return self.root / "Local Storage" / "leveldb"


@dataclass(frozen=True)
class Credentials:
    token: str = field(repr=False)
    cookie: str = field(repr=False)
    # False when no candidate passed auth.test and the top-ranked one was
    # returned anyway.
    validated: bool = True

    def __repr__(self) -> str:
        return (
            f"Credentials(token={mask_secret(self.token)!r}, "
            f"cookie={mask_secret(self.cookie)!r}, validated={self.validated})"
        )


@dataclass(frozen=True)
class EncryptedCookieRecord:
    version_tag: bytes
    ciphertext: bytes

    @classmethod
    def from_blob(cls, blob: bytes) -> EncryptedCookieRecord:
        return cls(version_tag=blob[:3], ciphertext=blob[3:])


@dataclass(frozen=True)
class CandidateToken:
    value: str
    source: Path
    method: str


class TokenCacheEntry(BaseModel):
    token: str = Field(alias="token", min_length=1)
    captured_at: int = Field(alias="ts")

    model_config = {"populate_by_name": True}


class AuthInfo(BaseModel):
    user: str = Field(alias="user")
    user_id: str = Field(alias="userID")
    team: str = Field(alias="team")
    team_id: str = Field(alias="teamID")
    url: str = Field(default="", alias="url")
    workspace: str = Field(default="", alias="workspace")
    validated: bool = Field(default=True, alias="validated")

    model_config = {"populate_by_name": True}
