from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from helpers import COOKIE, encrypt_cookie, write_cookie_db
from slk.slack_client import SlackClient
from slk.types import InstallKind, Workspace


@pytest.fixture
def workspace(tmp_path) -> Workspace:
    root = tmp_path / "Library" / "Application Support" / "Slack"
    (root / "Local Storage" / "leveldb").mkdir(parents=True)
    return Workspace(root=root, kind=InstallKind.DIRECT)


@pytest.fixture
def cookie_db(workspace) -> Path:
    return write_cookie_db(
        workspace.cookies_db,
        [
            (".slack.com", "d", encrypt_cookie(COOKIE.encode())),
            (".slack.com", "d-s", encrypt_cookie(b"1700000000")),
            (".example.com", "d", encrypt_cookie(b"xoxd-not-slack")),
        ],
    )


@pytest.fixture
def private_tmpdir(tmp_path, monkeypatch) -> Path:
    tmpdir = tmp_path / "tmp"
    tmpdir.mkdir()
    monkeypatch.setattr("tempfile.tempdir", str(tmpdir))
    return tmpdir


@pytest.fixture
def mock_client():
    client = AsyncMock(spec=SlackClient)
    return client


@pytest.fixture
def auth_response():
    return {
        "ok": True,
        "url": "https://myteam.slack.com/",
        "team": "My Team",
        "user": "alice",
        "team_id": "T001",
        "user_id": "U001",
    }
