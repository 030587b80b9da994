"""Extraction of ``xoxc-`` tokens from Slack's Local Storage LevelDB.

Recently written entries sit verbatim in ``.log`` files; compacted ``.ldb``
tables are Snappy-compressed, which splices back-reference bytes into the
middle of long strings. Two passes cover both cases.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from slk.errors import NoTokenFound
from slk.types import CandidateToken

logger = logging.getLogger(__name__)

TOKEN_PREFIX = b"xoxc-"
STORAGE_SUFFIXES = (".ldb", ".log")
MIN_TOKEN_LENGTH = 51
WINDOW_SIZE = 200

_DIRECT_RE = re.compile(rb"xoxc-[A-Za-z0-9_-]{20,}")
_HEX_TAIL_RE = re.compile(rb"[a-f0-9]{64}")
_TOKEN_RE = re.compile(r"xoxc-\d+-\d+-\d+-[a-f0-9]{64}")
# Every character a well-formed token can contain.
_TOKEN_CHARS = frozenset(b"0123456789abcdef-xoc")


def extract_direct(data: bytes) -> list[str]:
    return [m.group().decode("ascii") for m in _DIRECT_RE.finditer(data)]


def extract_structured(data: bytes, *, window: int = WINDOW_SIZE) -> list[str]:
    found: list[str] = []
    pos = 0
    while True:
        idx = data.find(TOKEN_PREFIX, pos)
        if idx < 0:
            break
        pos = idx + len(TOKEN_PREFIX)

        chunk = data[idx : idx + window]
        hex_match = _HEX_TAIL_RE.search(chunk)
        if not hex_match:
            continue

        clean = bytes(b for b in chunk[: hex_match.end()] if b in _TOKEN_CHARS).decode("ascii")
        if _TOKEN_RE.fullmatch(clean):
            found.append(clean)
    return found


def rank_candidates(candidates: list[CandidateToken]) -> list[CandidateToken]:
    """Drop duplicates and truncated matches, longest first.

    The first sighting of a value wins and ``sorted`` is stable, so equal
    lengths keep discovery order.
    """
    unique: dict[str, CandidateToken] = {}
    for candidate in candidates:
        unique.setdefault(candidate.value, candidate)
    kept = [c for c in unique.values() if len(c.value) >= MIN_TOKEN_LENGTH]
    return sorted(kept, key=lambda c: len(c.value), reverse=True)


class TokenScanner:
    def __init__(self, leveldb_dir: Path) -> None:
        self._leveldb_dir = leveldb_dir

    def storage_files(self) -> list[Path]:
        try:
            entries = sorted(self._leveldb_dir.iterdir())
        except OSError as exc:
            raise NoTokenFound(
                f"Could not read Slack local storage at {self._leveldb_dir}: {exc}"
            ) from exc
        return [p for p in entries if p.suffix in STORAGE_SUFFIXES and p.is_file()]

    def scan(self) -> list[CandidateToken]:
        found: list[CandidateToken] = []
        for path in self.storage_files():
            try:
                data = path.read_bytes()
            except OSError as exc:
                logger.debug("Skipping unreadable storage file %s: %s", path.name, exc)
                continue
            found.extend(CandidateToken(t, path, "direct") for t in extract_direct(data))
            found.extend(CandidateToken(t, path, "structured") for t in extract_structured(data))

        ranked = rank_candidates(found)
        if not ranked:
            if found:
                raise NoTokenFound(
                    f"Only truncated xoxc- tokens found in {self._leveldb_dir}. Is Slack running?"
                )
            raise NoTokenFound(f"No xoxc- token found in {self._leveldb_dir}. Is Slack running?")

        logger.info(
            "Found %d token candidate(s) in %d storage match(es)", len(ranked), len(found)
        )
        return ranked
