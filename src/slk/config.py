from __future__ import annotations

import math
import os
from dataclasses import dataclass

DEFAULT_VALIDATE_TIMEOUT = 5.0
TOKEN_CACHE_FILENAME = "token-cache.json"


@dataclass(frozen=True)
class Config:
    log_level: str = "info"
    cache_dir: str = ""
    validate_timeout: float = DEFAULT_VALIDATE_TIMEOUT

    @property
    def token_cache_path(self) -> str:
        if not self.cache_dir:
            return ""
        return os.path.join(self.cache_dir, TOKEN_CACHE_FILENAME)


def load_config() -> Config:
    return Config(
        log_level=os.environ.get("SLK_LOG_LEVEL", "info").lower(),
        cache_dir=_get_cache_dir(),
        validate_timeout=_parse_timeout(os.environ.get("SLK_VALIDATE_TIMEOUT", "")),
    )


def _parse_timeout(val: str) -> float:
    if not val:
        return DEFAULT_VALIDATE_TIMEOUT

    secs: float | None = None
    try:
        secs = float(val)
    except ValueError:
        try:
            if val.endswith("ms"):
                secs = int(val[:-2]) / 1000
            elif val.endswith("m"):
                secs = int(val[:-1]) * 60
            elif val.endswith("s"):
                secs = float(val[:-1])
        except ValueError:
            secs = None

    if secs is None or not math.isfinite(secs) or secs <= 0:
        return DEFAULT_VALIDATE_TIMEOUT
    return secs


def _get_cache_dir() -> str:
    cache_dir = os.environ.get("SLK_CACHE_DIR", "")
    if not cache_dir:
        cache_dir = os.path.join(os.path.expanduser("~"), ".local", "slk")
    return cache_dir
