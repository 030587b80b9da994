from __future__ import annotations

from urllib.parse import urlparse


def workspace_from_url(url: str) -> str:
    parsed = urlparse(url)
    host = parsed.hostname or ""
    parts = host.split(".")
    if len(parts) < 3:
        raise ValueError(f"invalid Slack URL: {url!r}")
    return parts[0]


def mask_secret(value: str, *, keep: int = 4) -> str:
    """Shorten a token or cookie so it can appear in logs.

    Keeps the ``xoxc-``/``xoxd-`` style prefix plus ``keep`` characters on
    each side; anything too short to mask meaningfully is fully hidden.
    """
    if not value:
        return ""
    prefix, sep, rest = value.partition("-")
    if not sep or len(prefix) > 4:
        prefix, rest = "", value
    else:
        prefix += sep
    if len(rest) <= keep * 2:
        return f"{prefix}***"
    return f"{prefix}{rest[:keep]}...{rest[-keep:]}"


def wrap_slack_content(text: str) -> str:
    if not text:
        return text
    return f"[SLACK_CONTENT]{text}[/SLACK_CONTENT]"
