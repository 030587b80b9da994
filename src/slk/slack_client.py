from __future__ import annotations

import asyncio
import logging
import time

import aiohttp
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.http_retry.builtin_async_handlers import AsyncRateLimitErrorRetryHandler
from slack_sdk.web.async_client import AsyncWebClient

from slk.errors import ValidationTimeout
from slk.text import mask_secret

logger = logging.getLogger(__name__)

_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)


class SlackClient:
    def __init__(self, token: str, cookie: str = "", *, timeout: int = 30) -> None:
        headers: dict[str, str] = {}
        if cookie:
            headers["cookie"] = f"d={cookie}; d-s={int(time.time()) - 10}"
            headers["User-Agent"] = _BROWSER_USER_AGENT
        self._client = AsyncWebClient(token=token, headers=headers, timeout=timeout)
        self._client.retry_handlers.append(AsyncRateLimitErrorRetryHandler(max_retry_count=3))

    async def auth_test(self) -> dict:
        resp = await self._client.auth_test()
        return resp.data


async def validate_credentials(token: str, cookie: str, *, timeout: float) -> bool:
    """Check a token/cookie pair with ``auth.test``.

    Any API or transport failure means "invalid". Running out of time
    raises :class:`ValidationTimeout` so callers can report it separately.
    """
    client = SlackClient(token, cookie=cookie, timeout=max(int(timeout), 1))
    try:
        data = await asyncio.wait_for(client.auth_test(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise ValidationTimeout(
            f"auth.test for {mask_secret(token)} did not answer within {timeout:g}s"
        ) from exc
    except SlackApiError as exc:
        logger.debug("Token %s rejected: %s", mask_secret(token), exc.response.get("error", ""))
        return False
    except (SlackClientError, aiohttp.ClientError, OSError) as exc:
        logger.debug("auth.test failed for %s: %s", mask_secret(token), exc)
        return False
    return bool(data.get("ok"))
