from __future__ import annotations

import logging

from fastmcp import Context

from slk.auth import CredentialResolver
from slk.errors import SlackAuthError
from slk.server import mcp
from slk.slack_client import SlackClient
from slk.text import workspace_from_url, wrap_slack_content
from slk.types import AuthInfo

logger = logging.getLogger(__name__)


async def auth_test(client: SlackClient, *, validated: bool = True) -> str:
    data = await client.auth_test()
    url = data.get("url", "")
    try:
        workspace = workspace_from_url(url)
    except ValueError:
        workspace = ""

    info = AuthInfo(
        user=wrap_slack_content(data.get("user", "")),
        userID=data.get("user_id", ""),
        team=wrap_slack_content(data.get("team", "")),
        teamID=data.get("team_id", ""),
        url=url,
        workspace=workspace,
        validated=validated,
    )
    return info.model_dump_json(by_alias=True)


async def auth_refresh(app_ctx: dict) -> str:
    resolver: CredentialResolver = app_ctx["resolver"]
    try:
        creds = await resolver.refresh()
    except SlackAuthError as exc:
        raise ValueError(str(exc)) from exc

    client = SlackClient(creds.token, cookie=creds.cookie)
    app_ctx["client"] = client
    logger.info("Slack credentials refreshed (validated=%s)", creds.validated)
    return await auth_test(client, validated=creds.validated)


# --- MCP tool wrappers ---


@mcp.tool(
    name="auth_test",
    description="Show the Slack user and workspace the desktop session credentials belong to.",
)
async def tool_auth_test(ctx: Context = None) -> str:
    app_ctx = ctx.request_context.lifespan_context
    creds = app_ctx["resolver"].credentials
    return await auth_test(
        app_ctx["client"],
        validated=creds.validated if creds is not None else True,
    )


@mcp.tool(
    name="auth_refresh",
    description="Re-read the Slack desktop session (cookie and token) and re-validate it, bypassing the token cache.",
)
async def tool_auth_refresh(ctx: Context = None) -> str:
    return await auth_refresh(ctx.request_context.lifespan_context)
