from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from slk.auth import CredentialResolver
from slk.config import load_config
from slk.slack_client import SlackClient
from slk.text import workspace_from_url

logger = logging.getLogger("slk")


@asynccontextmanager
async def lifespan(server: FastMCP):
    config = load_config()

    # Set up logging
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )

    logger.info("Starting slk MCP Server...")

    resolver = CredentialResolver.from_config(config)
    logger.info("Resolving Slack desktop session credentials...")
    creds = await resolver.resolve()
    if not creds.validated:
        logger.warning("Continuing with an unvalidated token; auth.test will confirm it")

    client = SlackClient(creds.token, cookie=creds.cookie)
    auth = await client.auth_test()
    try:
        workspace = workspace_from_url(auth.get("url", ""))
    except ValueError:
        logger.warning("auth.test returned no usable workspace URL")
        workspace = ""
    logger.info(
        "Authenticated: team=%s user=%s workspace=%s",
        auth.get("team", ""),
        auth.get("user", ""),
        workspace,
    )

    # Store context for tools
    ctx = {"client": client, "resolver": resolver, "config": config, "workspace": workspace}
    yield ctx


mcp = FastMCP("slk MCP Server", lifespan=lifespan)

# Importing tool modules triggers @mcp.tool() decorator registration
from slk.tools import auth  # noqa: E402, F401
