#!/usr/bin/env python3
"""Tusky MCP Server - wallet-authenticated access to Tusky storage.

Exposes Tusky authentication, API key management, profile and vault operations to
MCP-compatible clients like Claude Desktop and Cursor.

Usage:
    TUSKY_API_URL=https://api.tusky.io/v1 python -m tusky_mcp.server
"""

import json
from contextlib import asynccontextmanager
from typing import AsyncIterator

from mcp.server.fastmcp import FastMCP
import structlog

from .auth import AuthService
from .backends.base import TuskyBackend
from .backends.http import HTTPTuskyBackend
from .config import Settings, get_settings
from .gate import AuthorizationGate
from .keys import KeyManager
from .log import configure_logging
from .models import is_valid_api_key_format
from .profile import ProfileClient
from .results import to_envelope
from .session import SessionTokenStore
from .tools import register_auth_tools, register_key_tools, register_profile_tools, register_vault_tools
from .vaults import VaultClient

logger = structlog.get_logger()

INSTRUCTIONS = """Tusky MCP Server - Wallet-authenticated Tusky storage

1. **Authenticate**: Prove ownership of a wallet
   - Use tusky_create_challenge with your wallet address to get a nonce
   - Sign the nonce with your wallet
   - Use tusky_verify_challenge with the address, signature and nonce
   - Use tusky_check_auth_status to see whether the session is still valid
   - Use tusky_logout to discard the session

2. **API Keys**: Manage long-lived credentials (requires authentication)
   - Use tusky_list_api_keys, tusky_create_api_key and tusky_revoke_api_key
   - A new key's secret is shown once, at creation

3. **Profile**: Read or change your profile (requires authentication)
   - Use tusky_get_profile and tusky_update_profile

4. **Vaults**: Browse your storage (requires authentication)
   - Use tusky_list_vaults to page through vaults, filtered by status or tags
   - Use tusky_get_vault for one vault, optionally with permissions, files and folders

Every tool returns {success, error?, message?, data?}. The error field is a
stable machine-readable kind such as validation_error or authentication_required.
"""


def create_backend(settings: Settings) -> TuskyBackend:
    """Create the HTTP backend from configuration."""
    if settings.api_key and not is_valid_api_key_format(settings.api_key):
        logger.warning("static_api_key_unexpected_format")
    return HTTPTuskyBackend(
        base_url=settings.api_url,
        api_key=settings.api_key,
        timeout=settings.request_timeout,
    )


def create_server(
    settings: Settings | None = None,
    backend: TuskyBackend | None = None,
    session: SessionTokenStore | None = None,
) -> FastMCP:
    """Build the MCP server with its own session and registered tools.

    Args:
        settings: Configuration; defaults to the environment
        backend: Backend to use; defaults to the HTTP backend
        session: Session store; a fresh one is created when omitted

    Returns:
        The configured FastMCP server
    """
    settings = settings or get_settings()
    backend = backend or create_backend(settings)
    session = session or SessionTokenStore()
    gate = AuthorizationGate(session)

    auth = AuthService(backend, session, nonce_history_size=settings.nonce_history_size)
    keys = KeyManager(backend, gate)
    profiles = ProfileClient(backend, gate)
    vaults = VaultClient(backend, gate)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await backend.close()

    mcp = FastMCP(name="Tusky", instructions=INSTRUCTIONS, lifespan=lifespan)

    register_auth_tools(mcp, auth)
    register_key_tools(mcp, keys)
    register_profile_tools(mcp, profiles)
    register_vault_tools(mcp, vaults)

    @mcp.resource("tusky://auth/status")
    async def get_auth_status() -> str:
        """Current authentication status."""
        return json.dumps(to_envelope(auth.check_status()), indent=2)

    return mcp


def main():
    """Run the MCP server."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("server_starting", api_url=settings.api_url)
    create_server(settings).run(transport="stdio")


if __name__ == "__main__":
    main()
