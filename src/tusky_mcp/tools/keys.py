"""API key management MCP tools for Tusky."""

from typing import Any

from mcp.server.fastmcp import FastMCP

from ..keys import KeyManager
from ..models import CreatedApiKey
from ..results import jsonable, to_envelope


def register_key_tools(mcp: FastMCP, keys: KeyManager) -> None:
    """Register API key tools with the MCP server."""

    @mcp.tool()
    async def tusky_list_api_keys() -> dict[str, Any]:
        """List all API keys for the authenticated user.

        Secrets are never included; only each key's id, name and prefix.
        """
        result = await keys.list_keys()
        return to_envelope(result, present=lambda items: {"count": len(items), "keys": jsonable(items)})

    @mcp.tool()
    async def tusky_create_api_key(
        name: str,
        expires_in_days: int | None = None,
    ) -> dict[str, Any]:
        """Create a new Tusky API key for the authenticated user.

        Args:
            name: Display name for the API key
            expires_in_days: Optional lifetime in days (omit for no expiration)

        Returns:
            The key record and its secret. The secret is shown only this once.
        """
        result = await keys.create_key(name, expires_in_days)
        return to_envelope(result, present=CreatedApiKey.reveal)

    @mcp.tool()
    async def tusky_revoke_api_key(key_id: str) -> dict[str, Any]:
        """Revoke (delete) an existing Tusky API key.

        Args:
            key_id: ID of the API key to revoke
        """
        return to_envelope(await keys.revoke_key(key_id))
