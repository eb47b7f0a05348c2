"""Authentication MCP tools for Tusky."""

from typing import Any

from mcp.server.fastmcp import FastMCP

from ..auth import AuthService
from ..models import SessionToken
from ..results import to_envelope


def register_auth_tools(mcp: FastMCP, auth: AuthService) -> None:
    """Register authentication tools with the MCP server."""

    @mcp.tool()
    async def tusky_create_challenge(wallet_address: str) -> dict[str, Any]:
        """Create an authentication challenge for wallet-based authentication.

        Sign the returned nonce with the wallet, then call tusky_verify_challenge.

        Args:
            wallet_address: Wallet address (0x followed by 40 hex characters)

        Returns:
            The nonce to sign, when it was issued and how long it stays valid
        """
        result = await auth.create_challenge(wallet_address)
        return to_envelope(result)

    @mcp.tool()
    async def tusky_verify_challenge(
        wallet_address: str,
        signature: str,
        nonce: str,
    ) -> dict[str, Any]:
        """Verify a challenge by submitting the wallet's signature of the nonce.

        On success the session is stored by the server and used for all
        subsequent calls. Each nonce can be submitted only once.

        Args:
            wallet_address: Wallet address that requested the challenge
            signature: Signature of the nonce made with the wallet's private key
            nonce: The nonce returned by tusky_create_challenge

        Returns:
            Whether authentication succeeded and when the session expires
        """
        result = await auth.verify_challenge(wallet_address, signature, nonce)
        return to_envelope(result, present=SessionToken.public_view)

    @mcp.tool()
    async def tusky_check_auth_status() -> dict[str, Any]:
        """Check whether the server holds a valid Tusky session."""
        return to_envelope(auth.check_status())

    @mcp.tool()
    async def tusky_logout() -> dict[str, Any]:
        """Discard the current Tusky session."""
        return to_envelope(auth.logout())

    @mcp.tool()
    async def tusky_ping() -> dict[str, Any]:
        """Check that the Tusky MCP server is running."""
        return {"success": True, "message": "pong"}
