"""User profile MCP tools for Tusky."""

from typing import Any

from mcp.server.fastmcp import FastMCP

from ..profile import ProfileClient, summarize_profile
from ..results import to_envelope


def register_profile_tools(mcp: FastMCP, profiles: ProfileClient) -> None:
    """Register profile tools with the MCP server."""

    @mcp.tool()
    async def tusky_get_profile(include_storage: bool = False) -> dict[str, Any]:
        """Get the authenticated user's profile information.

        Args:
            include_storage: Also report storage usage and plan

        Returns:
            Profile details, plus storage usage when requested
        """
        result = await profiles.get_profile(include_storage=include_storage)
        return to_envelope(result, present=summarize_profile)

    @mcp.tool()
    async def tusky_update_profile(
        name: str | None = None,
        bio: str | None = None,
        avatar_url: str | None = None,
        preferences: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Update the authenticated user's profile information.

        Args:
            name: Display name (max 100 characters)
            bio: Short biography (max 500 characters)
            avatar_url: URL of the avatar image
            preferences: Arbitrary preference settings

        Returns:
            The updated profile
        """
        result = await profiles.update_profile(
            name=name,
            bio=bio,
            avatar_url=avatar_url,
            preferences=preferences,
        )
        return to_envelope(result, present=summarize_profile)
