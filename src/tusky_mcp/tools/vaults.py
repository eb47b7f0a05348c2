"""Vault MCP tools for Tusky."""

from typing import Any

from mcp.server.fastmcp import FastMCP

from ..results import to_envelope
from ..vaults import VaultClient, summarize_vault_details, summarize_vault_page


def register_vault_tools(mcp: FastMCP, vaults: VaultClient) -> None:
    """Register vault tools with the MCP server."""

    @mcp.tool()
    async def tusky_list_vaults(
        status: str = "active",
        limit: int | None = None,
        next_token: str | None = None,
        owned_only: bool | None = None,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        """List vaults accessible to the authenticated user.

        Args:
            status: Filter by status: active, archived, deleted or all
            limit: Maximum number of vaults to return (1-100)
            next_token: Pagination token from a previous call
            owned_only: Only return vaults you own
            tags: Only return vaults with these tags

        Returns:
            Vault summaries, plus nextToken when more pages exist
        """
        result = await vaults.list_vaults(
            status=status,
            limit=limit,
            next_token=next_token,
            owned_only=owned_only,
            tags=tags,
        )
        return to_envelope(result, present=summarize_vault_page)

    @mcp.tool()
    async def tusky_get_vault(
        vault_id: str,
        include_permissions: bool = False,
        include_files: bool = False,
        include_folders: bool = False,
    ) -> dict[str, Any]:
        """Get detailed information about a specific vault.

        Args:
            vault_id: ID of the vault
            include_permissions: Also list who can access the vault
            include_files: Also list the vault's files
            include_folders: Also list the vault's folders
        """
        result = await vaults.get_vault(
            vault_id,
            include_permissions=include_permissions,
            include_files=include_files,
            include_folders=include_folders,
        )
        return to_envelope(result, present=summarize_vault_details)
