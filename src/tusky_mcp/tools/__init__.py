"""MCP tools for the Tusky server."""

from .auth import register_auth_tools
from .keys import register_key_tools
from .profile import register_profile_tools
from .vaults import register_vault_tools

__all__ = ["register_auth_tools", "register_key_tools", "register_profile_tools", "register_vault_tools"]
