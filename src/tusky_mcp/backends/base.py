"""Abstract backend interface for Tusky operations."""

from abc import ABC, abstractmethod
from typing import Any

from ..models import (
    ApiKey,
    Challenge,
    CreatedApiKey,
    ProfileResponse,
    RevokedApiKey,
    SessionToken,
    VaultDetails,
    VaultPage,
)


class SignatureVerifier(ABC):
    """Capability that checks a signed nonce and issues a session token.

    The verification algorithm itself lives outside this server.
    """

    @abstractmethod
    async def verify_signature(
        self,
        wallet_address: str,
        signature: str,
        nonce: str,
        token: str | None = None,
    ) -> SessionToken:
        """Verify ``signature`` over ``nonce`` for ``wallet_address``."""
        ...


class TuskyBackend(SignatureVerifier):
    """Abstract backend for Tusky storage operations.

    ``token`` arguments are the bearer credential for the call. ``None``
    means the implementation falls back to its static credential, if any.
    """

    # ============================================================
    # Authentication
    # ============================================================

    @abstractmethod
    async def create_challenge(self, wallet_address: str, token: str | None = None) -> Challenge:
        """Request a nonce challenge for a wallet address."""
        ...

    # ============================================================
    # API Keys
    # ============================================================

    @abstractmethod
    async def list_api_keys(self, token: str) -> list[ApiKey]:
        """List API key records for the authenticated user."""
        ...

    @abstractmethod
    async def create_api_key(
        self,
        token: str,
        name: str,
        expires_in_days: int | None = None,
    ) -> CreatedApiKey:
        """Create an API key; the reply carries the one-time secret."""
        ...

    @abstractmethod
    async def delete_api_key(self, token: str, key_id: str) -> RevokedApiKey:
        """Revoke an API key. Raises ``NotFound`` if it does not exist."""
        ...

    # ============================================================
    # Profile
    # ============================================================

    @abstractmethod
    async def get_profile(self, token: str, include_storage: bool = False) -> ProfileResponse:
        ...

    @abstractmethod
    async def update_profile(self, token: str, changes: dict[str, Any]) -> ProfileResponse:
        ...

    # ============================================================
    # Vaults
    # ============================================================

    @abstractmethod
    async def list_vaults(
        self,
        token: str,
        status: str | None = None,
        limit: int | None = None,
        next_token: str | None = None,
        owned_only: bool | None = None,
        tags: list[str] | None = None,
    ) -> VaultPage:
        """List vaults visible to the authenticated user, one page at a time."""
        ...

    @abstractmethod
    async def get_vault(
        self,
        token: str,
        vault_id: str,
        include_permissions: bool = False,
        include_files: bool = False,
        include_folders: bool = False,
    ) -> VaultDetails:
        """Get one vault. Raises ``NotFound`` if it does not exist or is not visible."""
        ...

    async def close(self) -> None:
        """Clean up resources."""
        pass
