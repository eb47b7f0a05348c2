"""API key management, gated on an authenticated session.

Input validation always runs before the authorization gate, and the gate runs
before the backend is contacted. Key secrets pass through this module exactly
once, on creation, and are never kept.
"""

from typing import Any

import structlog

from .backends.base import TuskyBackend
from .errors import NotFound, ValidationError
from .gate import AuthorizationGate
from .models import ApiKey, CreatedApiKey
from .results import Result, capture

logger = structlog.get_logger()


def require_positive_days(expires_in_days: Any) -> int:
    # bool is an int subclass; True must not pass as one day
    if isinstance(expires_in_days, bool):
        raise ValidationError("API key expiration must be a positive number of days")
    if isinstance(expires_in_days, float) and expires_in_days.is_integer():
        expires_in_days = int(expires_in_days)
    if not isinstance(expires_in_days, int) or expires_in_days <= 0:
        raise ValidationError("API key expiration must be a positive number of days")
    return expires_in_days


class KeyManager:
    """Issues, lists and revokes long-lived API keys."""

    def __init__(self, backend: TuskyBackend, gate: AuthorizationGate):
        self.backend = backend
        self.gate = gate

    async def list_keys(self) -> Result[list[ApiKey]]:
        return await capture(self._list_keys())

    async def _list_keys(self) -> list[ApiKey]:
        token = self.gate.check("retrieve API keys")
        keys = await self.backend.list_api_keys(token)
        logger.info("api_keys_listed", count=len(keys))
        return keys

    async def create_key(self, name: str, expires_in_days: int | None = None) -> Result[CreatedApiKey]:
        """Create an API key.

        Args:
            name: Display name, must be non-empty
            expires_in_days: Optional lifetime; must be a positive integer

        Returns:
            Ok with the key record and its one-time secret
        """
        return await capture(
            self._create_key(name, expires_in_days),
            message="API key created. Store the secret now; it cannot be retrieved again.",
        )

    async def _create_key(self, name: str, expires_in_days: int | None) -> CreatedApiKey:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("API key name is required")
        if expires_in_days is not None:
            expires_in_days = require_positive_days(expires_in_days)

        token = self.gate.check("create API keys")
        created = await self.backend.create_api_key(token, name, expires_in_days)
        logger.info(
            "api_key_created",
            key_id=created.key.id,
            prefix=created.key.prefix,
            expires_in_days=expires_in_days,
        )
        return created

    async def revoke_key(self, key_id: str) -> Result[dict[str, Any]]:
        """Revoke an API key. A missing key is reported as ``not_found``."""
        return await capture(self._revoke_key(key_id))

    async def _revoke_key(self, key_id: str) -> dict[str, Any]:
        if not isinstance(key_id, str) or not key_id.strip():
            raise ValidationError("API key ID is required")
        key_id = key_id.strip()

        token = self.gate.check("delete API keys")
        try:
            revoked = await self.backend.delete_api_key(token, key_id)
        except NotFound:
            logger.info("api_key_revoke_missing", key_id=key_id)
            raise
        if not revoked.deleted:
            raise NotFound(f"API key {key_id} was not found or already revoked")

        logger.info("api_key_revoked", key_id=key_id)
        return {"id": revoked.id, "deleted": True}
