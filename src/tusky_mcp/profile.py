"""User profile operations built on the authorization gate."""

from typing import Any
from urllib.parse import urlparse

import structlog

from .backends.base import TuskyBackend
from .errors import ValidationError
from .gate import AuthorizationGate
from .models import ProfileResponse
from .results import Result, capture

logger = structlog.get_logger()

MAX_NAME_LENGTH = 100
MAX_BIO_LENGTH = 500


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """Format a byte count for display (e.g. ``1.5 MB``)."""
    if num_bytes == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB", "PB"]
    size = float(num_bytes)
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{round(size, decimals):g} {units[index]}"


def summarize_profile(response: ProfileResponse) -> dict[str, Any]:
    """Shape a profile response for tool output."""
    profile = response.profile
    data: dict[str, Any] = {
        "profile": {
            "id": profile.id,
            "name": profile.name or "Unnamed User",
            "bio": profile.bio or "",
            "avatarUrl": profile.avatar_url,
            "walletAddress": profile.wallet_address,
            "createdAt": profile.created_at.isoformat() if profile.created_at else None,
            "updatedAt": profile.updated_at.isoformat() if profile.updated_at else None,
            "preferences": profile.preferences,
        },
        "storage": None,
    }

    storage = response.storage
    if storage is not None:
        used_pct = round(storage.used / storage.total * 100) if storage.total else 0
        data["storage"] = {
            "total": format_bytes(storage.total),
            "used": format_bytes(storage.used),
            "available": format_bytes(max(storage.total - storage.used, 0)),
            "usedPercentage": f"{used_pct}%",
            "plan": storage.plan or "Standard",
            "expiresAt": storage.expires_at.isoformat() if storage.expires_at else "Never",
        }
    return data


class ProfileClient:
    """Read and update the authenticated user's profile."""

    def __init__(self, backend: TuskyBackend, gate: AuthorizationGate):
        self.backend = backend
        self.gate = gate

    async def get_profile(self, include_storage: bool = False) -> Result[ProfileResponse]:
        return await capture(self._get_profile(include_storage))

    async def _get_profile(self, include_storage: bool) -> ProfileResponse:
        token = self.gate.check("retrieve your profile")
        response = await self.backend.get_profile(token, include_storage=include_storage)
        if not include_storage:
            response = response.model_copy(update={"storage": None})
        return response

    async def update_profile(
        self,
        name: str | None = None,
        bio: str | None = None,
        avatar_url: str | None = None,
        preferences: dict[str, Any] | None = None,
    ) -> Result[ProfileResponse]:
        changes = {
            "name": name,
            "bio": bio,
            "avatarUrl": avatar_url,
            "preferences": preferences,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        updated = ", ".join(changes)
        return await capture(self._update_profile(changes), message=f"Updated profile fields: {updated}")

    async def _update_profile(self, changes: dict[str, Any]) -> ProfileResponse:
        if not changes:
            raise ValidationError(
                "Provide at least one field to update (name, bio, avatarUrl or preferences)"
            )
        if len(changes.get("name", "")) > MAX_NAME_LENGTH:
            raise ValidationError(f"Name must be less than {MAX_NAME_LENGTH} characters")
        if len(changes.get("bio", "")) > MAX_BIO_LENGTH:
            raise ValidationError(f"Bio must be less than {MAX_BIO_LENGTH} characters")
        if "avatarUrl" in changes:
            parsed = urlparse(changes["avatarUrl"])
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValidationError("Avatar URL must be a valid URL")

        token = self.gate.check("update your profile")
        response = await self.backend.update_profile(token, changes)
        logger.info("profile_updated", fields=sorted(changes))
        return response
