"""Read-only vault operations built on the authorization gate.

Like every other resource operation, the flow is: validate the input, pass
the gate, then call the backend with the token the gate returned.
"""

from datetime import datetime
from typing import Any

import structlog

from .backends.base import TuskyBackend
from .errors import ValidationError
from .gate import AuthorizationGate
from .models import Vault, VaultDetails, VaultPage
from .profile import format_bytes
from .results import Result, capture

logger = structlog.get_logger()

VAULT_STATUSES = ("active", "archived", "deleted", "all")
MAX_PAGE_SIZE = 100


def require_page_limit(limit: Any) -> int:
    if isinstance(limit, float) and limit.is_integer():
        limit = int(limit)
    # bool is an int subclass
    if isinstance(limit, bool) or not isinstance(limit, int) or not 0 < limit <= MAX_PAGE_SIZE:
        raise ValidationError(f"Limit must be a whole number between 1 and {MAX_PAGE_SIZE}")
    return limit


def require_tags(tags: Any) -> list[str]:
    if not isinstance(tags, list) or not all(isinstance(t, str) and t.strip() for t in tags):
        raise ValidationError("Tags must be a list of non-empty strings")
    return [t.strip() for t in tags]


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _vault_summary(vault: Vault) -> dict[str, Any]:
    return {
        "id": vault.id,
        "name": vault.name,
        "description": vault.description or "",
        "status": vault.status.value,
        "owner": vault.owner_name or vault.owner_id,
        "created": _iso(vault.created_at),
        "updated": _iso(vault.updated_at),
        "size": format_bytes(vault.size) if vault.size is not None else "Unknown",
        "itemCount": vault.item_count,
        "tags": list(vault.tags),
    }


def summarize_vault_page(page: VaultPage) -> dict[str, Any]:
    """Shape a vault listing for tool output."""
    return {
        "vaults": [_vault_summary(v) for v in page.vaults],
        "nextToken": page.next_token,
        "totalCount": page.total_count if page.total_count is not None else len(page.vaults),
    }


def summarize_vault_details(details: VaultDetails) -> dict[str, Any]:
    """Shape a single vault for tool output.

    Permissions, files and folders appear only when the backend returned them.
    """
    data: dict[str, Any] = {"vault": _vault_summary(details.vault)}
    if details.permissions is not None:
        data["permissions"] = [
            {
                "user": p.user_name or p.user_id,
                "access": p.access,
                "grantedAt": _iso(p.granted_at),
                "grantedBy": p.granted_by,
            }
            for p in details.permissions
        ]
    if details.files is not None:
        data["files"] = [
            {
                "id": f.id,
                "name": f.name,
                "type": f.type,
                "size": format_bytes(f.size) if f.size is not None else "Unknown",
                "folder": f.folder_id or "Root",
                "updated": _iso(f.updated_at),
            }
            for f in details.files
        ]
    if details.folders is not None:
        data["folders"] = [
            {
                "id": f.id,
                "name": f.name,
                "parent": f.parent_id or "Root",
                "itemCount": f.item_count,
            }
            for f in details.folders
        ]
    return data


class VaultClient:
    """List and inspect the authenticated user's vaults."""

    def __init__(self, backend: TuskyBackend, gate: AuthorizationGate):
        self.backend = backend
        self.gate = gate

    async def list_vaults(
        self,
        status: str = "active",
        limit: int | None = None,
        next_token: str | None = None,
        owned_only: bool | None = None,
        tags: list[str] | None = None,
    ) -> Result[VaultPage]:
        """List vaults.

        Args:
            status: active, archived, deleted or all
            limit: Page size, 1 to 100
            next_token: Continuation token from a previous page
            owned_only: Only vaults the user owns
            tags: Only vaults carrying all of these tags

        Returns:
            Ok with one page of vaults
        """
        return await capture(self._list_vaults(status, limit, next_token, owned_only, tags))

    async def _list_vaults(
        self,
        status: str,
        limit: int | None,
        next_token: str | None,
        owned_only: bool | None,
        tags: list[str] | None,
    ) -> VaultPage:
        if status not in VAULT_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(VAULT_STATUSES)}")
        if limit is not None:
            limit = require_page_limit(limit)
        if tags is not None:
            tags = require_tags(tags)

        token = self.gate.check("list vaults")
        page = await self.backend.list_vaults(
            token,
            status=status,
            limit=limit,
            next_token=next_token or None,
            owned_only=owned_only,
            tags=tags,
        )
        logger.info("vaults_listed", count=len(page.vaults), status=status)
        return page

    async def get_vault(
        self,
        vault_id: str,
        include_permissions: bool = False,
        include_files: bool = False,
        include_folders: bool = False,
    ) -> Result[VaultDetails]:
        return await capture(
            self._get_vault(vault_id, include_permissions, include_files, include_folders)
        )

    async def _get_vault(
        self,
        vault_id: str,
        include_permissions: bool,
        include_files: bool,
        include_folders: bool,
    ) -> VaultDetails:
        if not isinstance(vault_id, str) or not vault_id.strip():
            raise ValidationError("Vault ID is required")
        vault_id = vault_id.strip()

        token = self.gate.check("retrieve vault details")
        details = await self.backend.get_vault(
            token,
            vault_id,
            include_permissions=include_permissions,
            include_files=include_files,
            include_folders=include_folders,
        )
        # Drop sections the caller did not ask for
        return details.model_copy(
            update={
                "permissions": details.permissions if include_permissions else None,
                "files": details.files if include_files else None,
                "folders": details.folders if include_folders else None,
            }
        )
