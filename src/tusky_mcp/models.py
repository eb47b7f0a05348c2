"""Pydantic models for Tusky authentication, API key, profile and vault records."""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

WALLET_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

API_KEY_PREFIX = "tsk_"
API_KEY_MIN_LENGTH = 10


def is_valid_wallet_address(address: Any) -> bool:
    """Check a wallet address is a 0x-prefixed, 40 hex character string."""
    return isinstance(address, str) and bool(WALLET_ADDRESS_PATTERN.match(address))


def is_valid_api_key_format(token: Any) -> bool:
    """Basic shape check for a Tusky API key (``tsk_`` prefix, minimum length)."""
    if not isinstance(token, str) or not token.strip():
        return False
    return token.startswith(API_KEY_PREFIX) and len(token) >= API_KEY_MIN_LENGTH


def mask_wallet(address: str) -> str:
    """Shorten a wallet address for log output."""
    return address[:10] + "..."


def as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WireModel(BaseModel):
    """Base for models exchanged with the backend (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ============================================================
# Session
# ============================================================

class SessionStatus(str, Enum):
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"
    UNAUTHENTICATED = "unauthenticated"


class Challenge(WireModel):
    """A backend-issued nonce challenge for one wallet address."""

    nonce: str = Field(min_length=1)
    wallet_address: str = Field(alias="walletAddress")
    issued_at: Optional[datetime] = Field(default=None, alias="timestamp")
    expires_in_seconds: Optional[int] = Field(default=None, alias="expiresIn")


class SessionToken(WireModel):
    """Bearer credential returned by a successful verification.

    ``expires_at`` of ``None`` means the token never expires.
    """

    token: str = Field(min_length=1)
    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def public_view(self) -> dict[str, Any]:
        """Session details safe to show to a tool caller (no token)."""
        return {
            "authenticated": True,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
        }


# ============================================================
# API Keys
# ============================================================

class ApiKey(WireModel):
    """A long-lived API key record. Never carries the secret."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str
    name: str
    prefix: str
    created_at: datetime = Field(alias="createdAt")
    last_used: Optional[datetime] = Field(default=None, alias="lastUsed")
    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")


class CreatedApiKey(WireModel):
    """A freshly created key plus its one-time secret."""

    key: ApiKey
    secret_key: SecretStr = Field(alias="secretKey")

    def reveal(self) -> dict[str, Any]:
        """Payload for the single moment the secret is shown."""
        return {
            "key": self.key.model_dump(mode="json", by_alias=True, exclude_none=True),
            "secretKey": self.secret_key.get_secret_value(),
        }


class RevokedApiKey(WireModel):
    id: str
    deleted: bool


# ============================================================
# Profile
# ============================================================

class UserProfile(WireModel):
    id: str
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")
    wallet_address: Optional[str] = Field(default=None, alias="walletAddress")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    preferences: dict[str, Any] = Field(default_factory=dict)


class StorageInfo(WireModel):
    total: int
    used: int
    plan: Optional[str] = None
    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")


class ProfileResponse(WireModel):
    profile: UserProfile
    storage: Optional[StorageInfo] = None


# ============================================================
# Vaults
# ============================================================

class VaultStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class Vault(WireModel):
    id: str
    name: str
    description: Optional[str] = None
    status: VaultStatus = VaultStatus.ACTIVE
    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    owner_name: Optional[str] = Field(default=None, alias="ownerName")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    size: Optional[int] = None
    item_count: int = Field(default=0, alias="itemCount")
    tags: list[str] = Field(default_factory=list)


class VaultPermission(WireModel):
    user_id: str = Field(alias="userId")
    user_name: Optional[str] = Field(default=None, alias="userName")
    access: str
    granted_at: Optional[datetime] = Field(default=None, alias="grantedAt")
    granted_by: Optional[str] = Field(default=None, alias="grantedBy")


class VaultFile(WireModel):
    id: str
    name: str
    size: Optional[int] = None
    type: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    folder_id: Optional[str] = Field(default=None, alias="folderId")


class VaultFolder(WireModel):
    id: str
    name: str
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    item_count: int = Field(default=0, alias="itemCount")


class VaultPage(WireModel):
    """One page of a vault listing."""

    vaults: list[Vault]
    next_token: Optional[str] = Field(default=None, alias="nextToken")
    total_count: Optional[int] = Field(default=None, alias="totalCount")


class VaultDetails(WireModel):
    vault: Vault
    permissions: Optional[list[VaultPermission]] = None
    files: Optional[list[VaultFile]] = None
    folders: Optional[list[VaultFolder]] = None
