from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from tusky_mcp.auth import AuthService
from tusky_mcp.backends.base import TuskyBackend
from tusky_mcp.gate import AuthorizationGate
from tusky_mcp.keys import KeyManager
from tusky_mcp.models import (
    ApiKey,
    Challenge,
    CreatedApiKey,
    ProfileResponse,
    RevokedApiKey,
    SessionToken,
    Vault,
    VaultDetails,
    VaultFile,
    VaultPage,
    VaultPermission,
)
from tusky_mcp.profile import ProfileClient
from tusky_mcp.session import SessionTokenStore
from tusky_mcp.vaults import VaultClient

WALLET = "0x" + "1" * 40


@pytest.fixture
def anyio_backend():
    return "asyncio"


class ManualClock:
    """Clock the tests move forward by hand."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 4, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingBackend(TuskyBackend):
    """In-process backend that records calls and replays canned replies.

    Set ``fail_with`` to an exception to make the next call raise it.
    """

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Exception | None = None
        self.session_expires_in = timedelta(hours=1)
        self.keys = [
            ApiKey(id="key1", name="Test Key 1", prefix="tsk_1", created_at="2025-04-01T00:00:00Z"),
            ApiKey(id="key2", name="Test Key 2", prefix="tsk_2", created_at="2025-04-02T00:00:00Z"),
        ]
        self.profile = ProfileResponse.model_validate(
            {
                "profile": {"id": "user123", "name": "Ada", "walletAddress": WALLET},
                "storage": {"total": 1073741824, "used": 268435456, "plan": "Pro"},
            }
        )
        self.vault = Vault(
            id="vault-123",
            name="Test Vault",
            owner_id="user123",
            created_at="2025-04-01T12:00:00Z",
            size=1024,
            item_count=5,
            tags=["work"],
        )

    def _record(self, name: str, /, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    async def create_challenge(self, wallet_address, token=None):
        self._record("create_challenge", wallet_address=wallet_address, token=token)
        return Challenge(
            nonce="abc123",
            wallet_address=wallet_address,
            issued_at=self.clock(),
            expires_in_seconds=300,
        )

    async def verify_signature(self, wallet_address, signature, nonce, token=None):
        self._record("verify_signature", wallet_address=wallet_address, signature=signature, nonce=nonce, token=token)
        expires_at = self.clock() + self.session_expires_in if self.session_expires_in else None
        return SessionToken(token="tsk_1", expires_at=expires_at)

    async def list_api_keys(self, token):
        self._record("list_api_keys", token=token)
        return list(self.keys)

    async def create_api_key(self, token, name, expires_in_days=None):
        self._record("create_api_key", token=token, name=name, expires_in_days=expires_in_days)
        key = ApiKey(id="key3", name=name, prefix="tsk_3", created_at=self.clock())
        return CreatedApiKey(key=key, secret_key="tsk_3_super_secret_value")

    async def delete_api_key(self, token, key_id):
        self._record("delete_api_key", token=token, key_id=key_id)
        return RevokedApiKey(id=key_id, deleted=True)

    async def get_profile(self, token, include_storage=False):
        self._record("get_profile", token=token, include_storage=include_storage)
        return self.profile

    async def update_profile(self, token, changes):
        self._record("update_profile", token=token, changes=changes)
        profile = self.profile.profile.model_copy(update={"name": changes.get("name", self.profile.profile.name)})
        return ProfileResponse(profile=profile)

    async def list_vaults(self, token, status=None, limit=None, next_token=None, owned_only=None, tags=None):
        self._record(
            "list_vaults",
            token=token,
            status=status,
            limit=limit,
            next_token=next_token,
            owned_only=owned_only,
            tags=tags,
        )
        return VaultPage(vaults=[self.vault], next_token="next-token-123")

    async def get_vault(self, token, vault_id, include_permissions=False, include_files=False, include_folders=False):
        self._record(
            "get_vault",
            token=token,
            vault_id=vault_id,
            include_permissions=include_permissions,
            include_files=include_files,
            include_folders=include_folders,
        )
        # Replies with every section; the client drops what was not requested
        return VaultDetails(
            vault=self.vault.model_copy(update={"id": vault_id}),
            permissions=[VaultPermission(user_id="user456", user_name="Grace", access="read")],
            files=[VaultFile(id="file-1", name="notes.txt", size=1536, type="text/plain")],
            folders=[],
        )

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def backend(clock) -> RecordingBackend:
    return RecordingBackend(clock)


@pytest.fixture
def session(clock) -> SessionTokenStore:
    return SessionTokenStore(clock=clock)


@pytest.fixture
def gate(session) -> AuthorizationGate:
    return AuthorizationGate(session)


@pytest.fixture
def auth(backend, session) -> AuthService:
    return AuthService(backend, session)


@pytest.fixture
def keys(backend, gate) -> KeyManager:
    return KeyManager(backend, gate)


@pytest.fixture
def profiles(backend, gate) -> ProfileClient:
    return ProfileClient(backend, gate)


@pytest.fixture
def vaults(backend, gate) -> VaultClient:
    return VaultClient(backend, gate)


@pytest.fixture
def authenticated(session, clock) -> SessionTokenStore:
    session.set("tsk_session_token", clock.now + timedelta(hours=1))
    return session
