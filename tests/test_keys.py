import httpx
import pytest

from tusky_mcp.errors import BackendError, NotFound
from tusky_mcp.models import RevokedApiKey
from tusky_mcp.results import Err, Ok, to_envelope


# ============================================================
# Authorization gate
# ============================================================

@pytest.mark.anyio
async def test_list_keys_requires_authentication(keys, backend):
    envelope = to_envelope(await keys.list_keys())

    assert envelope["success"] is False
    assert envelope["error"] == "authentication_required"
    assert "verify_challenge" in envelope["message"]
    assert backend.calls == []


@pytest.mark.anyio
async def test_create_key_requires_authentication(keys, backend):
    result = await keys.create_key("CI key", 30)

    assert result.kind == "authentication_required"
    assert backend.calls == []


@pytest.mark.anyio
async def test_revoke_key_requires_authentication(keys, backend):
    result = await keys.revoke_key("key1")

    assert result.kind == "authentication_required"
    assert backend.calls == []


@pytest.mark.anyio
async def test_gate_observes_expiry_on_next_call(keys, backend, authenticated, clock):
    assert (await keys.list_keys()).success

    clock.advance(hours=1)

    assert (await keys.list_keys()).kind == "authentication_required"
    assert backend.call_names() == ["list_api_keys"]


@pytest.mark.anyio
async def test_gate_observes_logout(keys, backend, authenticated):
    authenticated.clear()

    assert (await keys.list_keys()).kind == "authentication_required"
    assert backend.calls == []


# ============================================================
# Listing
# ============================================================

@pytest.mark.anyio
async def test_list_keys_uses_session_token(keys, backend, authenticated):
    result = await keys.list_keys()

    assert isinstance(result, Ok)
    assert [k.id for k in result.value] == ["key1", "key2"]
    assert backend.calls == [("list_api_keys", {"token": "tsk_session_token"})]


@pytest.mark.anyio
async def test_list_keys_envelope_shape(keys, authenticated):
    envelope = to_envelope(await keys.list_keys())

    assert envelope["success"] is True
    assert envelope["data"][0]["id"] == "key1"
    assert envelope["data"][0]["prefix"] == "tsk_1"
    assert "createdAt" in envelope["data"][0]


# ============================================================
# Creation
# ============================================================

@pytest.mark.anyio
@pytest.mark.parametrize("name", ["", "   ", None])
async def test_create_key_requires_name(keys, backend, name):
    result = await keys.create_key(name)

    assert to_envelope(result) == {
        "success": False,
        "error": "validation_error",
        "message": "API key name is required",
    }
    assert backend.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize("days", [0, -5, 1.5, True, "7"])
async def test_create_key_rejects_bad_expiry(keys, backend, authenticated, days):
    result = await keys.create_key("x", days)

    assert result.kind == "validation_error"
    assert backend.calls == []


@pytest.mark.anyio
async def test_create_key_validates_before_gate(keys):
    # Unauthenticated, but the bad input is reported first
    result = await keys.create_key("x", 0)
    assert result.kind == "validation_error"


@pytest.mark.anyio
async def test_create_key_returns_secret_once(keys, backend, authenticated):
    result = await keys.create_key("CI key", 30)

    assert isinstance(result, Ok)
    assert result.value.key.id == "key3"
    assert result.value.secret_key.get_secret_value() == "tsk_3_super_secret_value"
    assert "super_secret" not in repr(result.value)
    assert backend.calls[0] == (
        "create_api_key",
        {"token": "tsk_session_token", "name": "CI key", "expires_in_days": 30},
    )
    assert "cannot be retrieved again" in result.message


@pytest.mark.anyio
async def test_create_key_accepts_integral_float(keys, backend, authenticated):
    result = await keys.create_key("CI key", 30.0)

    assert result.success
    assert backend.calls[0][1]["expires_in_days"] == 30


@pytest.mark.anyio
async def test_create_key_without_expiry(keys, backend, authenticated):
    assert (await keys.create_key("forever")).success
    assert backend.calls[0][1]["expires_in_days"] is None


# ============================================================
# Revocation
# ============================================================

@pytest.mark.anyio
@pytest.mark.parametrize("key_id", ["", "  ", None])
async def test_revoke_key_requires_id(keys, backend, authenticated, key_id):
    result = await keys.revoke_key(key_id)

    assert result.kind == "validation_error"
    assert result.message == "API key ID is required"
    assert backend.calls == []


@pytest.mark.anyio
async def test_revoke_key(keys, backend, authenticated):
    envelope = to_envelope(await keys.revoke_key("key1"))

    assert envelope == {"success": True, "data": {"id": "key1", "deleted": True}}


@pytest.mark.anyio
async def test_revoke_missing_key_is_not_found(keys, backend, authenticated):
    backend.fail_with = NotFound("API key missing-id not found")

    result = await keys.revoke_key("missing-id")

    assert isinstance(result, Err)
    assert result.kind == "not_found"
    assert result.kind != "operational_error"


@pytest.mark.anyio
async def test_revoke_not_deleted_is_not_found(keys, backend, authenticated):
    async def not_deleted(token, key_id):
        return RevokedApiKey(id=key_id, deleted=False)

    backend.delete_api_key = not_deleted

    assert (await keys.revoke_key("key1")).kind == "not_found"


@pytest.mark.anyio
async def test_backend_failures_are_values(keys, backend, authenticated):
    backend.fail_with = BackendError("Internal error", status_code=500)
    assert (await keys.list_keys()).kind == "operational_error"

    backend.fail_with = httpx.ConnectError("boom")
    assert (await keys.list_keys()).kind == "operational_error"

    backend.fail_with = RuntimeError("unexpected")
    result = await keys.list_keys()
    assert result.kind == "operational_error"
    assert result.message == "unexpected"


@pytest.mark.anyio
async def test_revoke_key_sends_stripped_id(keys, backend, authenticated):
    result = await keys.revoke_key("  key1 ")

    assert result.value == {"id": "key1", "deleted": True}
    assert backend.calls == [("delete_api_key", {"token": "tsk_session_token", "key_id": "key1"})]
