import pytest
import structlog

from tusky_mcp.config import Settings
from tusky_mcp.log import configure_logging
from tusky_mcp.server import create_backend, create_server
from tusky_mcp.backends.http import HTTPTuskyBackend

EXPECTED_TOOLS = {
    "tusky_create_challenge",
    "tusky_verify_challenge",
    "tusky_check_auth_status",
    "tusky_logout",
    "tusky_ping",
    "tusky_list_api_keys",
    "tusky_create_api_key",
    "tusky_revoke_api_key",
    "tusky_get_profile",
    "tusky_update_profile",
    "tusky_list_vaults",
    "tusky_get_vault",
}


@pytest.mark.anyio
async def test_server_registers_tools(backend, session):
    mcp = create_server(Settings(), backend=backend, session=session)

    tools = await mcp.list_tools()

    assert {tool.name for tool in tools} == EXPECTED_TOOLS


@pytest.mark.anyio
async def test_server_exposes_auth_status_resource(backend, session):
    mcp = create_server(Settings(), backend=backend, session=session)

    resources = await mcp.list_resources()

    assert "tusky://auth/status" in {str(r.uri) for r in resources}


@pytest.mark.anyio
async def test_create_backend_uses_settings():
    settings = Settings(api_url="https://api.tusky.test/v1/", api_key="tsk_static_key", request_timeout=3.0)

    backend = create_backend(settings)
    try:
        assert isinstance(backend, HTTPTuskyBackend)
        assert backend.base_url == "https://api.tusky.test/v1"
        assert backend.api_key == "tsk_static_key"
        assert backend.client.timeout.read == 3.0
    finally:
        await backend.close()


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("TUSKY_API_URL", "https://staging.tusky.test")
    monkeypatch.setenv("TUSKY_REQUEST_TIMEOUT", "2.5")

    settings = Settings()

    assert settings.api_url == "https://staging.tusky.test"
    assert settings.request_timeout == 2.5
    assert settings.nonce_history_size == 1024


def test_logging_goes_to_stderr(capsys):
    configure_logging("WARNING")
    try:
        log = structlog.get_logger()
        log.info("quiet_event")
        log.warning("loud_event", wallet="0x12345678...")
    finally:
        structlog.reset_defaults()

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "loud_event" in captured.err
    assert "quiet_event" not in captured.err
