"""HTTP backend for the Tusky REST API."""

from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError as PayloadValidationError
import structlog

from ..errors import BackendError, ErrorKind, NotFound, OperationalError, ValidationError
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
from .base import TuskyBackend

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 10.0

M = TypeVar("M", bound=BaseModel)


class HTTPTuskyBackend(TuskyBackend):
    """httpx client backend for the Tusky API.

    Every request carries ``Authorization: Bearer <token>`` where the token is
    the caller-supplied session token, or the static API key when none is given.
    Requests are never retried.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"accept": "application/json", "content-type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    # ============================================================
    # Authentication
    # ============================================================

    async def create_challenge(self, wallet_address: str, token: str | None = None) -> Challenge:
        payload = await self._request(
            "POST", "/auth/challenge", token=token, json={"walletAddress": wallet_address}
        )
        return self._parse(Challenge, {**_as_dict(payload), "walletAddress": wallet_address}, "challenge")

    async def verify_signature(
        self,
        wallet_address: str,
        signature: str,
        nonce: str,
        token: str | None = None,
    ) -> SessionToken:
        payload = await self._request(
            "POST",
            "/auth/verify",
            token=token,
            json={"walletAddress": wallet_address, "signature": signature, "nonce": nonce},
        )
        return self._parse(SessionToken, payload, "verification")

    # ============================================================
    # API Keys
    # ============================================================

    async def list_api_keys(self, token: str) -> list[ApiKey]:
        payload = _as_dict(await self._request("GET", "/api-keys", token=token))
        keys = payload.get("keys")
        if not isinstance(keys, list):
            raise OperationalError("Unexpected API key list response: missing 'keys'")
        return [self._parse(ApiKey, item, "API key") for item in keys]

    async def create_api_key(
        self,
        token: str,
        name: str,
        expires_in_days: int | None = None,
    ) -> CreatedApiKey:
        body: dict[str, Any] = {"name": name}
        if expires_in_days is not None:
            body["expiresInDays"] = expires_in_days
        payload = await self._request("POST", "/api-keys", token=token, json=body)
        return self._parse(CreatedApiKey, payload, "API key creation")

    async def delete_api_key(self, token: str, key_id: str) -> RevokedApiKey:
        payload = await self._request(
            "DELETE", f"/api-keys/{_segment(key_id)}", token=token, not_found=f"API key {key_id} not found"
        )
        return self._parse(RevokedApiKey, {"id": key_id, "deleted": True, **_as_dict(payload)}, "API key deletion")

    # ============================================================
    # Profile
    # ============================================================

    async def get_profile(self, token: str, include_storage: bool = False) -> ProfileResponse:
        params = {"includeStorage": "true"} if include_storage else None
        payload = await self._request("GET", "/users/profile", token=token, params=params)
        return self._parse(ProfileResponse, payload, "profile")

    async def update_profile(self, token: str, changes: dict[str, Any]) -> ProfileResponse:
        payload = await self._request("PATCH", "/users/profile", token=token, json=changes)
        return self._parse(ProfileResponse, payload, "profile update")

    # ============================================================
    # Vaults
    # ============================================================

    async def list_vaults(
        self,
        token: str,
        status: str | None = None,
        limit: int | None = None,
        next_token: str | None = None,
        owned_only: bool | None = None,
        tags: list[str] | None = None,
    ) -> VaultPage:
        params: list[tuple[str, str]] = []
        if status and status != "all":
            params.append(("status", status))
        if limit is not None:
            params.append(("limit", str(limit)))
        if next_token:
            params.append(("nextToken", next_token))
        if owned_only is not None:
            params.append(("ownedOnly", "true" if owned_only else "false"))
        for tag in tags or []:
            params.append(("tags", tag))
        payload = await self._request("GET", "/vaults", token=token, params=params or None)
        return self._parse(VaultPage, payload, "vault list")

    async def get_vault(
        self,
        token: str,
        vault_id: str,
        include_permissions: bool = False,
        include_files: bool = False,
        include_folders: bool = False,
    ) -> VaultDetails:
        flags = {
            "includePermissions": include_permissions,
            "includeFiles": include_files,
            "includeFolders": include_folders,
        }
        params = [(name, "true") for name, wanted in flags.items() if wanted]
        payload = await self._request(
            "GET",
            f"/vaults/{_segment(vault_id)}",
            token=token,
            not_found=f"Vault {vault_id} not found",
            params=params or None,
        )
        return self._parse(VaultDetails, payload, "vault")

    # ============================================================
    # Plumbing
    # ============================================================

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        credential = token or self.api_key
        if not credential:
            return {}
        return {"authorization": f"Bearer {credential}"}

    async def _request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        not_found: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """Send one request and unwrap the response body.

        Raises:
            NotFound: On HTTP 404
            BackendError: When the backend reports a failure
            OperationalError: On transport failure or a non-JSON body
        """
        try:
            response = await self.client.request(
                method, path, headers=self._auth_headers(token), **kwargs
            )
        except httpx.HTTPError as e:
            logger.warning("backend_request_failed", method=method, path=path, error=str(e))
            raise OperationalError(f"Request to {path} failed: {str(e) or type(e).__name__}") from e

        if response.status_code == 204:
            return {}

        body = _json_or_none(response)

        if response.status_code == 404:
            raise NotFound(_error_message(body) or not_found or f"Resource at {path} not found")

        if response.is_error:
            default_kind = (
                ErrorKind.AUTH.value if response.status_code in (401, 403) else ErrorKind.OPERATIONAL.value
            )
            logger.warning(
                "backend_error_response", method=method, path=path, status=response.status_code
            )
            raise BackendError(
                _error_message(body) or f"Backend returned HTTP {response.status_code}",
                kind=_error_kind(body) or default_kind,
                status_code=response.status_code,
            )

        if body is None:
            raise OperationalError(f"Backend returned a non-JSON response for {path}")

        if isinstance(body, dict) and body.get("success") is False:
            raise BackendError(
                _error_message(body) or "Backend reported a failure",
                kind=_error_kind(body) or ErrorKind.OPERATIONAL.value,
                status_code=response.status_code,
            )

        # Tusky wraps payloads as {"success": true, "data": {...}}
        if isinstance(body, dict) and "success" in body and "data" in body:
            return body["data"]
        return body

    @staticmethod
    def _parse(model: type[M], payload: Any, what: str) -> M:
        try:
            return model.model_validate(payload)
        except PayloadValidationError as e:
            raise OperationalError(f"Unexpected {what} response from backend: {e}") from e


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _as_dict(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise OperationalError(f"Expected a JSON object from backend, got {type(payload).__name__}")
    return payload


def _error_kind(body: Any) -> str | None:
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return None


def _error_message(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for field in ("message", "detail", "error"):
        value = body.get(field)
        if isinstance(value, str) and value:
            return value
    return None


def _segment(value: str) -> str:
    """Escape a caller-supplied id for use as exactly one path segment."""
    if value in ("", ".", ".."):
        raise ValidationError(f"Invalid resource identifier: {value!r}")
    return quote(value, safe="")
