"""Wallet-based challenge/response authentication.

Flow:
1. Caller requests a challenge for a wallet address: ``create_challenge``
2. Backend returns a nonce with a short lifetime
3. Caller signs the nonce with the wallet, outside this server
4. Caller submits address, signature and nonce: ``verify_challenge``
5. Backend verifies the signature and issues a session token, which becomes
   the bearer credential for every later call

Nonces are treated as single-use: once a nonce has been answered by the
backend (accepted or rejected) it is refused locally on resubmission.
"""

import threading
from collections import OrderedDict
from typing import Any

import structlog

from .backends.base import SignatureVerifier, TuskyBackend
from .errors import BackendError, ErrorKind, NotFound, OperationalError, ValidationError
from .models import (
    Challenge,
    SessionStatus,
    SessionToken,
    is_valid_wallet_address,
    mask_wallet,
)
from .results import Err, Ok, Result, capture
from .session import SessionTokenStore

logger = structlog.get_logger()

# Consumed nonces remembered for reuse detection
DEFAULT_NONCE_HISTORY_SIZE = 1024


def require_wallet_address(wallet_address: Any) -> str:
    if not is_valid_wallet_address(wallet_address):
        raise ValidationError("Invalid wallet address format")
    return wallet_address


def require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value


class AuthService:
    """Challenge issuance, signature verification and session bookkeeping."""

    def __init__(
        self,
        backend: TuskyBackend,
        session: SessionTokenStore,
        verifier: SignatureVerifier | None = None,
        nonce_history_size: int = DEFAULT_NONCE_HISTORY_SIZE,
    ):
        self.backend = backend
        self.session = session
        self.verifier = verifier or backend
        self.nonce_history_size = nonce_history_size
        self._used_nonces: OrderedDict[tuple[str, str], None] = OrderedDict()
        self._nonce_lock = threading.Lock()

    # ============================================================
    # Challenge
    # ============================================================

    async def create_challenge(self, wallet_address: str) -> Result[Challenge]:
        """Request a nonce challenge for a wallet address."""
        return await capture(self._create_challenge(wallet_address))

    async def _create_challenge(self, wallet_address: str) -> Challenge:
        require_wallet_address(wallet_address)
        try:
            challenge = await self.backend.create_challenge(wallet_address, token=self._outbound_token())
        except (OperationalError, NotFound) as e:
            logger.warning("auth_challenge_failed", wallet=mask_wallet(wallet_address), kind=e.kind)
            raise OperationalError(f"Failed to create authentication challenge: {e.message}") from e
        logger.info(
            "auth_challenge_created",
            wallet=mask_wallet(wallet_address),
            expires_in=challenge.expires_in_seconds,
        )
        return challenge

    # ============================================================
    # Verification
    # ============================================================

    async def verify_challenge(self, wallet_address: str, signature: str, nonce: str) -> Result[SessionToken]:
        """Submit a signed nonce and install the resulting session token.

        Args:
            wallet_address: Wallet that requested the challenge
            signature: Signature of the nonce by the wallet's key
            nonce: Nonce from ``create_challenge``

        Returns:
            Ok with the installed session, or Err with the failure kind. On
            any failure the session store is left untouched.
        """
        return await capture(
            self._verify_challenge(wallet_address, signature, nonce),
            message="Authenticated with Tusky.",
        )

    async def _verify_challenge(self, wallet_address: str, signature: str, nonce: str) -> SessionToken:
        require_wallet_address(wallet_address)
        require_text(signature, "Signature is required")
        require_text(nonce, "Nonce is required")

        nonce_key = (wallet_address.lower(), nonce)
        if not self._reserve_nonce(nonce_key):
            logger.warning("auth_nonce_reused", wallet=mask_wallet(wallet_address))
            raise ValidationError("Nonce has already been used. Request a new challenge.")

        try:
            issued = await self.verifier.verify_signature(
                wallet_address, signature, nonce, token=self._outbound_token()
            )
        except (BackendError, NotFound) as e:
            logger.warning("auth_verify_rejected", wallet=mask_wallet(wallet_address), kind=e.kind)
            raise
        except Exception:
            # The backend never answered, so the nonce may still be good
            self._release_nonce(nonce_key)
            raise

        session = self.session.set(issued.token, issued.expires_at)
        logger.info("auth_signature_valid", wallet=mask_wallet(wallet_address))
        return session

    # ============================================================
    # Session
    # ============================================================

    def check_status(self) -> Result[dict[str, Any]]:
        """Report whether a valid session is held."""
        status = self.session.status()
        if status is SessionStatus.EXPIRED:
            return Err(
                kind=ErrorKind.NOT_AUTHENTICATED.value,
                message="Authentication token has expired. Request a new challenge to re-authenticate.",
            )
        current = self.session.current()
        if current is None:
            return Err(
                kind=ErrorKind.NOT_AUTHENTICATED.value,
                message="Not authenticated. Use tusky_create_challenge and tusky_verify_challenge.",
            )
        return Ok(current.public_view(), message="You are authenticated with Tusky.")

    def logout(self) -> Result[dict[str, Any]]:
        had_session = self.session.clear()
        message = "Logged out." if had_session else "No active session."
        return Ok({"authenticated": False}, message=message)

    # ============================================================
    # Internals
    # ============================================================

    def _outbound_token(self) -> str | None:
        current = self.session.current()
        return current.token if current else None

    def _reserve_nonce(self, key: tuple[str, str]) -> bool:
        with self._nonce_lock:
            if key in self._used_nonces:
                return False
            self._used_nonces[key] = None
            while len(self._used_nonces) > self.nonce_history_size:
                self._used_nonces.popitem(last=False)
            return True

    def _release_nonce(self, key: tuple[str, str]) -> None:
        with self._nonce_lock:
            self._used_nonces.pop(key, None)
