"""Tusky MCP - wallet-authenticated Tusky storage for MCP clients.

Example usage:
    from tusky_mcp import AuthService, HTTPTuskyBackend, SessionTokenStore

    backend = HTTPTuskyBackend(base_url="https://api.tusky.io/v1")
    session = SessionTokenStore()
    auth = AuthService(backend, session)

    challenge = await auth.create_challenge("0x...")
    # sign challenge.value.nonce with the wallet, then:
    result = await auth.verify_challenge("0x...", signature, nonce)
"""

from .auth import AuthService
from .backends import HTTPTuskyBackend, SignatureVerifier, TuskyBackend
from .gate import AuthorizationGate
from .keys import KeyManager
from .profile import ProfileClient
from .results import Err, Ok, Result
from .session import SessionTokenStore
from .vaults import VaultClient

__version__ = "0.1.0"
__all__ = [
    "AuthService",
    "AuthorizationGate",
    "Err",
    "HTTPTuskyBackend",
    "KeyManager",
    "Ok",
    "ProfileClient",
    "Result",
    "SessionTokenStore",
    "SignatureVerifier",
    "TuskyBackend",
    "VaultClient",
]
