"""Backend implementations for the Tusky MCP server."""

from .base import SignatureVerifier, TuskyBackend
from .http import HTTPTuskyBackend

__all__ = ["SignatureVerifier", "TuskyBackend", "HTTPTuskyBackend"]
