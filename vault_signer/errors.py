"""
Error types for the Vault signing adapter.

Every failure surfaced by this package is one of three kinds:
configuration problems at session construction, transport failures
while talking to Vault, and responses that do not match the expected
schema.
"""

from typing import List, Optional


class VaultSignerError(Exception):
    """Base error for Vault signing operations."""


class ConfigurationError(VaultSignerError):
    """Missing or invalid configuration."""


class TransportError(VaultSignerError):
    """
    Network, authentication, or service-side failure.

    Args:
        message: Human-readable error description.
        status: HTTP status returned by Vault, if a response was received.
        errors: Error strings reported by Vault in the response body.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        errors: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.status = status
        self.errors = errors or []


class ParseError(VaultSignerError):
    """Vault response did not match the expected schema."""


class UnsupportedKeyError(VaultSignerError):
    """Key type or size has no supported signing algorithm."""
