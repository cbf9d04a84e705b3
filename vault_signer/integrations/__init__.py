"""
Integration clients for external services.

This module contains the HTTP client for HashiCorp Vault and the typed
bodies exchanged with its KV version 2 and transit secrets engines.
"""

from .schema import (
    CertificateSecret,
    KvV2ReadResponse,
    TransitSignRequest,
    TransitSignResponse,
)
from .vault_client import VaultClient

__all__ = [
    "CertificateSecret",
    "KvV2ReadResponse",
    "TransitSignRequest",
    "TransitSignResponse",
    "VaultClient",
]
