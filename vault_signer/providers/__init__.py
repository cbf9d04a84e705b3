"""
Signing Providers Package

Provides the signing provider used by the plugin host.

Available Providers:
- VaultProvider: Remote signing with HashiCorp Vault transit keys
"""

from .base import BaseProvider, KeyDescription, SigningResult
from .vault import VaultProvider

__all__ = [
    "BaseProvider",
    "KeyDescription",
    "SigningResult",
    "VaultProvider",
]
