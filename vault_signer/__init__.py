"""
Vault Transit Signer

Remote signing adapter for HashiCorp Vault: certificate chains come from
the KV version 2 engine and signatures from the transit engine, so private
keys never leave Vault.
"""

from .config import VaultConfig, load_config
from .crypto import KeySpec, decode_transit_signature, parse_certificates
from .errors import (
    ConfigurationError,
    ParseError,
    TransportError,
    UnsupportedKeyError,
    VaultSignerError,
)
from .keyvault import VaultKeyClient
from .providers import KeyDescription, SigningResult, VaultProvider

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "KeyDescription",
    "KeySpec",
    "ParseError",
    "SigningResult",
    "TransportError",
    "UnsupportedKeyError",
    "VaultConfig",
    "VaultKeyClient",
    "VaultProvider",
    "VaultSignerError",
    "decode_transit_signature",
    "load_config",
    "parse_certificates",
]
