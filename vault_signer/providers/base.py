"""
Signing Provider Abstraction Layer

Defines the base types returned to the plugin host: key descriptions and
detached signing results.
"""

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiofiles

from ..crypto import KeySpec


@dataclass
class KeyDescription:
    """Describes a remote signing key."""

    key_id: str
    key_spec: KeySpec
    certificate_fingerprint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "key_id": self.key_id,
            "key_spec": self.key_spec.value,
            "signing_algorithm": self.key_spec.signing_algorithm,
            "certificate_fingerprint": self.certificate_fingerprint
        }


@dataclass
class SigningResult:
    """Result from a signing operation."""

    key_id: str
    signature: bytes
    signing_algorithm: str

    # DER encoded, leaf first
    certificate_chain: List[bytes] = field(default_factory=list)

    provider_name: Optional[str] = None
    provider_metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "key_id": self.key_id,
            "provider": self.provider_name,
            "signature": base64.b64encode(self.signature).decode(),
            "signing_algorithm": self.signing_algorithm,
            "certificate_chain": [
                base64.b64encode(der).decode() for der in self.certificate_chain
            ],
            "metadata": self.provider_metadata
        }


class BaseProvider(ABC):
    """
    Abstract base class for signing providers.

    Providers sign with keys they never expose; subclasses implement key
    description and signature generation against their backend.
    """

    name = "base"

    @abstractmethod
    async def describe_key(self) -> KeyDescription:
        """Describe the provider's signing key."""
        pass

    @abstractmethod
    async def generate_signature(
        self,
        payload: bytes,
        key_spec: Optional[KeySpec] = None
    ) -> SigningResult:
        """Sign a payload - must be implemented by subclasses."""
        pass

    async def sign_file(
        self,
        file_path: str,
        key_spec: Optional[KeySpec] = None
    ) -> SigningResult:
        """
        Sign a file's contents.

        Args:
            file_path: Path to file to sign
            key_spec: Expected key spec, if known

        Returns:
            SigningResult with detached signature and certificate chain
        """
        async with aiofiles.open(file_path, "rb") as f:
            payload = await f.read()

        result = await self.generate_signature(payload, key_spec)
        result.provider_metadata.setdefault("file_path", file_path)
        return result

    async def close(self) -> None:
        """Clean up resources - override in subclasses."""

    async def __aenter__(self) -> "BaseProvider":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
