"""
Vault Signing Provider

Signs payloads with keys held in a HashiCorp Vault transit engine, using
the certificate bundle stored beside each key in the KV engine.

The payload is hashed locally; only its digest is sent to Vault.
"""

import base64
import logging
from typing import List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ..config import VaultConfig
from ..crypto import KeySpec, certificate_fingerprint, key_spec_from_certificate
from ..errors import ParseError, UnsupportedKeyError
from ..keyvault import VaultKeyClient
from .base import BaseProvider, KeyDescription, SigningResult

logger = logging.getLogger(__name__)


class VaultProvider(BaseProvider):
    """Vault transit signing provider for a single key."""

    name = "vault"

    def __init__(self, key_client: VaultKeyClient):
        self.key_client = key_client

    @classmethod
    def from_key_id(cls, key_id: str, config: Optional[VaultConfig] = None) -> "VaultProvider":
        return cls(VaultKeyClient.from_key_id(key_id, config))

    async def close(self) -> None:
        await self.key_client.close()

    async def _load_chain(self) -> List[x509.Certificate]:
        certs = await self.key_client.get_certificate_chain()
        if not certs:
            raise ParseError(f"No certificates stored for key {self.key_client.key_id}")
        return certs

    async def describe_key(self) -> KeyDescription:
        """Describe the key from the leaf of its certificate chain."""
        leaf = (await self._load_chain())[0]
        return KeyDescription(
            key_id=self.key_client.key_id,
            key_spec=key_spec_from_certificate(leaf),
            certificate_fingerprint=certificate_fingerprint(leaf)
        )

    async def generate_signature(
        self,
        payload: bytes,
        key_spec: Optional[KeySpec] = None
    ) -> SigningResult:
        """
        Produce a detached signature over a payload.

        Args:
            payload: Bytes to sign
            key_spec: Expected key spec; must match the certificate's key

        Returns:
            SigningResult with raw signature and DER certificate chain

        Raises:
            UnsupportedKeyError: If the key spec is unsupported or does not
                match the certificate
            TransportError: If Vault cannot be reached
            ParseError: If Vault's responses are malformed
        """
        certs = await self._load_chain()
        leaf_spec = key_spec_from_certificate(certs[0])

        if key_spec is not None and key_spec != leaf_spec:
            raise UnsupportedKeyError(
                f"Key spec {key_spec.value} does not match certificate key {leaf_spec.value}"
            )

        digest = leaf_spec.digest(payload)
        signature = await self.key_client.sign_with_transit(
            base64.b64encode(digest).decode(),
            leaf_spec.transit_signature_algorithm,
            leaf_spec.transit_hash_algorithm
        )

        logger.info(
            f"Generated {leaf_spec.signing_algorithm} signature with key {self.key_client.key_id}"
        )

        return SigningResult(
            key_id=self.key_client.key_id,
            signature=signature,
            signing_algorithm=leaf_spec.signing_algorithm,
            certificate_chain=[
                cert.public_bytes(serialization.Encoding.DER) for cert in certs
            ],
            provider_name=self.name,
            provider_metadata={
                "key_spec": leaf_spec.value,
                "digest": digest.hex()
            }
        )
