"""
Remote signing adapter for a single Vault-held key.

A session is bound to one key identifier: the same name addresses the
key's certificate bundle in the KV version 2 engine and its private key
in the transit engine. Private key material never leaves Vault.
"""

import logging
from typing import List, Optional

from cryptography import x509
from pydantic import ValidationError

from .config import VaultConfig
from .crypto import decode_transit_signature, parse_certificates
from .errors import ConfigurationError, ParseError
from .integrations import (
    CertificateSecret,
    KvV2ReadResponse,
    TransitSignRequest,
    TransitSignResponse,
    VaultClient,
)

logger = logging.getLogger(__name__)


class VaultKeyClient:
    """Certificate retrieval and transit signing for one key."""

    def __init__(self, client: VaultClient, key_id: str, config: VaultConfig):
        self._client = client
        self._key_id = key_id
        self._config = config

    @classmethod
    def from_key_id(cls, key_id: str, config: Optional[VaultConfig] = None) -> "VaultKeyClient":
        """
        Create a session for a key.

        Args:
            key_id: Key identifier used as both secret path and transit key name
            config: Connection settings; read from VAULT_ADDR and VAULT_TOKEN
                when omitted

        Raises:
            ConfigurationError: If the address or token is missing, the
                address is malformed, or the key identifier has empty or
                dot path segments
        """
        if config is None:
            config = VaultConfig.from_env()

        segments = key_id.strip("/").split("/")
        if any(s in ("", ".", "..") for s in segments):
            raise ConfigurationError(f"Invalid key identifier: {key_id!r}")

        client = VaultClient(config.address, config.token, timeout=config.timeout)
        logger.info(f"Vault session created for key {key_id} at {client.address}")
        return cls(client, key_id, config)

    @property
    def key_id(self) -> str:
        return self._key_id

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "VaultKeyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def get_certificate_chain(self) -> List[x509.Certificate]:
        """
        Read the key's certificate bundle from the KV engine.

        Returns:
            Parsed certificates in bundle order

        Raises:
            TransportError: If the read fails
            ParseError: If the secret has no string ``certificate`` field
            ValueError: If the bundle is not a valid certificate encoding
        """
        response = await self._client.kv_v2_read(self._config.kv_mount, self._key_id)

        try:
            secret = CertificateSecret.model_validate(
                KvV2ReadResponse.model_validate(response).data.data
            )
        except ValidationError as e:
            raise ParseError("failed to parse certificate from secrets engine") from e

        certs = parse_certificates(secret.certificate.encode())
        logger.debug(f"Loaded {len(certs)} certificate(s) for key {self._key_id}")
        return certs

    async def sign_with_transit(
        self,
        encoded_digest: str,
        signature_algorithm: Optional[str],
        hash_algorithm: Optional[str] = None
    ) -> bytes:
        """
        Sign a prehashed digest with the key's transit engine key.

        Args:
            encoded_digest: Base64-encoded digest
            signature_algorithm: Transit signature algorithm, e.g. ``pss``;
                omitted from the request when None
            hash_algorithm: Transit hash algorithm naming the digest's hash;
                Vault's default applies when None

        Returns:
            Raw ASN.1 signature bytes

        Raises:
            TransportError: If the sign request fails
            ParseError: If the response has no well-formed signature
        """
        request = TransitSignRequest(
            input=encoded_digest,
            signature_algorithm=signature_algorithm,
            hash_algorithm=hash_algorithm
        )
        response = await self._client.transit_sign(
            self._config.transit_mount, self._key_id, request.to_body()
        )

        try:
            signature = TransitSignResponse.model_validate(response).data.signature
        except ValidationError as e:
            raise ParseError("failed to parse signature from transit sign response") from e

        sig_bytes = decode_transit_signature(signature)
        logger.info(f"Signed digest with transit key {self._key_id}")
        return sig_bytes
