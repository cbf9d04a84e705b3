"""
Certificate and signature decoding helpers.

Parses certificate bundles stored in Vault, decodes transit signature
strings, and maps signing keys to the algorithms used with them.
"""

import base64
import binascii
import hashlib
from enum import Enum
from typing import Iterator, List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .errors import ParseError, UnsupportedKeyError

PEM_MARKER = b"-----BEGIN"


def parse_certificates(data: bytes) -> List[x509.Certificate]:
    """
    Parse a certificate bundle into certificates, in file order.

    PEM input may hold any number of CERTIFICATE blocks. Input without PEM
    armor is read as one or more concatenated DER certificates. Empty
    input yields an empty list.

    Raises:
        ValueError: If the bundle cannot be parsed
    """
    if not data.strip():
        return []

    if PEM_MARKER in data:
        return x509.load_pem_x509_certificates(data)

    return [x509.load_der_x509_certificate(der) for der in _split_der(data)]


def _split_der(data: bytes) -> Iterator[bytes]:
    """Split concatenated DER SEQUENCEs using their length headers."""
    offset = 0
    while offset < len(data):
        if data[offset] != 0x30 or offset + 2 > len(data):
            raise ValueError(f"Malformed DER certificate data at offset {offset}")

        first = data[offset + 1]
        if first < 0x80:
            length, header = first, 2
        else:
            count = first & 0x7F
            if count == 0 or count > 4 or offset + 2 + count > len(data):
                raise ValueError(f"Malformed DER length at offset {offset}")
            length = int.from_bytes(data[offset + 2:offset + 2 + count], "big")
            header = 2 + count

        end = offset + header + length
        if end > len(data):
            raise ValueError(f"Truncated DER certificate at offset {offset}")

        yield data[offset:end]
        offset = end


def decode_transit_signature(value: str) -> bytes:
    """
    Decode a transit signature string such as ``vault:v1:<base64>``.

    Raises:
        ParseError: If the string has fewer than three segments or the
            payload is not valid base64
    """
    segments = value.split(":")
    if len(segments) < 3:
        raise ParseError(
            f"Malformed transit signature: expected 3 colon-delimited segments, got {len(segments)}"
        )

    try:
        return base64.b64decode(segments[2], validate=True)
    except binascii.Error as e:
        raise ParseError(f"Transit signature payload is not valid base64: {e}") from e


def certificate_fingerprint(cert: x509.Certificate) -> str:
    """SHA-256 fingerprint of a certificate, hex encoded."""
    return cert.fingerprint(hashes.SHA256()).hex()


class KeySpec(Enum):
    """Key type and size of a signing key."""

    RSA_2048 = "RSA-2048"
    RSA_3072 = "RSA-3072"
    RSA_4096 = "RSA-4096"
    EC_256 = "EC-256"
    EC_384 = "EC-384"
    EC_521 = "EC-521"

    @property
    def is_rsa(self) -> bool:
        return self.value.startswith("RSA")

    @property
    def hash_name(self) -> str:
        """Hash paired with this key, e.g. ``SHA-256``."""
        return _HASH_NAMES[self]

    @property
    def signing_algorithm(self) -> str:
        """Signature scheme name, e.g. ``RSASSA-PSS-SHA-256``."""
        scheme = "RSASSA-PSS" if self.is_rsa else "ECDSA"
        return f"{scheme}-{self.hash_name}"

    @property
    def transit_signature_algorithm(self) -> Optional[str]:
        """Vault transit ``signature_algorithm``; only RSA keys take one."""
        return "pss" if self.is_rsa else None

    @property
    def transit_hash_algorithm(self) -> str:
        """Vault transit ``hash_algorithm`` matching the digest."""
        return "sha2-" + self.hash_name.split("-")[1]

    def digest(self, payload: bytes) -> bytes:
        """Hash a payload with this key's hash."""
        return hashlib.new(self.hash_name.replace("-", "").lower(), payload).digest()


_HASH_NAMES = {
    KeySpec.RSA_2048: "SHA-256",
    KeySpec.RSA_3072: "SHA-384",
    KeySpec.RSA_4096: "SHA-512",
    KeySpec.EC_256: "SHA-256",
    KeySpec.EC_384: "SHA-384",
    KeySpec.EC_521: "SHA-512",
}

_CURVES = {
    "secp256r1": KeySpec.EC_256,
    "secp384r1": KeySpec.EC_384,
    "secp521r1": KeySpec.EC_521,
}


def key_spec_from_certificate(cert: x509.Certificate) -> KeySpec:
    """
    Determine the key spec of a certificate's public key.

    Raises:
        UnsupportedKeyError: For key types or sizes without a key spec
    """
    public_key = cert.public_key()

    if isinstance(public_key, rsa.RSAPublicKey):
        try:
            return KeySpec(f"RSA-{public_key.key_size}")
        except ValueError:
            raise UnsupportedKeyError(f"Unsupported RSA key size: {public_key.key_size}")

    if isinstance(public_key, ec.EllipticCurvePublicKey):
        spec = _CURVES.get(public_key.curve.name)
        if spec is None:
            raise UnsupportedKeyError(f"Unsupported elliptic curve: {public_key.curve.name}")
        return spec

    raise UnsupportedKeyError(f"Unsupported public key type: {type(public_key).__name__}")
