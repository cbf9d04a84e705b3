"""
Typed request and response bodies for the Vault HTTP API.

Only the fields this package consumes are declared; anything else Vault
returns is ignored.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, StrictStr


class KvV2Data(BaseModel):
    """Inner ``data`` block of a KV version 2 read."""
    data: Dict[str, Any]


class KvV2ReadResponse(BaseModel):
    """Response of ``GET /v1/{mount}/data/{path}``."""
    data: KvV2Data


class CertificateSecret(BaseModel):
    """Secret document holding a key's certificate bundle."""
    certificate: StrictStr


class TransitSignRequest(BaseModel):
    """Body of ``POST /v1/{mount}/sign/{name}``."""

    model_config = ConfigDict(frozen=True)

    input: str
    prehashed: bool = True
    marshaling_algorithm: str = "asn1"
    salt_length: str = "hash"
    signature_algorithm: Optional[str] = None
    hash_algorithm: Optional[str] = None

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TransitSignData(BaseModel):
    signature: StrictStr


class TransitSignResponse(BaseModel):
    """Response of a transit sign request."""
    data: TransitSignData
