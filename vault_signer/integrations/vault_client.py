"""
Vault Client

Handles HTTP communication with a HashiCorp Vault server: KV version 2
secret reads and transit engine signing requests.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp
from yarl import URL

from ..config import DEFAULT_TIMEOUT
from ..errors import ConfigurationError, ParseError, TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "vault-signer/0.1.0"


class VaultClient:
    """Client for the Vault HTTP API authenticated with a token."""

    def __init__(self, address: str, token: str, timeout: int = DEFAULT_TIMEOUT):
        """
        Prepare a client for the given base address.

        No connection is opened here; the HTTP session is created on the
        first request.

        Raises:
            ConfigurationError: If the address is not an absolute http(s) URL
        """
        url = URL(address)
        if not url.is_absolute() or url.scheme not in ("http", "https"):
            raise ConfigurationError(f"Invalid vault address: {address!r}")

        self.address = str(url).rstrip("/")
        self._token = token
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def initialize(self):
        """Initialize the HTTP client session."""
        if self.session:
            return

        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "X-Vault-Token": self._token
        }

        self.session = aiohttp.ClientSession(
            headers=headers,
            timeout=self.timeout
        )

    async def close(self):
        """Close the HTTP client session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def __aenter__(self) -> "VaultClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def kv_v2_read(self, mount: str, path: str) -> Dict[str, Any]:
        """
        Read the latest version of a KV version 2 secret.

        Args:
            mount: KV engine mount path
            path: Secret path within the mount

        Returns:
            Decoded JSON response body
        """
        return await self._request("GET", mount, "data", path)

    async def transit_sign(self, mount: str, name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sign input with a named transit key.

        Args:
            mount: Transit engine mount path
            name: Transit key name
            body: Sign request parameters

        Returns:
            Decoded JSON response body
        """
        return await self._request("POST", mount, "sign", name, body=body)

    def _url(self, *segments: str) -> URL:
        """Build an API URL, percent-encoding every path segment."""
        parts = [
            quote(part, safe="")
            for segment in segments
            for part in segment.strip("/").split("/")
        ]
        return URL(f"{self.address}/v1/{'/'.join(parts)}", encoded=True)

    async def _request(
        self,
        method: str,
        *segments: str,
        body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        if not self.session:
            await self.initialize()

        url = self._url(*segments)
        path = url.raw_path
        logger.debug(f"Vault request: {method} {url}")

        try:
            async with self.session.request(method, url, json=body) as response:
                raw = await response.read()

                if response.status >= 400:
                    errors = _extract_errors(raw)
                    detail = "; ".join(errors) or response.reason or f"HTTP {response.status}"
                    raise TransportError(
                        f"Vault {method} {path} failed with status {response.status}: {detail}",
                        status=response.status,
                        errors=errors
                    )

        except aiohttp.ClientError as e:
            raise TransportError(f"Vault {method} {path} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"Vault {method} {path} timed out") from e

        if not raw:
            return {}

        try:
            result = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise ParseError(f"Vault returned a body that is not UTF-8 for {method} {path}") from e
        except json.JSONDecodeError as e:
            raise ParseError(f"Vault returned invalid JSON for {method} {path}") from e

        if not isinstance(result, dict):
            raise ParseError(f"Vault returned a non-object body for {method} {path}")

        return result


def _extract_errors(raw: bytes) -> List[str]:
    """Pull the ``errors`` list out of a Vault error body, if any."""
    try:
        payload = json.loads(raw.decode("utf-8", errors="replace"))
    except json.JSONDecodeError:
        return []

    if not isinstance(payload, dict):
        return []

    errors = payload.get("errors") or []
    if not isinstance(errors, list):
        return []
    return [str(e) for e in errors if e]
