"""Pytest configuration and fixtures."""

import base64
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from vault_signer import VaultConfig, VaultKeyClient

TOKEN = "test-token"
KEY_ID = "release-key"


class FakeVault:
    """In-process stand-in for the Vault KV v2 and transit endpoints."""

    def __init__(self):
        # secret path -> KV document
        self.secrets: Dict[str, Any] = {}
        # transit key -> response ``data`` dict, or callable(body) -> dict
        self.sign_responses: Dict[str, Union[Dict[str, Any], Callable]] = {}
        self.requests: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []
        # undecoded request paths, as sent on the wire
        self.raw_paths: List[str] = []
        # (status, body, content type) served instead of the normal response
        self.raw_response: Optional[Tuple[int, bytes, str]] = None

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/v1/{mount}/data/{path:.+}", self.handle_read)
        app.router.add_post("/v1/{mount}/sign/{name:.+}", self.handle_sign)
        return app

    def _override(self, request: web.Request) -> Optional[web.Response]:
        self.raw_paths.append(request.raw_path)
        if self.raw_response is None:
            return None
        status, body, content_type = self.raw_response
        return web.Response(status=status, body=body, content_type=content_type)

    def _denied(self, request: web.Request) -> Optional[web.Response]:
        if request.headers.get("X-Vault-Token") != TOKEN:
            return web.json_response({"errors": ["permission denied"]}, status=403)
        return None

    async def handle_read(self, request: web.Request) -> web.Response:
        self.requests.append(("GET", request.path, None))
        override = self._override(request)
        if override is not None:
            return override
        denied = self._denied(request)
        if denied:
            return denied

        path = request.match_info["path"]
        if path not in self.secrets:
            return web.json_response({"errors": []}, status=404)

        return web.json_response({
            "data": {"data": self.secrets[path], "metadata": {"version": 1}}
        })

    async def handle_sign(self, request: web.Request) -> web.Response:
        override = self._override(request)
        if override is not None:
            self.requests.append(("POST", request.path, None))
            return override

        body = await request.json()
        self.requests.append(("POST", request.path, body))
        denied = self._denied(request)
        if denied:
            return denied

        name = request.match_info["name"]
        response = self.sign_responses.get(name)
        if response is None:
            return web.json_response({"errors": [f"signing key {name} not found"]}, status=400)

        if callable(response):
            response = response(body)
        return web.json_response({"data": response})


def make_certificate(
    common_name: str,
    key=None,
    issuer: Optional[Tuple[x509.Certificate, Any]] = None
) -> Tuple[x509.Certificate, Any]:
    """Build a certificate, self-signed unless an issuer (cert, key) is given."""
    key = key or ec.generate_private_key(ec.SECP256R1())
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    issuer_name, issuer_key = (issuer[0].subject, issuer[1]) if issuer else (subject, key)
    now = datetime.now(timezone.utc)

    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer_name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(issuer_key, hashes.SHA256())
    )
    return cert, key


def transit_signature(signature: bytes, version: int = 1) -> str:
    """Format bytes the way Vault's transit engine does."""
    return f"vault:v{version}:{base64.b64encode(signature).decode()}"


@pytest.fixture
def cert_factory():
    """Certificate builder."""
    return make_certificate


@pytest.fixture
def fake_vault():
    return FakeVault()


@pytest_asyncio.fixture
async def vault_server(fake_vault):
    """Serve the fake Vault on a local port."""
    server = TestServer(fake_vault.app())
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
def vault_config(vault_server):
    return VaultConfig(address=str(vault_server.make_url("/")), token=TOKEN)


@pytest_asyncio.fixture
async def key_client(vault_config):
    client = VaultKeyClient.from_key_id(KEY_ID, vault_config)
    yield client
    await client.close()
