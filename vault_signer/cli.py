#!/usr/bin/env python3
"""
Vault Signer command line.

Manual access to the remote signing operations: inspect a key's
certificate chain, sign a prehashed digest, or sign a file.
"""

import asyncio
import base64
import json
import logging
import sys
from typing import Optional

import click
from cryptography.hazmat.primitives import serialization

from .config import VaultConfig, load_config
from .crypto import KeySpec, certificate_fingerprint
from .errors import VaultSignerError
from .providers import VaultProvider

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _load_vault_config(ctx: click.Context) -> VaultConfig:
    config_path = ctx.obj.get("config_path")
    if config_path:
        return load_config(config_path)
    return VaultConfig.from_env()


def _run(coro):
    """Run a command coroutine, reporting failures on stderr."""
    try:
        return asyncio.run(coro)
    except (VaultSignerError, ValueError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to configuration file (defaults to VAULT_ADDR/VAULT_TOKEN)"
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level"
)
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], log_level: str):
    """Sign with keys held in HashiCorp Vault."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command()
@click.argument("key_id")
@click.option(
    "--format",
    "output_format",
    default="pem",
    type=click.Choice(["pem", "json"]),
    help="Output format"
)
@click.pass_context
def chain(ctx: click.Context, key_id: str, output_format: str):
    """Print the certificate chain stored for KEY_ID."""

    async def _chain():
        provider = VaultProvider.from_key_id(key_id, _load_vault_config(ctx))
        async with provider:
            return await provider.key_client.get_certificate_chain()

    certs = _run(_chain())

    if output_format == "pem":
        for cert in certs:
            click.echo(cert.public_bytes(serialization.Encoding.PEM).decode(), nl=False)
        return

    click.echo(json.dumps([
        {
            "subject": cert.subject.rfc4514_string(),
            "issuer": cert.issuer.rfc4514_string(),
            "serial_number": format(cert.serial_number, "x"),
            "not_after": cert.not_valid_after_utc.isoformat(),
            "fingerprint": certificate_fingerprint(cert)
        }
        for cert in certs
    ], indent=2))


@main.command()
@click.argument("key_id")
@click.pass_context
def describe(ctx: click.Context, key_id: str):
    """Describe the signing key KEY_ID."""

    async def _describe():
        provider = VaultProvider.from_key_id(key_id, _load_vault_config(ctx))
        async with provider:
            return await provider.describe_key()

    click.echo(json.dumps(_run(_describe()).to_dict(), indent=2))


@main.command()
@click.argument("key_id")
@click.option("--digest", required=True, help="Base64-encoded prehashed digest")
@click.option("--algorithm", default=None, help="Transit signature algorithm (e.g. pss)")
@click.option("--hash-algorithm", default=None, help="Transit hash algorithm (e.g. sha2-256)")
@click.pass_context
def sign(
    ctx: click.Context,
    key_id: str,
    digest: str,
    algorithm: Optional[str],
    hash_algorithm: Optional[str]
):
    """Sign a prehashed digest with transit key KEY_ID."""

    async def _sign():
        provider = VaultProvider.from_key_id(key_id, _load_vault_config(ctx))
        async with provider:
            return await provider.key_client.sign_with_transit(digest, algorithm, hash_algorithm)

    click.echo(base64.b64encode(_run(_sign())).decode())


@main.command("sign-file")
@click.argument("key_id")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--key-spec",
    default=None,
    type=click.Choice([spec.value for spec in KeySpec]),
    help="Expected key spec"
)
@click.option(
    "--output",
    "-o",
    default=None,
    type=click.Path(dir_okay=False, writable=True),
    help="Write the raw signature to this file"
)
@click.pass_context
def sign_file(
    ctx: click.Context,
    key_id: str,
    path: str,
    key_spec: Optional[str],
    output: Optional[str]
):
    """Create a detached signature for PATH with key KEY_ID."""

    async def _sign_file():
        provider = VaultProvider.from_key_id(key_id, _load_vault_config(ctx))
        async with provider:
            return await provider.sign_file(path, KeySpec(key_spec) if key_spec else None)

    result = _run(_sign_file())

    if output:
        with open(output, "wb") as f:
            f.write(result.signature)
        click.echo(f"Signature written to {output} ({result.signing_algorithm})")
        return

    click.echo(json.dumps(result.to_dict(), indent=2))


if __name__ == "__main__":
    main()
