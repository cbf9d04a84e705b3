"""
Configuration management for the Vault signing adapter.

Handles loading and validation of the Vault connection settings,
either from the process environment or from a YAML/JSON file with
environment variable substitution.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

ADDRESS_ENV = "VAULT_ADDR"
TOKEN_ENV = "VAULT_TOKEN"
KV_MOUNT_ENV = "VAULT_KV_MOUNT"
TRANSIT_MOUNT_ENV = "VAULT_TRANSIT_MOUNT"

DEFAULT_TIMEOUT = 30


class VaultConfig(BaseModel):
    """Connection settings for a Vault server."""

    model_config = ConfigDict(frozen=True)

    address: str
    token: str = Field(repr=False)
    timeout: int = DEFAULT_TIMEOUT
    kv_mount: str = "secret"
    transit_mount: str = "transit"

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        if not v:
            raise ConfigurationError("failed to load vault address")
        return v

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        if not v:
            raise ConfigurationError("failed to load vault token")
        return v

    @field_validator("kv_mount", "transit_mount")
    @classmethod
    def strip_mount(cls, v: str) -> str:
        v = v.strip("/")
        if not v:
            raise ConfigurationError("mount path must not be empty")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "VaultConfig":
        """
        Build configuration from environment variables.

        VAULT_ADDR and VAULT_TOKEN are required; VAULT_KV_MOUNT and
        VAULT_TRANSIT_MOUNT override the default mount paths.

        Raises:
            ConfigurationError: If the address or token is missing or empty
        """
        env = os.environ if environ is None else environ

        settings: Dict[str, Any] = {
            "address": env.get(ADDRESS_ENV, ""),
            "token": env.get(TOKEN_ENV, ""),
        }
        if env.get(KV_MOUNT_ENV):
            settings["kv_mount"] = env[KV_MOUNT_ENV]
        if env.get(TRANSIT_MOUNT_ENV):
            settings["transit_mount"] = env[TRANSIT_MOUNT_ENV]

        return cls(**settings)


def substitute_environment_variables(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively substitute environment variables in configuration.

    Variables in the format ${VAR_NAME} will be replaced with their environment values.
    """
    def substitute_value(value):
        if isinstance(value, str):
            if value.startswith("${") and value.endswith("}"):
                env_var = value[2:-1]
                env_value = os.environ.get(env_var)
                if env_value is None:
                    raise ConfigurationError(f"Environment variable {env_var} not set")
                return env_value
            return value
        elif isinstance(value, dict):
            return {k: substitute_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [substitute_value(item) for item in value]
        else:
            return value

    return substitute_value(config_data)


def load_config(config_path: Union[str, Path]) -> VaultConfig:
    """
    Load configuration from file with environment variable substitution.

    The file may either hold the settings at its top level or under a
    ``vault`` key.

    Args:
        config_path: Path to configuration file (JSON or YAML)

    Returns:
        Validated configuration object

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        ConfigurationError: If configuration is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        try:
            if config_path.suffix.lower() in ['.yaml', '.yml']:
                config_data = yaml.safe_load(f)
            else:
                config_data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Invalid configuration file {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Invalid configuration file {config_path}: expected a mapping")

    if isinstance(config_data.get("vault"), dict):
        config_data = config_data["vault"]

    config_data = substitute_environment_variables(config_data)

    try:
        return VaultConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
