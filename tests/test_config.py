"""Tests for configuration loading."""

import json

import pytest
from pydantic import ValidationError

from vault_signer import ConfigurationError, VaultConfig, load_config


class TestVaultConfig:
    """Test the connection settings model."""

    def test_from_env(self):
        config = VaultConfig.from_env({
            "VAULT_ADDR": "https://vault.example.com:8200",
            "VAULT_TOKEN": "s.token",
        })

        assert config.address == "https://vault.example.com:8200"
        assert config.token == "s.token"
        assert config.timeout == 30
        assert config.kv_mount == "secret"
        assert config.transit_mount == "transit"

    def test_from_env_mount_overrides(self):
        config = VaultConfig.from_env({
            "VAULT_ADDR": "https://vault.example.com:8200",
            "VAULT_TOKEN": "s.token",
            "VAULT_KV_MOUNT": "signing-kv",
            "VAULT_TRANSIT_MOUNT": "signing-transit/",
        })

        assert config.kv_mount == "signing-kv"
        assert config.transit_mount == "signing-transit"

    @pytest.mark.parametrize("environ,message", [
        ({}, "vault address"),
        ({"VAULT_TOKEN": "s.token"}, "vault address"),
        ({"VAULT_ADDR": "", "VAULT_TOKEN": "s.token"}, "vault address"),
        ({"VAULT_ADDR": "https://vault.example.com"}, "vault token"),
        ({"VAULT_ADDR": "https://vault.example.com", "VAULT_TOKEN": ""}, "vault token"),
    ])
    def test_missing_values(self, environ, message):
        with pytest.raises(ConfigurationError, match=message):
            VaultConfig.from_env(environ)

    def test_empty_mount(self):
        with pytest.raises(ConfigurationError, match="mount"):
            VaultConfig(address="https://vault.example.com", token="s.token", kv_mount="/")

    def test_immutable(self):
        config = VaultConfig(address="https://vault.example.com", token="s.token")

        with pytest.raises(ValidationError):
            config.address = "https://other.example.com"

    def test_token_not_in_repr(self):
        config = VaultConfig(address="https://vault.example.com", token="s.secret-token")

        assert "s.secret-token" not in repr(config)


class TestLoadConfig:
    """Test loading configuration files."""

    def test_yaml_with_environment_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SIGNER_VAULT_TOKEN", "s.from-env")
        path = tmp_path / "config.yaml"
        path.write_text(
            "vault:\n"
            "  address: https://vault.example.com:8200\n"
            "  token: ${SIGNER_VAULT_TOKEN}\n"
            "  transit_mount: signing\n"
        )

        config = load_config(path)

        assert config.token == "s.from-env"
        assert config.transit_mount == "signing"

    def test_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "address": "http://127.0.0.1:8200",
            "token": "s.token",
            "timeout": 10,
        }))

        config = load_config(str(path))

        assert config.address == "http://127.0.0.1:8200"
        assert config.timeout == 10

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_unset_environment_variable(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SIGNER_UNSET_TOKEN", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("address: https://vault.example.com\ntoken: ${SIGNER_UNSET_TOKEN}\n")

        with pytest.raises(ConfigurationError, match="SIGNER_UNSET_TOKEN"):
            load_config(path)

    def test_missing_required_field(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("token: s.token\n")

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(path)

    def test_empty_token(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("address: https://vault.example.com\ntoken: ''\n")

        with pytest.raises(ConfigurationError, match="vault token"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- address\n- token\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            load_config(path)
