"""Tests for auth/config.py - Auth configuration with validation."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from auth.config import AuthConfig, load_auth_config
from auth.exceptions import ConfigurationError

SECRET = "s" * 40


class TestAuthConfigDefaults:
    """Tests that AuthConfig has sensible defaults."""

    def test_access_token_ttl_default(self):
        config = AuthConfig(signing_secret=SECRET)
        assert config.access_token_ttl == "30m"
        assert config.access_token_lifetime == timedelta(minutes=30)

    def test_hashing_defaults(self):
        config = AuthConfig(signing_secret=SECRET)
        assert config.hash_key_length == 512
        assert config.salt_bytes == 16
        assert config.hash_iterations == 210_000

    def test_refresh_token_default(self):
        config = AuthConfig(signing_secret=SECRET)
        assert config.refresh_token_bytes == 64

    def test_secret_hidden_in_repr(self):
        config = AuthConfig(signing_secret=SECRET)
        assert SECRET not in repr(config)


class TestAuthConfigValidation:
    """Tests that AuthConfig enforces validation bounds."""

    def test_secret_required(self):
        with pytest.raises(ValidationError):
            AuthConfig()

    def test_blank_secret_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(signing_secret=" " * 40)

    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(signing_secret="secret")

    def test_bad_ttl_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(signing_secret=SECRET, access_token_ttl="soon")

    def test_non_hmac_algorithm_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(signing_secret=SECRET, jwt_algorithm="none")

    def test_small_salt_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(signing_secret=SECRET, salt_bytes=8)  # < 16


class TestLoadAuthConfig:
    """Startup loading fails fast."""

    def test_explicit_secret(self, monkeypatch):
        monkeypatch.delenv("AUTH_ACCESS_TOKEN_TTL", raising=False)
        config = load_auth_config(signing_secret=SECRET)
        assert config.signing_secret.get_secret_value() == SECRET

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("AUTH_ACCESS_TOKEN_TTL", "2h")
        monkeypatch.setenv("AUTH_HASH_ITERATIONS", "5000")

        config = load_auth_config(signing_secret=SECRET)

        assert config.access_token_lifetime == timedelta(hours=2)
        assert config.hash_iterations == 5000

    def test_secret_from_vault(self):
        with patch("clients.vault_client.get_signing_secret", return_value=SECRET):
            config = load_auth_config()
        assert config.signing_secret.get_secret_value() == SECRET

    def test_vault_missing_secret_is_configuration_error(self):
        with patch(
            "clients.vault_client.get_signing_secret",
            side_effect=KeyError("signing_secret"),
        ):
            with pytest.raises(ConfigurationError, match="Signing secret"):
                load_auth_config()

    def test_vault_unconfigured_is_configuration_error(self, monkeypatch):
        monkeypatch.delenv("VAULT_ADDR", raising=False)
        import clients.vault_client as vault_module
        monkeypatch.setattr(vault_module, "_vault_client_instance", None)
        monkeypatch.setattr(vault_module, "_secret_cache", {})

        with pytest.raises(ConfigurationError):
            load_auth_config()

    def test_invalid_env_is_configuration_error(self, monkeypatch):
        monkeypatch.setenv("AUTH_ACCESS_TOKEN_TTL", "-5m")
        with pytest.raises(ConfigurationError):
            load_auth_config(signing_secret=SECRET)
