"""Tests for VaultClient - HashiCorp Vault secrets management."""

from unittest.mock import MagicMock, patch

import pytest
from hvac.exceptions import Forbidden, InvalidPath

import clients.vault_client as vault_module
from clients.vault_client import VaultClient, get_signing_secret


@pytest.fixture
def vault_env(monkeypatch):
    monkeypatch.setenv("VAULT_ADDR", "http://vault.test:8200")
    monkeypatch.setenv("VAULT_ROLE_ID", "role")
    monkeypatch.setenv("VAULT_SECRET_ID", "secret")
    monkeypatch.delenv("VAULT_NAMESPACE", raising=False)
    monkeypatch.setattr(vault_module, "_vault_client_instance", None)
    monkeypatch.setattr(vault_module, "_secret_cache", {})


@pytest.fixture
def mock_hvac(vault_env):
    with patch("clients.vault_client.hvac.Client") as client_class:
        hvac_client = client_class.return_value
        hvac_client.auth.approle.login.return_value = {"auth": {"client_token": "tok"}}
        hvac_client.is_authenticated.return_value = True
        yield hvac_client


def kv_response(data: dict) -> dict:
    return {"data": {"data": data}}


class TestVaultClientInit:
    """Initialization and authentication."""

    def test_missing_vault_addr_raises(self, vault_env, monkeypatch):
        monkeypatch.delenv("VAULT_ADDR")
        with pytest.raises(ValueError, match="VAULT_ADDR"):
            VaultClient()

    def test_missing_approle_credentials_raises(self, vault_env, monkeypatch):
        monkeypatch.delenv("VAULT_ROLE_ID")
        with pytest.raises(ValueError, match="VAULT_ROLE_ID"):
            VaultClient()

    def test_login_failure_is_permission_error(self, mock_hvac):
        mock_hvac.auth.approle.login.side_effect = Forbidden("denied")
        with pytest.raises(PermissionError, match="authentication"):
            VaultClient()

    def test_authenticates(self, mock_hvac):
        client = VaultClient()
        assert client.client.token == "tok"


class TestGetSecret:
    """Secret retrieval - paths scoped to auth/."""

    def test_reads_scoped_path(self, mock_hvac):
        mock_hvac.secrets.kv.v2.read_secret_version.return_value = kv_response({"url": "pg://"})

        assert VaultClient().get_secret("database", "url") == "pg://"
        kwargs = mock_hvac.secrets.kv.v2.read_secret_version.call_args.kwargs
        assert kwargs["path"] == "auth/database"

    def test_missing_field_raises_key_error(self, mock_hvac):
        mock_hvac.secrets.kv.v2.read_secret_version.return_value = kv_response({"other": "x"})
        with pytest.raises(KeyError, match="signing_secret"):
            VaultClient().get_secret("jwt", "signing_secret")

    def test_missing_path_raises_permission_error(self, mock_hvac):
        mock_hvac.secrets.kv.v2.read_secret_version.side_effect = InvalidPath("nope")
        with pytest.raises(PermissionError, match="not found"):
            VaultClient().get_secret("jwt", "signing_secret")


class TestGetSigningSecret:
    def test_cached_after_first_read(self, mock_hvac):
        mock_hvac.secrets.kv.v2.read_secret_version.return_value = kv_response(
            {"signing_secret": "k" * 40}
        )

        assert get_signing_secret() == "k" * 40
        assert get_signing_secret() == "k" * 40
        assert mock_hvac.secrets.kv.v2.read_secret_version.call_count == 1
