"""Tests for Sheets API credential selection."""

import json
from unittest.mock import MagicMock

import pytest

import google_client


class TestGetCredentials:
    def test_service_account_key_is_used_directly(self, tmp_path, monkeypatch):
        key = tmp_path / "sa.json"
        key.write_text(json.dumps({"type": "service_account"}), encoding="utf-8")
        monkeypatch.setenv("GOOGLE_CREDENTIALS_JSON", str(key))
        loader = MagicMock(return_value="sa-creds")
        monkeypatch.setattr(
            google_client.service_account.Credentials, "from_service_account_file", loader,
        )

        assert google_client.get_credentials() == "sa-creds"
        loader.assert_called_once_with(str(key), scopes=google_client.SCOPES)

    def test_valid_cached_token(self, tmp_path, monkeypatch):
        token = tmp_path / "token.json"
        token.write_text("{}", encoding="utf-8")
        monkeypatch.delenv("GOOGLE_CREDENTIALS_JSON", raising=False)
        monkeypatch.setenv("GOOGLE_TOKEN_FILE", str(token))
        cached = MagicMock(valid=True)
        monkeypatch.setattr(
            google_client.Credentials, "from_authorized_user_file", MagicMock(return_value=cached),
        )

        assert google_client.get_credentials() is cached

    def test_missing_configuration(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GOOGLE_CREDENTIALS_JSON", raising=False)
        monkeypatch.setenv("GOOGLE_TOKEN_FILE", str(tmp_path / "absent.json"))
        with pytest.raises(RuntimeError):
            google_client.get_credentials()
