"""Tests for stored accounts."""

import pytest

from fitness_connect.auth import session_identifier
from fitness_connect.database import init_db
from fitness_connect.services.account import AccountService


@pytest.fixture
def service(isolated_config, monkeypatch):
    from cryptography.fernet import Fernet

    monkeypatch.setattr(
        "fitness_connect.config.Config.ENCRYPTION_KEY", Fernet.generate_key().decode()
    )
    init_db()
    return AccountService()


def test_configure_and_get_password(service):
    service.configure("runner@example.com", "secret")

    assert service.is_configured("runner@example.com")
    assert service.get_password("runner@example.com") == "secret"


def test_configure_requires_password(service):
    with pytest.raises(ValueError):
        service.configure("runner@example.com", "")


def test_list_accounts_hides_password(service):
    service.configure("runner@example.com", "secret")

    accounts = service.list_accounts()

    assert accounts[0]["username"] == "runner@example.com"
    assert accounts[0]["identifier"] == session_identifier("runner@example.com")
    assert "password_encrypted" not in accounts[0]


def test_get_password_unknown_account(service):
    assert service.get_password("nobody@example.com") is None


def test_remove_account_clears_cookie_store(service, isolated_config):
    service.configure("runner@example.com", "secret")
    session_dir = isolated_config / "sessions"
    session_dir.mkdir(parents=True, exist_ok=True)
    cookie_file = session_dir / f"{session_identifier('runner@example.com')}.cookies"
    cookie_file.write_text("#LWP-Cookies-2.0\n")

    assert service.remove_account("runner@example.com") is True
    assert not cookie_file.exists()
    assert not service.is_configured("runner@example.com")


def test_get_client_falls_back_to_stored_password(service, monkeypatch):
    captured = {}

    class _Client:
        def __init__(self, username, password):
            captured["args"] = (username, password)

    monkeypatch.setattr("fitness_connect.services.account.GarminConnectClient", _Client)
    service.configure("runner@example.com", "stored")

    service.get_client("runner@example.com")
    assert captured["args"] == ("runner@example.com", "stored")

    service.get_client("runner@example.com", "given")
    assert captured["args"] == ("runner@example.com", "given")
