"""Unit tests for file and keyring credential stores."""

from __future__ import annotations

import json
import os
from pathlib import Path
import stat

import pytest
from loguru import logger

from neonbuilder.credentials import (
    FileCredentialStore,
    KeyringCredentialStore,
    create_credential_store,
    default_config_dir,
)


class FakeKeyringModule:
    """In-memory keyring stub for deterministic credential store tests."""

    def __init__(self) -> None:
        """Initialize fake storage dictionary."""

        self._storage: dict[tuple[str, str], str] = {}

    def get_password(self, service_name: str, account_name: str) -> str | None:
        """Return previously stored password if present."""

        return self._storage.get((service_name, account_name))

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        """Store password value for the service/account key."""

        self._storage[(service_name, account_name)] = value

    def delete_password(self, service_name: str, account_name: str) -> None:
        """Delete password value for the service/account key."""

        self._storage.pop((service_name, account_name), None)


def test_file_store_roundtrip_set_get_clear(tmp_path: Path) -> None:
    """File store should persist, read, and clear the key under `openaiApiKey`."""

    store = FileCredentialStore(config_dir=tmp_path / "cfg")

    assert store.get_api_key() is None
    store.set_api_key("  sk-test-123  ")

    assert store.get_api_key() == "sk-test-123"
    assert json.loads(store.path.read_text(encoding="utf-8")) == {"openaiApiKey": "sk-test-123"}
    assert store.clear_api_key() is True
    assert store.get_api_key() is None
    assert store.clear_api_key() is False


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_file_store_writes_owner_only_permissions(tmp_path: Path) -> None:
    """Credentials file should be readable and writable only by its owner."""

    store = FileCredentialStore(config_dir=tmp_path)
    store.set_api_key("sk-secret")

    assert stat.S_IMODE(store.path.stat().st_mode) == 0o600


def test_file_store_rejects_malformed_json(tmp_path: Path) -> None:
    """A corrupt credentials file should raise rather than read as empty."""

    (tmp_path / "credentials.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="not valid JSON"):
        FileCredentialStore(config_dir=tmp_path).get_api_key()


def test_file_store_rejects_blank_key(tmp_path: Path) -> None:
    """Blank keys should not be persisted."""

    with pytest.raises(ValueError):
        FileCredentialStore(config_dir=tmp_path).set_api_key("   ")


def test_keyring_store_roundtrip_set_get_clear(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keyring store should set/get/clear API key values via keyring backend."""

    fake_keyring = FakeKeyringModule()
    monkeypatch.setattr(
        KeyringCredentialStore, "_load_keyring_module", lambda self: fake_keyring
    )
    store = KeyringCredentialStore()

    assert store.is_available() is True
    assert store.get_api_key() is None

    store.set_api_key("  abc123  ")
    assert store.get_api_key() == "abc123"

    assert store.clear_api_key() is True
    assert store.get_api_key() is None
    assert store.clear_api_key() is False


def test_keyring_store_handles_missing_keyring_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keyring store should report unavailability when keyring cannot be imported."""

    monkeypatch.setattr(KeyringCredentialStore, "_load_keyring_module", lambda self: None)
    store = KeyringCredentialStore()

    assert store.is_available() is False
    assert store.get_api_key() is None
    assert store.clear_api_key() is False
    with pytest.raises(RuntimeError, match="keyring"):
        store.set_api_key("sk-x")


def test_create_credential_store_selects_backend(tmp_path: Path) -> None:
    """Backend selection should follow NEON_CREDENTIAL_BACKEND and NEON_CONFIG_DIR."""

    file_store = create_credential_store({"NEON_CONFIG_DIR": str(tmp_path)})
    assert isinstance(file_store, FileCredentialStore)
    assert file_store.path == tmp_path / "credentials.json"

    keyring_store = create_credential_store({"NEON_CREDENTIAL_BACKEND": "keyring"})
    assert isinstance(keyring_store, KeyringCredentialStore)

    with pytest.raises(ValueError, match="Unsupported credential backend"):
        create_credential_store({"NEON_CREDENTIAL_BACKEND": "vault"})


def test_default_config_dir_falls_back_to_home() -> None:
    """Without an override the directory lives under ~/.config/neon-builder."""

    assert default_config_dir({}) == Path.home() / ".config" / "neon-builder"


def test_file_store_first_write_does_not_warn(tmp_path: Path) -> None:
    """A missing credentials file is an empty store, not a warning."""

    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="WARNING")
    try:
        store = FileCredentialStore(config_dir=tmp_path / "cfg")
        assert store.clear_api_key() is False
        store.set_api_key("sk-first")
    finally:
        logger.remove(handler_id)

    assert store.get_api_key() == "sk-first"
    assert messages == []
