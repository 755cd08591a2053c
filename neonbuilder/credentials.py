"""Credential storage helpers for the neonbuilder CLI.

Responsibilities:
- Persist the OpenAI API key in an owner-only JSON file or the OS keyring.
- Provide deterministic read/write/delete operations for the stored key.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for provider credential persistence.
- `FileCredentialStore`: JSON file store under the user config directory.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import os
from pathlib import Path
from typing import Any, Mapping

from loguru import logger

from .parsing import normalize_optional_string


_DEFAULT_SERVICE_NAME = "neonbuilder"
_DEFAULT_ACCOUNT_NAME = "openai_api_key"
_CREDENTIALS_FILENAME = "credentials.json"
_API_KEY_FIELD = "openaiApiKey"
_CREDENTIAL_BACKENDS = frozenset({"file", "keyring"})


def default_config_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the credential directory, honoring `NEON_CONFIG_DIR`."""

    env_map: Mapping[str, str] = os.environ if env is None else env
    override = normalize_optional_string(env_map.get("NEON_CONFIG_DIR"))
    if override is not None:
        return Path(override).expanduser()
    return Path.home() / ".config" / "neon-builder"


class CredentialStore:
    """Interface for provider credential operations."""

    def is_available(self) -> bool:
        """Return whether credential operations are available."""

        raise NotImplementedError

    def get_api_key(self) -> str | None:
        """Load the stored API key, when present."""

        raise NotImplementedError

    def set_api_key(self, api_key: str) -> None:
        """Persist an API key."""

        raise NotImplementedError

    def clear_api_key(self) -> bool:
        """Delete a stored API key and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class FileCredentialStore(CredentialStore):
    """Credential store backed by a `0600` JSON file in a config directory."""

    config_dir: Path

    @property
    def path(self) -> Path:
        """Return the credentials file path."""

        return self.config_dir / _CREDENTIALS_FILENAME

    def is_available(self) -> bool:
        """File storage is always available."""

        return True

    def _read(self) -> dict[str, Any]:
        """Read the credential payload; a missing file is an empty payload.

        Raises:
            ValueError: If the file exists but is not a JSON object.
        """

        try:
            raw_text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No stored credentials found at {self.path}.")
            return {}
        try:
            payload = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Credentials file `{self.path}` is not valid JSON.") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"Credentials file `{self.path}` must contain a JSON object.")
        return payload

    def _write(self, payload: Mapping[str, Any]) -> None:
        """Write the credential payload with owner-only permissions."""

        self.config_dir.mkdir(parents=True, exist_ok=True)
        descriptor = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
            json.dump(dict(payload), handle, indent=2)
        os.chmod(self.path, 0o600)

    def get_api_key(self) -> str | None:
        """Get a normalized API key, returning `None` when missing."""

        return normalize_optional_string(self._read().get(_API_KEY_FIELD))

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key, keeping other stored fields."""

        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        payload = self._read()
        payload[_API_KEY_FIELD] = normalized
        self._write(payload)

    def clear_api_key(self) -> bool:
        """Remove the stored API key and report if one was present."""

        payload = self._read()
        if normalize_optional_string(payload.get(_API_KEY_FIELD)) is None:
            return False
        del payload[_API_KEY_FIELD]
        self._write(payload)
        return True


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME
    account_name: str = _DEFAULT_ACCOUNT_NAME

    def _load_keyring_module(self):
        """Import and return the optional `keyring` module when installed."""

        try:
            import keyring  # type: ignore
        except ImportError:
            return None
        return keyring

    def is_available(self) -> bool:
        """Return `True` when `keyring` can be imported in this environment."""

        return self._load_keyring_module() is not None

    def get_api_key(self) -> str | None:
        """Get a normalized API key from keyring, returning `None` when missing."""

        keyring_module = self._load_keyring_module()
        if keyring_module is None:
            return None
        return normalize_optional_string(
            keyring_module.get_password(self.service_name, self.account_name)
        )

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key in keyring or raise when unavailable."""

        keyring_module = self._load_keyring_module()
        if keyring_module is None:
            raise RuntimeError(
                "Secure credential storage is unavailable because `keyring` is not "
                "installed. Install `keyring` or use NEON_CREDENTIAL_BACKEND=file."
            )

        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        keyring_module.set_password(self.service_name, self.account_name, normalized)

    def clear_api_key(self) -> bool:
        """Remove the stored API key from keyring and report if one was present."""

        keyring_module = self._load_keyring_module()
        if keyring_module is None:
            return False

        if self.get_api_key() is None:
            return False

        keyring_module.delete_password(self.service_name, self.account_name)
        return True


def create_credential_store(env: Mapping[str, str] | None = None) -> CredentialStore:
    """Create the credential store selected by `NEON_CREDENTIAL_BACKEND`.

    Raises:
        ValueError: If the backend name is not `file` or `keyring`.
    """

    env_map: Mapping[str, str] = os.environ if env is None else env
    backend = (normalize_optional_string(env_map.get("NEON_CREDENTIAL_BACKEND")) or "file").lower()
    if backend not in _CREDENTIAL_BACKENDS:
        supported = ", ".join(sorted(_CREDENTIAL_BACKENDS))
        raise ValueError(
            f"Unsupported credential backend `{backend}`; supported: {supported}."
        )
    if backend == "keyring":
        return KeyringCredentialStore()
    return FileCredentialStore(config_dir=default_config_dir(env_map))
