"""Secure credential storage helpers for the Boka CLI.

Responsibilities:
- Persist provider API keys in an OS-backed secure credential store.
- Keep one stored key per provider preset.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for provider credential persistence.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass

from .parsing import normalize_optional_string

_DEFAULT_SERVICE_NAME = "boka"


def account_name_for(preset: str) -> str:
    """Return the keyring account name used for a provider preset."""

    return f"{preset.strip().lower()}_api_key"


class CredentialStore:
    """Interface for secure provider credential operations."""

    def is_available(self) -> bool:
        raise NotImplementedError

    def get_api_key(self, preset: str) -> str | None:
        raise NotImplementedError

    def set_api_key(self, preset: str, api_key: str) -> None:
        raise NotImplementedError

    def clear_api_key(self, preset: str) -> bool:
        """Delete a stored API key and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME

    def _load_keyring_module(self):
        """Import and return the `keyring` module, or `None` when it cannot be imported."""

        try:
            import keyring  # type: ignore
        except ImportError:
            return None
        return keyring

    def is_available(self) -> bool:
        return self._load_keyring_module() is not None

    def get_api_key(self, preset: str) -> str | None:
        """Get a normalized API key for `preset`, returning `None` when missing."""

        keyring_module = self._load_keyring_module()
        if keyring_module is None:
            return None
        value = keyring_module.get_password(self.service_name, account_name_for(preset))
        return normalize_optional_string(value)

    def set_api_key(self, preset: str, api_key: str) -> None:
        """Persist a normalized API key for `preset` or raise when keyring is unavailable."""

        keyring_module = self._load_keyring_module()
        if keyring_module is None:
            raise RuntimeError(
                "Secure credential storage is unavailable because `keyring` is not "
                "installed. Install `keyring` to persist API keys securely."
            )

        normalized = normalize_optional_string(api_key)
        if normalized is None:
            raise ValueError("API key must be a non-empty string.")
        keyring_module.set_password(self.service_name, account_name_for(preset), normalized)

    def clear_api_key(self, preset: str) -> bool:
        keyring_module = self._load_keyring_module()
        if keyring_module is None:
            return False

        if self.get_api_key(preset) is None:
            return False

        keyring_module.delete_password(self.service_name, account_name_for(preset))
        return True


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
