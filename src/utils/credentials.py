"""Wallet account loading helpers for the DCA toolkit."""

from __future__ import annotations

import os
import re
from typing import Mapping

import keyring
from keyring.errors import KeyringError

from aleo_client.models import AccountInfo
from dca.validation import validate_aleo_address

DEFAULT_SERVICE_NAME = "zkdca"
DEFAULT_OWNER_ENV = "ZKDCA_OWNER"
DEFAULT_VIEW_KEY_ENV = "ZKDCA_VIEW_KEY"
DEFAULT_PRIVATE_KEY_ENV = "ZKDCA_PRIVATE_KEY"
DEFAULT_OWNER_USERNAME = "owner"
DEFAULT_VIEW_KEY_USERNAME = "view_key"
DEFAULT_PRIVATE_KEY_USERNAME = "private_key"
_ENV_PATTERN = re.compile(r"^\$\{([A-Z0-9_]+)\}$")


def load_wallet_account(
    service_name: str = DEFAULT_SERVICE_NAME,
    config: Mapping[str, object] | None = None,
    *,
    owner_env: str = DEFAULT_OWNER_ENV,
    view_key_env: str = DEFAULT_VIEW_KEY_ENV,
    private_key_env: str = DEFAULT_PRIVATE_KEY_ENV,
) -> AccountInfo:
    """Load the wallet account from config, env vars, or keyring in order.

    Only the owner address is required. Key material never comes from the
    config file; it is read from the environment or the OS keychain.
    """
    owner = _resolve_value(config, "owner")
    if not owner:
        owner = _clean_value(os.getenv(owner_env))
    if not owner:
        owner = _get_keyring_value(service_name, DEFAULT_OWNER_USERNAME)

    if not owner:
        raise ValueError(
            "Wallet owner address is missing. Provide 'owner' in the config, "
            f"set {owner_env}, or store it in the keychain for service "
            f"'{service_name}'."
        )
    if not validate_aleo_address(owner):
        raise ValueError("Wallet owner must be an Aleo address (aleo1..., 63 characters).")

    view_key = _clean_value(os.getenv(view_key_env)) or _get_keyring_value(
        service_name, DEFAULT_VIEW_KEY_USERNAME
    )
    private_key = _clean_value(os.getenv(private_key_env)) or _get_keyring_value(
        service_name, DEFAULT_PRIVATE_KEY_USERNAME
    )
    return AccountInfo(address=owner, view_key=view_key, private_key=private_key)


def store_wallet_account(
    service_name: str,
    owner: str,
    *,
    view_key: str | None = None,
    private_key: str | None = None,
) -> None:
    """Store wallet account material in the OS keychain via keyring."""
    owner_value = _clean_value(owner)
    if not owner_value or not validate_aleo_address(owner_value):
        raise ValueError("owner must be an Aleo address (aleo1..., 63 characters).")
    entries = {DEFAULT_OWNER_USERNAME: owner_value}
    if _clean_value(view_key):
        entries[DEFAULT_VIEW_KEY_USERNAME] = _clean_value(view_key)
    if _clean_value(private_key):
        entries[DEFAULT_PRIVATE_KEY_USERNAME] = _clean_value(private_key)
    try:
        for username, value in entries.items():
            keyring.set_password(service_name, username, value)
    except KeyringError as exc:
        raise RuntimeError(
            "Failed to store wallet account in the OS keychain. "
            "Ensure a keyring backend is available."
        ) from exc


def _resolve_value(config: Mapping[str, object] | None, key: str) -> str | None:
    if not config or key not in config:
        return None
    raw = config.get(key)
    if not isinstance(raw, str):
        return _clean_value(str(raw)) if raw is not None else None
    raw = raw.strip()
    if not raw:
        return None
    match = _ENV_PATTERN.match(raw)
    if match:
        return _clean_value(os.getenv(match.group(1)))
    return _clean_value(raw)


def _clean_value(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def _get_keyring_value(service_name: str, username: str) -> str | None:
    try:
        return _clean_value(keyring.get_password(service_name, username))
    except KeyringError as exc:
        raise RuntimeError(
            "Failed to access the OS keychain. "
            "Ensure a keyring backend is available."
        ) from exc
