import pytest

import utils.credentials as credentials

OWNER = "aleo1" + "q" * 58
OTHER_OWNER = "aleo1" + "z" * 58


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for name in (
        credentials.DEFAULT_OWNER_ENV,
        credentials.DEFAULT_VIEW_KEY_ENV,
        credentials.DEFAULT_PRIVATE_KEY_ENV,
    ):
        monkeypatch.delenv(name, raising=False)


def test_load_account_prefers_config_owner(monkeypatch):
    monkeypatch.setenv(credentials.DEFAULT_OWNER_ENV, OTHER_OWNER)
    monkeypatch.setattr(
        credentials.keyring, "get_password", lambda service, username: None
    )

    account = credentials.load_wallet_account(
        credentials.DEFAULT_SERVICE_NAME, {"owner": OWNER}
    )

    assert account.address == OWNER


def test_load_account_uses_env_when_config_missing(monkeypatch):
    monkeypatch.setenv(credentials.DEFAULT_OWNER_ENV, OWNER)
    monkeypatch.setenv(credentials.DEFAULT_VIEW_KEY_ENV, "AViewKey1env")
    monkeypatch.setattr(
        credentials.keyring,
        "get_password",
        lambda service, username: f"ring-{username}",
    )

    account = credentials.load_wallet_account(credentials.DEFAULT_SERVICE_NAME, {})

    assert account.address == OWNER
    assert account.view_key == "AViewKey1env"
    assert account.private_key == "ring-private_key"


def test_load_account_uses_keyring_when_env_missing(monkeypatch):
    values = {"owner": OWNER, "view_key": "AViewKey1ring"}
    monkeypatch.setattr(
        credentials.keyring,
        "get_password",
        lambda service, username: values.get(username),
    )

    account = credentials.load_wallet_account(credentials.DEFAULT_SERVICE_NAME, {})

    assert account.address == OWNER
    assert account.view_key == "AViewKey1ring"
    assert account.private_key is None
    assert account.redacted()["view_key"] == "[REDACTED]"


def test_load_account_resolves_env_placeholders(monkeypatch):
    monkeypatch.setenv("CUSTOM_OWNER", OWNER)
    monkeypatch.setattr(
        credentials.keyring, "get_password", lambda service, username: None
    )

    account = credentials.load_wallet_account(
        credentials.DEFAULT_SERVICE_NAME, {"owner": "${CUSTOM_OWNER}"}
    )

    assert account.address == OWNER


def test_missing_owner_raises(monkeypatch):
    monkeypatch.setattr(
        credentials.keyring, "get_password", lambda service, username: None
    )

    with pytest.raises(ValueError, match="owner address is missing"):
        credentials.load_wallet_account(credentials.DEFAULT_SERVICE_NAME, {})


def test_invalid_owner_raises(monkeypatch):
    monkeypatch.setattr(
        credentials.keyring, "get_password", lambda service, username: None
    )

    with pytest.raises(ValueError, match="Aleo address"):
        credentials.load_wallet_account(
            credentials.DEFAULT_SERVICE_NAME, {"owner": "0x1234"}
        )


def test_keyring_errors_become_runtime_errors(monkeypatch):
    def broken(service, username):
        raise credentials.KeyringError("locked")

    monkeypatch.setattr(credentials.keyring, "get_password", broken)

    with pytest.raises(RuntimeError, match="keychain"):
        credentials.load_wallet_account(credentials.DEFAULT_SERVICE_NAME, {})


def test_store_account_writes_each_entry(monkeypatch):
    stored = {}
    monkeypatch.setattr(
        credentials.keyring,
        "set_password",
        lambda service, username, value: stored.update({(service, username): value}),
    )

    credentials.store_wallet_account("zkdca-test", OWNER, view_key=" AViewKey1x ")

    assert stored == {
        ("zkdca-test", "owner"): OWNER,
        ("zkdca-test", "view_key"): "AViewKey1x",
    }
