from __future__ import annotations

import json

import pytest

import cli.main as cli_main
import utils.credentials as credentials
from aleo_client.ans import AnsClient
from aleo_client.async_rest import AsyncRestClient
from engine.state import PositionBook
from fakes import FakeResponse, FakeSession

OWNER = "aleo1" + "q" * 58


@pytest.fixture(autouse=True)
def no_keyring(monkeypatch):
    monkeypatch.setattr(
        credentials.keyring, "get_password", lambda service, username: None
    )
    monkeypatch.delenv(credentials.DEFAULT_OWNER_ENV, raising=False)


def write_config(tmp_path, **overrides):
    config = {"owner": OWNER, "network": "testnet", "log_level": "WARNING"}
    config.update(overrides)
    path = tmp_path / "zkdca.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def record_plaintext(executions_remaining: int) -> str:
    return (
        f"{{ owner: {OWNER}.private, input_token_id: 1u64.private, "
        "input_amount: 100u64.private, output_token_id: 2u64.private, "
        f"interval: 10u32.private, executions_remaining: {executions_remaining}u32.private, "
        "min_output_amount: 90u64.private, next_execution: 1010u32.private }"
    )


def test_validate_address_command(capsys):
    assert cli_main.main(["validate-address", OWNER]) == 0
    assert json.loads(capsys.readouterr().out)["valid"] is True

    assert cli_main.main(["validate-address", OWNER, "--chain", "evm"]) == 1


def test_create_command_persists_pending_position(tmp_path, capsys):
    config_path = write_config(tmp_path)

    exit_code = cli_main.main(
        [
            "create",
            "--config",
            str(config_path),
            "--amount",
            "100",
            "--interval",
            "10",
            "--executions",
            "5",
            "--min-output",
            "90",
            "--height",
            "1000",
        ]
    )

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["success"] is True
    assert output["request"]["transitions"][0]["inputs"][-1] == "1000u32"
    book = PositionBook.load(tmp_path / "positions.json")
    assert book.positions[0].next_execution_height == 1010


def test_create_command_rejects_zero_amount(tmp_path):
    config_path = write_config(tmp_path)

    exit_code = cli_main.main(
        [
            "create",
            "--config",
            str(config_path),
            "--amount",
            "0",
            "--interval",
            "10",
            "--executions",
            "5",
            "--min-output",
            "90",
            "--height",
            "1000",
        ]
    )

    assert exit_code == 2
    assert not (tmp_path / "positions.json").exists()


def test_reconcile_and_positions_commands(tmp_path, capsys):
    config_path = write_config(tmp_path)
    records_path = tmp_path / "records.json"
    records_path.write_text(
        json.dumps(
            [
                {"plaintext": record_plaintext(3), "spent": False, "recordName": "DCAPosition"},
                {"plaintext": record_plaintext(2), "spent": True, "recordName": "DCAPosition"},
            ]
        ),
        encoding="utf-8",
    )

    assert (
        cli_main.main(
            ["reconcile", "--config", str(config_path), "--records", str(records_path)]
        )
        == 0
    )
    reconciled = json.loads(capsys.readouterr().out)
    assert len(reconciled["positions"]) == 1
    assert reconciled["positions"][0]["executions_remaining"] == 3

    assert cli_main.main(["positions", "--config", str(config_path)]) == 0
    listed = json.loads(capsys.readouterr().out)
    assert listed["positions"][0]["state"] == "active"
    assert "Aleo Credits (ALEO)" in listed["positions"][0]["swap"]


def test_invalid_config_returns_error_code(tmp_path):
    config_path = write_config(tmp_path, network="devnet")

    assert cli_main.main(["positions", "--config", str(config_path)]) == 2


def test_missing_config_returns_error_code(tmp_path):
    assert cli_main.main(["positions", "--config", str(tmp_path / "nope.json")]) == 2


def test_bridge_status_command(capsys):
    assert cli_main.main(["bridge", "status"]) == 0
    assert json.loads(capsys.readouterr().out)["transfer_limit"] == "100000"


def test_ans_command_uses_configured_client(monkeypatch, capsys):
    session = FakeSession([FakeResponse(200, {"name": "alice.ans"})])
    monkeypatch.setattr(
        cli_main,
        "build_ans_client",
        lambda config: AnsClient(
            AsyncRestClient("https://ans.example", session=session, max_retries=0)
        ),
    )

    assert cli_main.main(["ans", "primary-name", OWNER]) == 0
    assert json.loads(capsys.readouterr().out)["result"] == "alice.ans"


def test_load_config_supports_yaml(tmp_path):
    path = tmp_path / "zkdca.yaml"
    path.write_text(f"owner: {OWNER}\nfee: 2000000\n", encoding="utf-8")

    assert cli_main.load_config(path) == {"owner": OWNER, "fee": 2000000}


def test_load_config_rejects_unknown_suffix(tmp_path):
    path = tmp_path / "zkdca.ini"
    path.write_text("[x]", encoding="utf-8")

    with pytest.raises(ValueError):
        cli_main.load_config(path)


def test_store_account_command(monkeypatch):
    stored = {}
    monkeypatch.setattr(
        credentials.keyring,
        "set_password",
        lambda service, username, value: stored.update({(service, username): value}),
    )

    assert cli_main.main(["store-account", "--owner", OWNER]) == 0
    assert stored == {("zkdca", "owner"): OWNER}
    assert cli_main.main(["store-account", "--owner", "aleo1short"]) == 2


def test_tokens_command_lists_registry_and_bridgeable_tokens(capsys):
    assert cli_main.main(["tokens"]) == 0
    names = [token["name"] for token in json.loads(capsys.readouterr().out)["tokens"]]
    assert names[0] == "Aleo Credits (ALEO)"

    assert cli_main.main(["tokens", "--chain", "8453"]) == 0
    listed = json.loads(capsys.readouterr().out)
    assert listed["chain"] == "Base"
    assert "WBTC" not in listed["tokens"]

    assert cli_main.main(["tokens", "--chain", "999"]) == 2
