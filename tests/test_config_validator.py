import pytest

from utils.config_validator import ConfigValidationError, validate_config

OWNER = "aleo1" + "q" * 58


def test_empty_config_is_valid():
    validate_config({})


def test_full_config_is_valid():
    validate_config(
        {
            "network": "testnet",
            "chain_id": "testnetbeta",
            "program_id": "zk_dca_arcane_finance.aleo",
            "fee": 1_000_000,
            "fee_private": False,
            "explorer_url": "https://api.explorer.provable.com/v1",
            "ans_url": "https://testnet-api.aleonames.id",
            "poll_interval_sec": 30,
            "request_timeout_sec": "10.5",
            "request_retries": 0,
            "state_path": "positions.json",
            "owner": OWNER,
            "log_level": "debug",
        }
    )


def test_owner_placeholder_is_not_validated():
    validate_config({"owner": "${ZKDCA_OWNER}"})


@pytest.mark.parametrize(
    "config",
    [
        {"network": "devnet"},
        {"fee": 0},
        {"fee": "1000"},
        {"fee_private": "yes"},
        {"explorer_url": "ftp://explorer"},
        {"poll_interval_sec": 0},
        {"program_id": "not-a-program"},
        {"owner": "aleo1short"},
        {"log_level": "LOUD"},
        {"chain_id": "  "},
    ],
)
def test_invalid_values_are_rejected(config):
    with pytest.raises(ConfigValidationError):
        validate_config(config)
