from decimal import Decimal

import pytest

from dca.validation import (
    validate_address,
    validate_aleo_address,
    validate_amount,
    validate_evm_address,
)

ALEO_ADDRESS = "aleo1" + "q" * 58
EVM_ADDRESS = "0x" + "a" * 40


def test_aleo_address_requires_prefix_and_exact_length():
    assert validate_aleo_address(ALEO_ADDRESS)
    assert not validate_aleo_address(ALEO_ADDRESS[:-1])
    assert not validate_aleo_address(ALEO_ADDRESS + "q")
    assert not validate_aleo_address("aleo2" + "q" * 58)
    assert not validate_aleo_address(None)


def test_evm_address_requires_prefix_and_exact_length():
    assert validate_evm_address(EVM_ADDRESS)
    assert not validate_evm_address("0x" + "a" * 39)
    assert not validate_evm_address("1x" + "a" * 40)


@pytest.mark.parametrize(
    "address, chain, expected",
    [
        (ALEO_ADDRESS, "native", True),
        (ALEO_ADDRESS, "aleo", True),
        (EVM_ADDRESS, "evm", True),
        (EVM_ADDRESS, "Ethereum", True),
        (EVM_ADDRESS, "native", False),
        (ALEO_ADDRESS, "evm", False),
        (ALEO_ADDRESS, "solana", False),
        (ALEO_ADDRESS, None, False),
    ],
)
def test_validate_address_by_chain_kind(address, chain, expected):
    assert validate_address(address, chain) is expected


@pytest.mark.parametrize(
    "value", [1, "1", "0.0001", Decimal("5"), 2.5, " 10 "]
)
def test_validate_amount_accepts_positive_numbers(value):
    assert validate_amount(value)


@pytest.mark.parametrize(
    "value",
    [0, "0", -1, "-0.5", "", "abc", None, True, float("nan"), float("inf"), "Infinity"],
)
def test_validate_amount_rejects_non_positive_or_garbage(value):
    assert not validate_amount(value)
