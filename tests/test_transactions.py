import pytest

from dca.errors import InvalidArgument
from dca.transactions import (
    CANCEL_POSITION,
    CREATE_POSITION,
    EXECUTE_DCA,
    build_cancel_request,
    build_create_request,
    build_execute_request,
)

OWNER = "aleo1" + "q" * 58


def _create(**overrides):
    args = {
        "owner": OWNER,
        "input_token_id": 1,
        "input_amount": 100,
        "output_token_id": 2,
        "interval": 10,
        "executions_remaining": 5,
        "min_output_amount": 90,
        "block_height": 1000,
    }
    args.update(overrides)
    return build_create_request(**args)


def test_create_request_types_all_seven_inputs():
    request = _create()

    assert request.function_name == CREATE_POSITION
    assert request.program_id == "zk_dca_arcane_finance.aleo"
    assert request.inputs == (
        "1u64",
        "100u64",
        "2u64",
        "10u32",
        "5u32",
        "90u64",
        "1000u32",
    )
    assert request.fee == 1_000_000
    assert request.fee_private is False


def test_create_request_payload_uses_wallet_adapter_keys():
    payload = _create(fee=2_000_000, fee_private=True).to_payload()

    assert payload["address"] == OWNER
    assert payload["chainId"] == "testnetbeta"
    assert payload["fee"] == 2_000_000
    assert payload["feePrivate"] is True
    transition = payload["transitions"][0]
    assert transition["functionName"] == CREATE_POSITION
    assert len(transition["inputs"]) == 7


@pytest.mark.parametrize(
    "field, value",
    [
        ("input_amount", 0),
        ("input_amount", -5),
        ("interval", 0),
        ("executions_remaining", 0),
        ("min_output_amount", "abc"),
        ("input_token_id", 1.5),
        ("interval", 2**32),
        ("block_height", -1),
        ("owner", "aleo1short"),
    ],
)
def test_create_request_rejects_invalid_arguments(field, value):
    with pytest.raises(InvalidArgument):
        _create(**{field: value})


def test_create_request_accepts_height_zero():
    assert _create(block_height=0).inputs[-1] == "0u32"


def test_execute_request_passes_records_and_typed_height():
    request = build_execute_request(OWNER, "{position}", "{token}", 1234)

    assert request.function_name == EXECUTE_DCA
    assert request.inputs == ("{position}", "{token}", "1234u32")


def test_execute_request_requires_records():
    with pytest.raises(InvalidArgument):
        build_execute_request(OWNER, "", "{token}", 1234)
    with pytest.raises(InvalidArgument):
        build_execute_request(OWNER, "{position}", None, 1234)


def test_cancel_request_has_single_record_input():
    request = build_cancel_request(OWNER, "{position}", chain_id="mainnet")

    assert request.function_name == CANCEL_POSITION
    assert request.inputs == ("{position}",)
    assert request.chain_id == "mainnet"


def test_builders_reject_non_positive_fee():
    with pytest.raises(InvalidArgument):
        build_cancel_request(OWNER, "{position}", fee=0)
