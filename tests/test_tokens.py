from dca.tokens import find_evm_chain, format_token, get_token, tokens_for_chain


def test_format_token_known_and_unknown():
    assert format_token(1) == "Aleo Credits (ALEO)"
    assert format_token(99) == "Token #99"
    assert get_token(2).symbol == "USDC"


def test_bridgeable_tokens_filter_by_chain():
    symbols = {token.symbol for token in tokens_for_chain("8453")}

    assert "USDC" in symbols
    assert "WBTC" not in symbols
    assert find_evm_chain("84532").name == "Base Sepolia"
