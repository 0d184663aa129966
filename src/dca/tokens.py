"""Token and EVM chain registries used for display formatting."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenInfo:
    id: int
    name: str
    symbol: str
    icon: str | None = None


@dataclass(frozen=True)
class EvmChain:
    id: str
    name: str
    icon: str
    testnet: bool


@dataclass(frozen=True)
class BridgeableToken:
    id: int
    name: str
    symbol: str
    icon: str
    chains: tuple[str, ...]


AVAILABLE_TOKENS: dict[int, TokenInfo] = {
    1: TokenInfo(id=1, name="Aleo Credits", symbol="ALEO"),
    2: TokenInfo(id=2, name="USDC", symbol="USDC"),
    3: TokenInfo(id=3, name="Wrapped Ethereum", symbol="WETH"),
    4: TokenInfo(id=4, name="Wrapped Bitcoin", symbol="WBTC"),
}

EVM_CHAINS: dict[str, EvmChain] = {
    "ETH_MAINNET": EvmChain(id="1", name="Ethereum", icon="/ethereum.svg", testnet=False),
    "ETH_SEPOLIA": EvmChain(
        id="11155111", name="Ethereum Sepolia", icon="/ethereum.svg", testnet=True
    ),
    "BASE": EvmChain(id="8453", name="Base", icon="/base.svg", testnet=False),
    "BASE_SEPOLIA": EvmChain(
        id="84532", name="Base Sepolia", icon="/base.svg", testnet=True
    ),
    "ARBITRUM": EvmChain(
        id="42161", name="Arbitrum One", icon="/arbitrum.svg", testnet=False
    ),
    "ARBITRUM_SEPOLIA": EvmChain(
        id="421614", name="Arbitrum Sepolia", icon="/arbitrum.svg", testnet=True
    ),
}

_ALL_EVM_CHAIN_IDS = ("1", "11155111", "8453", "84532", "42161", "421614")

BRIDGEABLE_TOKENS: tuple[BridgeableToken, ...] = (
    BridgeableToken(1, "USDC", "USDC", "/usdc.svg", _ALL_EVM_CHAIN_IDS),
    BridgeableToken(2, "USDT", "USDT", "/usdt.svg", _ALL_EVM_CHAIN_IDS),
    BridgeableToken(3, "ETH", "ETH", "/ethereum.svg", _ALL_EVM_CHAIN_IDS),
    BridgeableToken(
        4, "Wrapped BTC", "WBTC", "/wbtc.svg", ("1", "11155111", "42161", "421614")
    ),
)


def get_token(token_id: int) -> TokenInfo | None:
    return AVAILABLE_TOKENS.get(token_id)


def format_token(token_id: int) -> str:
    """Return ``"Name (SYMBOL)"`` for a registered token id."""
    token = AVAILABLE_TOKENS.get(token_id)
    if token is None:
        return f"Token #{token_id}"
    return f"{token.name} ({token.symbol})"


def find_evm_chain(chain_id: str) -> EvmChain | None:
    for chain in EVM_CHAINS.values():
        if chain.id == chain_id:
            return chain
    return None


def tokens_for_chain(chain_id: str) -> list[BridgeableToken]:
    """Return the bridgeable tokens available on an EVM chain."""
    return [token for token in BRIDGEABLE_TOKENS if chain_id in token.chains]
