"""Shared endpoints and program constants for the Aleo DCA clients."""

DCA_PROGRAM_ID = "zk_dca_arcane_finance.aleo"
DEFAULT_CHAIN_ID = "testnetbeta"
DEFAULT_NETWORK = "testnet"
DEFAULT_FEE_MICROCREDITS = 1_000_000

EXPLORER_URL = "https://api.explorer.provable.com/v1"
ANS_URL = "https://testnet-api.aleonames.id"
VERULINK_URL = (
    "https://aleobridge-be-development.b08qlu4v33brq.us-east-1.cs.amazonlightsail.com/v1"
)

BLOCK_POLL_INTERVAL_SEC = 30.0

# Verulink chain ids.
CHAIN_ID_ALEO = "6694886634403"
CHAIN_ID_ETH_SEPOLIA = "28556963657430695"
CHAIN_ID_BASE_SEPOLIA = "443067135441324596"
CHAIN_ID_ARBITRUM_SEPOLIA = "438861435819683566"

BRIDGE_CHAINS: dict[str, dict[str, str]] = {
    CHAIN_ID_ALEO: {"name": "Aleo", "symbol": "ALEO", "icon": "/aleo.svg"},
    CHAIN_ID_ETH_SEPOLIA: {
        "name": "Ethereum (Sepolia)",
        "symbol": "ETH",
        "icon": "/ethereum.svg",
    },
    CHAIN_ID_BASE_SEPOLIA: {
        "name": "Base (Sepolia)",
        "symbol": "ETH",
        "icon": "/base.svg",
    },
    CHAIN_ID_ARBITRUM_SEPOLIA: {
        "name": "Arbitrum (Sepolia)",
        "symbol": "ETH",
        "icon": "/arbitrum.svg",
    },
}

VERULINK_CONTRACTS: dict[str, dict[str, str]] = {
    "ethereum": {
        "bridge": "0x7440176A6F367D3Fad1754519bD8033EAF173133",
        "token_service": "0x28E761500e7Fd17b5B0A21a1eAD29a8E22D73170",
    },
    "base": {
        "bridge": "0x7440176A6F367D3Fad1754519bD8033EAF173133",
        "token_service": "0x28E761500e7Fd17b5B0A21a1eAD29a8E22D73170",
    },
    "arbitrum": {
        "bridge": "0x7440176A6F367D3Fad1754519bD8033EAF173133",
        "token_service": "0x28E761500e7Fd17b5B0A21a1eAD29a8E22D73170",
    },
    "aleo": {
        "bridge": "vlink_token_bridge_v1.aleo",
        "token_service": "vlink_token_service_v1.aleo",
    },
}

SOURCE_CHAIN_CONTRACTS: dict[str, str] = {
    CHAIN_ID_ETH_SEPOLIA: "ethereum",
    CHAIN_ID_BASE_SEPOLIA: "base",
    CHAIN_ID_ARBITRUM_SEPOLIA: "arbitrum",
}

SUPPORTED_BRIDGE_TOKENS: dict[str, str] = {
    "vUSDC": "6088188135219746443092391282916151282477828391085949070550825603498725268775field",
    "vUSDT": "7311977476241952331367670434347097026669181172395481678807963832961201831695field",
    "vETH": "1381601714105276218895759962490543360839827276760458984912661726715051428034field",
}

BRIDGE_TRANSFER_LIMIT = "100000"
PACKET_FILTERS = ("all", "completed", "pending")


def latest_height_path(network: str = DEFAULT_NETWORK) -> str:
    """Return the explorer path that serves the latest block height."""
    return f"/{network}/latest/height"
