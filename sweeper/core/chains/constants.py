"""Static chain metadata for every chain the MEE relay supports."""

from typing import Any, Dict, FrozenSet, List

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Addresses balance indexes and wallets use for a chain's native asset.
NATIVE_TOKEN_SENTINELS: FrozenSet[str] = frozenset({
    ZERO_ADDRESS,
    "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
    "0x0000000000000000000000000000000000001010",  # Polygon native
})

# Supported chains with their DeBank identifiers.
#
# Chains from apechain onwards are not indexed by DeBank yet, so their tokens
# never auto-detect; they remain sweepable through manual entry.
SUPPORTED_CHAIN_DEFINITIONS: List[Dict[str, Any]] = [
    {"chain_id": 1, "name": "Ethereum", "debank_id": "eth", "aliases": ["eth", "ethereum"]},
    {"chain_id": 8453, "name": "Base", "debank_id": "base", "aliases": ["base"]},
    {"chain_id": 137, "name": "Polygon", "debank_id": "matic", "aliases": ["matic", "polygon"]},
    {"chain_id": 42161, "name": "Arbitrum One", "debank_id": "arb", "aliases": ["arb", "arbitrum"]},
    {"chain_id": 10, "name": "OP Mainnet", "debank_id": "op", "aliases": ["op", "optimism"]},
    {"chain_id": 56, "name": "BNB Smart Chain", "debank_id": "bsc", "aliases": ["bsc", "bnb"]},
    {"chain_id": 146, "name": "Sonic", "debank_id": "sonic", "aliases": ["sonic"]},
    {"chain_id": 534352, "name": "Scroll", "debank_id": "scrl", "aliases": ["scrl", "scroll"]},
    {"chain_id": 100, "name": "Gnosis", "debank_id": "xdai", "aliases": ["xdai", "gnosis"]},
    {"chain_id": 43114, "name": "Avalanche", "debank_id": "avax", "aliases": ["avax", "avalanche"]},
    {"chain_id": 33139, "name": "Ape Chain", "debank_id": "ape", "aliases": ["ape", "apechain"]},
    {"chain_id": 1329, "name": "Sei", "debank_id": "sei", "aliases": ["sei"]},
    {"chain_id": 480, "name": "World Chain", "debank_id": "world", "aliases": ["world", "worldchain"]},
    {"chain_id": 130, "name": "Unichain", "debank_id": "unichain", "aliases": ["unichain", "uni"]},
    {"chain_id": 9745, "name": "Plasma", "debank_id": "plasma", "aliases": ["plasma"]},
    {"chain_id": 143, "name": "Monad", "debank_id": "monad", "aliases": ["monad"]},
    {"chain_id": 999, "name": "HyperEVM", "debank_id": "hyperevm", "aliases": ["hyperevm", "hyperliquid"]},
    {"chain_id": 747474, "name": "Katana", "debank_id": "katana", "aliases": ["katana"]},
]

NATIVE_TOKENS: Dict[int, Dict[str, str]] = {
    1: {"symbol": "ETH", "name": "Ethereum"},
    10: {"symbol": "ETH", "name": "Ethereum"},
    56: {"symbol": "BNB", "name": "BNB"},
    100: {"symbol": "xDAI", "name": "xDAI"},
    137: {"symbol": "POL", "name": "POL"},
    146: {"symbol": "S", "name": "Sonic"},
    130: {"symbol": "ETH", "name": "Ethereum"},
    143: {"symbol": "MON", "name": "Monad"},
    480: {"symbol": "ETH", "name": "Ethereum"},
    999: {"symbol": "HYPE", "name": "HYPE"},
    1329: {"symbol": "SEI", "name": "Sei"},
    8453: {"symbol": "ETH", "name": "Ethereum"},
    9745: {"symbol": "PLAS", "name": "Plasma"},
    33139: {"symbol": "APE", "name": "ApeCoin"},
    42161: {"symbol": "ETH", "name": "Ethereum"},
    43114: {"symbol": "AVAX", "name": "Avalanche"},
    534352: {"symbol": "ETH", "name": "Ethereum"},
    747474: {"symbol": "ETH", "name": "Ethereum"},
}

ALCHEMY_RPC_BASE_URLS: Dict[int, str] = {
    1: "https://eth-mainnet.g.alchemy.com/v2",
    8453: "https://base-mainnet.g.alchemy.com/v2",
    137: "https://polygon-mainnet.g.alchemy.com/v2",
    42161: "https://arb-mainnet.g.alchemy.com/v2",
    10: "https://opt-mainnet.g.alchemy.com/v2",
    56: "https://bnb-mainnet.g.alchemy.com/v2",
    146: "https://sonic-mainnet.g.alchemy.com/v2",
    534352: "https://scroll-mainnet.g.alchemy.com/v2",
    100: "https://gnosis-mainnet.g.alchemy.com/v2",
    43114: "https://avax-mainnet.g.alchemy.com/v2",
    33139: "https://apechain-mainnet.g.alchemy.com/v2",
    480: "https://worldchain-mainnet.g.alchemy.com/v2",
    130: "https://unichain-mainnet.g.alchemy.com/v2",
    1329: "https://sei-mainnet.g.alchemy.com/v2",
    999: "https://hyperliquid-mainnet.g.alchemy.com/v2",
    9745: "https://plasma-mainnet.g.alchemy.com/v2",
}

PUBLIC_RPC_URLS: Dict[int, str] = {
    1: "https://ethereum.publicnode.com",
    8453: "https://developer-access-mainnet.base.org",
    137: "https://polygon-public.nodies.app",
    42161: "https://arbitrum.meowrpc.com",
    10: "https://optimism.publicnode.com",
    56: "https://bsc.meowrpc.com",
    146: "https://rpc.soniclabs.com",
    534352: "https://rpc.scroll.io",
    100: "https://gnosis-rpc.publicnode.com",
    43114: "https://avalanche-c-chain-rpc.publicnode.com",
    33139: "https://apechain.drpc.org",
    480: "https://worldchain.drpc.org",
    130: "https://0xrpc.io/uni",
    1329: "https://sei.drpc.org",
    999: "https://rpc.hypurrscan.io",
    9745: "https://rpc.plasma.to",
}

# Chains served by their own RPC regardless of Alchemy availability.
DEDICATED_RPC_URLS: Dict[int, str] = {
    143: "https://rpc-mainnet.monadinfra.com/rpc/mmuQFfKlylzj8puKP5UiSa8K3RLhKzhe",
    747474: "https://rpc-katana.t.conduit.xyz",
}

BASE_CHAIN_ID = 8453
