"""
Chain Registry

Static mapping between chain IDs, balance-index chain identifiers and
native-token sentinel addresses.
"""

from .constants import BASE_CHAIN_ID, NATIVE_TOKEN_SENTINELS, ZERO_ADDRESS
from .registry import (
    ChainDescriptor,
    ChainRegistry,
    get_chain_registry,
    is_native_token_address,
    native_token_info,
    normalize_identifier,
    rpc_url,
)

__all__ = [
    "BASE_CHAIN_ID",
    "NATIVE_TOKEN_SENTINELS",
    "ZERO_ADDRESS",
    "ChainDescriptor",
    "ChainRegistry",
    "get_chain_registry",
    "is_native_token_address",
    "native_token_info",
    "normalize_identifier",
    "rpc_url",
]
