"""External collaborators: balance index, chain RPC and execution relay."""

from .base import BalanceIndexProvider, ExecutionRelay, Provider, Signer
from .debank import DebankConfig, DebankError, DebankProvider
from .mee import MeeApiError, MeeConfig, MeeError, MeeProvider
from .rpc import RpcError, RpcProvider, get_rpc_provider

__all__ = [
    "Provider",
    "BalanceIndexProvider",
    "ExecutionRelay",
    "Signer",
    "DebankConfig",
    "DebankError",
    "DebankProvider",
    "MeeApiError",
    "MeeConfig",
    "MeeError",
    "MeeProvider",
    "RpcError",
    "RpcProvider",
    "get_rpc_provider",
]
