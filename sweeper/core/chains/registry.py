"""Static chain registry mapping chain IDs to balance-index identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from .constants import (
    ALCHEMY_RPC_BASE_URLS,
    DEDICATED_RPC_URLS,
    NATIVE_TOKEN_SENTINELS,
    NATIVE_TOKENS,
    PUBLIC_RPC_URLS,
    SUPPORTED_CHAIN_DEFINITIONS,
)


def normalize_identifier(value: str) -> str:
    return value.strip().lower()


@dataclass(frozen=True)
class ChainDescriptor:
    """One supported chain and the identifiers that map to it."""
    internal_id: int
    external_id: str
    name: str
    aliases: FrozenSet[str]
    native_sentinels: FrozenSet[str] = NATIVE_TOKEN_SENTINELS


class ChainRegistry:
    """Lookup tables between internal chain IDs and balance-index chain IDs.

    Usage:
        registry = get_chain_registry()

        registry.resolve_internal_id("Polygon")   # 137
        registry.resolve_external_id(42161)       # "arb"
        registry.is_native_sentinel(137, "0x0000000000000000000000000000000000001010")
    """

    def __init__(self, definitions: Iterable[Dict[str, Any]] = SUPPORTED_CHAIN_DEFINITIONS) -> None:
        self._by_id: Dict[int, ChainDescriptor] = {}
        self._alias_to_id: Dict[str, int] = {}

        for definition in definitions:
            chain_id = int(definition["chain_id"])
            external_id = normalize_identifier(definition["debank_id"])
            if chain_id in self._by_id:
                raise ValueError(f"Duplicate chain id {chain_id}")
            if external_id in self._alias_to_id:
                raise ValueError(f"Duplicate external chain id {external_id!r}")

            aliases = {normalize_identifier(alias) for alias in definition.get("aliases", [])}
            aliases.add(external_id)

            descriptor = ChainDescriptor(
                internal_id=chain_id,
                external_id=external_id,
                name=definition.get("name") or f"Chain {chain_id}",
                aliases=frozenset(aliases),
            )
            self._by_id[chain_id] = descriptor
            # Canonical ids win over aliases registered by other chains
            self._alias_to_id[external_id] = chain_id
            for alias in aliases:
                self._alias_to_id.setdefault(alias, chain_id)

    @property
    def chain_ids(self) -> List[int]:
        return list(self._by_id.keys())

    @property
    def external_ids(self) -> List[str]:
        return [descriptor.external_id for descriptor in self._by_id.values()]

    def get(self, chain_id: int) -> Optional[ChainDescriptor]:
        return self._by_id.get(chain_id)

    def resolve_internal_id(self, identifier: Optional[str]) -> Optional[int]:
        """Map a balance-index chain id or alias to a chain ID."""
        if not isinstance(identifier, str):
            return None
        normalized = normalize_identifier(identifier)
        if not normalized:
            return None
        return self._alias_to_id.get(normalized)

    def resolve_external_id(self, chain_id: int) -> Optional[str]:
        descriptor = self._by_id.get(chain_id)
        return descriptor.external_id if descriptor else None

    def is_supported(self, chain_id: Optional[int]) -> bool:
        return isinstance(chain_id, int) and chain_id in self._by_id

    def is_native_sentinel(self, chain_id: Optional[int], address: Optional[str]) -> bool:
        if not address:
            return False
        descriptor = self._by_id.get(chain_id) if chain_id is not None else None
        sentinels = descriptor.native_sentinels if descriptor else NATIVE_TOKEN_SENTINELS
        return normalize_identifier(address) in sentinels

    def chain_name(self, chain_id: int) -> str:
        descriptor = self._by_id.get(chain_id)
        return descriptor.name if descriptor else f"Chain {chain_id}"


def is_native_token_address(address: Optional[str]) -> bool:
    """Chain-agnostic sentinel check."""
    if not address:
        return False
    return address.lower() in NATIVE_TOKEN_SENTINELS


def native_token_info(chain_id: int) -> Dict[str, Any]:
    info = NATIVE_TOKENS.get(chain_id, {"symbol": "ETH", "name": "Native Token"})
    return {**info, "decimals": 18}


def rpc_url(chain_id: int, alchemy_api_key: str = "") -> str:
    """Pick an RPC endpoint: dedicated, then Alchemy (if keyed), then public, then Ankr."""
    dedicated = DEDICATED_RPC_URLS.get(chain_id)
    if dedicated:
        return dedicated

    if alchemy_api_key:
        alchemy_base = ALCHEMY_RPC_BASE_URLS.get(chain_id)
        if alchemy_base:
            return f"{alchemy_base}/{alchemy_api_key}"

    public = PUBLIC_RPC_URLS.get(chain_id)
    if public:
        return public

    return f"https://rpc.ankr.com/{chain_id}"


_chain_registry: Optional[ChainRegistry] = None


def get_chain_registry() -> ChainRegistry:
    """Get the singleton ChainRegistry instance."""
    global _chain_registry
    if _chain_registry is None:
        _chain_registry = ChainRegistry()
    return _chain_registry
