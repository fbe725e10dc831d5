"""Multichain view of a Nexus smart account."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from ...types import AccountVersion


@dataclass
class NexusAccount:
    """A smart account deployed (or deployable) at per-chain addresses.

    Nexus addresses are deterministic, so every configured chain shares the
    address derived on the anchor chain unless explicitly overridden.
    """
    version: AccountVersion
    address: str
    chain_ids: frozenset = field(default_factory=frozenset)
    overrides: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def on_chains(cls, version: AccountVersion, address: str, chain_ids: Iterable[int]) -> "NexusAccount":
        return cls(version=version, address=address, chain_ids=frozenset(chain_ids))

    def address_on(self, chain_id: int) -> Optional[str]:
        if chain_id in self.overrides:
            return self.overrides[chain_id]
        if chain_id in self.chain_ids:
            return self.address
        return None
