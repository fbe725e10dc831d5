"""Convert discovered or manually entered tokens into SweepTokens."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple, Union

from ..chains import ChainRegistry, get_chain_registry, is_native_token_address
from .models import ManualTokenEntry, SweepToken, TokenRecord, format_units


def normalize(
    record: Union[TokenRecord, ManualTokenEntry],
    chain_id: int,
) -> Optional[SweepToken]:
    """Return the canonical SweepToken, or None when the token has no address.

    Native tokens carry a snapshot of the current quantity; the relay cannot
    read a native balance at execution time the way it can an ERC-20 balance.
    """
    if isinstance(record, ManualTokenEntry):
        if not record.address:
            return None
        return SweepToken(
            chain_id=chain_id,
            address=record.address,
            is_native=record.is_native or is_native_token_address(record.address),
            amount=format_units(record.balance, record.decimals),
            decimals=record.decimals,
        )

    if not record.resolved_address:
        return None

    return SweepToken(
        chain_id=chain_id,
        address=record.resolved_address,
        is_native=record.is_native or is_native_token_address(record.resolved_address),
        amount=format(record.quantity, "f"),
        decimals=record.decimals,
    )


def normalize_sweep_set(
    records: Iterable[Union[TokenRecord, ManualTokenEntry]],
    registry: Optional[ChainRegistry] = None,
) -> List[Tuple[Union[TokenRecord, ManualTokenEntry], SweepToken]]:
    """Pair each record with its SweepToken, keeping only tokens an instruction can be built for.

    Records on chains outside the registry, or without an address, are dropped
    here so later steps (fee selection included) only ever see the sweep set.
    """
    registry = registry or get_chain_registry()
    pairs: List[Tuple[Union[TokenRecord, ManualTokenEntry], SweepToken]] = []
    for record in records:
        if isinstance(record, ManualTokenEntry):
            chain_id: Optional[int] = record.chain_id
        else:
            chain_id = registry.resolve_internal_id(record.chain_external_id)
        if not registry.is_supported(chain_id):
            continue
        token = normalize(record, chain_id)
        if token is not None:
            pairs.append((record, token))
    return pairs
