"""
Fee Strategy Selector

Decides who pays the relay fee for a sweep and with which token:

| version | composition          | mode              | fee token                          |
|---------|----------------------|-------------------|------------------------------------|
| V1      | >= 1 non-native      | SELF_FUNDED       | highest-USD non-native sweep token |
| V1      | native only          | EXTERNALLY_FUNDED | EOA selection                      |
| V2      | any                  | EXTERNALLY_FUNDED | EOA selection                      |
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Union

from ..chains import ChainRegistry, get_chain_registry, is_native_token_address
from ..errors import ValidationError
from ..tokens.models import ManualTokenEntry, TokenRecord, token_key
from ...config import settings
from ...types import AccountVersion
from .models import FeeMode, FeeSelection

logger = logging.getLogger(__name__)

FEE_TOKEN_REQUIRED_MESSAGE = "Please select a fee token."
INVALID_FEE_CHAIN_MESSAGE = "Invalid fee token chain."

SweepRecord = Union[TokenRecord, ManualTokenEntry]


def _is_native(record: SweepRecord) -> bool:
    if isinstance(record, ManualTokenEntry):
        return record.is_native or is_native_token_address(record.address)
    return record.is_native


def _usd_value(record: SweepRecord) -> Decimal:
    # Manual entries carry no price; they keep their list order.
    if isinstance(record, TokenRecord):
        return record.usd_value
    return Decimal("0")


def required_mode(version: AccountVersion, records: Iterable[SweepRecord]) -> FeeMode:
    if version == AccountVersion.V1 and any(not _is_native(record) for record in records):
        return FeeMode.SELF_FUNDED
    return FeeMode.EXTERNALLY_FUNDED


def fee_token_candidates(eoa_tokens: Iterable[TokenRecord], limit: Optional[int] = None) -> List[TokenRecord]:
    """Top EOA tokens by USD value. No minimum value applies to fee tokens."""
    limit = limit or settings.fee_token_candidate_limit
    ranked = sorted(eoa_tokens, key=lambda token: token.usd_value, reverse=True)
    return ranked[:limit]


def candidates_on_chains(
    candidates: Sequence[TokenRecord],
    records: Sequence[TokenRecord],
) -> List[TokenRecord]:
    """Narrow fee candidates to the chains the swept tokens live on."""
    if not records:
        return list(candidates)
    chains = {record.chain_external_id for record in records}
    return [candidate for candidate in candidates if candidate.chain_external_id in chains]


class FeeStrategySelector:
    def __init__(self, registry: Optional[ChainRegistry] = None):
        self.registry = registry or get_chain_registry()

    def _chain_id(self, record: SweepRecord) -> int:
        if isinstance(record, ManualTokenEntry):
            chain_id: Optional[int] = record.chain_id
        else:
            chain_id = self.registry.resolve_internal_id(record.chain_external_id)
        if chain_id is None:
            raise ValidationError(
                INVALID_FEE_CHAIN_MESSAGE,
                details={"chain": getattr(record, "chain_external_id", None)},
            )
        return chain_id

    def select(
        self,
        version: AccountVersion,
        records: Sequence[SweepRecord],
        eoa_selection: Optional[SweepRecord] = None,
    ) -> FeeSelection:
        """
        Pick the fee mode and token for a sweep.

        Raises:
            ValidationError: the mode needs an EOA fee token and none was
                selected, or the fee token's chain is unknown
        """
        mode = required_mode(version, records)

        if mode == FeeMode.SELF_FUNDED:
            non_native = [record for record in records if not _is_native(record)]
            token = max(non_native, key=_usd_value)
        else:
            if eoa_selection is None:
                raise ValidationError(FEE_TOKEN_REQUIRED_MESSAGE)
            token = eoa_selection

        selection = FeeSelection(token=token, chain_id=self._chain_id(token), mode=mode)
        if not selection.token_address:
            raise ValidationError(FEE_TOKEN_REQUIRED_MESSAGE)

        logger.debug(
            f"Fee selection for {version.value}: {mode.value} "
            f"{selection.token_address} on chain {selection.chain_id}"
        )
        return selection


class FeeTokenSelection:
    """The user's EOA fee-token pick, remembered by token key until the wallet disconnects."""

    def __init__(self) -> None:
        self.selected_key: Optional[str] = None

    def select(self, key: str) -> None:
        self.selected_key = key

    def clear(self) -> None:
        self.selected_key = None

    def current(self, candidates: Sequence[TokenRecord]) -> Optional[TokenRecord]:
        """Return the picked candidate, falling back to (and auto-selecting) the highest-value one."""
        if not candidates:
            return None
        if self.selected_key is not None:
            for candidate in candidates:
                if token_key(candidate) == self.selected_key:
                    return candidate
        fallback = candidates[0]
        self.selected_key = token_key(fallback)
        return fallback
