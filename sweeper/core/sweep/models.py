"""
Sweep Models

States, fee selections, requests, executions and history entries.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from ..errors import ErrorCategory, ValidationError
from ..tokens.models import ManualTokenEntry, SweepToken, TokenRecord
from ...types import AccountVersion, Instruction, Quote, SignedQuote


class SweepState(str, Enum):
    """States of a single sweep attempt."""

    IDLE = "idle"                              # Not started / validation failed
    QUOTE = "quote"                            # Building batch, requesting quote
    AWAITING_SIGNATURE = "awaiting-signature"  # Waiting on the wallet
    EXECUTING = "executing"                    # Submitted, awaiting confirmation
    SUCCESS = "success"                        # Mined successfully
    ERROR = "error"                            # Failed, terminal


IN_PROGRESS_STATES = frozenset({
    SweepState.QUOTE,
    SweepState.AWAITING_SIGNATURE,
    SweepState.EXECUTING,
})

TERMINAL_STATES = frozenset({SweepState.SUCCESS, SweepState.ERROR})


class FeeMode(str, Enum):
    SELF_FUNDED = "self_funded"              # Fee paid from a token inside the swept account
    EXTERNALLY_FUNDED = "externally_funded"  # Fee paid by the connected wallet (EOA)


class SweepOutcome(str, Enum):
    """How a call to ``sweep`` ended."""

    SUCCESS = "success"
    FAILED = "failed"
    NOT_STARTED = "not_started"        # Validation error, state stays idle
    CHAIN_SWITCHED = "chain_switched"  # Wallet switched network; user must trigger again
    BUSY = "busy"                      # A sweep for this version is already in flight


@dataclass
class FeeSelection:
    token: Union[TokenRecord, ManualTokenEntry]
    chain_id: int
    mode: FeeMode

    @property
    def token_address(self) -> str:
        if isinstance(self.token, ManualTokenEntry):
            return self.token.address
        return self.token.resolved_address or ""


@dataclass
class SweepRequest:
    account_version: AccountVersion
    source_address: str
    destination_address: str
    tokens: List[SweepToken]
    fee: Optional[FeeSelection] = None

    def validate(self) -> None:
        if not self.tokens:
            raise ValidationError("No tokens to sweep")
        if not self.source_address:
            raise ValidationError("Smart account not resolved.")
        if not self.destination_address:
            raise ValidationError("Please connect a wallet.")
        if self.source_address.lower() == self.destination_address.lower():
            raise ValidationError("Destination must differ from the swept account.")


@dataclass
class StateTransition:
    """Record of a sweep state transition."""

    from_state: SweepState
    to_state: SweepState
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    reason: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fromState": self.from_state.value,
            "toState": self.to_state.value,
            "timestamp": self.timestamp.isoformat(),
            "reason": self.reason,
            "errorMessage": self.error_message,
        }


@dataclass
class SweepExecution:
    """One sweep attempt for one account version. Owned exclusively by its state machine."""

    account_version: AccountVersion
    execution_id: str = field(default_factory=lambda: str(uuid4()))
    state: SweepState = SweepState.IDLE

    fee_mode: Optional[FeeMode] = None
    token_count: int = 0
    instruction_batch: List[Instruction] = field(default_factory=list)
    quote: Optional[Quote] = None
    signed_quote: Optional[SignedQuote] = None
    transaction_hash: Optional[str] = None
    receipt_status: Optional[str] = None

    error: Optional[str] = None
    error_category: Optional[ErrorCategory] = None

    state_history: List[StateTransition] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    refresh_task: Optional[asyncio.Task] = field(default=None, repr=False, compare=False)

    @property
    def is_in_progress(self) -> bool:
        return self.state in IN_PROGRESS_STATES

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executionId": self.execution_id,
            "version": self.account_version.value,
            "state": self.state.value,
            "feeMode": self.fee_mode.value if self.fee_mode else None,
            "tokenCount": self.token_count,
            "instructionCount": len(self.instruction_batch),
            "quoteHash": self.quote.hash if self.quote else None,
            "supertxHash": self.transaction_hash,
            "receiptStatus": self.receipt_status,
            "error": self.error,
            "errorCategory": self.error_category.value if self.error_category else None,
            "history": [t.to_dict() for t in self.state_history],
        }


@dataclass
class SweepResult:
    outcome: SweepOutcome
    execution: SweepExecution
    message: Optional[str] = None

    @property
    def hash(self) -> Optional[str]:
        return self.execution.transaction_hash


@dataclass(frozen=True)
class SweepHistoryEntry:
    hash: str
    timestamp: int  # epoch milliseconds
    token_count: int
    account_version: AccountVersion

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "timestamp": self.timestamp,
            "tokenCount": self.token_count,
            "version": self.account_version.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SweepHistoryEntry":
        return cls(
            hash=str(data["hash"]),
            timestamp=int(data["timestamp"]),
            token_count=int(data["tokenCount"]),
            account_version=AccountVersion(data["version"]),
        )


class InvalidTransitionError(Exception):
    """Raised when an invalid sweep state transition is attempted."""

    def __init__(
        self,
        from_state: SweepState,
        to_state: SweepState,
        message: Optional[str] = None,
    ):
        self.from_state = from_state
        self.to_state = to_state
        self.message = message or f"Cannot transition from {from_state.value} to {to_state.value}"
        super().__init__(self.message)


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)
