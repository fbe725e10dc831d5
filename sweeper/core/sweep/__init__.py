"""
Sweep Execution

- SweepOrchestrator: runs the quote → sign → execute → confirm protocol
- SweepStateMachine: validated per-attempt state transitions
- InstructionBuilder: token list → relay instruction batch
- FeeStrategySelector: fee mode and fee token per account version
- SweepHistoryStore: bounded local history of successful sweeps
"""

from .fees import (
    FEE_TOKEN_REQUIRED_MESSAGE,
    INVALID_FEE_CHAIN_MESSAGE,
    FeeStrategySelector,
    FeeTokenSelection,
    candidates_on_chains,
    fee_token_candidates,
    required_mode,
)
from .history import SWEEP_HISTORY_KEY, JsonFileStorage, SweepHistoryStore
from .instructions import (
    DirectValueTransfer,
    ForwarderTransfer,
    InstructionBuilder,
    NativeTransferStrategy,
    get_native_strategy,
)
from .models import (
    FeeMode,
    FeeSelection,
    InvalidTransitionError,
    StateTransition,
    SweepExecution,
    SweepHistoryEntry,
    SweepOutcome,
    SweepRequest,
    SweepResult,
    SweepState,
)
from .orchestrator import NO_TOKENS_MESSAGE, SweepOrchestrator
from .state_machine import SweepStateMachine

__all__ = [
    # Fees
    "FEE_TOKEN_REQUIRED_MESSAGE",
    "INVALID_FEE_CHAIN_MESSAGE",
    "FeeStrategySelector",
    "FeeTokenSelection",
    "candidates_on_chains",
    "fee_token_candidates",
    "required_mode",
    # History
    "SWEEP_HISTORY_KEY",
    "JsonFileStorage",
    "SweepHistoryStore",
    # Instructions
    "DirectValueTransfer",
    "ForwarderTransfer",
    "InstructionBuilder",
    "NativeTransferStrategy",
    "get_native_strategy",
    # Models
    "FeeMode",
    "FeeSelection",
    "InvalidTransitionError",
    "StateTransition",
    "SweepExecution",
    "SweepHistoryEntry",
    "SweepOutcome",
    "SweepRequest",
    "SweepResult",
    "SweepState",
    # Orchestration
    "NO_TOKENS_MESSAGE",
    "SweepOrchestrator",
    "SweepStateMachine",
]
