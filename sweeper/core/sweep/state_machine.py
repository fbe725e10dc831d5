"""
Sweep State Machine

Validates and records the state transitions of a single SweepExecution:

    idle → quote → awaiting-signature → executing → success | error
"""

import logging
from typing import Dict, Optional, Set

from ..errors import ErrorCategory
from .models import (
    InvalidTransitionError,
    StateTransition,
    SweepExecution,
    SweepState,
)


class SweepStateMachine:
    """
    Owns one SweepExecution and is the only thing allowed to change its state.

    - Validates transitions against the allowed transition map
    - Tracks state history
    - Stamps completion time on terminal states
    """

    TRANSITIONS: Dict[SweepState, Set[SweepState]] = {
        SweepState.IDLE: {
            SweepState.QUOTE,
        },
        SweepState.QUOTE: {
            SweepState.AWAITING_SIGNATURE,
            # The fee-chain check runs inside quote so a failed switch can end
            # in ERROR; a successful switch returns here and needs a re-trigger
            SweepState.IDLE,
            SweepState.ERROR,
        },
        SweepState.AWAITING_SIGNATURE: {
            SweepState.EXECUTING,
            SweepState.ERROR,  # Rejected signature or failed submit
        },
        SweepState.EXECUTING: {
            SweepState.SUCCESS,
            SweepState.ERROR,
        },
        SweepState.SUCCESS: set(),
        SweepState.ERROR: set(),
    }

    def __init__(self, execution: SweepExecution, logger: Optional[logging.Logger] = None):
        self.execution = execution
        self.logger = logger or logging.getLogger(__name__)

    @property
    def current_state(self) -> SweepState:
        return self.execution.state

    @property
    def is_busy(self) -> bool:
        return self.execution.is_in_progress

    @property
    def is_terminal(self) -> bool:
        return self.execution.is_terminal

    def can_transition_to(self, to_state: SweepState) -> bool:
        return to_state in self.TRANSITIONS.get(self.current_state, set())

    def get_allowed_transitions(self) -> Set[SweepState]:
        return self.TRANSITIONS.get(self.current_state, set())

    def transition_to(
        self,
        to_state: SweepState,
        reason: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> StateTransition:
        """
        Move the execution to ``to_state``.

        Raises:
            InvalidTransitionError: If the transition is not allowed
        """
        from_state = self.current_state

        if not self.can_transition_to(to_state):
            raise InvalidTransitionError(
                from_state=from_state,
                to_state=to_state,
                message=f"Invalid transition from {from_state.value} to {to_state.value}. "
                        f"Allowed: {sorted(s.value for s in self.get_allowed_transitions())}",
            )

        transition = StateTransition(
            from_state=from_state,
            to_state=to_state,
            reason=reason,
            error_message=error_message,
        )

        self.execution.state = to_state
        self.execution.state_history.append(transition)

        if to_state in (SweepState.SUCCESS, SweepState.ERROR):
            self.execution.completed_at = transition.timestamp

        if error_message:
            self.execution.error = error_message

        self.logger.info(
            f"Sweep {self.execution.account_version.value}/{self.execution.execution_id[:8]}: "
            f"{from_state.value} -> {to_state.value}"
            f"{f' ({reason})' if reason else ''}"
        )
        return transition

    def fail(self, error_message: str, category: Optional[ErrorCategory] = None) -> StateTransition:
        """Transition to the terminal error state."""
        self.execution.error_category = category
        return self.transition_to(
            SweepState.ERROR,
            reason="Sweep failed",
            error_message=error_message,
        )

    def succeed(self) -> StateTransition:
        return self.transition_to(SweepState.SUCCESS, reason="Supertransaction confirmed")

    def return_to_idle(self, reason: str) -> StateTransition:
        return self.transition_to(SweepState.IDLE, reason=reason)
