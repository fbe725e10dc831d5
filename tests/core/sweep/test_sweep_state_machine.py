"""
Tests for the Sweep State Machine
"""

import pytest

from sweeper.core.errors import ErrorCategory
from sweeper.core.sweep import (
    InvalidTransitionError,
    SweepExecution,
    SweepState,
    SweepStateMachine,
)
from sweeper.types import AccountVersion


@pytest.fixture
def machine() -> SweepStateMachine:
    return SweepStateMachine(SweepExecution(account_version=AccountVersion.V1))


class TestSweepStateMachine:
    def test_initial_state_is_idle(self, machine: SweepStateMachine):
        assert machine.current_state == SweepState.IDLE
        assert machine.is_busy is False
        assert machine.is_terminal is False

    def test_happy_path(self, machine: SweepStateMachine):
        machine.transition_to(SweepState.QUOTE)
        assert machine.is_busy is True
        machine.transition_to(SweepState.AWAITING_SIGNATURE)
        machine.transition_to(SweepState.EXECUTING)
        machine.succeed()

        assert machine.current_state == SweepState.SUCCESS
        assert machine.is_terminal is True
        assert machine.execution.completed_at is not None
        assert [t.to_state for t in machine.execution.state_history] == [
            SweepState.QUOTE,
            SweepState.AWAITING_SIGNATURE,
            SweepState.EXECUTING,
            SweepState.SUCCESS,
        ]

    def test_fail_records_error(self, machine: SweepStateMachine):
        machine.transition_to(SweepState.QUOTE)

        transition = machine.fail("User rejected the request.", ErrorCategory.SIGNATURE)

        assert machine.current_state == SweepState.ERROR
        assert machine.execution.error == "User rejected the request."
        assert machine.execution.error_category == ErrorCategory.SIGNATURE
        assert transition.error_message == "User rejected the request."

    def test_chain_switch_returns_to_idle(self, machine: SweepStateMachine):
        machine.transition_to(SweepState.QUOTE)
        machine.return_to_idle("switched chain")

        assert machine.current_state == SweepState.IDLE
        assert machine.is_busy is False

    def test_cannot_skip_states(self, machine: SweepStateMachine):
        with pytest.raises(InvalidTransitionError) as exc_info:
            machine.transition_to(SweepState.EXECUTING)

        assert exc_info.value.from_state == SweepState.IDLE
        assert exc_info.value.to_state == SweepState.EXECUTING

    @pytest.mark.parametrize("terminal", [SweepState.SUCCESS, SweepState.ERROR])
    def test_terminal_states_are_final(self, terminal: SweepState):
        execution = SweepExecution(account_version=AccountVersion.V2, state=terminal)
        machine = SweepStateMachine(execution)

        assert machine.get_allowed_transitions() == set()
        with pytest.raises(InvalidTransitionError):
            machine.transition_to(SweepState.QUOTE)

    def test_to_dict(self, machine: SweepStateMachine):
        machine.transition_to(SweepState.QUOTE)
        data = machine.execution.to_dict()

        assert data["version"] == "2.1.0"
        assert data["state"] == "quote"
        assert data["history"][0]["fromState"] == "idle"
