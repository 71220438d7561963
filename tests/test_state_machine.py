"""Tests for status state machines."""

import pytest

from payroll_admin.exceptions import InvalidTransitionError
from payroll_admin.services.state_machine import (
    ApprovalStateMachine,
    PayrollItemStateMachine,
    PayrollPeriodStateMachine,
    PayrollPeriodStatus,
)


class TestApprovalStateMachine:
    """Test approval transitions."""

    def test_valid_transitions(self):
        assert ApprovalStateMachine.can_transition("pending", "approved") is True
        assert ApprovalStateMachine.can_transition("pending", "rejected") is True

    def test_decided_is_terminal(self):
        # Once decided, never changes again
        assert ApprovalStateMachine.can_transition("approved", "rejected") is False
        assert ApprovalStateMachine.can_transition("rejected", "approved") is False
        assert ApprovalStateMachine.can_transition("approved", "pending") is False
        assert ApprovalStateMachine.is_terminal("approved") is True
        assert ApprovalStateMachine.is_terminal("rejected") is True
        assert ApprovalStateMachine.is_terminal("pending") is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            ApprovalStateMachine.validate_transition("approved", "approved")

        assert exc_info.value.from_status == "approved"
        assert exc_info.value.to_status == "approved"

    def test_required_fields(self):
        assert ApprovalStateMachine.required_fields("overtime") == ("hours", "start_date")
        assert ApprovalStateMachine.required_fields("leave") == ("start_date", "end_date")
        assert ApprovalStateMachine.required_fields("reimbursement") == ("amount", "notes")
        assert ApprovalStateMachine.required_fields("training") == ()


class TestPayrollPeriodStateMachine:
    def test_transitions(self):
        assert PayrollPeriodStateMachine.can_transition("draft", "processing") is True
        assert PayrollPeriodStateMachine.can_transition("processing", "processed") is True
        assert PayrollPeriodStateMachine.can_transition("draft", "processed") is False
        assert PayrollPeriodStateMachine.can_transition("processed", "draft") is False

    def test_next_statuses(self):
        assert PayrollPeriodStateMachine.get_next_statuses("draft") == [
            PayrollPeriodStatus.PROCESSING
        ]
        assert PayrollPeriodStateMachine.get_next_statuses("processed") == []

    def test_can_calculate(self):
        assert PayrollPeriodStateMachine.can_calculate("draft") is True
        assert PayrollPeriodStateMachine.can_calculate("processing") is True
        assert PayrollPeriodStateMachine.can_calculate("processed") is False


class TestPayrollItemStateMachine:
    def test_transitions(self):
        assert PayrollItemStateMachine.can_transition("pending", "approved") is True
        assert PayrollItemStateMachine.can_transition("approved", "paid") is True
        assert PayrollItemStateMachine.can_transition("pending", "paid") is False
        assert PayrollItemStateMachine.can_transition("paid", "pending") is False
