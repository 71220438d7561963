"""Status state machines with transition validation."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from payroll_admin.exceptions import InvalidTransitionError


class ApprovalStatus(str, Enum):
    """Approval request status values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PayrollPeriodStatus(str, Enum):
    """Payroll period status values."""

    DRAFT = "draft"
    PROCESSING = "processing"
    PROCESSED = "processed"


class PayrollItemStatus(str, Enum):
    """Payroll item status values."""

    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


class StateMachine:
    """Table-driven transition checks shared by the status machines."""

    # {from_status: [allowed_to_statuses]}
    VALID_TRANSITIONS: ClassVar[dict[str, list[str]]] = {}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return list(cls.VALID_TRANSITIONS.get(current_status, []))

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return not cls.VALID_TRANSITIONS.get(status)


class ApprovalStateMachine(StateMachine):
    """Approval requests: decided exactly once.

    Allowed transitions:
    - pending → approved
    - pending → rejected
    """

    VALID_TRANSITIONS = {
        ApprovalStatus.PENDING: [ApprovalStatus.APPROVED, ApprovalStatus.REJECTED],
        ApprovalStatus.APPROVED: [],  # Terminal state
        ApprovalStatus.REJECTED: [],  # Terminal state
    }

    # Fields each request type must carry
    REQUIRED_FIELDS: ClassVar[dict[str, tuple[str, ...]]] = {
        "overtime": ("hours", "start_date"),
        "leave": ("start_date", "end_date"),
        "reimbursement": ("amount", "notes"),
    }

    @classmethod
    def required_fields(cls, approval_type: str) -> tuple[str, ...]:
        return cls.REQUIRED_FIELDS.get(approval_type, ())


class PayrollPeriodStateMachine(StateMachine):
    """Payroll periods.

    Allowed transitions:
    - draft → processing
    - processing → processed

    Items of a processed period are frozen.
    """

    VALID_TRANSITIONS = {
        PayrollPeriodStatus.DRAFT: [PayrollPeriodStatus.PROCESSING],
        PayrollPeriodStatus.PROCESSING: [PayrollPeriodStatus.PROCESSED],
        PayrollPeriodStatus.PROCESSED: [],  # Terminal state
    }

    # Statuses where items may be computed or recomputed
    CALCULATION_ALLOWED = {
        PayrollPeriodStatus.DRAFT,
        PayrollPeriodStatus.PROCESSING,
    }

    @classmethod
    def can_calculate(cls, status: str) -> bool:
        """Check if computing items is allowed in this status."""
        return status in cls.CALCULATION_ALLOWED


class PayrollItemStateMachine(StateMachine):
    """Payroll items.

    Allowed transitions:
    - pending → approved
    - approved → paid
    """

    VALID_TRANSITIONS = {
        PayrollItemStatus.PENDING: [PayrollItemStatus.APPROVED],
        PayrollItemStatus.APPROVED: [PayrollItemStatus.PAID],
        PayrollItemStatus.PAID: [],  # Terminal state
    }
