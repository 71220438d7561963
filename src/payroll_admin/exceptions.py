"""Typed failures raised by the payroll engine and approval workflow."""

from __future__ import annotations

from decimal import Decimal


class PayrollError(Exception):
    """Base class for all payroll domain errors."""

    code = "PAYROLL_ERROR"


class InvalidInputError(PayrollError):
    """Raised for malformed or negative numeric inputs."""

    code = "INVALID_INPUT"


class InvalidSettingError(InvalidInputError):
    """Raised when a stored setting cannot be parsed or is out of range."""

    code = "INVALID_SETTING"

    def __init__(self, key: str, value: object, reason: str):
        self.key = key
        self.value = value
        super().__init__(f"Setting '{key}' has invalid value {value!r}: {reason}")


class MissingCompensationBasisError(PayrollError):
    """Raised when an employee has neither a salary nor an hourly rate."""

    code = "MISSING_COMPENSATION_BASIS"

    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(
            f"Employee {employee_id} has neither a basic salary nor an hourly rate"
        )


class DuplicatePayrollItemError(PayrollError):
    """Raised when a payroll item already exists for (period, employee)."""

    code = "DUPLICATE_PAYROLL_ITEM"

    def __init__(self, payroll_period_id: int, employee_id: int):
        self.payroll_period_id = payroll_period_id
        self.employee_id = employee_id
        super().__init__(
            f"Payroll item for employee {employee_id} in period "
            f"{payroll_period_id} already exists; request a recompute to replace it"
        )


class NegativeNetPayError(PayrollError):
    """Raised when computed net pay would be negative."""

    code = "NEGATIVE_NET_PAY"

    def __init__(self, employee_id: int, net_pay: Decimal):
        self.employee_id = employee_id
        self.net_pay = net_pay
        super().__init__(f"Net pay for employee {employee_id} would be {net_pay}")


class InvalidApprovalPayloadError(PayrollError):
    """Raised when an approval request lacks the fields its type requires."""

    code = "INVALID_APPROVAL_PAYLOAD"

    def __init__(self, approval_type: str, missing: list[str], reason: str | None = None):
        self.approval_type = approval_type
        self.missing = missing
        if reason:
            msg = f"Invalid {approval_type} request: {reason}"
        else:
            msg = f"{approval_type} request is missing: {', '.join(missing)}"
        super().__init__(msg)


class InvalidTransitionError(PayrollError):
    """Raised when an invalid state transition is attempted."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class MissingReasonError(PayrollError):
    """Raised when a rejection is attempted without a reason."""

    code = "MISSING_REASON"

    def __init__(self, approval_id: int):
        self.approval_id = approval_id
        super().__init__(f"Rejecting approval {approval_id} requires a reason")


class EntityNotFoundError(PayrollError):
    """Raised when a referenced record does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} {entity_id} not found")


class PayrollPeriodLockedError(PayrollError):
    """Raised when a processed (frozen) period would be modified."""

    code = "PERIOD_LOCKED"

    def __init__(self, payroll_period_id: int):
        self.payroll_period_id = payroll_period_id
        super().__init__(
            f"Payroll period {payroll_period_id} is processed; its items are frozen"
        )
