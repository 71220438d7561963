"""Compensation basis, hours and overtime rate resolution."""

from __future__ import annotations

from decimal import Decimal

from payroll_admin.calculators.line_builder import LineItemBuilder
from payroll_admin.calculators.types import (
    AttendanceSnapshot,
    EmployeeSnapshot,
    OvertimeApprovalSnapshot,
    PayrollSettings,
    PeriodSnapshot,
)
from payroll_admin.exceptions import InvalidInputError, MissingCompensationBasisError

# Attendance statuses whose check-in/check-out time counts as worked
WORKED_STATUSES = frozenset({"present", "late", "half_day"})

ZERO = Decimal("0")


class RateResolver:
    """Resolves the earnings side of a payroll item.

    Rules:
    1. An employee with a positive hourly rate is paid by the hour;
       otherwise the basic salary is the fixed per-period amount
    2. Hours worked come from the caller when supplied, else from
       completed attendance rows inside the period
    3. Overtime hours come only from approved overtime requests whose
       start date falls inside the period
    4. Overtime rate = hourly rate × multiplier, or, without an hourly rate,
       (basic salary / standard monthly hours) × multiplier
    """

    def __init__(self, settings: PayrollSettings):
        self.settings = settings

    @staticmethod
    def validate_compensation(employee: EmployeeSnapshot) -> None:
        """Reject negative compensation and a missing basis.

        Raises:
            InvalidInputError: salary or rate is negative
            MissingCompensationBasisError: neither salary nor rate is positive
        """
        if employee.basic_salary is None or employee.basic_salary < 0:
            raise InvalidInputError(
                f"Employee {employee.employee_id} has negative basic salary "
                f"{employee.basic_salary}"
            )
        if employee.hourly_rate is not None and employee.hourly_rate < 0:
            raise InvalidInputError(
                f"Employee {employee.employee_id} has negative hourly rate "
                f"{employee.hourly_rate}"
            )
        if employee.basic_salary == 0 and not employee.is_hourly:
            raise MissingCompensationBasisError(employee.employee_id)

    @staticmethod
    def hours_from_attendance(
        attendance: list[AttendanceSnapshot], period: PeriodSnapshot
    ) -> Decimal:
        """Sum worked hours of completed attendance rows inside the period."""
        total = ZERO
        for record in attendance:
            if not period.contains(record.work_date):
                continue
            if record.status not in WORKED_STATUSES:
                continue
            hours = record.worked_hours
            if hours is None:
                continue
            if hours < 0:
                raise InvalidInputError(
                    f"Attendance on {record.work_date} has time_out before time_in"
                )
            total += hours
        return total

    @staticmethod
    def approved_overtime_hours(
        approvals: list[OvertimeApprovalSnapshot], period: PeriodSnapshot
    ) -> Decimal:
        """Sum hours of approved overtime requests starting inside the period.

        Pending and rejected requests never count, whatever the caller passed.
        """
        total = ZERO
        for approval in approvals:
            if approval.approval_type != "overtime" or approval.status != "approved":
                continue
            if approval.start_date is None or not period.contains(approval.start_date):
                continue
            hours = approval.hours or ZERO
            if hours < 0:
                raise InvalidInputError(
                    f"Approval {approval.approval_id} has negative overtime hours {hours}"
                )
            total += hours
        return total

    def resolve_hours_worked(
        self,
        employee: EmployeeSnapshot,
        period: PeriodSnapshot,
        attendance: list[AttendanceSnapshot],
        explicit_hours: Decimal | None,
    ) -> Decimal | None:
        """Unrounded hours worked for the period; None for salaried employees without input."""
        if explicit_hours is not None:
            if explicit_hours < 0:
                raise InvalidInputError(f"hours_worked cannot be negative: {explicit_hours}")
            return explicit_hours
        if not employee.is_hourly and not attendance:
            return None
        return self.hours_from_attendance(attendance, period)

    def basic_component(self, employee: EmployeeSnapshot, hours_worked: Decimal | None) -> Decimal:
        """Hourly earnings or the fixed basic salary, rounded once as money."""
        if employee.is_hourly:
            return LineItemBuilder.round_to_cents((hours_worked or ZERO) * employee.hourly_rate)
        return LineItemBuilder.round_to_cents(employee.basic_salary)

    def overtime_rate(self, employee: EmployeeSnapshot) -> Decimal:
        """Per-hour overtime rate (unrounded)."""
        multiplier = self.settings.overtime_multiplier
        if employee.is_hourly:
            return employee.hourly_rate * multiplier
        return (employee.basic_salary / self.settings.standard_monthly_hours) * multiplier

    def overtime_amount(self, employee: EmployeeSnapshot, overtime_hours: Decimal) -> Decimal:
        """Overtime pay rounded half-up to cents."""
        if overtime_hours == 0:
            return LineItemBuilder.round_to_cents(ZERO)
        return LineItemBuilder.round_to_cents(overtime_hours * self.overtime_rate(employee))
