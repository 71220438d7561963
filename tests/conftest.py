"""Pytest fixtures for payroll admin unit tests."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from payroll_admin.calculators.engine import PayrollEngine
from payroll_admin.calculators.types import (
    AllowanceTypeSnapshot,
    AttendanceSnapshot,
    DeductionTypeSnapshot,
    EmployeeSnapshot,
    ManualOverrides,
    OvertimeApprovalSnapshot,
    PayrollInputs,
    PayrollSettings,
    PeriodSnapshot,
)

TEST_ENGINE_VERSION = "test-1.0.0"


@pytest.fixture
def payroll_settings() -> PayrollSettings:
    """Default policy: 15% tax, 1.5x overtime, 160 standard hours."""
    return PayrollSettings()


@pytest.fixture
def period() -> PeriodSnapshot:
    """January 2024, open for calculation."""
    return PeriodSnapshot(
        period_id=3,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        status="draft",
    )


@pytest.fixture
def income_tax_type() -> DeductionTypeSnapshot:
    return DeductionTypeSnapshot(
        deduction_type_id=1,
        name="Income Tax",
        is_percentage=True,
        default_value=Decimal("15"),
        is_required=True,
    )


@pytest.fixture
def allowance_types() -> list[AllowanceTypeSnapshot]:
    return [
        AllowanceTypeSnapshot(allowance_type_id=1, name="Transportation", is_taxable=False),
        AllowanceTypeSnapshot(allowance_type_id=2, name="Meal", is_taxable=False),
        AllowanceTypeSnapshot(allowance_type_id=3, name="Performance Bonus", is_taxable=True),
    ]


@pytest.fixture
def salaried_employee() -> EmployeeSnapshot:
    return EmployeeSnapshot(employee_id=9, basic_salary=Decimal("5000.00"))


@pytest.fixture
def hourly_employee() -> EmployeeSnapshot:
    return EmployeeSnapshot(
        employee_id=10, basic_salary=Decimal("0"), hourly_rate=Decimal("20.00")
    )


@pytest.fixture
def engine() -> PayrollEngine:
    return PayrollEngine(engine_version=TEST_ENGINE_VERSION)


def make_attendance(day: date, hours: int, status: str = "present") -> AttendanceSnapshot:
    """Attendance row checked in at 09:00 for ``hours`` hours."""
    return AttendanceSnapshot(
        work_date=day,
        time_in=datetime(day.year, day.month, day.day, 9, 0),
        time_out=datetime(day.year, day.month, day.day, 9 + hours, 0),
        status=status,
    )


def make_overtime(
    approval_id: int,
    hours: str,
    start_date: date,
    status: str = "approved",
) -> OvertimeApprovalSnapshot:
    return OvertimeApprovalSnapshot(
        approval_id=approval_id,
        approval_type="overtime",
        status=status,
        hours=Decimal(hours),
        start_date=start_date,
    )


def make_inputs(
    employee: EmployeeSnapshot,
    period: PeriodSnapshot,
    settings: PayrollSettings | None = None,
    deduction_types: list[DeductionTypeSnapshot] | None = None,
    allowance_types: list[AllowanceTypeSnapshot] | None = None,
    attendance: list[AttendanceSnapshot] | None = None,
    overtime_approvals: list[OvertimeApprovalSnapshot] | None = None,
    overrides: ManualOverrides | None = None,
) -> PayrollInputs:
    return PayrollInputs(
        employee=employee,
        period=period,
        settings=settings or PayrollSettings(),
        deduction_types=deduction_types or [],
        allowance_types=allowance_types or [],
        attendance=attendance or [],
        overtime_approvals=overtime_approvals or [],
        overrides=overrides or ManualOverrides(),
    )
