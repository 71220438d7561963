"""Type definitions for the calculation pipeline.

Everything here is a plain snapshot: the engine never touches the database,
so the service layer copies ORM rows into these before calculating.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class LineType(str, Enum):
    """Payroll item line types."""

    DEDUCTION = "DEDUCTION"
    TAX = "TAX"
    ALLOWANCE = "ALLOWANCE"


@dataclass(frozen=True)
class PayrollSettings:
    """Consistent snapshot of payroll policy settings for one calculation."""

    tax_rate: Decimal = Decimal("0.15")
    overtime_multiplier: Decimal = Decimal("1.5")
    standard_monthly_hours: Decimal = Decimal("160")
    income_tax_deduction_type: str = "Income Tax"

    def to_canonical_dict(self) -> dict[str, str]:
        return {
            "tax_rate": str(self.tax_rate),
            "overtime_multiplier": str(self.overtime_multiplier),
            "standard_monthly_hours": str(self.standard_monthly_hours),
            "income_tax_deduction_type": self.income_tax_deduction_type,
        }


@dataclass(frozen=True)
class EmployeeSnapshot:
    """Compensation basis of an employee at calculation time."""

    employee_id: int
    basic_salary: Decimal = Decimal("0")
    hourly_rate: Decimal | None = None

    @property
    def is_hourly(self) -> bool:
        return self.hourly_rate is not None and self.hourly_rate > 0


@dataclass(frozen=True)
class PeriodSnapshot:
    """Payroll period boundaries (inclusive)."""

    period_id: int
    start_date: date
    end_date: date
    status: str = "draft"

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class AttendanceSnapshot:
    """Attendance row used for hours aggregation."""

    work_date: date
    time_in: datetime
    time_out: datetime | None
    status: str = "present"

    @property
    def worked_hours(self) -> Decimal | None:
        if self.time_out is None:
            return None
        seconds = Decimal((self.time_out - self.time_in).total_seconds())
        return seconds / Decimal(3600)


@dataclass(frozen=True)
class OvertimeApprovalSnapshot:
    """Overtime request as seen by the engine; status is re-checked there."""

    approval_id: int
    approval_type: str
    status: str
    hours: Decimal | None
    start_date: date | None


@dataclass(frozen=True)
class DeductionTypeSnapshot:
    """Deduction catalog entry."""

    deduction_type_id: int
    name: str
    is_percentage: bool
    default_value: Decimal
    is_required: bool


@dataclass(frozen=True)
class AllowanceTypeSnapshot:
    """Allowance catalog entry."""

    allowance_type_id: int
    name: str
    is_taxable: bool = True


@dataclass(frozen=True)
class AllowanceRequest:
    """Allowance amount for a catalog type supplied by the caller."""

    allowance_type_id: int
    amount: Decimal
    notes: str | None = None


@dataclass(frozen=True)
class AdHocAllowance:
    """Allowance outside the catalog."""

    name: str
    amount: Decimal
    is_taxable: bool = True


@dataclass
class ManualOverrides:
    """Caller-supplied extras for a single computation.

    Overtime hours only come from approved overtime requests.
    """

    other_deductions: Decimal = Decimal("0")
    allowances: list[AllowanceRequest] = field(default_factory=list)
    ad_hoc_allowances: list[AdHocAllowance] = field(default_factory=list)
    hours_worked: Decimal | None = None
    notes: str | None = None
    replace: bool = False


@dataclass
class PayrollInputs:
    """Everything the engine needs to compute one payroll item."""

    employee: EmployeeSnapshot
    period: PeriodSnapshot
    settings: PayrollSettings
    deduction_types: list[DeductionTypeSnapshot] = field(default_factory=list)
    allowance_types: list[AllowanceTypeSnapshot] = field(default_factory=list)
    attendance: list[AttendanceSnapshot] = field(default_factory=list)
    overtime_approvals: list[OvertimeApprovalSnapshot] = field(default_factory=list)
    overrides: ManualOverrides = field(default_factory=ManualOverrides)


@dataclass
class LineCandidate:
    """A deduction, tax or allowance line before persistence."""

    line_type: LineType
    amount: Decimal  # Always non-negative; the line type carries the sign

    deduction_type_id: int | None = None
    allowance_type_id: int | None = None
    is_taxable: bool = False
    explanation: str | None = None
