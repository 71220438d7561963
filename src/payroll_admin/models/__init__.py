"""ORM models."""

from payroll_admin.models.base import Base, TimestampMixin
from payroll_admin.models.employee import Attendance, Department, Employee
from payroll_admin.models.payroll import (
    Allowance,
    AllowanceType,
    Deduction,
    DeductionType,
    PayrollItem,
    PayrollPeriod,
    Setting,
)
from payroll_admin.models.workflow import Activity, Approval

__all__ = [
    "Activity",
    "Allowance",
    "AllowanceType",
    "Approval",
    "Attendance",
    "Base",
    "Deduction",
    "DeductionType",
    "Department",
    "Employee",
    "PayrollItem",
    "PayrollPeriod",
    "Setting",
    "TimestampMixin",
]
