"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from payroll_admin.calculators.types import AdHocAllowance, AllowanceRequest, ManualOverrides
from payroll_admin.services.approval_service import ApprovalPayload


# ============================================================================
# Common
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str
    code: str | None = None


# ============================================================================
# Payroll item schemas
# ============================================================================


class AllowanceInput(BaseModel):
    """Catalog allowance supplied for a computation."""

    allowance_type_id: int
    amount: Decimal
    notes: str | None = None


class AdHocAllowanceInput(BaseModel):
    """Allowance outside the catalog."""

    name: str
    amount: Decimal
    is_taxable: bool = True


class PayrollItemCreate(BaseModel):
    """Schema for computing a payroll item."""

    employee_id: int
    other_deductions: Decimal = Decimal("0")
    allowances: list[AllowanceInput] = Field(default_factory=list)
    ad_hoc_allowances: list[AdHocAllowanceInput] = Field(default_factory=list)
    hours_worked: Decimal | None = None
    notes: str | None = None
    replace: bool = False

    def to_overrides(self) -> ManualOverrides:
        return ManualOverrides(
            other_deductions=self.other_deductions,
            allowances=[
                AllowanceRequest(
                    allowance_type_id=a.allowance_type_id, amount=a.amount, notes=a.notes
                )
                for a in self.allowances
            ],
            ad_hoc_allowances=[
                AdHocAllowance(name=a.name, amount=a.amount, is_taxable=a.is_taxable)
                for a in self.ad_hoc_allowances
            ],
            hours_worked=self.hours_worked,
            notes=self.notes,
            replace=self.replace,
        )


class DeductionLineResponse(BaseModel):
    """Schema for a persisted deduction line."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    deduction_type_id: int
    amount: Decimal
    notes: str | None = None


class AllowanceLineResponse(BaseModel):
    """Schema for a persisted allowance line."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    allowance_type_id: int | None = None
    amount: Decimal
    notes: str | None = None


class PayrollItemResponse(BaseModel):
    """Schema for payroll item response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    payroll_period_id: int
    employee_id: int
    basic_salary: Decimal
    hours_worked: Decimal | None = None
    overtime_hours: Decimal
    overtime_amount: Decimal
    gross_pay: Decimal
    tax_amount: Decimal
    other_deductions: Decimal
    net_pay: Decimal
    status: str
    notes: str | None = None
    calculation_id: str
    deductions: list[DeductionLineResponse] = Field(default_factory=list)
    allowances: list[AllowanceLineResponse] = Field(default_factory=list)


class PayrollItemListResponse(BaseModel):
    """Schema for listing the items of a period."""

    items: list[PayrollItemResponse]
    total: int


class PayrollItemStatusUpdate(BaseModel):
    """Schema for advancing a payroll item's status."""

    status: str


class PayrollPeriodResponse(BaseModel):
    """Schema for payroll period response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    start_date: date
    end_date: date
    status: str
    processed_date: datetime | None = None


# ============================================================================
# Approval schemas
# ============================================================================


class ApprovalCreate(BaseModel):
    """Schema for submitting an approval request."""

    employee_id: int
    type: str
    start_date: date | None = None
    end_date: date | None = None
    hours: Decimal | None = None
    amount: Decimal | None = None
    notes: str | None = None

    def to_payload(self) -> ApprovalPayload:
        return ApprovalPayload(
            start_date=self.start_date,
            end_date=self.end_date,
            hours=self.hours,
            amount=self.amount,
            notes=self.notes,
        )


class RejectRequest(BaseModel):
    """Schema for rejecting a request; a blank reason is refused."""

    reason: str | None = None


class ApprovalResponse(BaseModel):
    """Schema for approval response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    type: str
    request_date: datetime
    start_date: date | None = None
    end_date: date | None = None
    hours: Decimal | None = None
    amount: Decimal | None = None
    status: str
    notes: str | None = None
    approved_by: int | None = None
    approved_date: datetime | None = None
    rejected_reason: str | None = None


class ApprovalListResponse(BaseModel):
    """Schema for listing approvals."""

    items: list[ApprovalResponse]
    total: int


# ============================================================================
# Activity schemas
# ============================================================================


class ActivityResponse(BaseModel):
    """Schema for an activity log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None = None
    action: str
    entity_type: str | None = None
    entity_id: int | None = None
    details: str | None = None
    timestamp: datetime
    ip_address: str | None = None


class ActivityListResponse(BaseModel):
    """Schema for listing activity entries."""

    items: list[ActivityResponse]
    total: int
