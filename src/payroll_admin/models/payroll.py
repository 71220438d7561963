"""Payroll period, payroll item, deduction/allowance catalog and setting models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_admin.models.base import Base, HOURS, MONEY, TimestampMixin

if TYPE_CHECKING:
    from payroll_admin.models.employee import Employee


# ===== Periods & Items =====


class PayrollPeriod(Base, TimestampMixin):
    """Pay period date range; drives which attendance rows are aggregated."""

    __tablename__ = "payroll_period"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    processed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("start_date", "end_date", name="payroll_period_dates_unique"),
        CheckConstraint(
            "status IN ('draft', 'processing', 'processed')",
            name="payroll_period_status_check",
        ),
        CheckConstraint("end_date >= start_date", name="payroll_period_dates_check"),
    )

    # Relationships
    items: Mapped[list[PayrollItem]] = relationship(back_populates="payroll_period")


class PayrollItem(Base, TimestampMixin):
    """Computed pay for one employee in one period."""

    __tablename__ = "payroll_item"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    payroll_period_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payroll_period.id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.id", ondelete="RESTRICT"),
        nullable=False,
    )
    basic_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    hours_worked: Mapped[Decimal | None] = mapped_column(HOURS, nullable=True)
    overtime_hours: Mapped[Decimal] = mapped_column(HOURS, nullable=False, default=Decimal("0"))
    overtime_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    gross_pay: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    other_deductions: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    net_pay: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    calculation_id: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "payroll_period_id", "employee_id", name="payroll_item_period_employee_unique"
        ),
        Index("payroll_item_period_employee_idx", "payroll_period_id", "employee_id"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'paid')",
            name="payroll_item_status_check",
        ),
        CheckConstraint("net_pay >= 0", name="payroll_item_net_pay_check"),
    )

    # Relationships
    payroll_period: Mapped[PayrollPeriod] = relationship(back_populates="items")
    employee: Mapped[Employee] = relationship(back_populates="payroll_items")
    deductions: Mapped[list[Deduction]] = relationship(
        back_populates="payroll_item", cascade="all, delete-orphan"
    )
    allowances: Mapped[list[Allowance]] = relationship(
        back_populates="payroll_item", cascade="all, delete-orphan"
    )


# ===== Deduction & Allowance Catalogs =====


class DeductionType(Base):
    """Catalog entry for a deduction kind (percentage of gross or flat)."""

    __tablename__ = "deduction_type"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_percentage: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    default_value: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Deduction(Base):
    """Resolved deduction line of a payroll item."""

    __tablename__ = "deduction"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    payroll_item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payroll_item.id", ondelete="CASCADE"),
        nullable=False,
    )
    deduction_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("deduction_type.id", ondelete="RESTRICT"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("deduction_item_type_idx", "payroll_item_id", "deduction_type_id"),
    )

    # Relationships
    payroll_item: Mapped[PayrollItem] = relationship(back_populates="deductions")
    deduction_type: Mapped[DeductionType] = relationship()


class AllowanceType(Base):
    """Catalog entry for an allowance kind."""

    __tablename__ = "allowance_type"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_taxable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Allowance(Base):
    """Allowance line of a payroll item; ad hoc lines carry no type."""

    __tablename__ = "allowance"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    payroll_item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payroll_item.id", ondelete="CASCADE"),
        nullable=False,
    )
    allowance_type_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("allowance_type.id", ondelete="RESTRICT"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("allowance_item_type_idx", "payroll_item_id", "allowance_type_id"),
    )

    # Relationships
    payroll_item: Mapped[PayrollItem] = relationship(back_populates="allowances")
    allowance_type: Mapped[AllowanceType | None] = relationship()


# ===== Settings =====


class Setting(Base):
    """Key/value configuration row (parsed into PayrollSettings on read)."""

    __tablename__ = "setting"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
