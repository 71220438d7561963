"""Employee, department and attendance models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
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

from payroll_admin.models.base import Base, MONEY, TimestampMixin

if TYPE_CHECKING:
    from payroll_admin.models.payroll import PayrollItem
    from payroll_admin.models.workflow import Approval


class Department(Base):
    """Organisational department."""

    __tablename__ = "department"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class Employee(Base, TimestampMixin):
    """Employee record with its compensation basis.

    ``hourly_rate`` makes pay hours-driven; otherwise ``basic_salary`` is the
    fixed per-period amount.
    """

    __tablename__ = "employee"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    position: Mapped[str] = mapped_column(String, nullable=False)
    department: Mapped[str] = mapped_column(String, nullable=False)
    date_hired: Mapped[date] = mapped_column(Date, nullable=False)
    date_terminated: Mapped[date | None] = mapped_column(Date, nullable=True)
    basic_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    hourly_rate: Mapped[Decimal | None] = mapped_column(MONEY, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    tax_id: Mapped[str | None] = mapped_column(String, nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String, nullable=True)
    bank_account_number: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'on_leave', 'terminated')",
            name="employee_status_check",
        ),
    )

    # Relationships
    attendance: Mapped[list[Attendance]] = relationship(back_populates="employee")
    payroll_items: Mapped[list[PayrollItem]] = relationship(back_populates="employee")
    approvals: Mapped[list[Approval]] = relationship(back_populates="employee")


class Attendance(Base):
    """One check-in/check-out record per employee per day."""

    __tablename__ = "attendance"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    time_in: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    time_out: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="present")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="attendance_employee_date_unique"),
        Index("attendance_employee_date_idx", "employee_id", "date"),
        CheckConstraint(
            "status IN ('present', 'absent', 'late', 'half_day', 'leave')",
            name="attendance_status_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="attendance")

    @property
    def worked_hours(self) -> Decimal | None:
        """Hours between check-in and check-out, None while checked in."""
        if self.time_in is None or self.time_out is None:
            return None
        seconds = Decimal((self.time_out - self.time_in).total_seconds())
        return seconds / Decimal(3600)
