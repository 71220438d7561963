"""Entity store: the reads and writes the payroll core depends on."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_admin.models import (
    Activity,
    Allowance,
    AllowanceType,
    Approval,
    Attendance,
    Deduction,
    DeductionType,
    Employee,
    PayrollItem,
    PayrollPeriod,
    Setting,
)
from payroll_admin.services.state_machine import ApprovalStatus


@dataclass(frozen=True)
class ApprovalDecision:
    """Fields an approval may change after creation, all set in one update."""

    status: str
    actor_id: int | None
    decided_at: datetime
    rejected_reason: str | None = None


@dataclass(frozen=True)
class PayrollPeriodTransition:
    """Status change of a payroll period, conditional on its current status."""

    from_status: str
    to_status: str
    processed_date: datetime | None = None


class EntityStore:
    """Async repository over the ORM session.

    Writes only flush; committing is the caller's unit of work.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # === Reads ===

    async def get_employee(self, employee_id: int) -> Employee | None:
        return await self.session.get(Employee, employee_id)

    async def get_payroll_period(self, period_id: int) -> PayrollPeriod | None:
        return await self.session.get(PayrollPeriod, period_id)

    async def get_attendance_by_employee_and_range(
        self, employee_id: int, start: date, end: date
    ) -> list[Attendance]:
        """Attendance rows of an employee with start <= date <= end."""
        result = await self.session.execute(
            select(Attendance)
            .where(
                Attendance.employee_id == employee_id,
                Attendance.work_date >= start,
                Attendance.work_date <= end,
            )
            .order_by(Attendance.work_date)
        )
        return list(result.scalars().all())

    async def get_approved_approvals(
        self, employee_id: int, approval_type: str, start: date, end: date
    ) -> list[Approval]:
        """Approved requests of a type whose start date lies in [start, end]."""
        result = await self.session.execute(
            select(Approval)
            .where(
                Approval.employee_id == employee_id,
                Approval.type == approval_type,
                Approval.status == ApprovalStatus.APPROVED.value,
                Approval.start_date >= start,
                Approval.start_date <= end,
            )
            .order_by(Approval.id)
        )
        return list(result.scalars().all())

    async def get_all_deduction_types(self) -> list[DeductionType]:
        result = await self.session.execute(select(DeductionType).order_by(DeductionType.id))
        return list(result.scalars().all())

    async def get_all_allowance_types(self) -> list[AllowanceType]:
        result = await self.session.execute(select(AllowanceType).order_by(AllowanceType.id))
        return list(result.scalars().all())

    async def get_setting(self, key: str) -> Setting | None:
        result = await self.session.execute(select(Setting).where(Setting.key == key))
        return result.scalar_one_or_none()

    async def get_all_settings(self) -> dict[str, str]:
        """All settings as a key → raw value mapping, read in one query."""
        result = await self.session.execute(select(Setting))
        return {s.key: s.value for s in result.scalars().all()}

    async def get_payroll_item(
        self, payroll_period_id: int, employee_id: int
    ) -> PayrollItem | None:
        result = await self.session.execute(
            select(PayrollItem).where(
                PayrollItem.payroll_period_id == payroll_period_id,
                PayrollItem.employee_id == employee_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_payroll_item_with_lines(self, item_id: int) -> PayrollItem | None:
        result = await self.session.execute(
            select(PayrollItem)
            .where(PayrollItem.id == item_id)
            .options(selectinload(PayrollItem.deductions), selectinload(PayrollItem.allowances))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_payroll_items_by_period(self, payroll_period_id: int) -> list[PayrollItem]:
        result = await self.session.execute(
            select(PayrollItem)
            .where(PayrollItem.payroll_period_id == payroll_period_id)
            .options(selectinload(PayrollItem.deductions), selectinload(PayrollItem.allowances))
            .order_by(PayrollItem.employee_id)
        )
        return list(result.scalars().all())

    async def get_approval(self, approval_id: int, refresh: bool = False) -> Approval | None:
        if refresh:
            return await self.session.get(Approval, approval_id, populate_existing=True)
        return await self.session.get(Approval, approval_id)

    async def get_pending_approvals(self) -> list[Approval]:
        result = await self.session.execute(
            select(Approval)
            .where(Approval.status == ApprovalStatus.PENDING.value)
            .order_by(Approval.request_date, Approval.id)
        )
        return list(result.scalars().all())

    async def get_recent_activities(self, limit: int) -> list[Activity]:
        result = await self.session.execute(
            select(Activity).order_by(Activity.timestamp.desc(), Activity.id.desc()).limit(limit)
        )
        return list(result.scalars().all())

    # === Writes ===

    async def create_payroll_item(self, item: PayrollItem) -> PayrollItem:
        """Insert a payroll item; the unique constraint surfaces as IntegrityError."""
        self.session.add(item)
        await self.session.flush()
        return item

    async def delete_payroll_item(self, item_id: int) -> None:
        """Remove an item and its lines (explicit recompute only)."""
        for stmt in (
            delete(Deduction).where(Deduction.payroll_item_id == item_id),
            delete(Allowance).where(Allowance.payroll_item_id == item_id),
            delete(PayrollItem).where(PayrollItem.id == item_id),
        ):
            await self.session.execute(stmt.execution_options(synchronize_session=False))
        await self.session.flush()

    async def create_deduction(self, row: Deduction) -> Deduction:
        self.session.add(row)
        await self.session.flush()
        return row

    async def create_allowance(self, row: Allowance) -> Allowance:
        self.session.add(row)
        await self.session.flush()
        return row

    async def create_approval(self, approval: Approval) -> Approval:
        self.session.add(approval)
        await self.session.flush()
        return approval

    async def update_approval(self, approval_id: int, decision: ApprovalDecision) -> bool:
        """Apply a decision only while the approval is pending.

        Returns False when no row was updated (missing or already decided).
        """
        values: dict[str, object] = {"status": decision.status}
        if decision.status == ApprovalStatus.APPROVED:
            values["approved_by"] = decision.actor_id
            values["approved_date"] = decision.decided_at
        else:
            values["rejected_reason"] = decision.rejected_reason

        result = await self.session.execute(
            update(Approval)
            .where(
                Approval.id == approval_id,
                Approval.status == ApprovalStatus.PENDING.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def update_payroll_period_status(
        self, period_id: int, transition: PayrollPeriodTransition
    ) -> bool:
        """Move a period between statuses with a compare-and-swap on status."""
        values: dict[str, object] = {"status": transition.to_status}
        if transition.processed_date is not None:
            values["processed_date"] = transition.processed_date

        conditions = [
            PayrollPeriod.id == period_id,
            PayrollPeriod.status == transition.from_status,
        ]
        if transition.processed_date is not None:
            conditions.append(PayrollPeriod.processed_date.is_(None))

        result = await self.session.execute(
            update(PayrollPeriod)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def update_payroll_item_status(
        self, item_id: int, from_status: str, to_status: str
    ) -> bool:
        result = await self.session.execute(
            update(PayrollItem)
            .where(PayrollItem.id == item_id, PayrollItem.status == from_status)
            .values(status=to_status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def mark_attendance_as_leave(
        self, employee_id: int, start: date, end: date
    ) -> int:
        """Set status 'leave' on the employee's attendance rows in [start, end]."""
        result = await self.session.execute(
            update(Attendance)
            .where(
                Attendance.employee_id == employee_id,
                Attendance.work_date >= start,
                Attendance.work_date <= end,
            )
            .values(status="leave")
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def create_activity(self, entry: Activity) -> Activity:
        self.session.add(entry)
        await self.session.flush()
        return entry
