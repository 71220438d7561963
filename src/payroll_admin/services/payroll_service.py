"""Payroll service - orchestrates snapshot loading, calculation and persistence."""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.calculators.engine import CalculationResult, PayrollEngine
from payroll_admin.calculators.types import (
    AllowanceTypeSnapshot,
    AttendanceSnapshot,
    DeductionTypeSnapshot,
    EmployeeSnapshot,
    LineType,
    ManualOverrides,
    OvertimeApprovalSnapshot,
    PayrollInputs,
    PeriodSnapshot,
)
from payroll_admin.exceptions import (
    DuplicatePayrollItemError,
    EntityNotFoundError,
    InvalidTransitionError,
    PayrollPeriodLockedError,
)
from payroll_admin.models import (
    Allowance,
    Deduction,
    Employee,
    PayrollItem,
    PayrollPeriod,
)
from payroll_admin.services.activity_log import ActivityLog
from payroll_admin.services.entity_store import EntityStore, PayrollPeriodTransition
from payroll_admin.services.settings_service import SettingsService
from payroll_admin.services.state_machine import (
    PayrollItemStateMachine,
    PayrollPeriodStateMachine,
    PayrollPeriodStatus,
)

logger = logging.getLogger(__name__)


class PayrollService:
    """Service for computing and persisting payroll items.

    Operations:
    - compute_payroll_item: calculate and persist one item with its lines
    - recompute_payroll_item: explicit replace of an existing item
    - start_processing / finalize_period: period lifecycle
    - transition_item: pending → approved → paid

    Uniqueness of (period, employee) is enforced by the database; a
    concurrent second insert fails with DuplicatePayrollItemError and the
    caller's unit of work must be rolled back.
    """

    def __init__(
        self,
        session: AsyncSession,
        engine: PayrollEngine | None = None,
        ip_address: str | None = None,
    ):
        self.session = session
        self.store = EntityStore(session)
        self.settings_service = SettingsService(self.store)
        self.activity_log = ActivityLog(session, self.store, ip_address)
        self.engine = engine or PayrollEngine()

    async def compute_payroll_item(
        self,
        period_id: int,
        employee_id: int,
        overrides: ManualOverrides | None = None,
        actor_id: int | None = None,
    ) -> PayrollItem:
        """Compute and persist the payroll item for (period, employee).

        Raises:
            EntityNotFoundError: unknown period or employee
            PayrollPeriodLockedError: the period is processed
            DuplicatePayrollItemError: an item exists and replace was not requested
            InvalidInputError, MissingCompensationBasisError, NegativeNetPayError:
                from the engine
        """
        overrides = overrides or ManualOverrides()

        period = await self._get_period(period_id)
        if not PayrollPeriodStateMachine.can_calculate(period.status):
            raise PayrollPeriodLockedError(period_id)

        employee = await self.store.get_employee(employee_id)
        if employee is None:
            raise EntityNotFoundError("Employee", employee_id)

        existing = await self.store.get_payroll_item(period_id, employee_id)
        if existing is not None and not overrides.replace:
            raise DuplicatePayrollItemError(period_id, employee_id)

        inputs = await self.build_inputs(period, employee, overrides)
        result = self.engine.calculate(inputs)

        replaced = existing is not None
        if existing is not None:
            await self.store.delete_payroll_item(existing.id)
            self.session.expunge(existing)

        item = await self._persist(result, overrides)

        logger.info(
            "Computed payroll item %s for employee %s in period %s (net %s)",
            item.id,
            employee_id,
            period_id,
            item.net_pay,
        )
        await self.activity_log.record(
            action="recompute" if replaced else "create",
            user_id=actor_id,
            entity_type="payrollItem",
            entity_id=item.id,
            details=(
                f"{'Recomputed' if replaced else 'Created'} payroll item for employee ID: "
                f"{employee_id} in period ID: {period_id}"
            ),
        )
        return item

    async def recompute_payroll_item(
        self,
        period_id: int,
        employee_id: int,
        overrides: ManualOverrides | None = None,
        actor_id: int | None = None,
    ) -> PayrollItem:
        """Replace an existing item with a fresh calculation."""
        overrides = dataclasses.replace(overrides or ManualOverrides(), replace=True)
        return await self.compute_payroll_item(period_id, employee_id, overrides, actor_id)

    async def preview_payroll_item(
        self,
        period_id: int,
        employee_id: int,
        overrides: ManualOverrides | None = None,
    ) -> CalculationResult:
        """Run the engine against current data without persisting anything."""
        period = await self._get_period(period_id)
        employee = await self.store.get_employee(employee_id)
        if employee is None:
            raise EntityNotFoundError("Employee", employee_id)
        inputs = await self.build_inputs(period, employee, overrides or ManualOverrides())
        return self.engine.calculate(inputs)

    async def build_inputs(
        self,
        period: PayrollPeriod,
        employee: Employee,
        overrides: ManualOverrides,
    ) -> PayrollInputs:
        """Load one consistent snapshot of everything the engine reads."""
        settings = await self.settings_service.load()
        deduction_types = await self.store.get_all_deduction_types()
        allowance_types = await self.store.get_all_allowance_types()
        attendance = await self.store.get_attendance_by_employee_and_range(
            employee.id, period.start_date, period.end_date
        )
        overtime = await self.store.get_approved_approvals(
            employee.id, "overtime", period.start_date, period.end_date
        )

        return PayrollInputs(
            employee=EmployeeSnapshot(
                employee_id=employee.id,
                basic_salary=employee.basic_salary,
                hourly_rate=employee.hourly_rate,
            ),
            period=PeriodSnapshot(
                period_id=period.id,
                start_date=period.start_date,
                end_date=period.end_date,
                status=period.status,
            ),
            settings=settings,
            deduction_types=[
                DeductionTypeSnapshot(
                    deduction_type_id=dt.id,
                    name=dt.name,
                    is_percentage=dt.is_percentage,
                    default_value=dt.default_value,
                    is_required=dt.is_required,
                )
                for dt in deduction_types
            ],
            allowance_types=[
                AllowanceTypeSnapshot(
                    allowance_type_id=at.id, name=at.name, is_taxable=at.is_taxable
                )
                for at in allowance_types
            ],
            attendance=[
                AttendanceSnapshot(
                    work_date=a.work_date,
                    time_in=a.time_in,
                    time_out=a.time_out,
                    status=a.status,
                )
                for a in attendance
            ],
            overtime_approvals=[
                OvertimeApprovalSnapshot(
                    approval_id=a.id,
                    approval_type=a.type,
                    status=a.status,
                    hours=a.hours,
                    start_date=a.start_date,
                )
                for a in overtime
            ],
            overrides=overrides,
        )

    async def list_period_items(self, period_id: int) -> list[PayrollItem]:
        await self._get_period(period_id)
        return await self.store.get_payroll_items_by_period(period_id)

    async def get_item(self, item_id: int) -> PayrollItem:
        item = await self.store.get_payroll_item_with_lines(item_id)
        if item is None:
            raise EntityNotFoundError("PayrollItem", item_id)
        return item

    async def get_item_lines(self, item_id: int) -> tuple[list[Deduction], list[Allowance]]:
        item = await self.get_item(item_id)
        return list(item.deductions), list(item.allowances)

    async def start_processing(
        self, period_id: int, actor_id: int | None = None
    ) -> PayrollPeriod:
        """draft → processing."""
        return await self._transition_period(
            period_id, PayrollPeriodStatus.PROCESSING, actor_id
        )

    async def finalize_period(
        self, period_id: int, actor_id: int | None = None
    ) -> PayrollPeriod:
        """processing → processed; processed_date is set exactly once."""
        return await self._transition_period(
            period_id, PayrollPeriodStatus.PROCESSED, actor_id
        )

    async def transition_item(
        self, item_id: int, to_status: str, actor_id: int | None = None
    ) -> PayrollItem:
        """Advance a payroll item's status (pending → approved → paid)."""
        item = await self.get_item(item_id)
        from_status = item.status
        to_status = str(to_status)
        PayrollItemStateMachine.validate_transition(from_status, to_status)

        updated = await self.store.update_payroll_item_status(item_id, from_status, to_status)
        if not updated:
            raise InvalidTransitionError(from_status, to_status, "Status changed concurrently")

        await self.activity_log.record(
            action=to_status,
            user_id=actor_id,
            entity_type="payrollItem",
            entity_id=item_id,
            details=f"Payroll item status {from_status} -> {to_status}",
        )
        return await self.get_item(item_id)

    async def _transition_period(
        self, period_id: int, target: PayrollPeriodStatus, actor_id: int | None
    ) -> PayrollPeriod:
        period = await self._get_period(period_id)
        from_status = period.status
        to_status = target.value
        PayrollPeriodStateMachine.validate_transition(from_status, to_status)

        processed_date = None
        if to_status == PayrollPeriodStatus.PROCESSED:
            processed_date = datetime.now(timezone.utc)

        updated = await self.store.update_payroll_period_status(
            period_id,
            PayrollPeriodTransition(
                from_status=from_status,
                to_status=to_status,
                processed_date=processed_date,
            ),
        )
        if not updated:
            raise InvalidTransitionError(
                from_status, to_status, "Status changed concurrently"
            )

        await self.activity_log.record(
            action="process" if to_status == PayrollPeriodStatus.PROCESSED else "update",
            user_id=actor_id,
            entity_type="payrollPeriod",
            entity_id=period_id,
            details=f"Payroll period {period.start_date} to {period.end_date}: "
            f"{from_status} -> {to_status}",
        )
        return await self._get_period(period_id, refresh=True)

    async def _get_period(self, period_id: int, refresh: bool = False) -> PayrollPeriod:
        if refresh:
            period = await self.session.get(PayrollPeriod, period_id, populate_existing=True)
        else:
            period = await self.store.get_payroll_period(period_id)
        if period is None:
            raise EntityNotFoundError("PayrollPeriod", period_id)
        return period

    async def _persist(
        self, result: CalculationResult, overrides: ManualOverrides
    ) -> PayrollItem:
        """Write the item and its line rows."""
        item = PayrollItem(
            payroll_period_id=result.payroll_period_id,
            employee_id=result.employee_id,
            basic_salary=result.basic_salary,
            hours_worked=result.hours_worked,
            overtime_hours=result.overtime_hours,
            overtime_amount=result.overtime_amount,
            gross_pay=result.gross_pay,
            tax_amount=result.tax_amount,
            other_deductions=result.other_deductions,
            net_pay=result.net_pay,
            status="pending",
            notes=overrides.notes,
            calculation_id=str(result.calculation_id),
        )
        try:
            await self.store.create_payroll_item(item)
        except IntegrityError as e:
            if "unique" in str(e.orig).lower():
                raise DuplicatePayrollItemError(
                    result.payroll_period_id, result.employee_id
                ) from e
            raise

        for line in result.lines:
            if line.line_type == LineType.ALLOWANCE:
                await self.store.create_allowance(
                    Allowance(
                        payroll_item_id=item.id,
                        allowance_type_id=line.allowance_type_id,
                        amount=line.amount,
                        notes=line.explanation,
                    )
                )
            else:
                await self.store.create_deduction(
                    Deduction(
                        payroll_item_id=item.id,
                        deduction_type_id=line.deduction_type_id,
                        amount=line.amount,
                        notes=line.explanation,
                    )
                )

        return await self.get_item(item.id)
