"""Payroll calculation engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from payroll_admin.calculators.line_builder import LineItemBuilder
from payroll_admin.calculators.rate_resolver import RateResolver
from payroll_admin.calculators.tax_calculator import TaxCalculator
from payroll_admin.calculators.types import (
    AllowanceTypeSnapshot,
    LineCandidate,
    LineType,
    ManualOverrides,
    PayrollInputs,
)
from payroll_admin.config import get_settings
from payroll_admin.exceptions import InvalidInputError, NegativeNetPayError


@dataclass
class CalculationResult:
    """Result of calculating one payroll item."""

    employee_id: int
    payroll_period_id: int
    calculation_id: UUID
    basic_salary: Decimal
    hours_worked: Decimal | None
    overtime_hours: Decimal
    overtime_amount: Decimal
    gross_pay: Decimal
    tax_amount: Decimal
    other_deductions: Decimal
    net_pay: Decimal
    lines: list[LineCandidate]
    non_taxable_allowances: Decimal
    inputs_fingerprint: str

    @property
    def deduction_lines(self) -> list[LineCandidate]:
        """Catalog deduction lines, income tax included."""
        return [l for l in self.lines if l.line_type in (LineType.DEDUCTION, LineType.TAX)]

    @property
    def allowance_lines(self) -> list[LineCandidate]:
        return [l for l in self.lines if l.line_type == LineType.ALLOWANCE]


class PayrollEngine:
    """Payroll computation engine.

    Calculation pipeline (stable order, no I/O):
    1) Validate compensation basis and caller overrides
    2) Resolve hours worked and approved overtime hours
    3) Basic component (hourly × hours, or basic salary)
    4) Overtime amount at the overtime rate
    5) Allowance lines; taxable ones join gross
    6) Gross = basic + overtime + taxable allowances
    7) Required catalog deductions; income tax line or default-rate tax
    8) Net = gross - tax - other catalog deductions - ad hoc deductions
    9) Reject negative net pay

    The same inputs always produce the same result, including the
    calculation ID.
    """

    def __init__(self, engine_version: str | None = None):
        self.engine_version = engine_version or get_settings().engine_version

    def calculate(self, inputs: PayrollInputs) -> CalculationResult:
        """Compute a payroll item for one employee in one period."""
        employee = inputs.employee
        period = inputs.period
        overrides = inputs.overrides
        rate_resolver = RateResolver(inputs.settings)
        tax_calculator = TaxCalculator(inputs.settings)

        # 1) Validate
        rate_resolver.validate_compensation(employee)
        self._validate_overrides(overrides)

        # 2) Hours
        hours_worked = rate_resolver.resolve_hours_worked(
            employee, period, inputs.attendance, overrides.hours_worked
        )
        overtime_hours = rate_resolver.approved_overtime_hours(
            inputs.overtime_approvals, period
        )

        # 3-4) Earnings
        basic = rate_resolver.basic_component(employee, hours_worked)
        overtime_amount = rate_resolver.overtime_amount(employee, overtime_hours)

        # 5) Allowances
        allowance_lines = self._build_allowance_lines(overrides, inputs.allowance_types)

        # 6) Gross
        taxable_allowances = LineItemBuilder.sum_taxable_allowances(allowance_lines)
        gross = LineItemBuilder.round_to_cents(basic + overtime_amount + taxable_allowances)

        # 7) Deductions and tax
        deductions = tax_calculator.calculate(gross, inputs.deduction_types)
        other_deductions = LineItemBuilder.round_to_cents(overrides.other_deductions)

        # 8) Net
        net = gross - deductions.tax_amount - deductions.non_tax_total - other_deductions
        net = LineItemBuilder.round_to_cents(net)

        # 9) Never emit a negative payslip
        if net < 0:
            raise NegativeNetPayError(employee.employee_id, net)

        lines = deductions.lines + allowance_lines

        inputs_fingerprint = self._compute_inputs_fingerprint(
            self._canonical_inputs(inputs, hours_worked, overtime_hours)
        )
        calculation_id = self._generate_calculation_id(
            period.period_id, employee.employee_id, inputs_fingerprint
        )

        return CalculationResult(
            employee_id=employee.employee_id,
            payroll_period_id=period.period_id,
            calculation_id=calculation_id,
            basic_salary=basic,
            hours_worked=(
                LineItemBuilder.round_to_cents(hours_worked) if hours_worked is not None else None
            ),
            overtime_hours=LineItemBuilder.round_to_cents(overtime_hours),
            overtime_amount=overtime_amount,
            gross_pay=gross,
            tax_amount=deductions.tax_amount,
            other_deductions=other_deductions,
            net_pay=net,
            lines=lines,
            non_taxable_allowances=LineItemBuilder.sum_non_taxable_allowances(allowance_lines),
            inputs_fingerprint=inputs_fingerprint,
        )

    def _validate_overrides(self, overrides: ManualOverrides) -> None:
        if overrides.other_deductions is None or overrides.other_deductions < 0:
            raise InvalidInputError(
                f"other_deductions cannot be negative: {overrides.other_deductions}"
            )
        for req in overrides.allowances:
            if req.amount is None or req.amount < 0:
                raise InvalidInputError(
                    f"Allowance for type {req.allowance_type_id} cannot be negative: {req.amount}"
                )
        for adhoc in overrides.ad_hoc_allowances:
            if adhoc.amount is None or adhoc.amount < 0:
                raise InvalidInputError(
                    f"Allowance '{adhoc.name}' cannot be negative: {adhoc.amount}"
                )

    def _build_allowance_lines(
        self,
        overrides: ManualOverrides,
        allowance_types: list[AllowanceTypeSnapshot],
    ) -> list[LineCandidate]:
        """Build allowance lines: catalog requests first, then ad hoc entries."""
        catalog = {at.allowance_type_id: at for at in allowance_types}
        lines: list[LineCandidate] = []

        for req in sorted(overrides.allowances, key=lambda r: (r.allowance_type_id, r.amount)):
            allowance_type = catalog.get(req.allowance_type_id)
            if allowance_type is None:
                raise InvalidInputError(f"Unknown allowance type {req.allowance_type_id}")
            lines.append(
                LineItemBuilder.create_allowance_line(
                    amount=req.amount,
                    is_taxable=allowance_type.is_taxable,
                    allowance_type_id=allowance_type.allowance_type_id,
                    explanation=req.notes or allowance_type.name,
                )
            )

        for adhoc in sorted(overrides.ad_hoc_allowances, key=lambda a: (a.name, a.amount)):
            lines.append(
                LineItemBuilder.create_allowance_line(
                    amount=adhoc.amount,
                    is_taxable=adhoc.is_taxable,
                    explanation=adhoc.name,
                )
            )

        return lines

    @staticmethod
    def _canonical_inputs(
        inputs: PayrollInputs, hours_worked: Decimal | None, overtime_hours: Decimal
    ) -> dict[str, Any]:
        """Inputs that determine the result, in a stable representation."""
        overrides = inputs.overrides
        return {
            "employee": {
                "basic_salary": str(inputs.employee.basic_salary),
                "hourly_rate": (
                    str(inputs.employee.hourly_rate)
                    if inputs.employee.hourly_rate is not None
                    else None
                ),
            },
            "period": [str(inputs.period.start_date), str(inputs.period.end_date)],
            "settings": inputs.settings.to_canonical_dict(),
            "hours_worked": str(hours_worked) if hours_worked is not None else None,
            "overtime_hours": str(overtime_hours),
            "deduction_types": sorted(
                [
                    [dt.deduction_type_id, dt.name, dt.is_percentage,
                     str(dt.default_value), dt.is_required]
                    for dt in inputs.deduction_types
                ]
            ),
            "allowances": sorted(
                [[r.allowance_type_id, str(r.amount)] for r in overrides.allowances]
            ),
            "ad_hoc_allowances": sorted(
                [[a.name, str(a.amount), a.is_taxable] for a in overrides.ad_hoc_allowances]
            ),
            "other_deductions": str(overrides.other_deductions),
        }

    def _generate_calculation_id(
        self,
        payroll_period_id: int,
        employee_id: int,
        inputs_fingerprint: str,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "payroll_period_id": payroll_period_id,
            "employee_id": employee_id,
            "engine_version": self.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

    def _compute_inputs_fingerprint(self, inputs_data: dict[str, Any]) -> str:
        """Compute fingerprint of all inputs used in calculation."""
        json_str = json.dumps(inputs_data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]
