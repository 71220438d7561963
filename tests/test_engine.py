"""Tests for the payroll calculation engine."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from payroll_admin.calculators.engine import PayrollEngine
from payroll_admin.calculators.types import (
    AdHocAllowance,
    AllowanceRequest,
    AttendanceSnapshot,
    DeductionTypeSnapshot,
    EmployeeSnapshot,
    LineType,
    ManualOverrides,
    PayrollSettings,
)
from payroll_admin.exceptions import (
    InvalidInputError,
    MissingCompensationBasisError,
    NegativeNetPayError,
)
from tests.conftest import make_attendance, make_inputs, make_overtime


class TestExampleScenarios:
    """Reference scenarios for salaried and hourly pay."""

    def test_salaried_employee_with_income_tax(self, engine, salaried_employee, period, income_tax_type):
        """5000 salary, 15% income tax → gross 5000, tax 750, net 4250."""
        result = engine.calculate(
            make_inputs(salaried_employee, period, deduction_types=[income_tax_type])
        )

        assert result.gross_pay == Decimal("5000.00")
        assert result.tax_amount == Decimal("750.00")
        assert result.net_pay == Decimal("4250.00")
        assert result.overtime_amount == Decimal("0.00")
        assert result.hours_worked is None

        tax_lines = [l for l in result.lines if l.line_type == LineType.TAX]
        assert len(tax_lines) == 1
        assert tax_lines[0].deduction_type_id == income_tax_type.deduction_type_id
        assert tax_lines[0].amount == Decimal("750.00")

    def test_hourly_employee_with_approved_overtime(
        self, engine, hourly_employee, period, income_tax_type
    ):
        """160h at 20 plus 10 approved overtime hours at 1.5x."""
        result = engine.calculate(
            make_inputs(
                hourly_employee,
                period,
                deduction_types=[income_tax_type],
                overtime_approvals=[make_overtime(1, "10", date(2024, 1, 15))],
                overrides=ManualOverrides(hours_worked=Decimal("160")),
            )
        )

        assert result.hours_worked == Decimal("160.00")
        assert result.overtime_hours == Decimal("10.00")
        assert result.overtime_amount == Decimal("300.00")
        assert result.basic_salary == Decimal("3200.00")
        assert result.gross_pay == Decimal("3500.00")
        assert result.tax_amount == Decimal("525.00")
        assert result.net_pay == Decimal("2975.00")

    def test_no_compensation_basis(self, engine, period):
        employee = EmployeeSnapshot(employee_id=12, basic_salary=Decimal("0"))

        with pytest.raises(MissingCompensationBasisError) as exc_info:
            engine.calculate(make_inputs(employee, period))

        assert exc_info.value.employee_id == 12


class TestOvertimeGating:
    """Only approved overtime inside the period is paid."""

    def test_pending_and_rejected_overtime_ignored(self, engine, hourly_employee, period):
        result = engine.calculate(
            make_inputs(
                hourly_employee,
                period,
                overtime_approvals=[
                    make_overtime(1, "4", date(2024, 1, 10), status="pending"),
                    make_overtime(2, "6", date(2024, 1, 11), status="rejected"),
                ],
                overrides=ManualOverrides(hours_worked=Decimal("100")),
            )
        )

        assert result.overtime_hours == Decimal("0.00")
        assert result.overtime_amount == Decimal("0.00")

    def test_overtime_outside_period_ignored(self, engine, hourly_employee, period):
        result = engine.calculate(
            make_inputs(
                hourly_employee,
                period,
                overtime_approvals=[
                    make_overtime(1, "4", date(2023, 12, 31)),
                    make_overtime(2, "2", date(2024, 1, 31)),
                ],
                overrides=ManualOverrides(hours_worked=Decimal("100")),
            )
        )

        assert result.overtime_hours == Decimal("2.00")
        assert result.overtime_amount == Decimal("60.00")

    def test_salaried_overtime_uses_standard_hours(self, engine, salaried_employee, period, income_tax_type):
        """5000 / 160 × 1.5 = 46.875 per hour; 4h → 187.50."""
        result = engine.calculate(
            make_inputs(
                salaried_employee,
                period,
                deduction_types=[income_tax_type],
                overtime_approvals=[make_overtime(1, "4", date(2024, 1, 20))],
            )
        )

        assert result.overtime_amount == Decimal("187.50")
        assert result.gross_pay == Decimal("5187.50")
        # 778.125 rounds half-up
        assert result.tax_amount == Decimal("778.13")
        assert result.net_pay == Decimal("4409.37")


class TestHoursFromAttendance:
    def test_hourly_pay_from_attendance(self, engine, hourly_employee, period):
        attendance = [
            make_attendance(date(2024, 1, 2), 8),
            make_attendance(date(2024, 1, 3), 8, status="late"),
            make_attendance(date(2024, 1, 4), 8),
            make_attendance(date(2024, 1, 5), 8, status="absent"),
            make_attendance(date(2024, 2, 1), 8),
        ]

        result = engine.calculate(make_inputs(hourly_employee, period, attendance=attendance))

        assert result.hours_worked == Decimal("24.00")
        assert result.basic_salary == Decimal("480.00")

    def test_explicit_hours_override_attendance(self, engine, hourly_employee, period):
        result = engine.calculate(
            make_inputs(
                hourly_employee,
                period,
                attendance=[make_attendance(date(2024, 1, 2), 8)],
                overrides=ManualOverrides(hours_worked=Decimal("10")),
            )
        )

        assert result.hours_worked == Decimal("10.00")
        assert result.basic_salary == Decimal("200.00")

    def test_partial_hour_shift_pays_exact_minutes(self, engine, period):
        employee = EmployeeSnapshot(
            employee_id=11, basic_salary=Decimal("0"), hourly_rate=Decimal("100")
        )
        shift = AttendanceSnapshot(
            work_date=date(2024, 1, 2),
            time_in=datetime(2024, 1, 2, 9, 0),
            time_out=datetime(2024, 1, 2, 9, 20),
            status="present",
        )

        result = engine.calculate(make_inputs(employee, period, attendance=[shift]))

        # 20 minutes at 100/h; hours are rounded only for storage
        assert result.hours_worked == Decimal("0.33")
        assert result.basic_salary == Decimal("33.33")

    def test_fractional_explicit_hours(self, engine, hourly_employee, period):
        result = engine.calculate(
            make_inputs(
                hourly_employee,
                period,
                overrides=ManualOverrides(hours_worked=Decimal("7.456")),
            )
        )

        assert result.hours_worked == Decimal("7.46")
        assert result.basic_salary == Decimal("149.12")


class TestAllowances:
    def test_taxable_allowance_joins_gross(
        self, engine, salaried_employee, period, income_tax_type, allowance_types
    ):
        overrides = ManualOverrides(
            allowances=[
                AllowanceRequest(allowance_type_id=1, amount=Decimal("200")),
                AllowanceRequest(allowance_type_id=3, amount=Decimal("500")),
            ]
        )

        result = engine.calculate(
            make_inputs(
                salaried_employee,
                period,
                deduction_types=[income_tax_type],
                allowance_types=allowance_types,
                overrides=overrides,
            )
        )

        assert result.gross_pay == Decimal("5500.00")
        assert result.tax_amount == Decimal("825.00")
        assert result.net_pay == Decimal("4675.00")
        assert result.non_taxable_allowances == Decimal("200")
        assert len(result.allowance_lines) == 2

    def test_ad_hoc_allowance(self, engine, salaried_employee, period):
        overrides = ManualOverrides(
            ad_hoc_allowances=[AdHocAllowance(name="Relocation", amount=Decimal("300"))]
        )

        result = engine.calculate(make_inputs(salaried_employee, period, overrides=overrides))

        line = result.allowance_lines[0]
        assert line.allowance_type_id is None
        assert line.explanation == "Relocation"
        assert result.gross_pay == Decimal("5300.00")

    def test_unknown_allowance_type(self, engine, salaried_employee, period, allowance_types):
        overrides = ManualOverrides(
            allowances=[AllowanceRequest(allowance_type_id=99, amount=Decimal("10"))]
        )

        with pytest.raises(InvalidInputError):
            engine.calculate(
                make_inputs(
                    salaried_employee,
                    period,
                    allowance_types=allowance_types,
                    overrides=overrides,
                )
            )

    def test_negative_allowance_rejected(self, engine, salaried_employee, period):
        overrides = ManualOverrides(
            ad_hoc_allowances=[AdHocAllowance(name="Oops", amount=Decimal("-1"))]
        )

        with pytest.raises(InvalidInputError):
            engine.calculate(make_inputs(salaried_employee, period, overrides=overrides))


class TestDeductions:
    def test_flat_and_percentage_deductions(self, engine, salaried_employee, period, income_tax_type):
        deduction_types = [
            income_tax_type,
            DeductionTypeSnapshot(
                deduction_type_id=2,
                name="Health Insurance",
                is_percentage=False,
                default_value=Decimal("100"),
                is_required=True,
            ),
            DeductionTypeSnapshot(
                deduction_type_id=3,
                name="Pension",
                is_percentage=True,
                default_value=Decimal("5"),
                is_required=True,
            ),
            DeductionTypeSnapshot(
                deduction_type_id=4,
                name="Union Dues",
                is_percentage=False,
                default_value=Decimal("25"),
                is_required=False,
            ),
        ]

        result = engine.calculate(
            make_inputs(salaried_employee, period, deduction_types=deduction_types)
        )

        amounts = {l.deduction_type_id: l.amount for l in result.deduction_lines}
        assert amounts == {1: Decimal("750.00"), 2: Decimal("100.00"), 3: Decimal("250.00")}
        assert sum(l.amount for l in result.deduction_lines) == Decimal("1100.00")
        assert result.net_pay == Decimal("3900.00")

    def test_default_tax_rate_without_income_tax_type(self, engine, salaried_employee, period):
        settings = PayrollSettings(tax_rate=Decimal("0.10"))

        result = engine.calculate(make_inputs(salaried_employee, period, settings=settings))

        assert result.tax_amount == Decimal("500.00")
        assert result.lines == []
        assert result.net_pay == Decimal("4500.00")

    def test_other_deductions_applied_after_tax(self, engine, salaried_employee, period, income_tax_type):
        result = engine.calculate(
            make_inputs(
                salaried_employee,
                period,
                deduction_types=[income_tax_type],
                overrides=ManualOverrides(other_deductions=Decimal("250")),
            )
        )

        assert result.tax_amount == Decimal("750.00")
        assert result.other_deductions == Decimal("250.00")
        assert result.net_pay == Decimal("4000.00")

    def test_negative_net_pay_rejected(self, engine, period):
        employee = EmployeeSnapshot(employee_id=5, basic_salary=Decimal("1000"))

        with pytest.raises(NegativeNetPayError) as exc_info:
            engine.calculate(
                make_inputs(
                    employee,
                    period,
                    overrides=ManualOverrides(other_deductions=Decimal("2000")),
                )
            )

        assert exc_info.value.net_pay < 0

    def test_negative_other_deductions_rejected(self, engine, salaried_employee, period):
        with pytest.raises(InvalidInputError):
            engine.calculate(
                make_inputs(
                    salaried_employee,
                    period,
                    overrides=ManualOverrides(other_deductions=Decimal("-5")),
                )
            )


class TestDeterminism:
    def test_same_inputs_same_result(self, engine, hourly_employee, period, income_tax_type, allowance_types):
        def build():
            return make_inputs(
                hourly_employee,
                period,
                deduction_types=[income_tax_type],
                allowance_types=allowance_types,
                attendance=[make_attendance(date(2024, 1, 2), 8)],
                overtime_approvals=[make_overtime(1, "3", date(2024, 1, 2))],
                overrides=ManualOverrides(
                    allowances=[AllowanceRequest(allowance_type_id=3, amount=Decimal("50"))]
                ),
            )

        first = engine.calculate(build())
        second = engine.calculate(build())

        assert first.calculation_id == second.calculation_id
        assert first.inputs_fingerprint == second.inputs_fingerprint
        assert first.net_pay == second.net_pay
        assert first.lines == second.lines

    def test_engine_version_changes_calculation_id(self, salaried_employee, period):
        inputs = make_inputs(salaried_employee, period)

        v1 = PayrollEngine(engine_version="1.0.0").calculate(inputs)
        v2 = PayrollEngine(engine_version="2.0.0").calculate(inputs)

        assert v1.net_pay == v2.net_pay
        assert v1.calculation_id != v2.calculation_id

    def test_different_inputs_different_fingerprint(self, engine, salaried_employee, period):
        base = engine.calculate(make_inputs(salaried_employee, period))
        with_deduction = engine.calculate(
            make_inputs(
                salaried_employee,
                period,
                overrides=ManualOverrides(other_deductions=Decimal("1")),
            )
        )

        assert base.inputs_fingerprint != with_deduction.inputs_fingerprint
