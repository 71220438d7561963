"""Catalog deduction resolution and income tax."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_admin.calculators.line_builder import LineItemBuilder
from payroll_admin.calculators.types import (
    DeductionTypeSnapshot,
    LineCandidate,
    LineType,
    PayrollSettings,
)
from payroll_admin.exceptions import InvalidInputError


@dataclass
class DeductionResult:
    """Resolved catalog deductions for one payroll item."""

    lines: list[LineCandidate]
    tax_amount: Decimal
    tax_from_catalog: bool

    @property
    def non_tax_total(self) -> Decimal:
        return sum(
            (l.amount for l in self.lines if l.line_type == LineType.DEDUCTION),
            Decimal("0"),
        )


class TaxCalculator:
    """Applies required deduction types to gross pay.

    Every required DeductionType produces one line: percentage types take
    ``default_value`` percent of gross, flat types take ``default_value``
    verbatim. The required type whose name matches
    ``settings.income_tax_deduction_type`` (case-insensitive) is the income
    tax line. Without one, tax falls back to ``gross × settings.tax_rate``
    and no catalog line is emitted for it.
    """

    def __init__(self, settings: PayrollSettings):
        self.settings = settings

    @staticmethod
    def validate_catalog(deduction_types: list[DeductionTypeSnapshot]) -> None:
        """Reject catalog entries that would produce negative deductions."""
        for dt in deduction_types:
            if dt.default_value is None or dt.default_value < 0:
                raise InvalidInputError(
                    f"Deduction type '{dt.name}' has negative default value {dt.default_value}"
                )

    def is_income_tax(self, deduction_type: DeductionTypeSnapshot) -> bool:
        return (
            deduction_type.name.strip().lower()
            == self.settings.income_tax_deduction_type.strip().lower()
        )

    def default_tax(self, gross_pay: Decimal) -> Decimal:
        """Tax at the configured default rate."""
        return LineItemBuilder.round_to_cents(gross_pay * self.settings.tax_rate)

    def calculate(
        self, gross_pay: Decimal, deduction_types: list[DeductionTypeSnapshot]
    ) -> DeductionResult:
        """Resolve all required deductions against ``gross_pay``."""
        self.validate_catalog(deduction_types)

        lines: list[LineCandidate] = []
        tax_line: LineCandidate | None = None

        # Stable order: catalog id
        required = sorted(
            (dt for dt in deduction_types if dt.is_required),
            key=lambda dt: dt.deduction_type_id,
        )
        for dt in required:
            amount = LineItemBuilder.resolve_catalog_amount(
                dt.is_percentage, dt.default_value, gross_pay
            )
            if tax_line is None and self.is_income_tax(dt):
                tax_line = LineItemBuilder.create_tax_line(
                    deduction_type_id=dt.deduction_type_id,
                    amount=amount,
                    explanation=self._explain(dt),
                )
                lines.append(tax_line)
            else:
                lines.append(
                    LineItemBuilder.create_deduction_line(
                        deduction_type_id=dt.deduction_type_id,
                        amount=amount,
                        explanation=self._explain(dt),
                    )
                )

        if tax_line is not None:
            return DeductionResult(lines=lines, tax_amount=tax_line.amount, tax_from_catalog=True)

        return DeductionResult(
            lines=lines,
            tax_amount=self.default_tax(gross_pay),
            tax_from_catalog=False,
        )

    @staticmethod
    def _explain(dt: DeductionTypeSnapshot) -> str:
        if dt.is_percentage:
            return f"{dt.name}: {dt.default_value}% of gross"
        return f"{dt.name}: flat {dt.default_value}"
