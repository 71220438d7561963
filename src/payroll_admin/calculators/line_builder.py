"""Line item builder with half-up cent rounding."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from payroll_admin.calculators.types import LineCandidate, LineType


class LineItemBuilder:
    """Builds deduction, tax and allowance lines.

    Amounts on lines are always stored non-negative; whether a line adds to
    or subtracts from pay is carried by its type:
    - ALLOWANCE: adds to gross when taxable
    - DEDUCTION, TAX: subtract from gross

    Rounding:
    - Currency to 2 decimals, ROUND_HALF_UP (never banker's rounding)
    - Rounded once, at the point each amount is produced
    """

    OUTPUT_PRECISION = Decimal("0.01")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(LineItemBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def resolve_catalog_amount(
        is_percentage: bool, default_value: Decimal, gross_pay: Decimal
    ) -> Decimal:
        """Resolve a catalog deduction: percent of gross, or flat value verbatim."""
        if is_percentage:
            return LineItemBuilder.round_to_cents(gross_pay * default_value / Decimal(100))
        return LineItemBuilder.round_to_cents(default_value)

    @staticmethod
    def create_deduction_line(
        deduction_type_id: int,
        amount: Decimal,
        explanation: str | None = None,
    ) -> LineCandidate:
        """Create a catalog deduction line."""
        return LineCandidate(
            line_type=LineType.DEDUCTION,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
            deduction_type_id=deduction_type_id,
            explanation=explanation,
        )

    @staticmethod
    def create_tax_line(
        deduction_type_id: int,
        amount: Decimal,
        explanation: str | None = None,
    ) -> LineCandidate:
        """Create the income tax line (a deduction of the designated type)."""
        return LineCandidate(
            line_type=LineType.TAX,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
            deduction_type_id=deduction_type_id,
            explanation=explanation,
        )

    @staticmethod
    def create_allowance_line(
        amount: Decimal,
        is_taxable: bool,
        allowance_type_id: int | None = None,
        explanation: str | None = None,
    ) -> LineCandidate:
        """Create an allowance line; ``allowance_type_id`` is None for ad hoc entries."""
        return LineCandidate(
            line_type=LineType.ALLOWANCE,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
            allowance_type_id=allowance_type_id,
            is_taxable=is_taxable,
            explanation=explanation,
        )

    @staticmethod
    def sum_taxable_allowances(lines: list[LineCandidate]) -> Decimal:
        """Sum of allowance lines that count toward gross pay."""
        return sum(
            (l.amount for l in lines if l.line_type == LineType.ALLOWANCE and l.is_taxable),
            Decimal("0"),
        )

    @staticmethod
    def sum_non_taxable_allowances(lines: list[LineCandidate]) -> Decimal:
        return sum(
            (l.amount for l in lines if l.line_type == LineType.ALLOWANCE and not l.is_taxable),
            Decimal("0"),
        )
