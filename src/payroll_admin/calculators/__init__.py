"""Payroll calculation engine."""

from payroll_admin.calculators.engine import CalculationResult, PayrollEngine
from payroll_admin.calculators.line_builder import LineItemBuilder
from payroll_admin.calculators.rate_resolver import RateResolver
from payroll_admin.calculators.tax_calculator import TaxCalculator

__all__ = [
    "PayrollEngine",
    "CalculationResult",
    "LineItemBuilder",
    "RateResolver",
    "TaxCalculator",
]
