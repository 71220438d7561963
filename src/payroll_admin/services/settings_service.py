"""Typed payroll settings loaded from key/value setting rows."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from payroll_admin.calculators.types import PayrollSettings
from payroll_admin.exceptions import InvalidSettingError
from payroll_admin.services.entity_store import EntityStore

logger = logging.getLogger(__name__)

# Setting keys as stored in the setting table
TAX_RATE_KEY = "tax_rate"
OVERTIME_MULTIPLIER_KEY = "overtime_multiplier"
STANDARD_HOURS_KEY = "standard_work_hours"
INCOME_TAX_TYPE_KEY = "income_tax_deduction_type"


def _parse_decimal(key: str, raw: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, AttributeError):
        raise InvalidSettingError(key, raw, "not a number") from None
    if not value.is_finite():
        raise InvalidSettingError(key, raw, "not a finite number")
    return value


def parse_payroll_settings(raw: dict[str, str]) -> PayrollSettings:
    """Build and validate a PayrollSettings snapshot from raw setting values.

    Missing keys fall back to the defaults on PayrollSettings.

    Raises:
        InvalidSettingError: a present value is unparsable or out of range
    """
    defaults = PayrollSettings()

    tax_rate = defaults.tax_rate
    if TAX_RATE_KEY in raw:
        tax_rate = _parse_decimal(TAX_RATE_KEY, raw[TAX_RATE_KEY])
        if not Decimal("0") <= tax_rate <= Decimal("1"):
            raise InvalidSettingError(TAX_RATE_KEY, raw[TAX_RATE_KEY], "must be between 0 and 1")

    multiplier = defaults.overtime_multiplier
    if OVERTIME_MULTIPLIER_KEY in raw:
        multiplier = _parse_decimal(OVERTIME_MULTIPLIER_KEY, raw[OVERTIME_MULTIPLIER_KEY])
        if multiplier < 0:
            raise InvalidSettingError(
                OVERTIME_MULTIPLIER_KEY, raw[OVERTIME_MULTIPLIER_KEY], "cannot be negative"
            )

    standard_hours = defaults.standard_monthly_hours
    if STANDARD_HOURS_KEY in raw:
        standard_hours = _parse_decimal(STANDARD_HOURS_KEY, raw[STANDARD_HOURS_KEY])
        if standard_hours <= 0:
            raise InvalidSettingError(
                STANDARD_HOURS_KEY, raw[STANDARD_HOURS_KEY], "must be positive"
            )

    income_tax_type = defaults.income_tax_deduction_type
    if raw.get(INCOME_TAX_TYPE_KEY, "").strip():
        income_tax_type = raw[INCOME_TAX_TYPE_KEY].strip()

    return PayrollSettings(
        tax_rate=tax_rate,
        overtime_multiplier=multiplier,
        standard_monthly_hours=standard_hours,
        income_tax_deduction_type=income_tax_type,
    )


class SettingsService:
    """Loads one consistent PayrollSettings snapshot per computation."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def load(self) -> PayrollSettings:
        """Read all settings in a single query and validate them."""
        raw = await self.store.get_all_settings()
        settings = parse_payroll_settings(raw)
        logger.debug("Loaded payroll settings %s", settings.to_canonical_dict())
        return settings
