"""Payroll administration backend: computation engine, approvals, activity log."""

__version__ = "0.1.0"
