"""Payroll admin services."""

from payroll_admin.services.activity_log import ActivityLog
from payroll_admin.services.approval_service import ApprovalPayload, ApprovalService
from payroll_admin.services.entity_store import EntityStore
from payroll_admin.services.payroll_service import PayrollService
from payroll_admin.services.settings_service import SettingsService
from payroll_admin.services.state_machine import (
    ApprovalStateMachine,
    ApprovalStatus,
    PayrollItemStateMachine,
    PayrollItemStatus,
    PayrollPeriodStateMachine,
    PayrollPeriodStatus,
)

__all__ = [
    "ActivityLog",
    "ApprovalPayload",
    "ApprovalService",
    "ApprovalStateMachine",
    "ApprovalStatus",
    "EntityStore",
    "PayrollItemStateMachine",
    "PayrollItemStatus",
    "PayrollPeriodStateMachine",
    "PayrollPeriodStatus",
    "PayrollService",
    "SettingsService",
]
