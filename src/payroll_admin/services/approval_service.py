"""Approval workflow: submit, approve and reject employee requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.exceptions import (
    EntityNotFoundError,
    InvalidApprovalPayloadError,
    InvalidInputError,
    InvalidTransitionError,
    MissingReasonError,
)
from payroll_admin.models import Approval
from payroll_admin.services.activity_log import ActivityLog
from payroll_admin.services.entity_store import ApprovalDecision, EntityStore
from payroll_admin.services.state_machine import ApprovalStateMachine, ApprovalStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApprovalPayload:
    """Request details; which fields are required depends on the type."""

    start_date: date | None = None
    end_date: date | None = None
    hours: Decimal | None = None
    amount: Decimal | None = None
    notes: str | None = None


class ApprovalService:
    """Service for the approval request lifecycle.

    Every request starts pending and is decided exactly once. Decisions are
    conditional updates on ``status = 'pending'``, so of two concurrent
    deciders only one succeeds; the other gets InvalidTransitionError.
    """

    ACTIONS = ("approve", "reject")

    def __init__(self, session: AsyncSession, ip_address: str | None = None):
        self.session = session
        self.store = EntityStore(session)
        self.activity_log = ActivityLog(session, self.store, ip_address)

    async def submit(
        self,
        employee_id: int,
        approval_type: str,
        payload: ApprovalPayload,
        actor_id: int | None = None,
    ) -> Approval:
        """Create a pending request after validating its payload.

        Raises:
            InvalidApprovalPayloadError: missing or invalid fields for the type
            EntityNotFoundError: unknown employee
        """
        self.validate_payload(approval_type, payload)

        employee = await self.store.get_employee(employee_id)
        if employee is None:
            raise EntityNotFoundError("Employee", employee_id)

        approval = await self.store.create_approval(
            Approval(
                employee_id=employee_id,
                type=approval_type,
                request_date=datetime.now(timezone.utc),
                start_date=payload.start_date,
                end_date=payload.end_date,
                hours=payload.hours,
                amount=payload.amount,
                notes=payload.notes,
                status=ApprovalStatus.PENDING.value,
            )
        )

        logger.info(
            "Submitted %s approval %s for employee %s", approval_type, approval.id, employee_id
        )
        await self.activity_log.record(
            action="create",
            user_id=actor_id,
            entity_type="approval",
            entity_id=approval.id,
            details=f"Created {approval_type} request for employee ID: {employee_id}",
        )
        return approval

    @staticmethod
    def validate_payload(approval_type: str, payload: ApprovalPayload) -> None:
        if not approval_type or not approval_type.strip():
            raise InvalidApprovalPayloadError(
                str(approval_type), ["type"], "request type is required"
            )

        required = ApprovalStateMachine.required_fields(approval_type)
        missing = [name for name in required if _is_blank(getattr(payload, name))]
        if missing:
            raise InvalidApprovalPayloadError(approval_type, missing)

        if payload.hours is not None and payload.hours < 0:
            raise InvalidApprovalPayloadError(
                approval_type, [], f"hours cannot be negative: {payload.hours}"
            )
        if payload.amount is not None and payload.amount < 0:
            raise InvalidApprovalPayloadError(
                approval_type, [], f"amount cannot be negative: {payload.amount}"
            )
        if (
            payload.start_date is not None
            and payload.end_date is not None
            and payload.end_date < payload.start_date
        ):
            raise InvalidApprovalPayloadError(
                approval_type,
                [],
                f"end_date {payload.end_date} is before start_date {payload.start_date}",
            )

    async def approve(self, approval_id: int, actor_id: int | None = None) -> Approval:
        """pending → approved.

        Approved leave marks the employee's attendance in the leave range
        as 'leave'.
        """
        approval = await self._decide(
            approval_id,
            ApprovalDecision(
                status=ApprovalStatus.APPROVED.value,
                actor_id=actor_id,
                decided_at=datetime.now(timezone.utc),
            ),
        )

        if approval.type == "leave" and approval.start_date and approval.end_date:
            marked = await self.store.mark_attendance_as_leave(
                approval.employee_id, approval.start_date, approval.end_date
            )
            logger.debug("Marked %s attendance rows as leave for approval %s", marked, approval_id)

        await self.activity_log.record(
            action="approve",
            user_id=actor_id,
            entity_type="approval",
            entity_id=approval_id,
            details=f"Approved {approval.type} request for employee ID: {approval.employee_id}",
        )
        return approval

    async def reject(
        self, approval_id: int, actor_id: int | None = None, reason: str | None = None
    ) -> Approval:
        """pending → rejected; the reason is required and stored."""
        if reason is None or not reason.strip():
            raise MissingReasonError(approval_id)
        reason = reason.strip()

        approval = await self._decide(
            approval_id,
            ApprovalDecision(
                status=ApprovalStatus.REJECTED.value,
                actor_id=actor_id,
                decided_at=datetime.now(timezone.utc),
                rejected_reason=reason,
            ),
        )

        await self.activity_log.record(
            action="reject",
            user_id=actor_id,
            entity_type="approval",
            entity_id=approval_id,
            details=(
                f"Rejected {approval.type} request for employee ID: "
                f"{approval.employee_id}. Reason: {reason}"
            ),
        )
        return approval

    async def transition(
        self,
        approval_id: int,
        action: str,
        actor_id: int | None = None,
        reason: str | None = None,
    ) -> Approval:
        """Apply an 'approve' or 'reject' action."""
        if action == "approve":
            return await self.approve(approval_id, actor_id)
        if action == "reject":
            return await self.reject(approval_id, actor_id, reason)
        raise InvalidInputError(
            f"Unknown approval action '{action}'; expected one of {', '.join(self.ACTIONS)}"
        )

    async def list_pending(self) -> list[Approval]:
        return await self.store.get_pending_approvals()

    async def get(self, approval_id: int) -> Approval:
        approval = await self.store.get_approval(approval_id)
        if approval is None:
            raise EntityNotFoundError("Approval", approval_id)
        return approval

    async def _decide(self, approval_id: int, decision: ApprovalDecision) -> Approval:
        approval = await self.get(approval_id)
        ApprovalStateMachine.validate_transition(approval.status, decision.status)

        updated = await self.store.update_approval(approval_id, decision)
        if not updated:
            # Someone else decided it between our read and the update
            current = await self.store.get_approval(approval_id, refresh=True)
            if current is None:
                raise EntityNotFoundError("Approval", approval_id)
            raise InvalidTransitionError(
                current.status, decision.status, "Approval was already decided"
            )

        logger.info("Approval %s is now %s", approval_id, decision.status)
        return await self.store.get_approval(approval_id, refresh=True)


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
