"""Approval request endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from payroll_admin.api.dependencies import ActorId, ClientIp, DbSession
from payroll_admin.api.schemas import (
    ApprovalCreate,
    ApprovalListResponse,
    ApprovalResponse,
    ErrorResponse,
    RejectRequest,
)
from payroll_admin.services.approval_service import ApprovalService

router = APIRouter(prefix="/approvals", tags=["approvals"])


@router.post(
    "",
    response_model=ApprovalResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def submit_approval(
    db: DbSession,
    actor_id: ActorId,
    client_ip: ClientIp,
    payload: ApprovalCreate,
) -> ApprovalResponse:
    """Submit an overtime, leave or reimbursement request."""
    service = ApprovalService(db, ip_address=client_ip)
    approval = await service.submit(
        payload.employee_id, payload.type, payload.to_payload(), actor_id
    )
    await db.commit()
    return ApprovalResponse.model_validate(approval)


@router.get("/pending", response_model=ApprovalListResponse)
async def list_pending_approvals(db: DbSession) -> ApprovalListResponse:
    """List requests awaiting a decision, oldest first."""
    approvals = await ApprovalService(db).list_pending()
    return ApprovalListResponse(
        items=[ApprovalResponse.model_validate(a) for a in approvals],
        total=len(approvals),
    )


@router.get(
    "/{approval_id}",
    response_model=ApprovalResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_approval(
    db: DbSession,
    approval_id: Annotated[int, Path()],
) -> ApprovalResponse:
    approval = await ApprovalService(db).get(approval_id)
    return ApprovalResponse.model_validate(approval)


@router.put(
    "/{approval_id}/approve",
    response_model=ApprovalResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def approve_request(
    db: DbSession,
    actor_id: ActorId,
    client_ip: ClientIp,
    approval_id: Annotated[int, Path()],
) -> ApprovalResponse:
    service = ApprovalService(db, ip_address=client_ip)
    approval = await service.transition(approval_id, "approve", actor_id)
    await db.commit()
    return ApprovalResponse.model_validate(approval)


@router.put(
    "/{approval_id}/reject",
    response_model=ApprovalResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def reject_request(
    db: DbSession,
    actor_id: ActorId,
    client_ip: ClientIp,
    approval_id: Annotated[int, Path()],
    payload: RejectRequest,
) -> ApprovalResponse:
    """Reject a pending request; the reason is stored with it."""
    service = ApprovalService(db, ip_address=client_ip)
    approval = await service.transition(approval_id, "reject", actor_id, payload.reason)
    await db.commit()
    return ApprovalResponse.model_validate(approval)
