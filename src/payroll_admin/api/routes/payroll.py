"""Payroll period and payroll item endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from payroll_admin.api.dependencies import ActorId, ClientIp, DbSession
from payroll_admin.api.schemas import (
    ErrorResponse,
    PayrollItemCreate,
    PayrollItemListResponse,
    PayrollItemResponse,
    PayrollItemStatusUpdate,
    PayrollPeriodResponse,
)
from payroll_admin.services.payroll_service import PayrollService

router = APIRouter(tags=["payroll"])


# ============================================================================
# Payroll items
# ============================================================================


@router.post(
    "/payroll-periods/{period_id}/items",
    response_model=PayrollItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def compute_payroll_item(
    db: DbSession,
    actor_id: ActorId,
    client_ip: ClientIp,
    period_id: Annotated[int, Path()],
    payload: PayrollItemCreate,
) -> PayrollItemResponse:
    """Compute and store the payroll item of one employee in a period.

    Set ``replace`` to recompute an existing item.
    """
    service = PayrollService(db, ip_address=client_ip)
    item = await service.compute_payroll_item(
        period_id, payload.employee_id, payload.to_overrides(), actor_id
    )
    await db.commit()
    return PayrollItemResponse.model_validate(item)


@router.get(
    "/payroll-periods/{period_id}/items",
    response_model=PayrollItemListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_payroll_items(
    db: DbSession,
    period_id: Annotated[int, Path()],
) -> PayrollItemListResponse:
    """List the items of a payroll period with their lines."""
    items = await PayrollService(db).list_period_items(period_id)
    return PayrollItemListResponse(
        items=[PayrollItemResponse.model_validate(i) for i in items],
        total=len(items),
    )


@router.get(
    "/payroll-items/{item_id}",
    response_model=PayrollItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_item(
    db: DbSession,
    item_id: Annotated[int, Path()],
) -> PayrollItemResponse:
    item = await PayrollService(db).get_item(item_id)
    return PayrollItemResponse.model_validate(item)


@router.put(
    "/payroll-items/{item_id}/status",
    response_model=PayrollItemResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_payroll_item_status(
    db: DbSession,
    actor_id: ActorId,
    client_ip: ClientIp,
    item_id: Annotated[int, Path()],
    payload: PayrollItemStatusUpdate,
) -> PayrollItemResponse:
    """Advance an item: pending → approved → paid."""
    service = PayrollService(db, ip_address=client_ip)
    item = await service.transition_item(item_id, payload.status, actor_id)
    await db.commit()
    return PayrollItemResponse.model_validate(item)


# ============================================================================
# Payroll period transitions
# ============================================================================


@router.post(
    "/payroll-periods/{period_id}/process",
    response_model=PayrollPeriodResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def start_processing(
    db: DbSession,
    actor_id: ActorId,
    client_ip: ClientIp,
    period_id: Annotated[int, Path()],
) -> PayrollPeriodResponse:
    """Move a period from draft to processing."""
    service = PayrollService(db, ip_address=client_ip)
    period = await service.start_processing(period_id, actor_id)
    await db.commit()
    return PayrollPeriodResponse.model_validate(period)


@router.post(
    "/payroll-periods/{period_id}/finalize",
    response_model=PayrollPeriodResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def finalize_period(
    db: DbSession,
    actor_id: ActorId,
    client_ip: ClientIp,
    period_id: Annotated[int, Path()],
) -> PayrollPeriodResponse:
    """Mark a period processed. Its items are frozen afterwards."""
    service = PayrollService(db, ip_address=client_ip)
    period = await service.finalize_period(period_id, actor_id)
    await db.commit()
    return PayrollPeriodResponse.model_validate(period)
