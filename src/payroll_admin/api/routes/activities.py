"""Activity log endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from payroll_admin.api.dependencies import DbSession
from payroll_admin.api.schemas import ActivityListResponse, ActivityResponse
from payroll_admin.services.activity_log import ActivityLog

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("/recent", response_model=ActivityListResponse)
async def recent_activities(
    db: DbSession,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> ActivityListResponse:
    """Newest activity entries first."""
    entries = await ActivityLog(db).recent(limit)
    return ActivityListResponse(
        items=[ActivityResponse.model_validate(e) for e in entries],
        total=len(entries),
    )
