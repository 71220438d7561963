"""Best-effort append-only activity log."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.models import Activity
from payroll_admin.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


class ActivityLog:
    """Records who did what to which entity.

    Writes happen inside a SAVEPOINT so a failed audit write rolls back only
    itself. Failures are logged and never raised: the primary operation
    (payroll computation, approval transition) still succeeds.
    """

    def __init__(
        self,
        session: AsyncSession,
        store: EntityStore | None = None,
        ip_address: str | None = None,
    ):
        self.session = session
        self.store = store or EntityStore(session)
        self.ip_address = ip_address

    async def record(
        self,
        action: str,
        user_id: int | None = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
        details: str | None = None,
        ip_address: str | None = None,
    ) -> Activity | None:
        """Append an entry; returns None if the write failed."""
        entry = Activity(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            ip_address=ip_address or self.ip_address,
        )
        try:
            async with self.session.begin_nested():
                await self.store.create_activity(entry)
        except Exception:
            logger.exception(
                "Failed to record activity %s on %s %s",
                action,
                entity_type,
                entity_id,
            )
            return None
        return entry

    async def recent(self, limit: int = 10) -> list[Activity]:
        """Newest entries first."""
        return await self.store.get_recent_activities(limit)
