"""
Run Retention Sweep Use Case

Expires overdue invitations and hard-deletes invitation records whose
retention period has ended.
"""

import logging
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel

from libs.result import Result, Return
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.base import utcnow
from src.domain.entities import AuditEvent

logger = logging.getLogger(__name__)


class RetentionSweepResponse(BaseModel):
    """Aggregate sweep counts"""

    swept_at: str
    expired: int
    deleted: int
    deleted_by_purpose: Dict[str, int]


class RunRetentionSweepUseCase:
    """
    Business Rules:
    - Operators (or the scheduler acting as one) only
    - pending invitations past expires_at become expired
    - Records with auto_delete_at <= now are hard-deleted
    - One aggregate retention_sweep audit event; no per-record entries
    - A deleted invitation's token then fails verification as revoked
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, caller, now: Optional[datetime] = None
    ) -> Result[RetentionSweepResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.retention_sweep, Resource(ResourceKind.system, None)
            )
            if denied:
                return Return.err(denied)

            now = now or utcnow()

            expired = await self.uow.invitations.expire_overdue(now)
            deleted_by_purpose = await self.uow.invitations.delete_due(now)
            deleted = sum(deleted_by_purpose.values())

            audit = AuditEvent(
                tenant_id=None,
                actor_id=getattr(caller, "user_id", None),
                action="retention_sweep",
                event_metadata={
                    "swept_at": now.isoformat() + "Z",
                    "expired": expired,
                    "deleted": deleted,
                    "deleted_by_purpose": deleted_by_purpose,
                },
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            logger.info(f"Retention sweep: {expired} expired, {deleted} deleted")

            return Return.ok(
                RetentionSweepResponse(
                    swept_at=now.isoformat() + "Z",
                    expired=expired,
                    deleted=deleted,
                    deleted_by_purpose=deleted_by_purpose,
                )
            )
