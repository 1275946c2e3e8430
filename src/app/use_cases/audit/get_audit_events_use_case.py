"""
Get Audit Events Use Case

Retrieves audit events for a tenant, or global events for operators,
with pagination.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from libs.result import Result, Return
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind


class GetAuditEventsUseCase:
    """
    Use case for retrieving audit events.

    Business Rules:
    - Tenant superusers see their own tenant's events
    - tenant_id=None selects global events (retention sweeps), operators only
    - Results ordered by newest first
    - Supports cursor-based pagination and filtering by action
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        caller,
        tenant_id: Optional[UUID],
        limit: int = 50,
        cursor: Optional[str] = None,
        action: Optional[str] = None,
    ) -> Result[Dict[str, Any]]:
        """
        Execute get audit events use case.

        Args:
            caller: Resolved caller
            tenant_id: Tenant whose events to read, None for global events
            limit: Maximum number of events to return
            cursor: Pagination cursor (optional)
            action: Only return events of this action (optional)

        Returns:
            Result with events list and next_cursor, or Error
        """
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.audit_read, Resource(ResourceKind.audit_log, tenant_id)
            )
            if denied:
                return Return.err(denied)

            events, next_cursor = await self.uow.audit_events.get_by_tenant_paginated(
                tenant_id, limit=limit, cursor=cursor, action=action
            )

            events_list = [
                {
                    "action": event.action,
                    "actor_id": str(event.actor_id) if event.actor_id else None,
                    "timestamp": event.created_at.isoformat() + "Z",
                    "metadata": event.event_metadata or {},
                }
                for event in events
            ]

            return Return.ok({"events": events_list, "next_cursor": next_cursor})
