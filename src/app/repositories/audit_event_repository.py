from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import AuditEvent


class IAuditEventRepository(ABC):
    """AuditEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Append an audit event (never updated or deleted)"""
        pass

    @abstractmethod
    async def get_by_tenant_paginated(
        self,
        tenant_id: Optional[UUID],
        limit: int = 50,
        cursor: Optional[str] = None,
        action: Optional[str] = None,
    ) -> Tuple[List[AuditEvent], Optional[str]]:
        """
        Page through a tenant's audit log, newest first.

        A tenant_id of None selects global events (retention sweeps).
        `action` narrows the page to one event type.

        Returns:
            (events, next_cursor); next_cursor is None on the last page
        """
        pass
