import base64
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.domain.entities import AuditEvent

CURSOR_SEPARATOR = "|"


def encode_cursor(event: AuditEvent) -> str:
    raw = f"{event.created_at.isoformat()}{CURSOR_SEPARATOR}{event.id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("utf-8")


def decode_cursor(cursor: str) -> Optional[Tuple[datetime, UUID]]:
    """Position of the last event of the previous page, or None if unreadable"""
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("utf-8")).decode("utf-8")
        created_at, event_id = raw.split(CURSOR_SEPARATOR)
        return datetime.fromisoformat(created_at), UUID(event_id)
    except (ValueError, TypeError, UnicodeDecodeError):
        return None


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Append an audit event"""
        self.session.add(audit_event)
        await self.session.flush()
        await self.session.refresh(audit_event)
        return audit_event

    async def get_by_tenant_paginated(
        self,
        tenant_id: Optional[UUID],
        limit: int = 50,
        cursor: Optional[str] = None,
        action: Optional[str] = None,
    ) -> Tuple[List[AuditEvent], Optional[str]]:
        """
        Keyset pagination on (created_at, id), newest first.

        The id tie-breaker keeps events that share a timestamp from being
        skipped between pages. An unreadable cursor restarts from the top.
        """
        if tenant_id is None:
            stmt = select(AuditEvent).where(AuditEvent.tenant_id.is_(None))
        else:
            stmt = select(AuditEvent).where(AuditEvent.tenant_id == tenant_id)

        if action:
            stmt = stmt.where(AuditEvent.action == action)

        position = decode_cursor(cursor) if cursor else None
        if position is not None:
            created_at, event_id = position
            stmt = stmt.where(
                or_(
                    AuditEvent.created_at < created_at,
                    and_(AuditEvent.created_at == created_at, AuditEvent.id < event_id),
                )
            )

        stmt = stmt.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(
            limit + 1
        )
        result = await self.session.exec(stmt)
        page = list(result.all())

        if len(page) <= limit:
            return page, None
        page = page[:limit]
        return page, encode_cursor(page[-1])
