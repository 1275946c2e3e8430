from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invitation_repository import IInvitationRepository
from src.domain.entities import DeliveryStatus, InvitationRecord, InvitationStatus


class InvitationRepository(IInvitationRepository):
    """Invitation repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invitation_id: UUID) -> Optional[InvitationRecord]:
        """Get invitation by ID"""
        stmt = (
            select(InvitationRecord)
            .where(InvitationRecord.id == invitation_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_verification(
        self, invitation_id: UUID, lookup_hash: str
    ) -> Optional[InvitationRecord]:
        """Get the record backing a token, matched on id and lookup hash"""
        stmt = (
            select(InvitationRecord)
            .where(
                InvitationRecord.id == invitation_id,
                InvitationRecord.lookup_hash == lookup_hash,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_pending_by_tenant_and_hash(
        self, tenant_id: UUID, lookup_hash: str
    ) -> Optional[InvitationRecord]:
        """Get pending invitation by tenant and lookup hash"""
        stmt = select(InvitationRecord).where(
            InvitationRecord.tenant_id == tenant_id,
            InvitationRecord.lookup_hash == lookup_hash,
            InvitationRecord.status == InvitationStatus.pending,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_lookup_hash(
        self, lookup_hash: str, tenant_id: Optional[UUID] = None
    ) -> List[InvitationRecord]:
        """Get invitations for an identity hash, optionally within one tenant"""
        stmt = select(InvitationRecord).where(InvitationRecord.lookup_hash == lookup_hash)
        if tenant_id is not None:
            stmt = stmt.where(InvitationRecord.tenant_id == tenant_id)
        stmt = stmt.order_by(InvitationRecord.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_tenant_id(self, tenant_id: UUID) -> List[InvitationRecord]:
        """Get all invitations for a tenant"""
        stmt = (
            select(InvitationRecord)
            .where(InvitationRecord.tenant_id == tenant_id)
            .order_by(InvitationRecord.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, invitation: InvitationRecord) -> InvitationRecord:
        """Create a new invitation"""
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def update(self, invitation: InvitationRecord) -> InvitationRecord:
        """Update existing invitation"""
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def mark_redeemed(self, invitation_id: UUID, redeemed_at: datetime) -> bool:
        """Atomically move a pending invitation to redeemed"""
        stmt = (
            update(InvitationRecord)
            .where(
                InvitationRecord.id == invitation_id,
                InvitationRecord.status == InvitationStatus.pending,
            )
            .values(status=InvitationStatus.redeemed, redeemed_at=redeemed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_expired(self, invitation_id: UUID) -> bool:
        """Atomically move a pending invitation to expired"""
        stmt = (
            update(InvitationRecord)
            .where(
                InvitationRecord.id == invitation_id,
                InvitationRecord.status == InvitationStatus.pending,
            )
            .values(status=InvitationStatus.expired)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_revoked(
        self,
        invitation_id: UUID,
        revoked_at: datetime,
        revoked_by: Optional[UUID],
        reason: Optional[str],
    ) -> bool:
        """Atomically move a pending or redeemed invitation to revoked"""
        stmt = (
            update(InvitationRecord)
            .where(
                InvitationRecord.id == invitation_id,
                InvitationRecord.status.in_(
                    [InvitationStatus.pending, InvitationStatus.redeemed]
                ),
            )
            .values(
                status=InvitationStatus.revoked,
                revoked_at=revoked_at,
                revoked_by=revoked_by,
                revocation_reason=reason,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def expire_overdue(self, now: datetime) -> int:
        """Mark pending invitations past expires_at as expired"""
        stmt = (
            update(InvitationRecord)
            .where(
                InvitationRecord.status == InvitationStatus.pending,
                InvitationRecord.expires_at <= now,
            )
            .values(status=InvitationStatus.expired)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete_due(self, now: datetime) -> Dict[str, int]:
        """Hard-delete invitations with auto_delete_at <= now"""
        stmt = select(InvitationRecord.id, InvitationRecord.retention_purpose).where(
            InvitationRecord.auto_delete_at <= now
        )
        result = await self.session.execute(stmt)
        rows = result.all()
        if not rows:
            return {}

        ids = [row[0] for row in rows]
        await self.session.execute(
            delete(InvitationRecord)
            .where(InvitationRecord.id.in_(ids))
            .execution_options(synchronize_session=False)
        )

        counts = Counter(
            row[1].value if hasattr(row[1], "value") else str(row[1]) for row in rows
        )
        return dict(counts)

    async def get_due_for_delivery(self, now: datetime) -> List[InvitationRecord]:
        """Get invitations whose scheduled delivery retry is due"""
        stmt = (
            select(InvitationRecord)
            .where(
                InvitationRecord.delivery_status == DeliveryStatus.retry_scheduled,
                InvitationRecord.next_delivery_attempt_at <= now,
                InvitationRecord.status == InvitationStatus.pending,
            )
            .order_by(InvitationRecord.next_delivery_attempt_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_failed_deliveries(
        self, tenant_id: Optional[UUID] = None
    ) -> List[InvitationRecord]:
        """Get invitations whose delivery needs manual intervention"""
        stmt = select(InvitationRecord).where(
            InvitationRecord.delivery_status == DeliveryStatus.failed
        )
        if tenant_id is not None:
            stmt = stmt.where(InvitationRecord.tenant_id == tenant_id)
        stmt = stmt.order_by(InvitationRecord.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
