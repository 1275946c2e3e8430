from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from src.domain.entities import InvitationRecord


class IInvitationRepository(ABC):
    """Invitation repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, invitation_id: UUID) -> Optional[InvitationRecord]:
        """Get invitation by ID"""
        pass

    @abstractmethod
    async def get_for_verification(
        self, invitation_id: UUID, lookup_hash: str
    ) -> Optional[InvitationRecord]:
        """Get the record backing a token, matched on id and lookup hash"""
        pass

    @abstractmethod
    async def get_pending_by_tenant_and_hash(
        self, tenant_id: UUID, lookup_hash: str
    ) -> Optional[InvitationRecord]:
        """Get pending invitation by tenant and lookup hash"""
        pass

    @abstractmethod
    async def get_by_lookup_hash(
        self, lookup_hash: str, tenant_id: Optional[UUID] = None
    ) -> List[InvitationRecord]:
        """Get invitations for an identity hash, optionally within one tenant"""
        pass

    @abstractmethod
    async def get_by_tenant_id(self, tenant_id: UUID) -> List[InvitationRecord]:
        """Get all invitations for a tenant"""
        pass

    @abstractmethod
    async def create(self, invitation: InvitationRecord) -> InvitationRecord:
        """Create a new invitation"""
        pass

    @abstractmethod
    async def update(self, invitation: InvitationRecord) -> InvitationRecord:
        """Update existing invitation"""
        pass

    @abstractmethod
    async def mark_redeemed(self, invitation_id: UUID, redeemed_at: datetime) -> bool:
        """Atomically move a pending invitation to redeemed. False if it was not pending."""
        pass

    @abstractmethod
    async def mark_expired(self, invitation_id: UUID) -> bool:
        """Atomically move a pending invitation to expired"""
        pass

    @abstractmethod
    async def mark_revoked(
        self,
        invitation_id: UUID,
        revoked_at: datetime,
        revoked_by: Optional[UUID],
        reason: Optional[str],
    ) -> bool:
        """Atomically move a pending or redeemed invitation to revoked"""
        pass

    @abstractmethod
    async def expire_overdue(self, now: datetime) -> int:
        """Mark pending invitations past expires_at as expired. Returns count."""
        pass

    @abstractmethod
    async def delete_due(self, now: datetime) -> Dict[str, int]:
        """Hard-delete invitations with auto_delete_at <= now. Returns counts per retention purpose."""
        pass

    @abstractmethod
    async def get_due_for_delivery(self, now: datetime) -> List[InvitationRecord]:
        """Get invitations whose scheduled delivery retry is due"""
        pass

    @abstractmethod
    async def get_failed_deliveries(
        self, tenant_id: Optional[UUID] = None
    ) -> List[InvitationRecord]:
        """Get invitations whose delivery needs manual intervention"""
        pass
