"""
InvitationRecord Entity

Invitation metadata. All personal data lives encrypted inside the token.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow

from .enums import DeliveryStatus, InvitationRole, InvitationStatus, RetentionPurpose


class InvitationRecord(SQLModel, table=True):
    """
    InvitationRecord entity - tenant-owned invitation metadata.

    Business Rules:
    - No plaintext PII: identity fields are encrypted inside `token`
    - lookup_hash is the only key for "already invited" checks
    - pending -> redeemed on first successful verification
    - pending -> expired once the token expiry has passed
    - pending/redeemed -> revoked by explicit staff action
    - Hard-deleted by the retention sweep at auto_delete_at
    - At most MAX_DELIVERY_ATTEMPTS delivery attempts before manual intervention
    """

    __tablename__ = "invitations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: UUID = Field(nullable=False, index=True)

    token: str = Field(nullable=False)
    lookup_hash: str = Field(max_length=64, nullable=False)
    domain_tag: Optional[str] = Field(default=None, max_length=255)

    role: InvitationRole = Field(default=InvitationRole.member)
    scope: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    status: InvitationStatus = Field(default=InvitationStatus.pending)

    # Retention
    retention_purpose: RetentionPurpose = Field(nullable=False)
    auto_delete_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    # Audit trail
    created_by: Optional[UUID] = Field(default=None)
    revoked_by: Optional[UUID] = Field(default=None)
    revocation_reason: Optional[str] = Field(default=None, max_length=500)

    # Delivery tracking
    delivery_status: DeliveryStatus = Field(default=DeliveryStatus.pending)
    delivery_attempts: int = Field(default=0)
    max_delivery_attempts: int = Field(default=3)
    next_delivery_attempt_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    last_delivery_error: Optional[str] = Field(default=None, max_length=1000)
    delivered_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    redeemed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_invitation_lookup_hash", "lookup_hash"),
        Index("idx_invitation_tenant_lookup", "tenant_id", "lookup_hash"),
        Index("idx_invitation_status", "status"),
        Index("idx_invitation_auto_delete_at", "auto_delete_at"),
        Index("idx_invitation_delivery", "delivery_status", "next_delivery_attempt_at"),
    )
