"""
Invitation Use Case DTOs (Data Transfer Objects)

Responses never carry the lookup hash or any decrypted identity field,
except DecodedIdentityResponse which is only produced by the audited
decode use case.
"""

from typing import List, Optional

from pydantic import BaseModel


# ============================================================================
# Response DTOs
# ============================================================================


class CreateInvitationResponse(BaseModel):
    """Response for create invitation use case"""

    invitation_id: str
    token: str
    status: str
    expires_at: str
    auto_delete_at: str


class RedeemInvitationResponse(BaseModel):
    """Response for redeem invitation use case"""

    access_token: str
    token_type: str = "bearer"
    invitation_id: str
    tenant_id: str
    role: str


class RevokeInvitationResponse(BaseModel):
    """Response for revoke invitation use case"""

    invitation_id: str
    status: str


class DecodedIdentityResponse(BaseModel):
    """Response for decode invitation identity use case"""

    invitation_id: str
    tenant_id: str
    email: str
    full_name: str
    phone: Optional[str] = None
    private_email: Optional[str] = None


class InvitationSummary(BaseModel):
    """Non-PII view of an invitation"""

    invitation_id: str
    tenant_id: str
    status: str
    role: str
    domain_tag: Optional[str]
    retention_purpose: str
    delivery_status: str
    delivery_attempts: int
    created_at: str
    expires_at: str
    auto_delete_at: str


class InvitationListResponse(BaseModel):
    """Response for list/find invitation use cases"""

    invitations: List[InvitationSummary]


class DeliveryResponse(BaseModel):
    """Response for single delivery attempt and requeue"""

    invitation_id: str
    delivery_status: str
    delivery_attempts: int
    next_delivery_attempt_at: Optional[str] = None


class RetryDeliveriesResponse(BaseModel):
    """Response for the due-delivery sweep"""

    attempted: int
    sent: int
    retry_scheduled: int
    failed: int


def iso(value) -> Optional[str]:
    """Naive UTC datetime -> ISO 8601 with Z suffix"""
    if value is None:
        return None
    return value.isoformat() + "Z"


def summarize(invitation) -> InvitationSummary:
    return InvitationSummary(
        invitation_id=str(invitation.id),
        tenant_id=str(invitation.tenant_id),
        status=invitation.status.value,
        role=invitation.role.value,
        domain_tag=invitation.domain_tag,
        retention_purpose=invitation.retention_purpose.value,
        delivery_status=invitation.delivery_status.value,
        delivery_attempts=invitation.delivery_attempts,
        created_at=iso(invitation.created_at),
        expires_at=iso(invitation.expires_at),
        auto_delete_at=iso(invitation.auto_delete_at),
    )
