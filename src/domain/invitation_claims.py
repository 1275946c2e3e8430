"""
Invitation token claims.

`identity` is the only part that is encrypted inside the token; everything
else travels as signed cleartext.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.entities.enums import InvitationRole


class IdentityClaims(BaseModel):
    """Personal data carried by the invitation (encrypted at rest and in transit)"""

    email: str
    full_name: str
    phone: Optional[str] = None
    private_email: Optional[str] = None


class TokenRestrictions(BaseModel):
    """Optional redemption constraints"""

    not_before: Optional[datetime] = None
    allowed_origins: List[str] = Field(default_factory=list)

    def permits(self, now: datetime, origin: Optional[str] = None) -> bool:
        """`now` must be timezone-aware; a naive not_before is read as UTC."""
        if self.not_before is not None:
            not_before = self.not_before
            if not_before.tzinfo is None:
                not_before = not_before.replace(tzinfo=timezone.utc)
            if now < not_before:
                return False
        if self.allowed_origins and origin not in self.allowed_origins:
            return False
        return True


class InvitationClaims(BaseModel):
    """Claims signed into an invitation token"""

    invitation_id: UUID
    tenant_id: UUID
    role: InvitationRole = InvitationRole.member
    scope: List[str] = Field(default_factory=list)
    restrictions: TokenRestrictions = Field(default_factory=TokenRestrictions)
    identity: IdentityClaims
