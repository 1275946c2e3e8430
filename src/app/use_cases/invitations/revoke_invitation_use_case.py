"""
Revoke Invitation Use Case
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.base import utcnow
from src.domain.entities import AuditEvent

from .dtos import RevokeInvitationResponse

logger = logging.getLogger(__name__)


class RevokeInvitationUseCase:
    """
    Use case for revoking an invitation.

    Business Rules:
    - Tenant superusers (own tenant) and operators only
    - pending and redeemed invitations can be revoked
    - A revoked token fails verification from then on
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, caller, invitation_id: UUID, reason: Optional[str] = None
    ) -> Result[RevokeInvitationResponse]:
        async with self.uow:
            invitation = await self.uow.invitations.get_by_id(invitation_id)
            if invitation is None:
                return Return.err(Error("INVITATION_NOT_FOUND", "Invitation not found"))

            denied = await Policy(self.uow).check(
                caller,
                Operation.invitation_revoke,
                Resource(ResourceKind.invitation, invitation.tenant_id, invitation.id),
            )
            if denied:
                return Return.err(denied)

            revoked = await self.uow.invitations.mark_revoked(
                invitation_id,
                revoked_at=utcnow(),
                revoked_by=getattr(caller, "user_id", None),
                reason=reason,
            )
            if not revoked:
                return Return.err(
                    Error(
                        "INVALID_TRANSITION",
                        f"Invitation is {invitation.status.value} and cannot be revoked",
                    )
                )

            audit = AuditEvent(
                tenant_id=invitation.tenant_id,
                actor_id=getattr(caller, "user_id", None),
                action="invitation_revoked",
                event_metadata={"invitation_id": str(invitation_id), "reason": reason},
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            logger.info(f"Invitation {invitation_id} revoked")

            return Return.ok(
                RevokeInvitationResponse(invitation_id=str(invitation_id), status="revoked")
            )
