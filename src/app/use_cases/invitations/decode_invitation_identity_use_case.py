"""
Decode Invitation Identity Use Case

Explicit, audited access to the encrypted identity of an invitation.
"""

import logging
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.policy import Policy
from src.app.services.token_codec import TokenCodec, TokenError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.entities import AuditEvent

from .dtos import DecodedIdentityResponse

logger = logging.getLogger(__name__)


class DecodeInvitationIdentityUseCase:
    """
    Business Rules:
    - Tenant superusers (own tenant) and operators only
    - The stored token goes through full verification; expired or revoked
      invitations do not reveal their identity
    - Every successful decode writes an identity_decoded audit event
      (without the decoded values)
    """

    def __init__(self, uow: UnitOfWork, codec: TokenCodec):
        self.uow = uow
        self.codec = codec

    async def execute(self, caller, invitation_id: UUID) -> Result[DecodedIdentityResponse]:
        async with self.uow:
            invitation = await self.uow.invitations.get_by_id(invitation_id)
            if invitation is None:
                return Return.err(Error("INVITATION_NOT_FOUND", "Invitation not found"))

            denied = await Policy(self.uow).check(
                caller,
                Operation.invitation_decode_identity,
                Resource(ResourceKind.invitation, invitation.tenant_id, invitation.id),
            )
            if denied:
                return Return.err(denied)

            try:
                claims = await self.codec.decode(invitation.token, self.uow.invitations)
            except TokenError as e:
                return Return.err(Error(e.code, str(e)))

            audit = AuditEvent(
                tenant_id=invitation.tenant_id,
                actor_id=getattr(caller, "user_id", None),
                action="identity_decoded",
                event_metadata={"invitation_id": str(invitation_id)},
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            logger.info(f"Identity of invitation {invitation_id} decoded")

            return Return.ok(
                DecodedIdentityResponse(
                    invitation_id=str(claims.invitation_id),
                    tenant_id=str(claims.tenant_id),
                    email=claims.identity.email,
                    full_name=claims.identity.full_name,
                    phone=claims.identity.phone,
                    private_email=claims.identity.private_email,
                )
            )
