"""
Redeem Invitation Use Case

Verifies an invitation token and exchanges it for a session bound to the
invitation's tenant.
"""

import logging
from datetime import timedelta
from typing import Optional

from libs.result import Error, Result, Return
from src.api.utils.jwt import create_access_token
from src.app.services.token_codec import TokenCodec, TokenError, TokenExpired
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import CALLER_CLASS_TENANT
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, InvitationRole, InvitationStatus

from .dtos import RedeemInvitationResponse

logger = logging.getLogger(__name__)


class RedeemInvitationUseCase:
    """
    Use case for accepting an invitation.

    Business Rules:
    - Token verified as signature -> expiry -> revocation -> decrypt
    - An expired token moves its pending record to expired
    - Restrictions (not_before, allowed origins) are enforced here
    - pending -> redeemed happens once; a second redemption is rejected
    - The session's tenant comes from the verified token, never the request
    - The session carries the token scope; a non-empty scope limits it
    """

    def __init__(
        self, uow: UnitOfWork, codec: TokenCodec, session_ttl: timedelta = timedelta(minutes=15)
    ):
        self.uow = uow
        self.codec = codec
        self.session_ttl = session_ttl

    async def execute(
        self, token: str, origin: Optional[str] = None
    ) -> Result[RedeemInvitationResponse]:
        """
        Execute redeem invitation use case.

        Args:
            token: Invitation token
            origin: Origin the redemption request came from

        Returns:
            Result with RedeemInvitationResponse DTO, or Error
        """
        async with self.uow:
            try:
                claims = await self.codec.decode(token, self.uow.invitations)
            except TokenExpired as e:
                if e.invitation_id is not None:
                    if await self.uow.invitations.mark_expired(e.invitation_id):
                        await self.uow.commit()
                return Return.err(Error(e.code, str(e)))
            except TokenError as e:
                return Return.err(Error(e.code, str(e)))

            if not claims.restrictions.permits(self.codec.now(), origin):
                return Return.err(
                    Error("RESTRICTION_VIOLATED", "This invitation cannot be redeemed here or yet")
                )

            redeemed = await self.uow.invitations.mark_redeemed(claims.invitation_id, utcnow())
            if not redeemed:
                invitation = await self.uow.invitations.get_by_id(claims.invitation_id)
                if invitation is not None and invitation.status == InvitationStatus.redeemed:
                    return Return.err(
                        Error(
                            "INVITATION_ALREADY_REDEEMED",
                            "This invitation has already been redeemed",
                        )
                    )
                return Return.err(Error("TOKEN_REVOKED", "Invitation has been revoked"))

            audit = AuditEvent(
                tenant_id=claims.tenant_id,
                actor_id=None,
                action="invitation_redeemed",
                event_metadata={"invitation_id": str(claims.invitation_id)},
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            logger.info(f"Invitation {claims.invitation_id} redeemed")

            # The redeemed invitation is the session subject
            access_token = create_access_token(
                user_id=str(claims.invitation_id),
                tenant_id=str(claims.tenant_id),
                caller_class=CALLER_CLASS_TENANT,
                superuser=claims.role == InvitationRole.superuser,
                expires_delta=self.session_ttl,
                scope=list(claims.scope),
            )

            return Return.ok(
                RedeemInvitationResponse(
                    access_token=access_token,
                    invitation_id=str(claims.invitation_id),
                    tenant_id=str(claims.tenant_id),
                    role=claims.role.value,
                )
            )
