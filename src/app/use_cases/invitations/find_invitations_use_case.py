"""
Invitation lookup use cases.

FindInvitationsByIdentityUseCase answers "has this person already been
invited?" by hashing the raw identity; ListInvitationsUseCase lists a
tenant's invitations. Both return non-PII summaries only.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.privacy import lookup_hash

from .dtos import InvitationListResponse, summarize


class FindInvitationsByIdentityUseCase:
    """Search without a tenant is cross-tenant and therefore operator-only"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, caller, identity: str, tenant_id: Optional[UUID] = None
    ) -> Result[InvitationListResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.invitation_read, Resource(ResourceKind.invitation, tenant_id)
            )
            if denied:
                return Return.err(denied)

            try:
                identity_hash = lookup_hash(identity)
            except ValueError:
                return Return.err(Error("INVALID_IDENTITY", "Identity must not be empty"))

            invitations = await self.uow.invitations.get_by_lookup_hash(
                identity_hash, tenant_id=tenant_id
            )
            return Return.ok(
                InvitationListResponse(invitations=[summarize(i) for i in invitations])
            )


class ListInvitationsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, caller, tenant_id: UUID) -> Result[InvitationListResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.invitation_read, Resource(ResourceKind.invitation, tenant_id)
            )
            if denied:
                return Return.err(denied)

            invitations = await self.uow.invitations.get_by_tenant_id(tenant_id)
            return Return.ok(
                InvitationListResponse(invitations=[summarize(i) for i in invitations])
            )
