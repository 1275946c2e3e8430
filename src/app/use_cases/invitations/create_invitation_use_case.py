"""
Create Invitation Use Case

Issues an invitation token for one identity and stores only its
non-reversible metadata.
"""

import logging
from datetime import timedelta
from typing import List, Optional
from uuid import UUID, uuid4

from libs.result import Error, Result, Return
from src.app.services.policy import Policy
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind, parse_scope
from src.domain.base import utcnow
from src.domain.entities import (
    AuditEvent,
    InvitationRecord,
    InvitationRole,
    RetentionPurpose,
)
from src.domain.invitation_claims import IdentityClaims, InvitationClaims, TokenRestrictions
from src.domain.privacy import derive_domain_tag, hash_prefix, lookup_hash
from src.domain.retention import compute_auto_delete_at

from .dtos import CreateInvitationResponse, iso

logger = logging.getLogger(__name__)


class CreateInvitationUseCase:
    """
    Use case for inviting a person into a tenant.

    Business Rules:
    - Caller must be allowed invitation:create on the tenant
    - Superuser invitations additionally need invitation:grant_superuser
    - Scope entries must be operation names
    - One pending invitation per (tenant, identity)
    - Identity is encrypted into the token; the record keeps hash + domain tag
    - auto_delete_at is fixed at creation from the retention purpose
    """

    def __init__(self, uow: UnitOfWork, codec: TokenCodec, ttl_days: int = 14):
        self.uow = uow
        self.codec = codec
        self.ttl_days = ttl_days

    async def execute(
        self,
        caller,
        tenant_id: UUID,
        identity: IdentityClaims,
        retention_purpose: RetentionPurpose,
        role: InvitationRole = InvitationRole.member,
        scope: Optional[List[str]] = None,
        restrictions: Optional[TokenRestrictions] = None,
        ttl_days: Optional[int] = None,
    ) -> Result[CreateInvitationResponse]:
        """
        Execute create invitation use case.

        Args:
            caller: Resolved caller
            tenant_id: Tenant the invitation belongs to
            identity: Personal data to encrypt into the token
            retention_purpose: Legal basis, drives auto_delete_at
            role: Role granted on redemption
            scope: Operation names granted on redemption
            restrictions: Optional redemption constraints
            ttl_days: Token lifetime, defaults to the configured value

        Returns:
            Result with CreateInvitationResponse DTO, or Error
        """
        async with self.uow:
            policy = Policy(self.uow)
            resource = Resource(ResourceKind.invitation, tenant_id)
            denied = await policy.check(caller, Operation.invitation_create, resource)
            if denied:
                return Return.err(denied)
            if role == InvitationRole.superuser:
                denied = await policy.check(
                    caller, Operation.invitation_grant_superuser, resource
                )
                if denied:
                    return Return.err(denied)

            if parse_scope(scope or []) is None:
                return Return.err(
                    Error("INVALID_SCOPE", "Scope may only name known operations")
                )

            ttl = timedelta(days=ttl_days if ttl_days is not None else self.ttl_days)
            if ttl <= timedelta(0):
                return Return.err(Error("INVALID_TTL", "Invitation lifetime must be positive"))

            try:
                identity_hash = lookup_hash(identity.email)
                domain_tag = derive_domain_tag(identity.email)
            except ValueError:
                return Return.err(
                    Error("INVALID_IDENTITY", "Identity must be an address with a domain")
                )

            existing = await self.uow.invitations.get_pending_by_tenant_and_hash(
                tenant_id, identity_hash
            )
            if existing:
                return Return.err(
                    Error(
                        "INVITE_ALREADY_EXISTS",
                        "A pending invitation already exists for this identity",
                    )
                )

            invitation_id = uuid4()
            claims = InvitationClaims(
                invitation_id=invitation_id,
                tenant_id=tenant_id,
                role=role,
                scope=scope or [],
                restrictions=restrictions or TokenRestrictions(),
                identity=identity,
            )
            issued = self.codec.issue(claims, ttl)

            created_at = utcnow()
            invitation = InvitationRecord(
                id=invitation_id,
                tenant_id=tenant_id,
                token=issued.token,
                lookup_hash=issued.lookup_hash,
                domain_tag=domain_tag,
                role=role,
                scope=list(claims.scope),
                retention_purpose=retention_purpose,
                auto_delete_at=compute_auto_delete_at(
                    retention_purpose, created_at, issued.expires_at
                ),
                expires_at=issued.expires_at,
                created_at=created_at,
                created_by=getattr(caller, "user_id", None),
            )
            await self.uow.invitations.create(invitation)

            audit = AuditEvent(
                tenant_id=tenant_id,
                actor_id=getattr(caller, "user_id", None),
                action="invitation_created",
                event_metadata={
                    "invitation_id": str(invitation_id),
                    "role": role.value,
                    "retention_purpose": retention_purpose.value,
                    "domain_tag": domain_tag,
                },
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            logger.info(
                f"Invitation {invitation_id} created for tenant {tenant_id} "
                f"lkh={hash_prefix(issued.lookup_hash)}"
            )

            return Return.ok(
                CreateInvitationResponse(
                    invitation_id=str(invitation.id),
                    token=issued.token,
                    status=invitation.status.value,
                    expires_at=iso(invitation.expires_at),
                    auto_delete_at=iso(invitation.auto_delete_at),
                )
            )
