"""
Policy gate used by every use case.

Wraps `authorize` so that a denial is logged, recorded as an audit event and
turned into a uniform AUTHORIZATION_DENIED error. The error never says whether
the resource exists or which tenant owns it.
"""

import logging
from typing import Optional

from libs.result import Error
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import (
    Decision,
    Operation,
    Operator,
    Resource,
    TenantSuperuser,
    TenantUser,
    authorize,
    caller_tenant_id,
)
from src.domain.entities import AuditEvent

logger = logging.getLogger(__name__)

AUTHORIZATION_DENIED = "AUTHORIZATION_DENIED"


def caller_class_name(caller) -> str:
    if isinstance(caller, Operator):
        return "operator"
    if isinstance(caller, TenantSuperuser):
        return "tenant_superuser"
    if isinstance(caller, TenantUser):
        return "tenant_user"
    return "unknown"


class Policy:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def check(
        self, caller, operation: Operation, resource: Resource
    ) -> Optional[Error]:
        """
        Authorize `caller` for `operation` on `resource`.

        Returns None when allowed. On denial the audit event is committed
        immediately so it survives the use case rolling back.
        """
        if authorize(caller, operation, resource) == Decision.allow:
            return None

        op_name = operation.value if isinstance(operation, Operation) else str(operation)
        kind = getattr(getattr(resource, "kind", None), "value", None)
        logger.warning(
            f"Authorization denied: caller={caller_class_name(caller)} "
            f"operation={op_name} resource={kind}"
        )

        audit = AuditEvent(
            tenant_id=caller_tenant_id(caller),
            actor_id=getattr(caller, "user_id", None),
            action="authorization_denied",
            event_metadata={
                "operation": op_name,
                "resource_kind": kind,
                "caller_class": caller_class_name(caller),
            },
        )
        await self.uow.audit_events.create(audit)
        await self.uow.commit()

        return Error(AUTHORIZATION_DENIED, "You are not allowed to perform this operation")
