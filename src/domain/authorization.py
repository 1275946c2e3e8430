"""
Authorization Engine

Single policy gate for every data-layer operation. Callers are a closed set of
variants resolved once from a verified credential; `authorize` is total and
denies anything it cannot positively allow.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Union
from uuid import UUID


class Operation(str, Enum):
    # Invitations
    invitation_create = "invitation:create"
    invitation_grant_superuser = "invitation:grant_superuser"
    invitation_read = "invitation:read"
    invitation_revoke = "invitation:revoke"
    invitation_decode_identity = "invitation:decode_identity"
    invitation_deliver = "invitation:deliver"
    # Workflows
    workflow_create = "workflow:create"
    workflow_read = "workflow:read"
    workflow_activate = "workflow:activate"
    workflow_complete = "workflow:complete"
    workflow_cancel = "workflow:cancel"
    # Credits
    credit_read = "credit:read"
    credit_purchase = "credit:purchase"
    credit_reserve = "credit:reserve"
    credit_adjust = "credit:adjust"
    # Maintenance
    retention_sweep = "retention:sweep"
    delivery_queue = "delivery:queue"
    audit_read = "audit:read"


class ResourceKind(str, Enum):
    invitation = "invitation"
    workflow = "workflow"
    credit_balance = "credit_balance"
    audit_log = "audit_log"
    system = "system"


class Decision(str, Enum):
    allow = "allow"
    deny = "deny"


@dataclass(frozen=True)
class Operator:
    """Staff/support tooling. Cross-tenant; never issued to tenant surfaces."""

    user_id: UUID


@dataclass(frozen=True)
class TenantUser:
    user_id: UUID
    tenant_id: UUID
    # Empty means the role decides alone
    scope: FrozenSet[Operation] = frozenset()


@dataclass(frozen=True)
class TenantSuperuser:
    user_id: UUID
    tenant_id: UUID
    scope: FrozenSet[Operation] = frozenset()


Caller = Union[Operator, TenantUser, TenantSuperuser]


@dataclass(frozen=True)
class Resource:
    kind: ResourceKind
    tenant_id: Optional[UUID]
    id: Optional[UUID] = None


TENANT_OPERATIONS = frozenset(
    {
        Operation.invitation_create,
        Operation.invitation_read,
        Operation.invitation_deliver,
        Operation.workflow_create,
        Operation.workflow_read,
        Operation.workflow_activate,
        Operation.workflow_complete,
        Operation.workflow_cancel,
        Operation.credit_read,
    }
)

ELEVATED_OPERATIONS = frozenset(
    {
        Operation.invitation_revoke,
        Operation.invitation_decode_identity,
        Operation.invitation_grant_superuser,
        Operation.credit_purchase,
        Operation.credit_reserve,
        Operation.audit_read,
    }
)

OPERATOR_OPERATIONS = frozenset(
    {
        Operation.credit_adjust,
        Operation.retention_sweep,
        Operation.delivery_queue,
    }
)

CALLER_CLASS_OPERATOR = "operator"
CALLER_CLASS_TENANT = "tenant"


def authorize(caller: Any, operation: Any, resource: Any) -> Decision:
    """
    Decide whether `caller` may perform `operation` on `resource`.

    Fails closed: unknown caller types, unknown operations, resources without
    a tenant and any tenant mismatch all yield `Decision.deny`. A tenant
    caller holding a non-empty scope is further limited to the operations
    in it.
    """
    if not isinstance(operation, Operation) or not isinstance(resource, Resource):
        return Decision.deny

    if isinstance(caller, Operator):
        return Decision.allow

    if isinstance(caller, TenantSuperuser):
        allowed = TENANT_OPERATIONS | ELEVATED_OPERATIONS
    elif isinstance(caller, TenantUser):
        allowed = TENANT_OPERATIONS
    else:
        return Decision.deny

    if operation not in allowed:
        return Decision.deny
    if caller.scope and operation not in caller.scope:
        return Decision.deny
    if caller.tenant_id is None or resource.tenant_id is None:
        return Decision.deny
    if caller.tenant_id != resource.tenant_id:
        return Decision.deny
    return Decision.allow


def _as_uuid(value: Any) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


def parse_scope(values: Optional[Iterable[Any]]) -> Optional[FrozenSet[Operation]]:
    """Operations named by `values`, or None if any name is not an operation"""
    if values is None:
        return frozenset()
    if isinstance(values, (str, bytes)):
        return None
    try:
        return frozenset(Operation(value) for value in values)
    except (TypeError, ValueError):
        return None


def resolve_caller(claims: Optional[Mapping[str, Any]]) -> Optional[Caller]:
    """
    Map verified session claims onto a caller variant.

    Called once per request. Returns None for anything incomplete or
    unrecognized, which callers treat as unauthenticated.
    """
    if not claims:
        return None

    user_id = _as_uuid(claims.get("user_id"))
    if user_id is None:
        return None

    caller_class = claims.get("caller_class")
    if caller_class == CALLER_CLASS_OPERATOR:
        return Operator(user_id=user_id)

    if caller_class != CALLER_CLASS_TENANT:
        return None

    tenant_id = _as_uuid(claims.get("tenant_id"))
    if tenant_id is None:
        return None

    scope = parse_scope(claims.get("scope"))
    if scope is None:
        return None

    superuser = claims.get("superuser", False)
    if superuser is True:
        return TenantSuperuser(user_id=user_id, tenant_id=tenant_id, scope=scope)
    if superuser is False:
        return TenantUser(user_id=user_id, tenant_id=tenant_id, scope=scope)
    return None


def caller_tenant_id(caller: Caller) -> Optional[UUID]:
    return getattr(caller, "tenant_id", None)
