from uuid import uuid4

import pytest

from src.domain.authorization import (
    ELEVATED_OPERATIONS,
    OPERATOR_OPERATIONS,
    TENANT_OPERATIONS,
    Decision,
    Operation,
    Operator,
    Resource,
    ResourceKind,
    TenantSuperuser,
    TenantUser,
    authorize,
    parse_scope,
    resolve_caller,
)

TENANT_A = uuid4()
TENANT_B = uuid4()


def test_operation_sets_cover_every_operation():
    assert TENANT_OPERATIONS | ELEVATED_OPERATIONS | OPERATOR_OPERATIONS == set(Operation)
    assert not TENANT_OPERATIONS & ELEVATED_OPERATIONS
    assert not TENANT_OPERATIONS & OPERATOR_OPERATIONS
    assert not ELEVATED_OPERATIONS & OPERATOR_OPERATIONS


@pytest.mark.parametrize("operation", list(Operation))
@pytest.mark.parametrize("kind", list(ResourceKind))
def test_operator_is_allowed_everything(operation, kind):
    caller = Operator(user_id=uuid4())

    assert authorize(caller, operation, Resource(kind, TENANT_A)) == Decision.allow
    assert authorize(caller, operation, Resource(kind, None)) == Decision.allow


@pytest.mark.parametrize("operation", sorted(TENANT_OPERATIONS, key=lambda o: o.value))
def test_tenant_user_allowed_tenant_operations_in_own_tenant(operation):
    caller = TenantUser(user_id=uuid4(), tenant_id=TENANT_A)

    assert authorize(caller, operation, Resource(ResourceKind.workflow, TENANT_A)) == Decision.allow


@pytest.mark.parametrize(
    "operation",
    sorted(ELEVATED_OPERATIONS | OPERATOR_OPERATIONS, key=lambda o: o.value),
)
def test_tenant_user_denied_elevated_and_operator_operations(operation):
    caller = TenantUser(user_id=uuid4(), tenant_id=TENANT_A)

    assert authorize(caller, operation, Resource(ResourceKind.invitation, TENANT_A)) == Decision.deny


@pytest.mark.parametrize(
    "operation",
    sorted(TENANT_OPERATIONS | ELEVATED_OPERATIONS, key=lambda o: o.value),
)
def test_tenant_superuser_allowed_elevated_operations_in_own_tenant(operation):
    caller = TenantSuperuser(user_id=uuid4(), tenant_id=TENANT_A)

    assert authorize(caller, operation, Resource(ResourceKind.invitation, TENANT_A)) == Decision.allow


@pytest.mark.parametrize("operation", sorted(OPERATOR_OPERATIONS, key=lambda o: o.value))
def test_tenant_superuser_denied_operator_operations(operation):
    caller = TenantSuperuser(user_id=uuid4(), tenant_id=TENANT_A)

    assert authorize(caller, operation, Resource(ResourceKind.system, TENANT_A)) == Decision.deny


@pytest.mark.parametrize("kind", list(ResourceKind))
@pytest.mark.parametrize("operation", list(Operation))
@pytest.mark.parametrize("caller_type", [TenantUser, TenantSuperuser])
def test_cross_tenant_access_is_denied_for_every_resource_kind(caller_type, operation, kind):
    caller = caller_type(user_id=uuid4(), tenant_id=TENANT_A)

    assert authorize(caller, operation, Resource(kind, TENANT_B, uuid4())) == Decision.deny


@pytest.mark.parametrize("caller_type", [TenantUser, TenantSuperuser])
def test_resource_without_tenant_is_denied_for_tenant_callers(caller_type):
    caller = caller_type(user_id=uuid4(), tenant_id=TENANT_A)

    assert (
        authorize(caller, Operation.invitation_read, Resource(ResourceKind.invitation, None))
        == Decision.deny
    )


@pytest.mark.parametrize(
    "caller",
    [None, "operator", {"user_id": str(uuid4())}, object()],
)
def test_unknown_caller_is_denied(caller):
    resource = Resource(ResourceKind.workflow, TENANT_A)

    assert authorize(caller, Operation.workflow_read, resource) == Decision.deny


def test_unknown_operation_is_denied():
    caller = Operator(user_id=uuid4())

    assert authorize(caller, "workflow:delete", Resource(ResourceKind.workflow, TENANT_A)) == Decision.deny
    assert authorize(caller, "workflow:read", Resource(ResourceKind.workflow, TENANT_A)) == Decision.deny


def test_missing_resource_is_denied():
    assert authorize(Operator(user_id=uuid4()), Operation.workflow_read, None) == Decision.deny


# ============================================================================
# resolve_caller
# ============================================================================


def test_resolve_operator():
    user_id = uuid4()

    caller = resolve_caller({"user_id": str(user_id), "caller_class": "operator"})

    assert caller == Operator(user_id=user_id)


def test_resolve_tenant_user_and_superuser():
    user_id = uuid4()
    claims = {"user_id": str(user_id), "caller_class": "tenant", "tenant_id": str(TENANT_A)}

    assert resolve_caller(claims) == TenantUser(user_id=user_id, tenant_id=TENANT_A)
    assert resolve_caller({**claims, "superuser": True}) == TenantSuperuser(
        user_id=user_id, tenant_id=TENANT_A
    )


@pytest.mark.parametrize(
    "claims",
    [
        None,
        {},
        {"caller_class": "operator"},
        {"user_id": "not-a-uuid", "caller_class": "operator"},
        {"user_id": str(uuid4()), "caller_class": "admin"},
        {"user_id": str(uuid4())},
        {"user_id": str(uuid4()), "caller_class": "tenant"},
        {"user_id": str(uuid4()), "caller_class": "tenant", "tenant_id": "nope"},
        {
            "user_id": str(uuid4()),
            "caller_class": "tenant",
            "tenant_id": str(uuid4()),
            "superuser": "yes",
        },
        {
            "user_id": str(uuid4()),
            "caller_class": "tenant",
            "tenant_id": str(uuid4()),
            "scope": ["workflow:delete"],
        },
        {
            "user_id": str(uuid4()),
            "caller_class": "tenant",
            "tenant_id": str(uuid4()),
            "scope": "workflow:read",
        },
    ],
)
def test_resolve_caller_fails_closed(claims):
    assert resolve_caller(claims) is None


# ============================================================================
# Scope
# ============================================================================


def test_resolve_tenant_caller_with_scope():
    user_id = uuid4()
    claims = {
        "user_id": str(user_id),
        "caller_class": "tenant",
        "tenant_id": str(TENANT_A),
        "scope": ["workflow:read", "workflow:activate"],
    }

    caller = resolve_caller(claims)

    assert caller == TenantUser(
        user_id=user_id,
        tenant_id=TENANT_A,
        scope=frozenset({Operation.workflow_read, Operation.workflow_activate}),
    )


def test_scoped_caller_limited_to_scope():
    caller = TenantUser(
        user_id=uuid4(), tenant_id=TENANT_A, scope=frozenset({Operation.workflow_read})
    )
    resource = Resource(ResourceKind.workflow, TENANT_A)

    assert authorize(caller, Operation.workflow_read, resource) == Decision.allow
    assert authorize(caller, Operation.workflow_create, resource) == Decision.deny
    assert (
        authorize(caller, Operation.invitation_create, Resource(ResourceKind.invitation, TENANT_A))
        == Decision.deny
    )


def test_scope_never_widens_role():
    caller = TenantUser(
        user_id=uuid4(), tenant_id=TENANT_A, scope=frozenset({Operation.credit_purchase})
    )

    assert (
        authorize(caller, Operation.credit_purchase, Resource(ResourceKind.credit_balance, TENANT_A))
        == Decision.deny
    )


def test_scoped_superuser_still_bound_to_tenant():
    caller = TenantSuperuser(
        user_id=uuid4(), tenant_id=TENANT_A, scope=frozenset({Operation.audit_read})
    )

    assert authorize(caller, Operation.audit_read, Resource(ResourceKind.audit_log, TENANT_A)) == Decision.allow
    assert authorize(caller, Operation.audit_read, Resource(ResourceKind.audit_log, TENANT_B)) == Decision.deny
    assert (
        authorize(caller, Operation.invitation_revoke, Resource(ResourceKind.invitation, TENANT_A))
        == Decision.deny
    )


@pytest.mark.parametrize(
    "values, expected",
    [
        (None, frozenset()),
        ([], frozenset()),
        (["credit:read"], frozenset({Operation.credit_read})),
        (["credit:read", "credit:read"], frozenset({Operation.credit_read})),
        (["credit:steal"], None),
        ("credit:read", None),
        ([["credit:read"]], None),
    ],
)
def test_parse_scope(values, expected):
    assert parse_scope(values) == expected
