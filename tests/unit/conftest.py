import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

# Add repo root to Python path for libs access
repo_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(repo_root))

from src.domain.authorization import Operator, TenantSuperuser, TenantUser


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.invitations = MagicMock()
    for name in (
        "get_by_id",
        "get_for_verification",
        "get_pending_by_tenant_and_hash",
        "get_by_lookup_hash",
        "get_by_tenant_id",
        "create",
        "update",
        "mark_redeemed",
        "mark_expired",
        "mark_revoked",
        "expire_overdue",
        "delete_due",
        "get_due_for_delivery",
        "get_failed_deliveries",
    ):
        setattr(uow.invitations, name, AsyncMock())

    uow.credit_balances = MagicMock()
    for name in (
        "get_by_tenant_id",
        "ensure_exists",
        "add_purchased",
        "consume_available",
        "consume_reserved",
        "reserve",
        "release",
        "adjust_purchased",
    ):
        setattr(uow.credit_balances, name, AsyncMock())
    uow.credit_balances.get_by_tenant_id.return_value = None

    uow.credit_transactions = MagicMock()
    for name in ("create", "get_by_id", "get_usage_by_workflow_id", "get_by_tenant_id"):
        setattr(uow.credit_transactions, name, AsyncMock())

    uow.workflows = MagicMock()
    for name in ("get_by_id", "get_by_tenant_id", "create", "claim_credit", "transition"):
        setattr(uow.workflows, name, AsyncMock())

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()
    uow.audit_events.get_by_tenant_paginated = AsyncMock()

    return uow


@pytest.fixture
def tenant_id():
    return uuid4()


@pytest.fixture
def tenant_user(tenant_id):
    return TenantUser(user_id=uuid4(), tenant_id=tenant_id)


@pytest.fixture
def tenant_superuser(tenant_id):
    return TenantSuperuser(user_id=uuid4(), tenant_id=tenant_id)


@pytest.fixture
def operator():
    return Operator(user_id=uuid4())


@pytest.fixture
def audit_actions(mock_uow):
    """Actions of every audit event created on the mock uow so far"""

    def actions():
        return [c.args[0].action for c in mock_uow.audit_events.create.call_args_list]

    return actions
