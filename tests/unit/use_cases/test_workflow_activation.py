from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.app.services.credit_ledger import INSUFFICIENT_CREDIT_MESSAGE
from src.app.use_cases.workflows import (
    ActivateWorkflowUseCase,
    CancelWorkflowUseCase,
    CompleteWorkflowUseCase,
    CreateWorkflowUseCase,
    GetWorkflowUseCase,
)
from src.domain.authorization import TenantUser
from src.domain.base import utcnow
from src.domain.entities import WorkflowInstance, WorkflowKind, WorkflowStatus


def _workflow(tenant_id, status=WorkflowStatus.draft, credit_transaction_id=None):
    return WorkflowInstance(
        id=uuid4(),
        tenant_id=tenant_id,
        kind=WorkflowKind.onboarding,
        status=status,
        subject_id="emp-42",
        credit_transaction_id=credit_transaction_id,
        created_at=utcnow(),
    )


@pytest.fixture
def listener():
    listener = MagicMock()
    listener.on_activated = AsyncMock()
    return listener


@pytest.mark.asyncio
async def test_create_workflow_starts_as_draft(mock_uow, tenant_user, tenant_id, audit_actions):
    result = await CreateWorkflowUseCase(mock_uow).execute(
        tenant_user, tenant_id, WorkflowKind.offboarding, " emp-7 "
    )

    assert result.is_ok()
    assert result.value.status == "draft"
    assert result.value.subject_id == "emp-7"
    assert result.value.credit_transaction_id is None
    mock_uow.credit_balances.consume_available.assert_not_called()
    assert audit_actions() == ["workflow_created"]
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_create_workflow_requires_subject(mock_uow, tenant_user, tenant_id):
    result = await CreateWorkflowUseCase(mock_uow).execute(
        tenant_user, tenant_id, WorkflowKind.onboarding, "   "
    )

    assert result.error.code == "INVALID_SUBJECT"
    mock_uow.workflows.create.assert_not_called()


@pytest.mark.asyncio
async def test_create_workflow_in_other_tenant_is_denied(mock_uow, tenant_user, audit_actions):
    result = await CreateWorkflowUseCase(mock_uow).execute(
        tenant_user, uuid4(), WorkflowKind.onboarding, "emp-1"
    )

    assert result.error.code == "AUTHORIZATION_DENIED"
    assert audit_actions() == ["authorization_denied"]
    mock_uow.workflows.create.assert_not_called()


@pytest.mark.asyncio
async def test_activation_consumes_one_credit_then_runs_listeners(
    mock_uow, tenant_user, tenant_id, listener, audit_actions
):
    # Arrange
    draft = _workflow(tenant_id)
    tx_id = uuid4()
    active = _workflow(tenant_id, WorkflowStatus.active, credit_transaction_id=tx_id)
    active.id = draft.id
    mock_uow.workflows.get_by_id.side_effect = [draft, active]
    mock_uow.workflows.claim_credit.return_value = True
    mock_uow.credit_balances.consume_available.return_value = True
    mock_uow.workflows.transition.return_value = True

    # Act
    result = await ActivateWorkflowUseCase(mock_uow, listeners=[listener]).execute(
        tenant_user, draft.id
    )

    # Assert
    assert result.is_ok()
    assert result.value.status == "active"
    assert result.value.credit_transaction_id == str(tx_id)
    mock_uow.credit_balances.consume_available.assert_called_once()
    mock_uow.workflows.transition.assert_called_once()
    assert mock_uow.workflows.transition.call_args.args[1:3] == (
        WorkflowStatus.draft,
        WorkflowStatus.active,
    )
    assert audit_actions() == ["workflow_activated"]
    mock_uow.commit.assert_called_once()
    listener.on_activated.assert_called_once_with(active)


@pytest.mark.asyncio
async def test_activation_without_credit_stays_draft(mock_uow, tenant_user, tenant_id, listener):
    draft = _workflow(tenant_id)
    mock_uow.workflows.get_by_id.return_value = draft
    mock_uow.workflows.claim_credit.return_value = True
    mock_uow.credit_balances.consume_available.return_value = False

    result = await ActivateWorkflowUseCase(mock_uow, listeners=[listener]).execute(
        tenant_user, draft.id
    )

    assert result.error.code == "INSUFFICIENT_CREDIT"
    assert result.error.message == INSUFFICIENT_CREDIT_MESSAGE
    mock_uow.rollback.assert_called_once()
    mock_uow.workflows.transition.assert_not_called()
    mock_uow.commit.assert_not_called()
    listener.on_activated.assert_not_called()


@pytest.mark.asyncio
async def test_second_activation_is_already_consumed(mock_uow, tenant_user, tenant_id, listener):
    active = _workflow(tenant_id, WorkflowStatus.active, credit_transaction_id=uuid4())
    mock_uow.workflows.get_by_id.return_value = active

    result = await ActivateWorkflowUseCase(mock_uow, listeners=[listener]).execute(
        tenant_user, active.id
    )

    assert result.error.code == "ALREADY_CONSUMED"
    mock_uow.workflows.claim_credit.assert_not_called()
    mock_uow.credit_balances.consume_available.assert_not_called()
    listener.on_activated.assert_not_called()


@pytest.mark.asyncio
async def test_lost_claim_race_is_already_consumed(mock_uow, tenant_user, tenant_id, listener):
    draft = _workflow(tenant_id)
    mock_uow.workflows.get_by_id.return_value = draft
    mock_uow.workflows.claim_credit.return_value = False

    result = await ActivateWorkflowUseCase(mock_uow, listeners=[listener]).execute(
        tenant_user, draft.id
    )

    assert result.error.code == "ALREADY_CONSUMED"
    mock_uow.credit_balances.consume_available.assert_not_called()
    listener.on_activated.assert_not_called()


@pytest.mark.asyncio
async def test_cancelled_draft_cannot_be_activated(mock_uow, tenant_user, tenant_id):
    cancelled = _workflow(tenant_id, WorkflowStatus.cancelled)
    mock_uow.workflows.get_by_id.return_value = cancelled

    result = await ActivateWorkflowUseCase(mock_uow).execute(tenant_user, cancelled.id)

    assert result.error.code == "INVALID_TRANSITION"
    mock_uow.workflows.claim_credit.assert_not_called()


@pytest.mark.asyncio
async def test_activation_undone_when_cancelled_concurrently(mock_uow, tenant_user, tenant_id):
    draft = _workflow(tenant_id)
    mock_uow.workflows.get_by_id.return_value = draft
    mock_uow.workflows.claim_credit.return_value = True
    mock_uow.credit_balances.consume_available.return_value = True
    mock_uow.workflows.transition.return_value = False

    result = await ActivateWorkflowUseCase(mock_uow).execute(tenant_user, draft.id)

    assert result.error.code == "INVALID_TRANSITION"
    mock_uow.rollback.assert_called_once()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_listener_failure_does_not_undo_activation(mock_uow, tenant_user, tenant_id):
    draft = _workflow(tenant_id)
    active = _workflow(tenant_id, WorkflowStatus.active, credit_transaction_id=uuid4())
    mock_uow.workflows.get_by_id.side_effect = [draft, active]
    mock_uow.workflows.claim_credit.return_value = True
    mock_uow.credit_balances.consume_available.return_value = True
    mock_uow.workflows.transition.return_value = True
    broken = MagicMock()
    broken.on_activated = AsyncMock(side_effect=RuntimeError("task service down"))

    result = await ActivateWorkflowUseCase(mock_uow, listeners=[broken]).execute(
        tenant_user, draft.id
    )

    assert result.is_ok()
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_activation_of_other_tenants_workflow_is_denied(mock_uow, tenant_id, audit_actions):
    foreign = _workflow(uuid4())
    mock_uow.workflows.get_by_id.return_value = foreign

    result = await ActivateWorkflowUseCase(mock_uow).execute(
        TenantUser(user_id=uuid4(), tenant_id=tenant_id), foreign.id
    )

    assert result.error.code == "AUTHORIZATION_DENIED"
    mock_uow.workflows.claim_credit.assert_not_called()
    assert audit_actions() == ["authorization_denied"]


@pytest.mark.asyncio
async def test_complete_active_workflow_leaves_ledger_alone(mock_uow, tenant_user, tenant_id):
    active = _workflow(tenant_id, WorkflowStatus.active, credit_transaction_id=uuid4())
    completed = _workflow(tenant_id, WorkflowStatus.completed, active.credit_transaction_id)
    mock_uow.workflows.get_by_id.side_effect = [active, completed]
    mock_uow.workflows.transition.return_value = True

    result = await CompleteWorkflowUseCase(mock_uow).execute(tenant_user, active.id)

    assert result.value.status == "completed"
    assert mock_uow.workflows.transition.call_args.args[1:3] == (
        WorkflowStatus.active,
        WorkflowStatus.completed,
    )
    assert "completed_at" in mock_uow.workflows.transition.call_args.args[3]
    mock_uow.credit_balances.release.assert_not_called()
    mock_uow.credit_balances.adjust_purchased.assert_not_called()


@pytest.mark.asyncio
async def test_complete_draft_is_invalid(mock_uow, tenant_user, tenant_id):
    mock_uow.workflows.get_by_id.return_value = _workflow(tenant_id)

    result = await CompleteWorkflowUseCase(mock_uow).execute(tenant_user, uuid4())

    assert result.error.code == "INVALID_TRANSITION"
    mock_uow.workflows.transition.assert_not_called()


@pytest.mark.asyncio
async def test_cancel_draft(mock_uow, tenant_user, tenant_id, audit_actions):
    draft = _workflow(tenant_id)
    cancelled = _workflow(tenant_id, WorkflowStatus.cancelled)
    mock_uow.workflows.get_by_id.side_effect = [draft, cancelled]
    mock_uow.workflows.transition.return_value = True

    result = await CancelWorkflowUseCase(mock_uow).execute(tenant_user, draft.id)

    assert result.value.status == "cancelled"
    assert audit_actions() == ["workflow_cancelled"]


@pytest.mark.asyncio
async def test_cancel_completed_is_invalid(mock_uow, tenant_user, tenant_id):
    mock_uow.workflows.get_by_id.return_value = _workflow(tenant_id, WorkflowStatus.completed)

    result = await CancelWorkflowUseCase(mock_uow).execute(tenant_user, uuid4())

    assert result.error.code == "INVALID_TRANSITION"


@pytest.mark.asyncio
async def test_get_missing_workflow(mock_uow, tenant_user):
    mock_uow.workflows.get_by_id.return_value = None

    result = await GetWorkflowUseCase(mock_uow).execute(tenant_user, uuid4())

    assert result.error.code == "WORKFLOW_NOT_FOUND"
