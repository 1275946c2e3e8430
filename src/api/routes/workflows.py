"""
Workflow API Routes
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.workflows import (
    ActivateWorkflowUseCase,
    CancelWorkflowUseCase,
    CompleteWorkflowUseCase,
    CreateWorkflowUseCase,
    GetWorkflowUseCase,
    ListWorkflowsUseCase,
    WorkflowListResponse,
    WorkflowResponse,
)
from src.depends import (
    get_activation_listeners,
    get_balance_thresholds,
    get_base_price,
    get_current_caller,
    get_unit_of_work,
    resolve_tenant,
)
from src.domain.authorization import Caller
from src.domain.entities import WorkflowKind, WorkflowStatus
from config import ApplicationConfig

router = APIRouter(prefix="/workflows", tags=["Workflows"])


class CreateWorkflowRequest(BaseModel):
    tenant_id: Optional[UUID] = None
    kind: WorkflowKind
    subject_id: str = Field(..., min_length=1, max_length=64)
    invitation_id: Optional[UUID] = None


class ActivateWorkflowRequest(BaseModel):
    from_reservation: bool = False


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=WorkflowResponse,
)
async def create_workflow(
    request: CreateWorkflowRequest,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Create Workflow (draft, no credit consumed)"""
    use_case = CreateWorkflowUseCase(uow)
    result = await use_case.execute(
        caller,
        resolve_tenant(caller, request.tenant_id),
        request.kind,
        request.subject_id,
        invitation_id=request.invitation_id,
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=WorkflowListResponse,
)
async def list_workflows(
    tenant_id: Optional[UUID] = Query(None, description="Operators only"),
    workflow_status: Optional[WorkflowStatus] = Query(None, alias="status"),
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = ListWorkflowsUseCase(uow)
    result = await use_case.execute(
        caller, resolve_tenant(caller, tenant_id), status=workflow_status
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get(
    "/{workflow_id}",
    status_code=status.HTTP_200_OK,
    response_model=WorkflowResponse,
)
async def get_workflow(
    workflow_id: UUID,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = GetWorkflowUseCase(uow)
    result = await use_case.execute(caller, workflow_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/{workflow_id}/activate",
    status_code=status.HTTP_200_OK,
    response_model=WorkflowResponse,
)
async def activate_workflow(
    workflow_id: UUID,
    request: Optional[ActivateWorkflowRequest] = None,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    listeners: list = Depends(get_activation_listeners),
):
    """
    Activate Workflow - consumes exactly one credit

    Raises:
        - 402 Payment Required: INSUFFICIENT_CREDIT
        - 403 Forbidden: AUTHORIZATION_DENIED
        - 404 Not Found: WORKFLOW_NOT_FOUND
        - 409 Conflict: ALREADY_CONSUMED, INVALID_TRANSITION
    """
    use_case = ActivateWorkflowUseCase(
        uow,
        listeners=listeners,
        base_price=get_base_price(),
        currency=ApplicationConfig.CREDIT_CURRENCY,
        thresholds=get_balance_thresholds(),
    )
    result = await use_case.execute(
        caller,
        workflow_id,
        from_reservation=request.from_reservation if request else False,
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/{workflow_id}/complete",
    status_code=status.HTTP_200_OK,
    response_model=WorkflowResponse,
)
async def complete_workflow(
    workflow_id: UUID,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = CompleteWorkflowUseCase(uow)
    result = await use_case.execute(caller, workflow_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/{workflow_id}/cancel",
    status_code=status.HTTP_200_OK,
    response_model=WorkflowResponse,
)
async def cancel_workflow(
    workflow_id: UUID,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Cancel Workflow - a consumed credit is not refunded"""
    use_case = CancelWorkflowUseCase(uow)
    result = await use_case.execute(caller, workflow_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
