"""
Admin API Routes - Operator Endpoints

Cross-tenant maintenance for staff tooling. Callers authenticate with the
admin API key or an operator session; the use cases still run every request
through the authorization engine.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.app.services.delivery import IDeliveryService, ITemplateRenderer
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.credits import AdjustCreditsUseCase, PurchaseCreditsResponse
from src.app.use_cases.invitations import (
    DeliveryResponse,
    InvitationListResponse,
    ListFailedDeliveriesUseCase,
    RequeueDeliveryUseCase,
    RetryDeliveriesResponse,
    RetryDueDeliveriesUseCase,
)
from src.app.use_cases.retention import RetentionSweepResponse, RunRetentionSweepUseCase
from src.depends import (
    get_balance_thresholds,
    get_current_caller,
    get_delivery_service,
    get_template_renderer,
    get_unit_of_work,
)
from src.domain.authorization import Caller

router = APIRouter(prefix="/admin", tags=["Admin"])


class AdjustCreditsRequest(BaseModel):
    amount: int = Field(..., description="Credits to add (positive) or remove (negative)")
    reason: str = Field(..., min_length=1, max_length=500)


@router.post(
    "/retention/sweep",
    status_code=status.HTTP_200_OK,
    response_model=RetentionSweepResponse,
)
async def run_retention_sweep(
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Run Retention Sweep

    Expires overdue invitations and deletes records past auto_delete_at.
    """
    use_case = RunRetentionSweepUseCase(uow)
    result = await use_case.execute(caller)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get(
    "/deliveries/failed",
    status_code=status.HTTP_200_OK,
    response_model=InvitationListResponse,
)
async def list_failed_deliveries(
    tenant_id: Optional[UUID] = Query(None),
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Invitations whose delivery needs manual intervention"""
    use_case = ListFailedDeliveriesUseCase(uow)
    result = await use_case.execute(caller, tenant_id=tenant_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/deliveries/retry",
    status_code=status.HTTP_200_OK,
    response_model=RetryDeliveriesResponse,
)
async def retry_due_deliveries(
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    delivery: IDeliveryService = Depends(get_delivery_service),
    renderer: ITemplateRenderer = Depends(get_template_renderer),
):
    use_case = RetryDueDeliveriesUseCase(uow, delivery, renderer)
    result = await use_case.execute(caller)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/deliveries/{invitation_id}/requeue",
    status_code=status.HTTP_200_OK,
    response_model=DeliveryResponse,
)
async def requeue_delivery(
    invitation_id: UUID,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = RequeueDeliveryUseCase(uow)
    result = await use_case.execute(caller, invitation_id)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/tenants/{tenant_id}/credits/adjust",
    status_code=status.HTTP_200_OK,
    response_model=PurchaseCreditsResponse,
)
async def adjust_credits(
    tenant_id: UUID,
    request: AdjustCreditsRequest,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Adjust Credits

    Raises:
        - 400 Bad Request: INVALID_AMOUNT, INVALID_REASON
        - 402 Payment Required: INSUFFICIENT_CREDIT
        - 403 Forbidden: AUTHORIZATION_DENIED
    """
    use_case = AdjustCreditsUseCase(uow, thresholds=get_balance_thresholds())
    result = await use_case.execute(caller, tenant_id, request.amount, request.reason)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
