"""
Credit API Routes

Balance, ledger history, quotes, purchases and reservations.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import to_http_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.credits import (
    BalanceResponse,
    GetBalanceUseCase,
    ListTransactionsUseCase,
    PurchaseCreditsResponse,
    PurchaseCreditsUseCase,
    QuoteCreditsUseCase,
    QuoteResponse,
    ReleaseCreditsUseCase,
    ReserveCreditsUseCase,
    TransactionListResponse,
)
from src.depends import (
    get_balance_thresholds,
    get_base_price,
    get_current_caller,
    get_unit_of_work,
    resolve_tenant,
)
from src.domain.authorization import Caller

router = APIRouter(prefix="/credits", tags=["Credits"])


class CreditAmountRequest(BaseModel):
    tenant_id: Optional[UUID] = None
    amount: int = Field(..., description="Number of credits")


@router.get(
    "/balance",
    status_code=status.HTTP_200_OK,
    response_model=BalanceResponse,
)
async def get_balance(
    tenant_id: Optional[UUID] = Query(None, description="Operators only"),
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = GetBalanceUseCase(uow, thresholds=get_balance_thresholds())
    result = await use_case.execute(caller, resolve_tenant(caller, tenant_id))

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get(
    "/transactions",
    status_code=status.HTTP_200_OK,
    response_model=TransactionListResponse,
)
async def list_transactions(
    tenant_id: Optional[UUID] = Query(None, description="Operators only"),
    limit: int = Query(100, ge=1, le=500),
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = ListTransactionsUseCase(uow)
    result = await use_case.execute(caller, resolve_tenant(caller, tenant_id), limit=limit)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get(
    "/quote",
    status_code=status.HTTP_200_OK,
    response_model=QuoteResponse,
)
async def quote_credits(quantity: int = Query(..., description="Number of credits")):
    """Price Quote - 25% off from 500 credits, 30% off from 2500"""
    result = QuoteCreditsUseCase(get_base_price()).execute(quantity)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/purchase",
    status_code=status.HTTP_201_CREATED,
    response_model=PurchaseCreditsResponse,
)
async def purchase_credits(
    request: CreditAmountRequest,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Purchase Credits

    Raises:
        - 400 Bad Request: INVALID_AMOUNT
        - 403 Forbidden: AUTHORIZATION_DENIED
    """
    use_case = PurchaseCreditsUseCase(
        uow,
        base_price=get_base_price(),
        currency=ApplicationConfig.CREDIT_CURRENCY,
        thresholds=get_balance_thresholds(),
    )
    result = await use_case.execute(
        caller, resolve_tenant(caller, request.tenant_id), request.amount
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/reserve",
    status_code=status.HTTP_200_OK,
    response_model=BalanceResponse,
)
async def reserve_credits(
    request: CreditAmountRequest,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Reserve Credits

    Raises:
        - 400 Bad Request: INVALID_AMOUNT
        - 402 Payment Required: INSUFFICIENT_CREDIT
    """
    use_case = ReserveCreditsUseCase(uow, thresholds=get_balance_thresholds())
    result = await use_case.execute(
        caller, resolve_tenant(caller, request.tenant_id), request.amount
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/release",
    status_code=status.HTTP_200_OK,
    response_model=BalanceResponse,
)
async def release_credits(
    request: CreditAmountRequest,
    caller: Caller = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = ReleaseCreditsUseCase(uow, thresholds=get_balance_thresholds())
    result = await use_case.execute(
        caller, resolve_tenant(caller, request.tenant_id), request.amount
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
