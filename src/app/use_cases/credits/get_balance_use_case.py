"""
Credit read use cases: balance, ledger history and price quotes.
"""

from decimal import Decimal
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.credit_ledger import CreditLedger
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.balance_alerts import DEFAULT_BALANCE_THRESHOLDS, BalanceThresholds
from src.domain.pricing import BASE_PRICE, quote_price

from .dtos import (
    BalanceResponse,
    QuoteResponse,
    TransactionListResponse,
    balance_response,
    quote_response,
    transaction_response,
)


class GetBalanceUseCase:
    def __init__(
        self, uow: UnitOfWork, thresholds: BalanceThresholds = DEFAULT_BALANCE_THRESHOLDS
    ):
        self.uow = uow
        self.ledger = CreditLedger(uow, thresholds=thresholds)

    async def execute(self, caller, tenant_id: UUID) -> Result[BalanceResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.credit_read, Resource(ResourceKind.credit_balance, tenant_id)
            )
            if denied:
                return Return.err(denied)

            return Return.ok(balance_response(await self.ledger.get_balance(tenant_id)))


class ListTransactionsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.ledger = CreditLedger(uow)

    async def execute(
        self, caller, tenant_id: UUID, limit: int = 100
    ) -> Result[TransactionListResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.credit_read, Resource(ResourceKind.credit_balance, tenant_id)
            )
            if denied:
                return Return.err(denied)

            transactions = await self.ledger.list_transactions(tenant_id, limit=limit)
            return Return.ok(
                TransactionListResponse(
                    transactions=[transaction_response(tx) for tx in transactions]
                )
            )


class QuoteCreditsUseCase:
    """Pure pricing; no tenant data involved"""

    def __init__(self, base_price: Decimal = BASE_PRICE):
        self.base_price = base_price

    def execute(self, quantity: int) -> Result[QuoteResponse]:
        try:
            quote = quote_price(quantity, self.base_price)
        except ValueError:
            return Return.err(Error("INVALID_AMOUNT", "Quantity must be a positive integer"))
        return Return.ok(quote_response(quote))
