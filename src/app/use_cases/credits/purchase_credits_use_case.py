"""
Purchase Credits Use Case

Records a credit purchase at the tiered price. Payment collection happens
before this is called.
"""

import logging
from decimal import Decimal
from uuid import UUID

from libs.result import Result, Return
from src.app.services.credit_ledger import CreditLedger
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.balance_alerts import DEFAULT_BALANCE_THRESHOLDS, BalanceThresholds
from src.domain.entities import AuditEvent
from src.domain.pricing import BASE_PRICE

from .dtos import PurchaseCreditsResponse, balance_response, transaction_response

logger = logging.getLogger(__name__)


class PurchaseCreditsUseCase:
    """
    Business Rules:
    - Tenant superusers (own tenant) and operators only
    - Amount must be a positive integer
    - 25% off from 500 credits, 30% off from 2500
    """

    def __init__(
        self,
        uow: UnitOfWork,
        base_price: Decimal = BASE_PRICE,
        currency: str = "EUR",
        thresholds: BalanceThresholds = DEFAULT_BALANCE_THRESHOLDS,
    ):
        self.uow = uow
        self.ledger = CreditLedger(
            uow, base_price=base_price, currency=currency, thresholds=thresholds
        )

    async def execute(
        self, caller, tenant_id: UUID, amount: int
    ) -> Result[PurchaseCreditsResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.credit_purchase, Resource(ResourceKind.credit_balance, tenant_id)
            )
            if denied:
                return Return.err(denied)

            purchased = await self.ledger.purchase(
                tenant_id, amount, created_by=str(getattr(caller, "user_id", ""))
            )
            if purchased.is_err():
                return Return.err(purchased.error)
            transaction = purchased.value

            audit = AuditEvent(
                tenant_id=tenant_id,
                actor_id=getattr(caller, "user_id", None),
                action="credits_purchased",
                event_metadata={
                    "transaction_id": str(transaction.id),
                    "amount": amount,
                    "total_amount": str(transaction.total_amount),
                },
            )
            await self.uow.audit_events.create(audit)

            balance = await self.ledger.get_balance(tenant_id)
            await self.uow.commit()

            return Return.ok(
                PurchaseCreditsResponse(
                    transaction=transaction_response(transaction),
                    balance=balance_response(balance),
                )
            )
