"""
Adjust Credits Use Case

Operator-only correction of a tenant's purchased credits.
"""

import logging
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.credit_ledger import CreditLedger
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.balance_alerts import DEFAULT_BALANCE_THRESHOLDS, BalanceThresholds
from src.domain.entities import AuditEvent

from .dtos import PurchaseCreditsResponse, balance_response, transaction_response

logger = logging.getLogger(__name__)


class AdjustCreditsUseCase:
    """
    Business Rules:
    - Operators only
    - A reason is mandatory and stored on the adjustment transaction
    - used is never touched; negative adjustments cannot make available negative
    """

    def __init__(
        self, uow: UnitOfWork, thresholds: BalanceThresholds = DEFAULT_BALANCE_THRESHOLDS
    ):
        self.uow = uow
        self.ledger = CreditLedger(uow, thresholds=thresholds)

    async def execute(
        self, caller, tenant_id: UUID, amount: int, reason: str
    ) -> Result[PurchaseCreditsResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.credit_adjust, Resource(ResourceKind.credit_balance, tenant_id)
            )
            if denied:
                return Return.err(denied)

            if not reason or not reason.strip():
                return Return.err(Error("INVALID_REASON", "An adjustment needs a reason"))

            adjusted = await self.ledger.adjust(
                tenant_id, amount, reason.strip(), created_by=str(caller.user_id)
            )
            if adjusted.is_err():
                return Return.err(adjusted.error)
            transaction = adjusted.value

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=tenant_id,
                    actor_id=caller.user_id,
                    action="credits_adjusted",
                    event_metadata={
                        "transaction_id": str(transaction.id),
                        "amount": amount,
                        "reason": reason.strip(),
                    },
                )
            )

            balance = await self.ledger.get_balance(tenant_id)
            await self.uow.commit()

            logger.info(f"Operator {caller.user_id} adjusted tenant {tenant_id} by {amount}")

            return Return.ok(
                PurchaseCreditsResponse(
                    transaction=transaction_response(transaction),
                    balance=balance_response(balance),
                )
            )
