"""
Credit Ledger

The only code path that mutates CreditBalance rows. Every method runs inside
the caller's unit of work and leaves committing to the caller; a failed
`consume` rolls the unit of work back before returning.

Balance changes are conditional UPDATEs, so two concurrent debits can never
both pass an `available >= 1` check computed from the same stale read.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.balance_alerts import DEFAULT_BALANCE_THRESHOLDS, BalanceThresholds
from src.domain.base import utcnow
from src.domain.entities import BalanceStatus, CreditTransaction, TransactionKind
from src.domain.pricing import BASE_PRICE, PriceQuote, quote_price

logger = logging.getLogger(__name__)

INSUFFICIENT_CREDIT_MESSAGE = (
    "Not enough credits to start this workflow. Purchase more credits and try again."
)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class BalanceView:
    """Read-only snapshot of a tenant's balance"""

    tenant_id: UUID
    purchased: int
    used: int
    reserved: int
    thresholds: BalanceThresholds = DEFAULT_BALANCE_THRESHOLDS

    @property
    def current(self) -> int:
        return self.purchased - self.used

    @property
    def available(self) -> int:
        return self.purchased - self.used - self.reserved

    @property
    def balance_status(self) -> BalanceStatus:
        return self.thresholds.status(self.available)


class CreditLedger:
    def __init__(
        self,
        uow: UnitOfWork,
        base_price: Decimal = BASE_PRICE,
        currency: str = "EUR",
        thresholds: BalanceThresholds = DEFAULT_BALANCE_THRESHOLDS,
    ):
        self.uow = uow
        self.base_price = base_price
        self.currency = currency
        self.thresholds = thresholds

    async def consume(
        self,
        tenant_id: UUID,
        workflow_id: UUID,
        subject_id: str,
        from_reservation: bool = False,
    ) -> Result[UUID]:
        """
        Debit exactly one credit for a workflow.

        Steps, all in one transaction:
            1. claim the workflow (credit_transaction_id IS NULL -> new id)
            2. debit the balance (available >= 1, or reserved >= 1)
            3. append the usage transaction

        Returns:
            Result with the usage transaction id, or Error
            (WORKFLOW_NOT_FOUND, ALREADY_CONSUMED, INSUFFICIENT_CREDIT)
        """
        transaction_id = uuid4()

        claimed = await self.uow.workflows.claim_credit(
            workflow_id, tenant_id, transaction_id
        )
        if not claimed:
            await self.uow.rollback()
            workflow = await self.uow.workflows.get_by_id(workflow_id)
            if workflow is None or workflow.tenant_id != tenant_id:
                return Return.err(Error("WORKFLOW_NOT_FOUND", "Workflow not found"))
            return Return.err(
                Error("ALREADY_CONSUMED", "A credit has already been consumed for this workflow")
            )

        now = utcnow()
        if from_reservation:
            debited = await self.uow.credit_balances.consume_reserved(tenant_id, now)
        else:
            debited = await self.uow.credit_balances.consume_available(tenant_id, now)
        if not debited:
            await self.uow.rollback()
            logger.info(f"Insufficient credit for tenant {tenant_id}")
            return Return.err(Error("INSUFFICIENT_CREDIT", INSUFFICIENT_CREDIT_MESSAGE))

        usage = CreditTransaction(
            id=transaction_id,
            tenant_id=tenant_id,
            kind=TransactionKind.usage,
            amount=1,
            unit_price=ZERO,
            total_amount=ZERO,
            currency=self.currency,
            workflow_id=workflow_id,
            subject_id=subject_id,
            description="Workflow activation",
        )
        try:
            await self.uow.credit_transactions.create(usage)
        except IntegrityError:
            # Unique usage-per-workflow index
            await self.uow.rollback()
            return Return.err(
                Error("ALREADY_CONSUMED", "A credit has already been consumed for this workflow")
            )

        logger.info(f"Consumed 1 credit: tenant={tenant_id} workflow={workflow_id}")
        if not from_reservation:
            await self._warn_on_threshold(tenant_id)
        return Return.ok(transaction_id)

    async def _warn_on_threshold(self, tenant_id: UUID) -> None:
        """Warn once per crossing: the debit moved available from n + 1 to n"""
        view = await self.get_balance(tenant_id)
        status = view.balance_status
        if status == BalanceStatus.healthy:
            return
        if status == self.thresholds.status(view.available + 1):
            return
        logger.warning(
            f"Credit balance {status.value} for tenant {tenant_id}: "
            f"{view.available} available"
        )

    def quote(self, quantity: int) -> PriceQuote:
        return quote_price(quantity, self.base_price)

    async def purchase(
        self, tenant_id: UUID, amount: int, created_by: Optional[str] = None
    ) -> Result[CreditTransaction]:
        """Add `amount` credits at the tiered price"""
        if not isinstance(amount, int) or amount <= 0:
            return Return.err(Error("INVALID_AMOUNT", "Amount must be a positive integer"))

        price = self.quote(amount)
        now = utcnow()

        # First purchase for a tenant creates its row; racing creators are fine
        await self.uow.credit_balances.ensure_exists(tenant_id, now)
        await self.uow.credit_balances.add_purchased(tenant_id, amount, price.total, now)

        transaction = await self.uow.credit_transactions.create(
            CreditTransaction(
                tenant_id=tenant_id,
                kind=TransactionKind.purchase,
                amount=amount,
                unit_price=price.unit_price,
                total_amount=price.total,
                currency=self.currency,
                pricing_tier=price.tier,
                discount_percentage=price.discount_percentage,
                description=f"Purchased {amount} credits",
                created_by=created_by,
            )
        )
        logger.info(f"Purchased {amount} credits for tenant {tenant_id} ({price.tier.value})")
        return Return.ok(transaction)

    async def reserve(self, tenant_id: UUID, amount: int) -> Result[None]:
        """Hold `amount` credits out of the available balance"""
        if not isinstance(amount, int) or amount <= 0:
            return Return.err(Error("INVALID_AMOUNT", "Amount must be a positive integer"))

        if not await self.uow.credit_balances.reserve(tenant_id, amount):
            return Return.err(Error("INSUFFICIENT_CREDIT", INSUFFICIENT_CREDIT_MESSAGE))
        return Return.ok()

    async def release(self, tenant_id: UUID, amount: int) -> Result[None]:
        """Return reserved credits to the available balance"""
        if not isinstance(amount, int) or amount <= 0:
            return Return.err(Error("INVALID_AMOUNT", "Amount must be a positive integer"))

        if not await self.uow.credit_balances.release(tenant_id, amount):
            return Return.err(
                Error("INVALID_AMOUNT", "Cannot release more credits than are reserved")
            )
        return Return.ok()

    async def adjust(
        self,
        tenant_id: UUID,
        amount: int,
        reason: str,
        created_by: Optional[str] = None,
    ) -> Result[CreditTransaction]:
        """
        Operator correction of the purchased total.

        Negative adjustments are refused when they would push available below zero.
        """
        if not isinstance(amount, int) or amount == 0:
            return Return.err(Error("INVALID_AMOUNT", "Amount must be a non-zero integer"))

        if amount > 0:
            await self.uow.credit_balances.ensure_exists(tenant_id, utcnow())

        updated = await self.uow.credit_balances.adjust_purchased(tenant_id, amount)
        if not updated:
            return Return.err(Error("INSUFFICIENT_CREDIT", "Adjustment exceeds available credits"))

        transaction = await self.uow.credit_transactions.create(
            CreditTransaction(
                tenant_id=tenant_id,
                kind=TransactionKind.adjustment,
                amount=amount,
                unit_price=ZERO,
                total_amount=ZERO,
                currency=self.currency,
                description=reason,
                created_by=created_by,
            )
        )
        logger.info(f"Adjusted credits for tenant {tenant_id} by {amount}")
        return Return.ok(transaction)

    async def get_balance(self, tenant_id: UUID) -> BalanceView:
        balance = await self.uow.credit_balances.get_by_tenant_id(tenant_id)
        if balance is None:
            return BalanceView(
                tenant_id=tenant_id,
                purchased=0,
                used=0,
                reserved=0,
                thresholds=self.thresholds,
            )
        return BalanceView(
            tenant_id=tenant_id,
            purchased=balance.purchased,
            used=balance.used,
            reserved=balance.reserved,
            thresholds=self.thresholds,
        )

    async def list_transactions(
        self, tenant_id: UUID, limit: int = 100
    ) -> List[CreditTransaction]:
        return await self.uow.credit_transactions.get_by_tenant_id(tenant_id, limit=limit)
