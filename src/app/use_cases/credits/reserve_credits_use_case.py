"""
Reserve / Release Credits Use Cases

A reservation holds credits out of the available balance, e.g. for a batch
of onboardings that have been planned but not started.
"""

from uuid import UUID

from libs.result import Result, Return
from src.app.services.credit_ledger import CreditLedger
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.balance_alerts import DEFAULT_BALANCE_THRESHOLDS, BalanceThresholds
from src.domain.entities import AuditEvent

from .dtos import BalanceResponse, balance_response


class ReserveCreditsUseCase:
    def __init__(
        self, uow: UnitOfWork, thresholds: BalanceThresholds = DEFAULT_BALANCE_THRESHOLDS
    ):
        self.uow = uow
        self.ledger = CreditLedger(uow, thresholds=thresholds)

    async def execute(self, caller, tenant_id: UUID, amount: int) -> Result[BalanceResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.credit_reserve, Resource(ResourceKind.credit_balance, tenant_id)
            )
            if denied:
                return Return.err(denied)

            reserved = await self.ledger.reserve(tenant_id, amount)
            if reserved.is_err():
                return Return.err(reserved.error)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=tenant_id,
                    actor_id=getattr(caller, "user_id", None),
                    action="credits_reserved",
                    event_metadata={"amount": amount},
                )
            )

            balance = await self.ledger.get_balance(tenant_id)
            await self.uow.commit()
            return Return.ok(balance_response(balance))


class ReleaseCreditsUseCase:
    def __init__(
        self, uow: UnitOfWork, thresholds: BalanceThresholds = DEFAULT_BALANCE_THRESHOLDS
    ):
        self.uow = uow
        self.ledger = CreditLedger(uow, thresholds=thresholds)

    async def execute(self, caller, tenant_id: UUID, amount: int) -> Result[BalanceResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.credit_reserve, Resource(ResourceKind.credit_balance, tenant_id)
            )
            if denied:
                return Return.err(denied)

            released = await self.ledger.release(tenant_id, amount)
            if released.is_err():
                return Return.err(released.error)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=tenant_id,
                    actor_id=getattr(caller, "user_id", None),
                    action="credits_released",
                    event_metadata={"amount": amount},
                )
            )

            balance = await self.ledger.get_balance(tenant_id)
            await self.uow.commit()
            return Return.ok(balance_response(balance))
