"""
Activate Workflow Use Case

The one transition that consumes a credit. Ledger debit and status change
commit together; activation listeners run only after that commit.
"""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.credit_ledger import CreditLedger
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.workflow_listeners import IWorkflowActivationListener
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.balance_alerts import DEFAULT_BALANCE_THRESHOLDS, BalanceThresholds
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, WorkflowStatus
from src.domain.pricing import BASE_PRICE

from .dtos import WorkflowResponse, to_response

logger = logging.getLogger(__name__)


class ActivateWorkflowUseCase:
    """
    Use case for starting a workflow.

    Business Rules:
    - draft -> active only
    - Exactly one credit per workflow, ever; retries return ALREADY_CONSUMED
    - No credit -> INSUFFICIENT_CREDIT and the workflow stays draft
    - Listeners (task generation, notifications) never run for a failed activation
    """

    def __init__(
        self,
        uow: UnitOfWork,
        listeners: Optional[List[IWorkflowActivationListener]] = None,
        base_price: Decimal = BASE_PRICE,
        currency: str = "EUR",
        thresholds: BalanceThresholds = DEFAULT_BALANCE_THRESHOLDS,
    ):
        self.uow = uow
        self.listeners = listeners or []
        self.ledger = CreditLedger(
            uow, base_price=base_price, currency=currency, thresholds=thresholds
        )

    async def execute(
        self, caller, workflow_id: UUID, from_reservation: bool = False
    ) -> Result[WorkflowResponse]:
        """
        Execute activate workflow use case.

        Args:
            caller: Resolved caller
            workflow_id: Workflow to activate
            from_reservation: Consume a previously reserved credit

        Returns:
            Result with WorkflowResponse DTO, or Error
        """
        async with self.uow:
            workflow = await self.uow.workflows.get_by_id(workflow_id)
            if workflow is None:
                return Return.err(Error("WORKFLOW_NOT_FOUND", "Workflow not found"))

            denied = await Policy(self.uow).check(
                caller,
                Operation.workflow_activate,
                Resource(ResourceKind.workflow, workflow.tenant_id, workflow.id),
            )
            if denied:
                return Return.err(denied)

            if workflow.credit_transaction_id is not None:
                return Return.err(
                    Error(
                        "ALREADY_CONSUMED",
                        "A credit has already been consumed for this workflow",
                    )
                )
            if workflow.status != WorkflowStatus.draft:
                return Return.err(
                    Error(
                        "INVALID_TRANSITION",
                        f"Cannot activate a {workflow.status.value} workflow",
                    )
                )

            consumed = await self.ledger.consume(
                workflow.tenant_id,
                workflow.id,
                workflow.subject_id,
                from_reservation=from_reservation,
            )
            if consumed.is_err():
                return Return.err(consumed.error)

            moved = await self.uow.workflows.transition(
                workflow.id,
                WorkflowStatus.draft,
                WorkflowStatus.active,
                {"activated_at": utcnow()},
            )
            if not moved:
                # Cancelled concurrently; undo the debit
                await self.uow.rollback()
                return Return.err(
                    Error("INVALID_TRANSITION", "Workflow is no longer a draft")
                )

            audit = AuditEvent(
                tenant_id=workflow.tenant_id,
                actor_id=getattr(caller, "user_id", None),
                action="workflow_activated",
                event_metadata={
                    "workflow_id": str(workflow.id),
                    "credit_transaction_id": str(consumed.value),
                },
            )
            await self.uow.audit_events.create(audit)

            workflow = await self.uow.workflows.get_by_id(workflow.id)
            await self.uow.commit()

        logger.info(f"Workflow {workflow.id} activated")
        for listener in self.listeners:
            try:
                await listener.on_activated(workflow)
            except Exception:
                # Activation is committed; a listener failure must not mask it
                logger.exception(
                    f"Activation listener {type(listener).__name__} failed for workflow {workflow.id}"
                )

        return Return.ok(to_response(workflow))
