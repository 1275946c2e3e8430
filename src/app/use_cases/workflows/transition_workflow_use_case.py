"""
Complete / Cancel / Get Workflow Use Cases

None of these touch the credit ledger: a consumed credit stays consumed.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, WorkflowStatus
from src.domain.workflow_state import can_transition

from .dtos import WorkflowListResponse, WorkflowResponse, to_response

logger = logging.getLogger(__name__)


class _TransitionWorkflowUseCase:
    operation: Operation
    target: WorkflowStatus
    timestamp_field: str
    action: str

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, caller, workflow_id: UUID) -> Result[WorkflowResponse]:
        async with self.uow:
            workflow = await self.uow.workflows.get_by_id(workflow_id)
            if workflow is None:
                return Return.err(Error("WORKFLOW_NOT_FOUND", "Workflow not found"))

            denied = await Policy(self.uow).check(
                caller,
                self.operation,
                Resource(ResourceKind.workflow, workflow.tenant_id, workflow.id),
            )
            if denied:
                return Return.err(denied)

            current = workflow.status
            if not can_transition(current, self.target):
                return Return.err(
                    Error(
                        "INVALID_TRANSITION",
                        f"Cannot move a {current.value} workflow to {self.target.value}",
                    )
                )

            moved = await self.uow.workflows.transition(
                workflow.id, current, self.target, {self.timestamp_field: utcnow()}
            )
            if not moved:
                return Return.err(
                    Error("INVALID_TRANSITION", "Workflow status changed concurrently")
                )

            audit = AuditEvent(
                tenant_id=workflow.tenant_id,
                actor_id=getattr(caller, "user_id", None),
                action=self.action,
                event_metadata={"workflow_id": str(workflow.id), "from": current.value},
            )
            await self.uow.audit_events.create(audit)

            workflow = await self.uow.workflows.get_by_id(workflow.id)
            await self.uow.commit()
            logger.info(f"Workflow {workflow.id}: {current.value} -> {self.target.value}")
            return Return.ok(to_response(workflow))


class CompleteWorkflowUseCase(_TransitionWorkflowUseCase):
    operation = Operation.workflow_complete
    target = WorkflowStatus.completed
    timestamp_field = "completed_at"
    action = "workflow_completed"


class CancelWorkflowUseCase(_TransitionWorkflowUseCase):
    operation = Operation.workflow_cancel
    target = WorkflowStatus.cancelled
    timestamp_field = "cancelled_at"
    action = "workflow_cancelled"


class GetWorkflowUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, caller, workflow_id: UUID) -> Result[WorkflowResponse]:
        async with self.uow:
            workflow = await self.uow.workflows.get_by_id(workflow_id)
            if workflow is None:
                return Return.err(Error("WORKFLOW_NOT_FOUND", "Workflow not found"))

            denied = await Policy(self.uow).check(
                caller,
                Operation.workflow_read,
                Resource(ResourceKind.workflow, workflow.tenant_id, workflow.id),
            )
            if denied:
                return Return.err(denied)

            return Return.ok(to_response(workflow))


class ListWorkflowsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, caller, tenant_id: UUID, status: Optional[WorkflowStatus] = None
    ) -> Result[WorkflowListResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.workflow_read, Resource(ResourceKind.workflow, tenant_id)
            )
            if denied:
                return Return.err(denied)

            workflows = await self.uow.workflows.get_by_tenant_id(tenant_id, status=status)
            return Return.ok(WorkflowListResponse(workflows=[to_response(w) for w in workflows]))
