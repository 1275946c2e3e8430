"""
Create Workflow Use Case

Workflows start as drafts; no credit is consumed until activation.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.policy import Policy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operation, Resource, ResourceKind
from src.domain.entities import AuditEvent, WorkflowInstance, WorkflowKind

from .dtos import WorkflowResponse, to_response

logger = logging.getLogger(__name__)


class CreateWorkflowUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        caller,
        tenant_id: UUID,
        kind: WorkflowKind,
        subject_id: str,
        invitation_id: Optional[UUID] = None,
    ) -> Result[WorkflowResponse]:
        async with self.uow:
            denied = await Policy(self.uow).check(
                caller, Operation.workflow_create, Resource(ResourceKind.workflow, tenant_id)
            )
            if denied:
                return Return.err(denied)

            if not subject_id or not subject_id.strip():
                return Return.err(Error("INVALID_SUBJECT", "Subject id must not be empty"))

            workflow = WorkflowInstance(
                tenant_id=tenant_id,
                kind=kind,
                subject_id=subject_id.strip(),
                invitation_id=invitation_id,
            )
            await self.uow.workflows.create(workflow)

            audit = AuditEvent(
                tenant_id=tenant_id,
                actor_id=getattr(caller, "user_id", None),
                action="workflow_created",
                event_metadata={"workflow_id": str(workflow.id), "kind": kind.value},
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            return Return.ok(to_response(workflow))
