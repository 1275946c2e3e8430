from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.workflow_repository import IWorkflowRepository
from src.domain.entities import WorkflowInstance, WorkflowStatus


class WorkflowRepository(IWorkflowRepository):
    """Workflow repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, workflow_id: UUID) -> Optional[WorkflowInstance]:
        """Get workflow by ID"""
        stmt = (
            select(WorkflowInstance)
            .where(WorkflowInstance.id == workflow_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_tenant_id(
        self, tenant_id: UUID, status: Optional[WorkflowStatus] = None
    ) -> List[WorkflowInstance]:
        """Get workflows for a tenant"""
        stmt = select(WorkflowInstance).where(WorkflowInstance.tenant_id == tenant_id)
        if status is not None:
            stmt = stmt.where(WorkflowInstance.status == status)
        stmt = stmt.order_by(WorkflowInstance.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, workflow: WorkflowInstance) -> WorkflowInstance:
        """Create a new workflow"""
        self.session.add(workflow)
        await self.session.flush()
        await self.session.refresh(workflow)
        return workflow

    async def claim_credit(
        self, workflow_id: UUID, tenant_id: UUID, transaction_id: UUID
    ) -> bool:
        """Set credit_transaction_id if still unset"""
        stmt = (
            update(WorkflowInstance)
            .where(
                WorkflowInstance.id == workflow_id,
                WorkflowInstance.tenant_id == tenant_id,
                WorkflowInstance.credit_transaction_id.is_(None),
            )
            .values(credit_transaction_id=transaction_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def transition(
        self,
        workflow_id: UUID,
        from_status: WorkflowStatus,
        to_status: WorkflowStatus,
        timestamps: Optional[Dict[str, datetime]] = None,
    ) -> bool:
        """Move workflow from from_status to to_status"""
        stmt = (
            update(WorkflowInstance)
            .where(
                WorkflowInstance.id == workflow_id,
                WorkflowInstance.status == from_status,
            )
            .values(status=to_status, **(timestamps or {}))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
