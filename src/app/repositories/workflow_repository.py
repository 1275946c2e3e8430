from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from src.domain.entities import WorkflowInstance, WorkflowStatus


class IWorkflowRepository(ABC):
    """Workflow repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, workflow_id: UUID) -> Optional[WorkflowInstance]:
        """Get workflow by ID (fresh from the database)"""
        pass

    @abstractmethod
    async def get_by_tenant_id(
        self, tenant_id: UUID, status: Optional[WorkflowStatus] = None
    ) -> List[WorkflowInstance]:
        """Get workflows for a tenant"""
        pass

    @abstractmethod
    async def create(self, workflow: WorkflowInstance) -> WorkflowInstance:
        """Create a new workflow"""
        pass

    @abstractmethod
    async def claim_credit(
        self, workflow_id: UUID, tenant_id: UUID, transaction_id: UUID
    ) -> bool:
        """Set credit_transaction_id if still unset. False if already claimed."""
        pass

    @abstractmethod
    async def transition(
        self,
        workflow_id: UUID,
        from_status: WorkflowStatus,
        to_status: WorkflowStatus,
        timestamps: Optional[Dict[str, datetime]] = None,
    ) -> bool:
        """Move workflow from from_status to to_status. False if it was not in from_status."""
        pass
