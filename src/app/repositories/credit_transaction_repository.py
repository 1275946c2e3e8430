from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import CreditTransaction


class ICreditTransactionRepository(ABC):
    """
    CreditTransaction repository interface - application layer.

    Append-only: there is deliberately no update or delete.
    """

    @abstractmethod
    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        """Append a ledger entry"""
        pass

    @abstractmethod
    async def get_by_id(self, transaction_id: UUID) -> Optional[CreditTransaction]:
        """Get ledger entry by ID"""
        pass

    @abstractmethod
    async def get_usage_by_workflow_id(self, workflow_id: UUID) -> List[CreditTransaction]:
        """Get usage entries for a workflow (at most one exists)"""
        pass

    @abstractmethod
    async def get_by_tenant_id(
        self, tenant_id: UUID, limit: int = 100
    ) -> List[CreditTransaction]:
        """Get ledger entries for a tenant, newest first"""
        pass
