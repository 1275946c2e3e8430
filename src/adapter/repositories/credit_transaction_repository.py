from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.credit_transaction_repository import (
    ICreditTransactionRepository,
)
from src.domain.entities import CreditTransaction, TransactionKind


class CreditTransactionRepository(ICreditTransactionRepository):
    """Append-only CreditTransaction repository using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        """Append a ledger entry"""
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def get_by_id(self, transaction_id: UUID) -> Optional[CreditTransaction]:
        """Get ledger entry by ID"""
        stmt = select(CreditTransaction).where(CreditTransaction.id == transaction_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_usage_by_workflow_id(self, workflow_id: UUID) -> List[CreditTransaction]:
        """Get usage entries for a workflow"""
        stmt = select(CreditTransaction).where(
            CreditTransaction.workflow_id == workflow_id,
            CreditTransaction.kind == TransactionKind.usage,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_tenant_id(
        self, tenant_id: UUID, limit: int = 100
    ) -> List[CreditTransaction]:
        """Get ledger entries for a tenant, newest first"""
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.tenant_id == tenant_id)
            .order_by(CreditTransaction.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
