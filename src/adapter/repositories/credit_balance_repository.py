from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.credit_balance_repository import ICreditBalanceRepository
from src.domain.entities import CreditBalance

# Dialects with INSERT ... ON CONFLICT DO NOTHING
UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class CreditBalanceRepository(ICreditBalanceRepository):
    """CreditBalance repository implementation using conditional UPDATEs"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_tenant_id(self, tenant_id: UUID) -> Optional[CreditBalance]:
        """Get balance for a tenant"""
        stmt = (
            select(CreditBalance)
            .where(CreditBalance.tenant_id == tenant_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def ensure_exists(self, tenant_id: UUID, at: datetime) -> None:
        """INSERT ... ON CONFLICT (tenant_id) DO NOTHING"""
        dialect = self.session.get_bind().dialect.name
        insert = UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"No conflict-free insert for dialect {dialect!r}")

        stmt = (
            insert(CreditBalance)
            .values(
                tenant_id=tenant_id,
                purchased=0,
                used=0,
                reserved=0,
                total_spent=Decimal("0.00"),
                created_at=at,
            )
            .on_conflict_do_nothing(index_elements=["tenant_id"])
        )
        await self.session.execute(stmt)

    async def _apply(self, stmt) -> bool:
        result = await self.session.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def add_purchased(
        self, tenant_id: UUID, amount: int, spent: Decimal, at: datetime
    ) -> bool:
        """Increase purchased by amount"""
        return await self._apply(
            update(CreditBalance)
            .where(CreditBalance.tenant_id == tenant_id)
            .values(
                purchased=CreditBalance.purchased + amount,
                total_spent=CreditBalance.total_spent + spent,
                last_purchase_at=at,
            )
        )

    async def consume_available(self, tenant_id: UUID, at: datetime) -> bool:
        """used += 1 if available >= 1"""
        return await self._apply(
            update(CreditBalance)
            .where(
                CreditBalance.tenant_id == tenant_id,
                CreditBalance.purchased - CreditBalance.used - CreditBalance.reserved >= 1,
            )
            .values(used=CreditBalance.used + 1, last_usage_at=at)
        )

    async def consume_reserved(self, tenant_id: UUID, at: datetime) -> bool:
        """reserved -= 1 and used += 1 if reserved >= 1"""
        return await self._apply(
            update(CreditBalance)
            .where(CreditBalance.tenant_id == tenant_id, CreditBalance.reserved >= 1)
            .values(
                used=CreditBalance.used + 1,
                reserved=CreditBalance.reserved - 1,
                last_usage_at=at,
            )
        )

    async def reserve(self, tenant_id: UUID, amount: int) -> bool:
        """reserved += amount if available >= amount"""
        return await self._apply(
            update(CreditBalance)
            .where(
                CreditBalance.tenant_id == tenant_id,
                CreditBalance.purchased - CreditBalance.used - CreditBalance.reserved
                >= amount,
            )
            .values(reserved=CreditBalance.reserved + amount)
        )

    async def release(self, tenant_id: UUID, amount: int) -> bool:
        """reserved -= amount if reserved >= amount"""
        return await self._apply(
            update(CreditBalance)
            .where(CreditBalance.tenant_id == tenant_id, CreditBalance.reserved >= amount)
            .values(reserved=CreditBalance.reserved - amount)
        )

    async def adjust_purchased(self, tenant_id: UUID, amount: int) -> bool:
        """purchased += amount if available stays >= 0"""
        return await self._apply(
            update(CreditBalance)
            .where(
                CreditBalance.tenant_id == tenant_id,
                CreditBalance.purchased - CreditBalance.used - CreditBalance.reserved
                + amount
                >= 0,
            )
            .values(purchased=CreditBalance.purchased + amount)
        )
