from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from src.domain.entities import CreditBalance


class ICreditBalanceRepository(ABC):
    """
    CreditBalance repository interface - application layer.

    Every mutator is a single conditional update that either applies in full
    or reports False without changing anything.
    """

    @abstractmethod
    async def get_by_tenant_id(self, tenant_id: UUID) -> Optional[CreditBalance]:
        """Get balance for a tenant (fresh from the database)"""
        pass

    @abstractmethod
    async def ensure_exists(self, tenant_id: UUID, at: datetime) -> None:
        """
        Create an empty balance row for the tenant unless one exists.

        Safe under concurrency: a row inserted by another transaction in the
        meantime is left alone instead of raising.
        """
        pass

    @abstractmethod
    async def add_purchased(
        self, tenant_id: UUID, amount: int, spent: Decimal, at: datetime
    ) -> bool:
        """Increase purchased by amount"""
        pass

    @abstractmethod
    async def consume_available(self, tenant_id: UUID, at: datetime) -> bool:
        """used += 1 if available >= 1"""
        pass

    @abstractmethod
    async def consume_reserved(self, tenant_id: UUID, at: datetime) -> bool:
        """reserved -= 1 and used += 1 if reserved >= 1"""
        pass

    @abstractmethod
    async def reserve(self, tenant_id: UUID, amount: int) -> bool:
        """reserved += amount if available >= amount"""
        pass

    @abstractmethod
    async def release(self, tenant_id: UUID, amount: int) -> bool:
        """reserved -= amount if reserved >= amount"""
        pass

    @abstractmethod
    async def adjust_purchased(self, tenant_id: UUID, amount: int) -> bool:
        """purchased += amount (may be negative) if available stays >= 0"""
        pass
