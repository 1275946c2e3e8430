"""
CreditBalance Entity

Materialized running total of a tenant's credit ledger.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, Numeric
from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class CreditBalance(SQLModel, table=True):
    """
    CreditBalance entity - one row per tenant.

    Business Rules:
    - purchased, used, reserved are non-negative
    - available = purchased - used - reserved, never below zero
    - used never decreases (no refunds)
    - Only mutated through the CreditLedger entry points
    """

    __tablename__ = "credit_balances"

    tenant_id: UUID = Field(primary_key=True)

    purchased: int = Field(default=0, nullable=False)
    used: int = Field(default=0, nullable=False)
    reserved: int = Field(default=0, nullable=False)

    total_spent: Decimal = Field(
        default=Decimal("0.00"), sa_column=Column(Numeric(12, 2), nullable=False)
    )

    # Timestamps
    last_purchase_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    last_usage_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        CheckConstraint("purchased >= 0", name="ck_balance_purchased_non_negative"),
        CheckConstraint("used >= 0", name="ck_balance_used_non_negative"),
        CheckConstraint("reserved >= 0", name="ck_balance_reserved_non_negative"),
        CheckConstraint(
            "purchased - used - reserved >= 0", name="ck_balance_available_non_negative"
        ),
    )

    @property
    def current(self) -> int:
        return self.purchased - self.used

    @property
    def available(self) -> int:
        return self.purchased - self.used - self.reserved
