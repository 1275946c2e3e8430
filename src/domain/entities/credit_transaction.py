"""
CreditTransaction Entity

Append-only credit ledger.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Numeric, text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import PricingTier, TransactionKind


class CreditTransaction(SQLModel, table=True):
    """
    CreditTransaction entity - immutable ledger entry.

    Business Rules:
    - Never updated or deleted
    - usage rows carry workflow_id and subject_id
    - At most one usage row per workflow_id
    """

    __tablename__ = "credit_transactions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: UUID = Field(nullable=False, index=True)
    kind: TransactionKind = Field(nullable=False)

    amount: int = Field(nullable=False)
    unit_price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    total_amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    currency: str = Field(default="EUR", max_length=3)

    pricing_tier: Optional[PricingTier] = Field(default=None)
    discount_percentage: Decimal = Field(
        default=Decimal("0.00"), sa_column=Column(Numeric(5, 2), nullable=False)
    )

    # Usage context
    workflow_id: Optional[UUID] = Field(default=None)
    subject_id: Optional[str] = Field(default=None, max_length=64)

    description: Optional[str] = Field(default=None, max_length=500)
    created_by: Optional[str] = Field(default=None, max_length=100)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        CheckConstraint(
            "kind != 'usage' OR (workflow_id IS NOT NULL AND subject_id IS NOT NULL)",
            name="ck_usage_has_workflow",
        ),
        Index(
            "uq_usage_per_workflow",
            "workflow_id",
            unique=True,
            sqlite_where=text("kind = 'usage'"),
            postgresql_where=text("kind = 'usage'"),
        ),
        Index("idx_credit_tx_tenant_kind", "tenant_id", "kind"),
        Index("idx_credit_tx_created_at", "created_at"),
    )
