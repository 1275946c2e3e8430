"""
WorkflowInstance Entity

Onboarding or offboarding process for one subject.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import WorkflowKind, WorkflowStatus


class WorkflowInstance(SQLModel, table=True):
    """
    WorkflowInstance entity - an HR lifecycle workflow.

    Business Rules:
    - draft -> active consumes exactly one credit
    - credit_transaction_id is set once and never cleared
    - completion and cancellation do not touch the ledger
    """

    __tablename__ = "workflows"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: UUID = Field(nullable=False, index=True)
    kind: WorkflowKind = Field(nullable=False)
    status: WorkflowStatus = Field(default=WorkflowStatus.draft)

    subject_id: str = Field(max_length=64, nullable=False)
    invitation_id: Optional[UUID] = Field(default=None)

    credit_transaction_id: Optional[UUID] = Field(default=None, unique=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    activated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    completed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    cancelled_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_workflow_tenant_status", "tenant_id", "status"),
    )
