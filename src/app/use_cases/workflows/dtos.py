"""
Workflow Use Case DTOs (Data Transfer Objects)
"""

from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import WorkflowInstance


class WorkflowResponse(BaseModel):
    """Workflow state returned by every workflow use case"""

    workflow_id: str
    tenant_id: str
    kind: str
    status: str
    subject_id: str
    invitation_id: Optional[str] = None
    credit_transaction_id: Optional[str] = None
    created_at: str
    activated_at: Optional[str] = None
    completed_at: Optional[str] = None
    cancelled_at: Optional[str] = None


class WorkflowListResponse(BaseModel):
    workflows: List[WorkflowResponse]


def _iso(value) -> Optional[str]:
    return value.isoformat() + "Z" if value is not None else None


def to_response(workflow: WorkflowInstance) -> WorkflowResponse:
    return WorkflowResponse(
        workflow_id=str(workflow.id),
        tenant_id=str(workflow.tenant_id),
        kind=workflow.kind.value,
        status=workflow.status.value,
        subject_id=workflow.subject_id,
        invitation_id=str(workflow.invitation_id) if workflow.invitation_id else None,
        credit_transaction_id=(
            str(workflow.credit_transaction_id) if workflow.credit_transaction_id else None
        ),
        created_at=_iso(workflow.created_at),
        activated_at=_iso(workflow.activated_at),
        completed_at=_iso(workflow.completed_at),
        cancelled_at=_iso(workflow.cancelled_at),
    )
