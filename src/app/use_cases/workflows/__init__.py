"""
Workflow Use Cases

Workflow state machine; activation is the only ledger interaction.
"""

from .activate_workflow_use_case import ActivateWorkflowUseCase
from .create_workflow_use_case import CreateWorkflowUseCase
from .dtos import WorkflowListResponse, WorkflowResponse
from .transition_workflow_use_case import (
    CancelWorkflowUseCase,
    CompleteWorkflowUseCase,
    GetWorkflowUseCase,
    ListWorkflowsUseCase,
)

__all__ = [
    "CreateWorkflowUseCase",
    "ActivateWorkflowUseCase",
    "CompleteWorkflowUseCase",
    "CancelWorkflowUseCase",
    "GetWorkflowUseCase",
    "ListWorkflowsUseCase",
    "WorkflowResponse",
    "WorkflowListResponse",
]
