"""Workflow status transitions."""

from src.domain.entities.enums import WorkflowStatus

ALLOWED_TRANSITIONS = {
    WorkflowStatus.draft: frozenset({WorkflowStatus.active, WorkflowStatus.cancelled}),
    WorkflowStatus.active: frozenset({WorkflowStatus.completed, WorkflowStatus.cancelled}),
    WorkflowStatus.completed: frozenset(),
    WorkflowStatus.cancelled: frozenset(),
}

# The only transition that debits the credit ledger.
DEBITING_TRANSITION = (WorkflowStatus.draft, WorkflowStatus.active)


def can_transition(current: WorkflowStatus, target: WorkflowStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def is_terminal(status: WorkflowStatus) -> bool:
    return not ALLOWED_TRANSITIONS.get(status)
