import logging
from abc import ABC, abstractmethod

from src.domain.entities import WorkflowInstance

logger = logging.getLogger(__name__)


class IWorkflowActivationListener(ABC):
    """Collaborator notified after a workflow activation has been committed"""

    @abstractmethod
    async def on_activated(self, workflow: WorkflowInstance) -> None:
        """Handle a newly active workflow (task generation, notifications)"""
        pass


class LoggingActivationListener(IWorkflowActivationListener):
    async def on_activated(self, workflow: WorkflowInstance) -> None:
        logger.info(f"Workflow {workflow.id} ({workflow.kind.value}) activated")
