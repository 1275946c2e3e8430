from abc import ABC, abstractmethod

from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.credit_balance_repository import ICreditBalanceRepository
from src.app.repositories.credit_transaction_repository import (
    ICreditTransactionRepository,
)
from src.app.repositories.invitation_repository import IInvitationRepository
from src.app.repositories.workflow_repository import IWorkflowRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    invitations: IInvitationRepository
    credit_balances: ICreditBalanceRepository
    credit_transactions: ICreditTransactionRepository
    workflows: IWorkflowRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
