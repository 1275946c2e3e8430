from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.audit_event_repository import AuditEventRepository
from src.adapter.repositories.credit_balance_repository import CreditBalanceRepository
from src.adapter.repositories.credit_transaction_repository import (
    CreditTransactionRepository,
)
from src.adapter.repositories.invitation_repository import InvitationRepository
from src.adapter.repositories.workflow_repository import WorkflowRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.invitations = InvitationRepository(self.session)
        self.credit_balances = CreditBalanceRepository(self.session)
        self.credit_transactions = CreditTransactionRepository(self.session)
        self.workflows = WorkflowRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Anything not committed is discarded
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
