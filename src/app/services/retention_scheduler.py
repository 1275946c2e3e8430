"""
Periodic retention sweep.

Runs RunRetentionSweepUseCase on a fixed interval inside the API process.
"""

import asyncio
import logging
from typing import AsyncContextManager, Callable
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Operator

logger = logging.getLogger(__name__)

# Actor recorded for sweeps not triggered by a person
SYSTEM_OPERATOR = Operator(user_id=UUID(int=0))


class RetentionScheduler:
    """Scheduler for the invitation retention sweep"""

    def __init__(
        self,
        uow_factory: Callable[[], AsyncContextManager[UnitOfWork]],
        interval_seconds: int,
    ):
        self.uow_factory = uow_factory
        self.interval_seconds = interval_seconds
        self._task = None

    async def run_once(self):
        from src.app.use_cases.retention import RunRetentionSweepUseCase

        async with self.uow_factory() as uow:
            result = await RunRetentionSweepUseCase(uow).execute(SYSTEM_OPERATOR)

        if result.is_err():
            logger.error(f"Retention sweep failed: {result.error.code}")
        return result

    async def run_forever(self):
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception as e:
                # Keep the loop alive; the next interval retries
                logger.error(f"Error in retention scheduler: {e}")

    def start(self):
        if self._task is None:
            self._task = asyncio.create_task(self.run_forever())
            logger.info(
                f"Retention scheduler started (every {self.interval_seconds}s)"
            )

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Retention scheduler stopped")
