import logging

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .dtos import SweepReport

logger = logging.getLogger(__name__)


class CleanupVerificationsUseCase:
    """Expire pending verifications whose token TTL has passed."""

    JOB_NAME = "verifications"

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[SweepReport]:
        async with self.uow:
            expired = await self.uow.verifications.expire_stale(utcnow())
            await self.uow.commit()

        if expired:
            logger.info(f"Expired {expired} stale verification requests")
        return Return.ok(SweepReport(job=self.JOB_NAME, processed=expired, succeeded=expired))
