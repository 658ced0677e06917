import logging

from libs.result import Result, Return
from src.app.services.notification_service import DemoNotificationService
from src.app.services.provisioning_orchestrator import ProvisioningOrchestrator
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .dtos import SweepReport
from .follow_ups import schedule_follow_ups

logger = logging.getLogger(__name__)


class ExpireTenantsUseCase:
    """
    Expiration sweep.

    Each overdue running tenant is claimed with a conditional update that
    only matches while it is still running and past its expiry, so a demo
    extended after the candidate query is left alone. The claim is committed
    before teardown; teardown, the purge and the follow-up emails are
    committed together afterwards. A failing tenant is logged and skipped,
    the rest of the batch still runs.
    """

    JOB_NAME = "expiration"

    def __init__(
        self,
        uow: UnitOfWork,
        orchestrator: ProvisioningOrchestrator,
        notifications: DemoNotificationService,
    ):
        self.uow = uow
        self.orchestrator = orchestrator
        self.notifications = notifications

    async def execute(self) -> Result[SweepReport]:
        report = SweepReport(job=self.JOB_NAME)
        expired = []

        async with self.uow:
            candidates = await self.uow.tenants.get_expired_running(utcnow())
            tenant_ids = [tenant.id for tenant in candidates]
            report.processed = len(tenant_ids)

            for tenant_id in tenant_ids:
                try:
                    if not await self.uow.tenants.claim_expired(tenant_id, utcnow()):
                        await self.uow.rollback()
                        logger.info(f"Tenant {tenant_id} no longer due for expiry, skipping")
                        continue
                    await self.uow.commit()

                    tenant = await self.uow.tenants.reload(tenant_id)
                    await self.orchestrator.teardown(tenant, self.uow)
                    await schedule_follow_ups(self.uow, tenant, utcnow())
                    await self.uow.commit()

                    expired.append((tenant.email, tenant.name))
                    report.succeeded += 1
                except Exception:
                    logger.exception(f"Failed to expire tenant {tenant_id}")
                    await self.uow.rollback()
                    report.failed.append(str(tenant_id))

        for email, name in expired:
            await self.notifications.send_expired(email, name)

        if report.processed:
            logger.info(
                f"Expiration sweep: {report.succeeded}/{report.processed} expired, "
                f"{len(report.failed)} failed"
            )
        return Return.ok(report)
