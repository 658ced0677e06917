import logging
from datetime import timedelta

from libs.result import Result, Return
from src.app.services.demo_settings import DemoSettings
from src.app.services.notification_service import DemoNotificationService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import TenantStatus

from .dtos import SweepReport

logger = logging.getLogger(__name__)

WARNING_WINDOW_START = timedelta(hours=2)
WARNING_WINDOW_END = timedelta(hours=3)


class SendExpirationWarningsUseCase:
    """Warn running demos expiring in [now+2h, now+3h) once."""

    JOB_NAME = "warnings"

    def __init__(
        self,
        uow: UnitOfWork,
        settings: DemoSettings,
        notifications: DemoNotificationService,
    ):
        self.uow = uow
        self.settings = settings
        self.notifications = notifications

    async def execute(self) -> Result[SweepReport]:
        report = SweepReport(job=self.JOB_NAME)

        async with self.uow:
            now = utcnow()
            start, end = now + WARNING_WINDOW_START, now + WARNING_WINDOW_END
            due = await self.uow.tenants.get_expiring_between(start, end)
            tenant_ids = [tenant.id for tenant in due]
            report.processed = len(tenant_ids)

            for tenant_id in tenant_ids:
                try:
                    tenant = await self.uow.tenants.reload(tenant_id)
                    if (
                        tenant is None
                        or tenant.status != TenantStatus.running
                        or tenant.expiration_warned
                        or not start <= tenant.expires_at < end
                    ):
                        continue
                    await self.notifications.send_expiration_warning(
                        tenant.email,
                        tenant.name,
                        self.settings.access_url(tenant.subdomain),
                        tenant.hours_remaining(now),
                    )
                    tenant.expiration_warned = True
                    await self.uow.tenants.update(tenant)
                    await self.uow.commit()
                    report.succeeded += 1
                except Exception:
                    logger.exception(f"Failed to warn tenant {tenant_id}")
                    await self.uow.rollback()
                    report.failed.append(str(tenant_id))

        return Return.ok(report)
