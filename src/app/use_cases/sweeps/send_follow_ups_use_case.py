import logging

from libs.result import Result, Return
from src.app.services.demo_settings import DemoSettings
from src.app.services.notification_service import DemoNotificationService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ScheduledEmailStatus

from .dtos import SweepReport

logger = logging.getLogger(__name__)

MAX_DELIVERY_ATTEMPTS = 3


class SendFollowUpEmailsUseCase:
    """
    Send Follow-up Emails Use Case

    Business Logic:
    1. Pick pending follow-ups whose send time has passed
    2. Skip (unsubscribed) when the address opted out
    3. Skip (converted) when the tenant already asked to upgrade
    4. Otherwise send, mark sent
    5. A failed delivery stays pending for the next run, and is given up
       (failed) after MAX_DELIVERY_ATTEMPTS

    One commit per email.
    """

    JOB_NAME = "followups"

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
            due = await self.uow.scheduled_emails.get_due(utcnow())
            email_ids = [scheduled.id for scheduled in due]
            report.processed = len(email_ids)

            for email_id in email_ids:
                try:
                    scheduled = await self.uow.scheduled_emails.get_by_id(email_id)
                    if scheduled is None or scheduled.status != ScheduledEmailStatus.pending:
                        continue

                    status = await self._process(scheduled)
                    delivered = status is not None
                    if not delivered:
                        scheduled.attempts += 1
                        if scheduled.attempts >= MAX_DELIVERY_ATTEMPTS:
                            status = ScheduledEmailStatus.failed

                    if status is not None:
                        scheduled.status = status
                        scheduled.processed_at = utcnow()
                    await self.uow.scheduled_emails.update(scheduled)
                    await self.uow.commit()

                    if delivered:
                        report.succeeded += 1
                    else:
                        report.failed.append(str(email_id))
                except Exception:
                    logger.exception(f"Failed to process follow-up {email_id}")
                    await self.uow.rollback()
                    report.failed.append(str(email_id))

        if report.processed:
            logger.info(
                f"Follow-up sweep: {report.succeeded}/{report.processed} handled, "
                f"{len(report.failed)} failed"
            )
        return Return.ok(report)

    async def _process(self, scheduled):
        """Returns the final status, None when delivery failed"""
        label = f"Follow-up {scheduled.kind.value} to {scheduled.email}"
        if await self.uow.scheduled_emails.is_unsubscribed(scheduled.email):
            logger.info(f"{label} skipped, unsubscribed")
            return ScheduledEmailStatus.unsubscribed

        tenant = await self.uow.tenants.get_by_id(scheduled.tenant_id)
        if tenant is not None and tenant.upgrade_requested:
            logger.info(f"{label} skipped, converted")
            return ScheduledEmailStatus.converted

        sent = await self.notifications.send_follow_up(
            scheduled.email,
            scheduled.name,
            scheduled.kind,
            self.settings.upgrade_url(scheduled.subdomain),
            self.settings.unsubscribe_url(scheduled.unsubscribe_token),
        )
        return ScheduledEmailStatus.sent if sent else None
