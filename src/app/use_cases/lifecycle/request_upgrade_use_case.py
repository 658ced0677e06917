from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.notification_service import DemoNotificationService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .dtos import UpgradeRequestResponse


class RequestUpgradeUseCase:
    """Flag a demo for sales follow-up; the lifecycle is not touched."""

    def __init__(self, uow: UnitOfWork, notifications: DemoNotificationService):
        self.uow = uow
        self.notifications = notifications

    async def execute(
        self, access_token: str, notes: Optional[str] = None
    ) -> Result[UpgradeRequestResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_access_token(access_token)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Demo not found"))

            tenant.upgrade_requested = True
            tenant.upgrade_requested_at = utcnow()
            if notes:
                tenant.notes = notes
            await self.uow.tenants.update(tenant)
            await self.uow.commit()

            name, email, company = tenant.name, tenant.email, tenant.company
            subdomain, saved_notes = tenant.subdomain, tenant.notes

        await self.notifications.send_upgrade_request(name, email, company, subdomain, saved_notes)
        return Return.ok(
            UpgradeRequestResponse(
                subdomain=subdomain,
                upgrade_requested=True,
                message="Thanks! Our team will contact you shortly.",
            )
        )
