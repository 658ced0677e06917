import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.demo_settings import DemoSettings
from src.app.services.notification_service import DemoNotificationService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import TenantStatus

from .dtos import ExtendTenantResponse

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION_HOURS = 24


class ExtendTenantUseCase:
    """
    Extend a demo's lifetime.

    Hours are clamped to [1, MAX_DEMO_HOURS]. A running or paused tenant is
    (back) in running afterwards and will be warned again before expiry.
    Terminal tenants keep their status, their infrastructure is gone.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: DemoSettings,
        notifications: DemoNotificationService,
    ):
        self.uow = uow
        self.settings = settings
        self.notifications = notifications

    async def execute(
        self, tenant_id: UUID, hours: Optional[int] = None
    ) -> Result[ExtendTenantResponse]:
        if hours is None:
            hours = DEFAULT_EXTENSION_HOURS
        hours = max(1, min(int(hours), self.settings.max_demo_hours))

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            tenant.expires_at = tenant.expires_at + timedelta(hours=hours)
            if tenant.status in (TenantStatus.running, TenantStatus.paused):
                tenant.status = TenantStatus.running
            tenant.expiration_warned = False
            tenant = await self.uow.tenants.update(tenant)
            await self.uow.commit()

            response = ExtendTenantResponse(
                id=str(tenant.id),
                status=tenant.status.value,
                hours_added=hours,
                expires_at=tenant.expires_at.isoformat(),
            )
            to, name, expires_at = tenant.email, tenant.name, tenant.expires_at

        logger.info(f"Extended tenant {tenant_id} by {hours}h")
        await self.notifications.send_extension(to, name, hours, expires_at)
        return Return.ok(response)
