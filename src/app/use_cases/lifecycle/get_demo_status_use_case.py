from libs.result import Error, Result, Return
from src.app.services.demo_settings import DemoSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import TenantStatus

from .dtos import DemoStatusResponse


class GetDemoStatusUseCase:
    """Polling view used by the landing page while a demo is provisioned."""

    def __init__(self, uow: UnitOfWork, settings: DemoSettings):
        self.uow = uow
        self.settings = settings

    async def execute(self, identifier: str) -> Result[DemoStatusResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_subdomain_or_token(identifier)
            if not tenant:
                return Return.err(Error("DEMO_NOT_FOUND", "Demo not found"))

            now = utcnow()
            return Return.ok(
                DemoStatusResponse(
                    id=str(tenant.id),
                    subdomain=tenant.subdomain,
                    name=tenant.name,
                    status=tenant.status.value,
                    is_ready=tenant.status == TenantStatus.running and tenant.expires_at > now,
                    hours_remaining=tenant.hours_remaining(now),
                    expires_at=tenant.expires_at.isoformat(),
                    access_url=self.settings.access_url(tenant.subdomain),
                )
            )
