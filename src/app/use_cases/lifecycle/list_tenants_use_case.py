import math
from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.demo_settings import DemoSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import TenantStatus

from .dtos import TenantListResponse, TenantSummary

MAX_PAGE_SIZE = 100


class ListTenantsUseCase:
    """Paginated operator view of demos, newest first."""

    def __init__(self, uow: UnitOfWork, settings: DemoSettings):
        self.uow = uow
        self.settings = settings

    async def execute(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Result[TenantListResponse]:
        status_filter = None
        if status:
            try:
                status_filter = TenantStatus(status.lower())
            except ValueError:
                return Return.err(
                    Error("INVALID_FILTER", f"Unknown status: {status}")
                )

        page = max(1, page)
        limit = max(1, min(limit, MAX_PAGE_SIZE))

        async with self.uow:
            tenants, total = await self.uow.tenants.list(
                status=status_filter,
                search=search.strip() if search else None,
                offset=(page - 1) * limit,
                limit=limit,
            )

        now = utcnow()
        return Return.ok(
            TenantListResponse(
                items=[
                    TenantSummary.from_tenant(t, self.settings.access_url(t.subdomain), now)
                    for t in tenants
                ],
                total=total,
                page=page,
                limit=limit,
                pages=math.ceil(total / limit) if total else 0,
            )
        )
