from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.demo_settings import DemoSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .dtos import AccessLogInfo, FeatureUsageInfo, TenantDetailResponse, TenantSummary

RECENT_ACTIVITY_LIMIT = 100


class GetTenantDetailUseCase:
    def __init__(self, uow: UnitOfWork, settings: DemoSettings):
        self.uow = uow
        self.settings = settings

    async def execute(self, tenant_id: UUID) -> Result[TenantDetailResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            logs = await self.uow.activity.get_recent_access_logs(tenant.id, RECENT_ACTIVITY_LIMIT)
            usage = await self.uow.activity.get_recent_feature_usage(
                tenant.id, RECENT_ACTIVITY_LIMIT
            )

            return Return.ok(
                TenantDetailResponse(
                    tenant=TenantSummary.from_tenant(
                        tenant, self.settings.access_url(tenant.subdomain), utcnow()
                    ),
                    phone=tenant.phone,
                    notes=tenant.notes,
                    resource_port=tenant.resource_port,
                    started_at=tenant.started_at.isoformat() if tenant.started_at else None,
                    upgrade_requested_at=(
                        tenant.upgrade_requested_at.isoformat()
                        if tenant.upgrade_requested_at
                        else None
                    ),
                    access_logs=[
                        AccessLogInfo(
                            path=log.path,
                            method=log.method,
                            status_code=log.status_code,
                            response_time_ms=log.response_time_ms,
                            ip_address=log.ip_address,
                            created_at=log.created_at.isoformat(),
                        )
                        for log in logs
                    ],
                    feature_usage=[
                        FeatureUsageInfo(
                            feature=event.feature,
                            action=event.action,
                            metadata=event.event_metadata,
                            created_at=event.created_at.isoformat(),
                        )
                        for event in usage
                    ],
                )
            )
