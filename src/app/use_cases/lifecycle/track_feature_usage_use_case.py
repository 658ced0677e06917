from typing import Any, Dict, Optional

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import FeatureUsageEvent

from .dtos import TrackFeatureUsageResponse


class TrackFeatureUsageUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        access_token: str,
        feature: str,
        action: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Result[TrackFeatureUsageResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_access_token(access_token)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Demo not found"))

            await self.uow.activity.add_feature_usage(
                FeatureUsageEvent(
                    tenant_id=tenant.id,
                    feature=feature,
                    action=action,
                    event_metadata=metadata,
                )
            )
            tenant.request_count += 1
            tenant.last_accessed_at = utcnow()
            await self.uow.tenants.update(tenant)
            await self.uow.commit()

        return Return.ok(TrackFeatureUsageResponse())
