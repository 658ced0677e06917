from collections import Counter
from datetime import timedelta

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ACTIVE_TENANT_STATUSES, TenantStatus

from .dtos import AnalyticsSummaryResponse, DailyCount, FeatureCount

TOP_FEATURES_LIMIT = 10
DAILY_WINDOW_DAYS = 30


class GetAnalyticsSummaryUseCase:
    """
    Operator dashboard numbers.

    conversion_rate = upgrade requests / total demos * 100, 0 without demos.
    demos_by_day covers the last 30 days, oldest first, days without demos
    included as zero.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[AnalyticsSummaryResponse]:
        now = utcnow()
        window_start = (now - timedelta(days=DAILY_WINDOW_DAYS - 1)).replace(
            hour=0, minute=0, second=0, microsecond=0
        )

        async with self.uow:
            counts = await self.uow.tenants.count_by_status()
            upgrades = await self.uow.tenants.count_upgrade_requests()
            histogram = await self.uow.activity.feature_histogram(TOP_FEATURES_LIMIT)
            created = await self.uow.tenants.get_created_since(window_start)

        total = sum(counts.values())
        per_day = Counter(created_at.date() for created_at in created)
        demos_by_day = []
        for offset in range(DAILY_WINDOW_DAYS):
            day = (window_start + timedelta(days=offset)).date()
            demos_by_day.append(DailyCount(date=day.isoformat(), count=per_day.get(day, 0)))

        return Return.ok(
            AnalyticsSummaryResponse(
                total=total,
                by_status={status.value: counts.get(status, 0) for status in TenantStatus},
                active=sum(counts.get(status, 0) for status in ACTIVE_TENANT_STATUSES),
                upgrade_requests=upgrades,
                conversion_rate=round(upgrades / total * 100, 2) if total else 0.0,
                top_features=[FeatureCount(feature=f, count=c) for f, c in histogram],
                demos_by_day=demos_by_day,
            )
        )
