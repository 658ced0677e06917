from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlmodel import delete, func, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.activity_repository import IActivityRepository
from src.domain.entities import AccessLog, FeatureUsageEvent, LoginAttempt, TenantSession

ACTIVITY_MODELS = (TenantSession, AccessLog, FeatureUsageEvent, LoginAttempt)


class ActivityRepository(IActivityRepository):
    """Tenant activity repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add(self, record):
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record)
        return record

    async def add_access_log(self, log: AccessLog) -> AccessLog:
        return await self._add(log)

    async def add_feature_usage(self, event: FeatureUsageEvent) -> FeatureUsageEvent:
        return await self._add(event)

    async def add_login_attempt(self, attempt: LoginAttempt) -> LoginAttempt:
        return await self._add(attempt)

    async def save_session(self, session: TenantSession) -> TenantSession:
        return await self._add(session)

    async def get_recent_session(
        self, tenant_id: UUID, ip_address: str, since: datetime
    ) -> Optional[TenantSession]:
        stmt = (
            select(TenantSession)
            .where(
                TenantSession.tenant_id == tenant_id,
                TenantSession.ip_address == ip_address,
                TenantSession.is_active == True,  # noqa: E712
                TenantSession.started_at >= since,
            )
            .order_by(TenantSession.started_at.desc())
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def close_active_sessions(self, tenant_id: UUID, now: datetime) -> int:
        stmt = select(TenantSession).where(
            TenantSession.tenant_id == tenant_id,
            TenantSession.is_active == True,  # noqa: E712
        )
        sessions = (await self.session.exec(stmt)).all()
        for session in sessions:
            session.is_active = False
            session.ended_at = now
            session.duration_seconds = int((now - session.started_at).total_seconds())
            self.session.add(session)
        await self.session.flush()
        return len(sessions)

    async def get_recent_access_logs(self, tenant_id: UUID, limit: int = 100) -> List[AccessLog]:
        stmt = (
            select(AccessLog)
            .where(AccessLog.tenant_id == tenant_id)
            .order_by(AccessLog.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_recent_feature_usage(
        self, tenant_id: UUID, limit: int = 100
    ) -> List[FeatureUsageEvent]:
        stmt = (
            select(FeatureUsageEvent)
            .where(FeatureUsageEvent.tenant_id == tenant_id)
            .order_by(FeatureUsageEvent.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def feature_histogram(self, limit: int = 10) -> List[Tuple[str, int]]:
        usage = func.count(FeatureUsageEvent.id).label("usage")
        stmt = (
            select(FeatureUsageEvent.feature, usage)
            .group_by(FeatureUsageEvent.feature)
            .order_by(usage.desc())
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return [(feature, count) for feature, count in result.all()]

    async def delete_by_tenant(self, tenant_id: UUID) -> int:
        deleted = 0
        for model in ACTIVITY_MODELS:
            stmt = delete(model).where(model.tenant_id == tenant_id)
            result = await self.session.execute(stmt)
            deleted += result.rowcount or 0
        return deleted
