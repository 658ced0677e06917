from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import AccessLog, FeatureUsageEvent, LoginAttempt, TenantSession


class IActivityRepository(ABC):
    """
    Tenant activity repository interface - application layer

    Append-only analytics children of a tenant: sessions, access logs,
    feature usage events and login attempts.
    """

    @abstractmethod
    async def add_access_log(self, log: AccessLog) -> AccessLog:
        pass

    @abstractmethod
    async def add_feature_usage(self, event: FeatureUsageEvent) -> FeatureUsageEvent:
        pass

    @abstractmethod
    async def add_login_attempt(self, attempt: LoginAttempt) -> LoginAttempt:
        pass

    @abstractmethod
    async def get_recent_session(
        self, tenant_id: UUID, ip_address: str, since: datetime
    ) -> Optional[TenantSession]:
        pass

    @abstractmethod
    async def close_active_sessions(self, tenant_id: UUID, now: datetime) -> int:
        pass

    @abstractmethod
    async def save_session(self, session: TenantSession) -> TenantSession:
        pass

    @abstractmethod
    async def get_recent_access_logs(self, tenant_id: UUID, limit: int = 100) -> List[AccessLog]:
        pass

    @abstractmethod
    async def get_recent_feature_usage(
        self, tenant_id: UUID, limit: int = 100
    ) -> List[FeatureUsageEvent]:
        pass

    @abstractmethod
    async def feature_histogram(self, limit: int = 10) -> List[Tuple[str, int]]:
        """(feature, count) pairs, most used first"""
        pass

    @abstractmethod
    async def delete_by_tenant(self, tenant_id: UUID) -> int:
        pass
