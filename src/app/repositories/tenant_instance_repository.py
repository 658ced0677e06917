from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple
from uuid import UUID

from src.domain.entities import TenantInstance, TenantStatus


class ITenantInstanceRepository(ABC):
    """Demo tenant repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, tenant_id: UUID) -> Optional[TenantInstance]:
        pass

    @abstractmethod
    async def reload(self, tenant_id: UUID) -> Optional[TenantInstance]:
        """
        Read the tenant from the database again, overwriting whatever the
        session holds for it. Use before acting on a row another session
        may have changed.
        """
        pass

    @abstractmethod
    async def transition(
        self, tenant_id: UUID, expected: TenantStatus, status: TenantStatus, **values
    ) -> bool:
        """
        Move the tenant to status (and set values) only if it is still in
        expected. Returns False when another writer got there first.
        """
        pass

    @abstractmethod
    async def claim_expired(self, tenant_id: UUID, now: datetime) -> bool:
        """Mark a running tenant expired if its expiry is still before now"""
        pass

    @abstractmethod
    async def get_by_access_token(self, access_token: str) -> Optional[TenantInstance]:
        pass

    @abstractmethod
    async def get_by_subdomain_or_token(self, identifier: str) -> Optional[TenantInstance]:
        """Demo URLs carry either the subdomain or the access token"""
        pass

    @abstractmethod
    async def get_active_by_email(self, email: str) -> Optional[TenantInstance]:
        """Get the non-terminal tenant owned by an email"""
        pass

    @abstractmethod
    async def count_active(self) -> int:
        pass

    @abstractmethod
    async def subdomain_exists(self, subdomain: str) -> bool:
        pass

    @abstractmethod
    async def get_ports_in_use(self) -> Set[int]:
        """Ports held by active tenants"""
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[TenantStatus] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[TenantInstance], int]:
        """Page of tenants (newest first) and the total matching count"""
        pass

    @abstractmethod
    async def get_expired_running(self, now: datetime) -> List[TenantInstance]:
        pass

    @abstractmethod
    async def get_expiring_between(
        self, start: datetime, end: datetime
    ) -> List[TenantInstance]:
        """Running, not yet warned, expires_at in [start, end)"""
        pass

    @abstractmethod
    async def count_by_status(self) -> Dict[TenantStatus, int]:
        pass

    @abstractmethod
    async def count_upgrade_requests(self) -> int:
        pass

    @abstractmethod
    async def get_created_since(self, since: datetime) -> List[datetime]:
        """created_at of every tenant created after since"""
        pass

    @abstractmethod
    async def create(self, tenant: TenantInstance) -> TenantInstance:
        pass

    @abstractmethod
    async def update(self, tenant: TenantInstance) -> TenantInstance:
        pass
