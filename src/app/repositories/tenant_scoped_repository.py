from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar
from uuid import UUID

from src.domain.entities import TenantScopedRecord
from src.domain.tenancy import TenantContext

RecordT = TypeVar("RecordT", bound=TenantScopedRecord)


class InvalidFilterError(ValueError):
    """Raised when a filter or update names a column the caller may not use"""


class ITenantScopedRepository(ABC, Generic[RecordT]):
    """
    Tenant-filtered data access facade - application layer

    The only way CRUD code reaches tenant-scoped tables. Every read, update
    and delete is intersected with the context's tenant, every create is
    stamped with it. Records of another tenant look exactly like missing
    records.
    """

    context: TenantContext

    @abstractmethod
    async def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[RecordT]:
        pass

    @abstractmethod
    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        pass

    @abstractmethod
    async def get_by_id(self, record_id: UUID) -> Optional[RecordT]:
        pass

    @abstractmethod
    async def create(self, record: RecordT) -> RecordT:
        pass

    @abstractmethod
    async def update(self, record_id: UUID, values: Dict[str, Any]) -> Optional[RecordT]:
        pass

    @abstractmethod
    async def update_many(self, filters: Dict[str, Any], values: Dict[str, Any]) -> int:
        pass

    @abstractmethod
    async def delete(self, record_id: UUID) -> bool:
        pass

    @abstractmethod
    async def delete_many(self, filters: Dict[str, Any]) -> int:
        pass


class ITenantDataRepository(ABC):
    """Teardown-only access to tenant-scoped tables"""

    @abstractmethod
    async def purge(self, tenant_id: UUID) -> Dict[str, int]:
        """Delete every tenant-scoped record of exactly this tenant, per table counts"""
        pass
