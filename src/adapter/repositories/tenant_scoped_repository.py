from typing import Any, Dict, List, Optional, Type
from uuid import UUID

from sqlmodel import delete, func, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.tenant_scoped_repository import (
    InvalidFilterError,
    ITenantDataRepository,
    ITenantScopedRepository,
    RecordT,
)
from src.domain.entities import TENANT_SCOPED_MODELS
from src.domain.tenancy import TenantContext

PROTECTED_COLUMNS = ("id", "tenant_id")


class TenantScopedRepository(ITenantScopedRepository[RecordT]):
    """Tenant-filtered repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession, model: Type[RecordT], context: TenantContext):
        if model not in TENANT_SCOPED_MODELS:
            raise TypeError(f"{model.__name__} is not a tenant-scoped model")
        if not isinstance(context, TenantContext):
            raise TypeError("context must be a TenantContext")
        self.session = session
        self.model = model
        self.context = context

    def _tenant_clause(self):
        if self.context.tenant_id is None:
            return self.model.tenant_id.is_(None)
        return self.model.tenant_id == self.context.tenant_id

    def _column(self, name: str):
        columns = self.model.__table__.columns
        if name not in columns:
            raise InvalidFilterError(f"{self.model.__name__} has no column {name!r}")
        return getattr(self.model, name)

    def _where(self, filters: Optional[Dict[str, Any]]) -> list:
        conditions = [self._tenant_clause()]
        for name, value in (filters or {}).items():
            if name == "tenant_id":
                raise InvalidFilterError("tenant_id is set by the tenant context")
            column = self._column(name)
            if value is None:
                conditions.append(column.is_(None))
            elif isinstance(value, (list, tuple, set)):
                conditions.append(column.in_(list(value)))
            else:
                conditions.append(column == value)
        return conditions

    def _values(self, values: Dict[str, Any]) -> Dict[str, Any]:
        for name in values:
            if name in PROTECTED_COLUMNS:
                raise InvalidFilterError(f"{name} cannot be changed")
            self._column(name)
        return values

    async def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[RecordT]:
        stmt = select(self.model).where(*self._where(filters))
        if order_by:
            descending = order_by.startswith("-")
            column = self._column(order_by.lstrip("-"))
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        else:
            stmt = stmt.order_by(self.model.created_at.desc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.exec(stmt)
        return list(result.all())

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        stmt = select(func.count()).select_from(self.model).where(*self._where(filters))
        result = await self.session.exec(stmt)
        return result.one()

    async def get_by_id(self, record_id: UUID) -> Optional[RecordT]:
        record = await self.session.get(self.model, record_id)
        if record is None or not self.context.owns(record.tenant_id):
            return None
        return record

    async def create(self, record: RecordT) -> RecordT:
        if not isinstance(record, self.model):
            raise TypeError(f"expected {self.model.__name__}, got {type(record).__name__}")
        record.tenant_id = self.context.tenant_id
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record)
        return record

    async def update(self, record_id: UUID, values: Dict[str, Any]) -> Optional[RecordT]:
        record = await self.get_by_id(record_id)
        if record is None:
            return None
        for name, value in self._values(values).items():
            setattr(record, name, value)
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record)
        return record

    async def update_many(self, filters: Dict[str, Any], values: Dict[str, Any]) -> int:
        stmt = (
            update(self.model)
            .where(*self._where(filters))
            .values(**self._values(values))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def delete(self, record_id: UUID) -> bool:
        record = await self.get_by_id(record_id)
        if record is None:
            return False
        await self.session.delete(record)
        await self.session.flush()
        return True

    async def delete_many(self, filters: Dict[str, Any]) -> int:
        stmt = (
            delete(self.model)
            .where(*self._where(filters))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0


class TenantDataRepository(ITenantDataRepository):
    """Bulk purge of one tenant's records across every tenant-scoped table"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def purge(self, tenant_id: UUID) -> Dict[str, int]:
        if tenant_id is None:
            raise ValueError("refusing to purge records without a tenant id")
        deleted = {}
        for model in TENANT_SCOPED_MODELS:
            stmt = (
                delete(model)
                .where(model.tenant_id == tenant_id)
                .execution_options(synchronize_session=False)
            )
            result = await self.session.execute(stmt)
            deleted[model.__tablename__] = result.rowcount or 0
        return deleted
