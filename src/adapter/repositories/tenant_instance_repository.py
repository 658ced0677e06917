from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple
from uuid import UUID

from sqlmodel import func, or_, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.tenant_instance_repository import ITenantInstanceRepository
from src.domain.entities import ACTIVE_TENANT_STATUSES, TenantInstance, TenantStatus


class TenantInstanceRepository(ITenantInstanceRepository):
    """Demo tenant repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, tenant_id: UUID) -> Optional[TenantInstance]:
        stmt = select(TenantInstance).where(TenantInstance.id == tenant_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def reload(self, tenant_id: UUID) -> Optional[TenantInstance]:
        stmt = (
            select(TenantInstance)
            .where(TenantInstance.id == tenant_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def _update_where(self, tenant_id: UUID, conditions: list, values: dict) -> bool:
        stmt = (
            update(TenantInstance)
            .where(TenantInstance.id == tenant_id, *conditions)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def transition(
        self, tenant_id: UUID, expected: TenantStatus, status: TenantStatus, **values
    ) -> bool:
        return await self._update_where(
            tenant_id, [TenantInstance.status == expected], {**values, "status": status}
        )

    async def claim_expired(self, tenant_id: UUID, now: datetime) -> bool:
        return await self._update_where(
            tenant_id,
            [TenantInstance.status == TenantStatus.running, TenantInstance.expires_at < now],
            {"status": TenantStatus.expired},
        )

    async def get_by_access_token(self, access_token: str) -> Optional[TenantInstance]:
        stmt = select(TenantInstance).where(TenantInstance.access_token == access_token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_subdomain_or_token(self, identifier: str) -> Optional[TenantInstance]:
        stmt = select(TenantInstance).where(
            or_(
                TenantInstance.subdomain == identifier,
                TenantInstance.access_token == identifier,
            )
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def get_active_by_email(self, email: str) -> Optional[TenantInstance]:
        stmt = select(TenantInstance).where(
            TenantInstance.email == email,
            TenantInstance.status.in_(ACTIVE_TENANT_STATUSES),
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def count_active(self) -> int:
        stmt = select(func.count()).select_from(TenantInstance).where(
            TenantInstance.status.in_(ACTIVE_TENANT_STATUSES)
        )
        result = await self.session.exec(stmt)
        return result.one()

    async def subdomain_exists(self, subdomain: str) -> bool:
        stmt = select(TenantInstance.id).where(TenantInstance.subdomain == subdomain)
        result = await self.session.exec(stmt)
        return result.first() is not None

    async def get_ports_in_use(self) -> Set[int]:
        stmt = select(TenantInstance.resource_port).where(
            TenantInstance.status.in_(ACTIVE_TENANT_STATUSES)
        )
        result = await self.session.exec(stmt)
        return set(result.all())

    async def list(
        self,
        status: Optional[TenantStatus] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[TenantInstance], int]:
        conditions = []
        if status is not None:
            conditions.append(TenantInstance.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(TenantInstance.name).like(pattern),
                    func.lower(TenantInstance.email).like(pattern),
                    func.lower(TenantInstance.company).like(pattern),
                    func.lower(TenantInstance.subdomain).like(pattern),
                )
            )

        stmt = (
            select(TenantInstance)
            .where(*conditions)
            .order_by(TenantInstance.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        tenants = list(result.all())

        count_stmt = select(func.count()).select_from(TenantInstance).where(*conditions)
        total = (await self.session.exec(count_stmt)).one()

        return tenants, total

    async def get_expired_running(self, now: datetime) -> List[TenantInstance]:
        stmt = select(TenantInstance).where(
            TenantInstance.status == TenantStatus.running,
            TenantInstance.expires_at < now,
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_expiring_between(
        self, start: datetime, end: datetime
    ) -> List[TenantInstance]:
        stmt = select(TenantInstance).where(
            TenantInstance.status == TenantStatus.running,
            TenantInstance.expires_at >= start,
            TenantInstance.expires_at < end,
            TenantInstance.expiration_warned == False,  # noqa: E712
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def count_by_status(self) -> Dict[TenantStatus, int]:
        stmt = select(TenantInstance.status, func.count()).group_by(TenantInstance.status)
        result = await self.session.exec(stmt)
        return {TenantStatus(status): count for status, count in result.all()}

    async def count_upgrade_requests(self) -> int:
        stmt = select(func.count()).select_from(TenantInstance).where(
            TenantInstance.upgrade_requested == True  # noqa: E712
        )
        result = await self.session.exec(stmt)
        return result.one()

    async def get_created_since(self, since: datetime) -> List[datetime]:
        stmt = select(TenantInstance.created_at).where(TenantInstance.created_at >= since)
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, tenant: TenantInstance) -> TenantInstance:
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def update(self, tenant: TenantInstance) -> TenantInstance:
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant
