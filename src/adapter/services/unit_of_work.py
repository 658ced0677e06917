from typing import Type

from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.activity_repository import ActivityRepository
from src.adapter.repositories.scheduled_email_repository import ScheduledEmailRepository
from src.adapter.repositories.tenant_instance_repository import TenantInstanceRepository
from src.adapter.repositories.tenant_scoped_repository import (
    TenantDataRepository,
    TenantScopedRepository,
)
from src.adapter.repositories.verification_repository import VerificationRepository
from src.app.repositories.tenant_scoped_repository import ITenantScopedRepository, RecordT
from src.app.services.unit_of_work import UnitOfWork
from src.domain.tenancy import TenantContext


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.verifications = VerificationRepository(self.session)
        self.tenants = TenantInstanceRepository(self.session)
        self.activity = ActivityRepository(self.session)
        self.tenant_data = TenantDataRepository(self.session)
        self.scheduled_emails = ScheduledEmailRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    def scoped(
        self, model: Type[RecordT], context: TenantContext
    ) -> ITenantScopedRepository[RecordT]:
        return TenantScopedRepository(self.session, model, context)
