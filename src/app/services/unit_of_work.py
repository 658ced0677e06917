from abc import ABC, abstractmethod
from typing import Type

from src.app.repositories.activity_repository import IActivityRepository
from src.app.repositories.scheduled_email_repository import IScheduledEmailRepository
from src.app.repositories.tenant_instance_repository import ITenantInstanceRepository
from src.app.repositories.tenant_scoped_repository import (
    ITenantDataRepository,
    ITenantScopedRepository,
    RecordT,
)
from src.app.repositories.verification_repository import IVerificationRepository
from src.domain.tenancy import TenantContext


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    verifications: IVerificationRepository
    tenants: ITenantInstanceRepository
    activity: IActivityRepository
    tenant_data: ITenantDataRepository
    scheduled_emails: IScheduledEmailRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    @abstractmethod
    def scoped(
        self, model: Type[RecordT], context: TenantContext
    ) -> ITenantScopedRepository[RecordT]:
        """Tenant-filtered access to a tenant-scoped table"""
        pass
