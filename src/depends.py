from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import UUID

from fastapi import Cookie, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.dns_mx_resolver import DnsMxResolver
from src.adapter.services.local_provisioner import LocalInfrastructureProvisioner
from src.adapter.services.log_email_sender import LogEmailSender
from src.adapter.services.ses_email_sender import SesEmailSender
from src.adapter.services.sweep_scheduler import ScheduledJob, SweepScheduler
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import verify_jwt
from src.app.services.background_jobs import BackgroundJobRunner
from src.app.services.demo_settings import DemoSettings
from src.app.services.email_sender import IEmailSender
from src.app.services.email_validation_service import EmailValidationService
from src.app.services.mx_resolver import IMxResolver
from src.app.services.notification_service import DemoNotificationService
from src.app.services.provisioning_dispatcher import (
    BackgroundProvisioningDispatcher,
    IProvisioningDispatcher,
)
from src.app.services.provisioning_orchestrator import (
    ProvisioningOrchestrator,
    UnitOfWorkScope,
)
from src.app.services.sample_data_seeder import SampleDataSeeder
from src.app.services.tenant_allocator import TenantAllocator
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sweeps import (
    CleanupVerificationsUseCase,
    ExpireTenantsUseCase,
    SendExpirationWarningsUseCase,
    SendFollowUpEmailsUseCase,
)
from src.domain.tenancy import TenantContext

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

settings = DemoSettings.from_config(ApplicationConfig)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@asynccontextmanager
async def unit_of_work_scope() -> AsyncIterator[UnitOfWork]:
    """Unit of work with its own session, for work outside a request"""
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_settings() -> DemoSettings:
    return settings


# ============================================================================
# Process-wide services
# ============================================================================


def _build_email_sender() -> IEmailSender:
    if ApplicationConfig.EMAIL_BACKEND == "ses":
        return SesEmailSender(
            sender=ApplicationConfig.EMAIL_FROM,
            region=ApplicationConfig.AWS_REGION,
            access_key_id=ApplicationConfig.AWS_ACCESS_KEY_ID,
            secret_access_key=ApplicationConfig.AWS_SECRET_ACCESS_KEY,
        )
    return LogEmailSender()


email_sender = _build_email_sender()
mx_resolver = DnsMxResolver(timeout=ApplicationConfig.DNS_TIMEOUT)
allocator = TenantAllocator()
job_runner = BackgroundJobRunner()
notification_service = DemoNotificationService(email_sender, settings)


def build_orchestrator(uow_scope: UnitOfWorkScope) -> ProvisioningOrchestrator:
    return ProvisioningOrchestrator(
        uow_scope=uow_scope,
        provisioner=LocalInfrastructureProvisioner.from_settings(settings),
        seeder=SampleDataSeeder(),
    )


orchestrator = build_orchestrator(unit_of_work_scope)


def build_sweep_scheduler(
    uow_scope: UnitOfWorkScope,
    orchestrator: ProvisioningOrchestrator,
    notifications: DemoNotificationService,
    demo_settings: DemoSettings,
) -> SweepScheduler:
    async def expire():
        async with uow_scope() as uow:
            return await ExpireTenantsUseCase(uow, orchestrator, notifications).execute()

    async def warn():
        async with uow_scope() as uow:
            return await SendExpirationWarningsUseCase(
                uow, demo_settings, notifications
            ).execute()

    async def follow_up():
        async with uow_scope() as uow:
            return await SendFollowUpEmailsUseCase(
                uow, demo_settings, notifications
            ).execute()

    async def cleanup():
        async with uow_scope() as uow:
            return await CleanupVerificationsUseCase(uow).execute()

    return SweepScheduler(
        [
            ScheduledJob(
                ExpireTenantsUseCase.JOB_NAME,
                ApplicationConfig.EXPIRATION_SWEEP_INTERVAL,
                expire,
            ),
            ScheduledJob(
                SendExpirationWarningsUseCase.JOB_NAME,
                ApplicationConfig.EXPIRATION_WARNING_INTERVAL,
                warn,
            ),
            ScheduledJob(
                SendFollowUpEmailsUseCase.JOB_NAME,
                ApplicationConfig.FOLLOW_UP_INTERVAL,
                follow_up,
            ),
            ScheduledJob(
                CleanupVerificationsUseCase.JOB_NAME,
                ApplicationConfig.VERIFICATION_CLEANUP_INTERVAL,
                cleanup,
            ),
        ]
    )


sweep_scheduler = build_sweep_scheduler(
    unit_of_work_scope, orchestrator, notification_service, settings
)


def get_mx_resolver() -> IMxResolver:
    return mx_resolver


def get_email_validation_service(
    resolver: IMxResolver = Depends(get_mx_resolver),
) -> EmailValidationService:
    return EmailValidationService(resolver)


def get_notification_service() -> DemoNotificationService:
    return notification_service


def get_tenant_allocator() -> TenantAllocator:
    return allocator


def get_job_runner() -> BackgroundJobRunner:
    return job_runner


def get_provisioning_orchestrator() -> ProvisioningOrchestrator:
    return orchestrator


def get_provisioning_dispatcher() -> IProvisioningDispatcher:
    return BackgroundProvisioningDispatcher(job_runner, orchestrator)


def get_sweep_scheduler() -> SweepScheduler:
    return sweep_scheduler


# ============================================================================
# Tenant context
# ============================================================================


async def get_tenant_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    access_token: Optional[str] = Cookie(None),
) -> TenantContext:
    """
    Build the request's tenant context from the bearer token or the demo
    session cookie.

    No token means production context. A demo token (is_tenant=True) confines
    the request to its tenant.

    Raises:
        ClientError: 401 if a token is present but invalid or expired
    """
    token = credentials.credentials if credentials else access_token
    if not token:
        return TenantContext.production()

    payload = verify_jwt(token)
    if payload is None:
        raise ClientError(
            Error("UNAUTHORIZED", "Invalid or expired token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if payload.get("is_tenant"):
        try:
            return TenantContext.for_tenant(UUID(payload["tenant_id"]))
        except (KeyError, TypeError, ValueError):
            raise ClientError(
                Error("UNAUTHORIZED", "Malformed demo session token"),
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
    return TenantContext.production()
