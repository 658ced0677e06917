import logging
from datetime import datetime
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.demo_settings import DemoSettings
from src.app.services.notification_service import DemoNotificationService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.lifecycle import (
    CreateTenantCommand,
    CreateTenantUseCase,
    TenantCredentials,
)
from src.domain.base import utcnow
from src.domain.entities import VerificationStatus

logger = logging.getLogger(__name__)

MAX_VERIFICATION_ATTEMPTS = 5


class VerifyDemoUseCase:
    """
    Verify Demo Use Case

    Business Logic:
    1. Unknown token: INVALID_TOKEN
    2. Completed: return the linked demo again (password no longer known)
    3. Blocked: VERIFICATION_BLOCKED
    4. Past TTL: mark expired, TOKEN_EXPIRED
    5. Count the attempt; above 5 the row is blocked (VERIFICATION_BLOCKED)
    6. Mark verified and create the tenant in the same unit of work
    7. Success: link the tenant, mark completed, email the credentials
       Failure: PROVISIONING_FAILED with the cause; the row stays verified
    """

    def __init__(
        self,
        uow: UnitOfWork,
        create_tenant: CreateTenantUseCase,
        settings: DemoSettings,
        notifications: DemoNotificationService,
    ):
        self.uow = uow
        self.create_tenant = create_tenant
        self.settings = settings
        self.notifications = notifications

    async def execute(self, token: str) -> Result[TenantCredentials]:
        async with self.uow:
            verification = await self.uow.verifications.get_by_token(token)
            if not verification:
                return Return.err(Error("INVALID_TOKEN", "Invalid verification link"))

            if verification.status == VerificationStatus.completed:
                return await self._existing_credentials(verification.linked_tenant_id)

            if verification.status == VerificationStatus.blocked:
                return Return.err(self._blocked_error())

            now = utcnow()
            if (
                verification.status == VerificationStatus.expired
                or verification.token_expires_at < now
            ):
                verification.status = VerificationStatus.expired
                await self.uow.verifications.update(verification)
                await self.uow.commit()
                return Return.err(
                    Error(
                        "TOKEN_EXPIRED",
                        "This verification link has expired",
                        details={"suggestion": "Request a new demo to receive a fresh link."},
                    )
                )

            verification.attempt_count += 1
            verification.last_attempt_at = now
            if verification.attempt_count > MAX_VERIFICATION_ATTEMPTS:
                verification.status = VerificationStatus.blocked
                await self.uow.verifications.update(verification)
                await self.uow.commit()
                logger.warning(f"Verification {verification.id} blocked after too many attempts")
                return Return.err(self._blocked_error())

            verification.status = VerificationStatus.verified
            verification.verified_at = now
            await self.uow.verifications.update(verification)
            await self.uow.commit()

            command = CreateTenantCommand(
                name=verification.name,
                email=verification.email,
                company=verification.company,
                phone=verification.phone,
                preferred_subdomain=verification.preferred_subdomain,
            )
            created = await self.create_tenant.create_within_transaction(command)
            if created.is_err():
                cause = created.error
                logger.warning(f"Tenant creation failed for {command.email}: {cause.code}")
                return Return.err(
                    Error(
                        "PROVISIONING_FAILED",
                        "We could not create your demo",
                        reason=cause.message,
                        details={"cause": cause.code},
                    )
                )
            credentials = created.value

            verification = await self.uow.verifications.get_by_token(token)
            verification.linked_tenant_id = UUID(credentials.id)
            verification.status = VerificationStatus.completed
            await self.uow.verifications.update(verification)
            await self.uow.commit()

        await self.notifications.send_credentials(
            to=command.email,
            name=command.name,
            access_url=credentials.access_url,
            admin_email=credentials.admin_email,
            admin_password=credentials.admin_password,
            expires_at=datetime.fromisoformat(credentials.expires_at),
        )
        return Return.ok(credentials)

    async def _existing_credentials(self, tenant_id) -> Result[TenantCredentials]:
        tenant = await self.uow.tenants.get_by_id(tenant_id) if tenant_id else None
        if not tenant:
            return Return.err(Error("TENANT_NOT_FOUND", "Demo not found"))
        return Return.ok(
            TenantCredentials(
                id=str(tenant.id),
                subdomain=tenant.subdomain,
                access_url=self.settings.access_url(tenant.subdomain),
                admin_email=tenant.admin_email,
                admin_password=None,
                access_token=tenant.access_token,
                expires_at=tenant.expires_at.isoformat(),
                status=tenant.status.value,
            )
        )

    @staticmethod
    def _blocked_error() -> Error:
        return Error(
            "VERIFICATION_BLOCKED",
            "Too many verification attempts",
            details={"suggestion": "Contact support to get access to a demo."},
        )
