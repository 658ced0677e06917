import logging
import secrets
from datetime import timedelta

import bcrypt
from sqlalchemy.exc import IntegrityError

from libs.result import Error, Result, Return
from src.app.services.demo_settings import DemoSettings
from src.app.services.email_validation_service import normalize_email
from src.app.services.provisioning_dispatcher import IProvisioningDispatcher
from src.app.services.tenant_allocator import TenantAllocator
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import TenantInstance, TenantStatus
from src.domain.identifiers import database_name_for, sanitize_subdomain

from .dtos import CreateTenantCommand, TenantCredentials

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789"
PASSWORD_LENGTH = 12
MAX_ALLOCATION_ATTEMPTS = 3


def generate_admin_password() -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(PASSWORD_LENGTH))


class CreateTenantUseCase:
    """
    Create Tenant Use Case

    Business Logic:
    1. Refuse when the email already owns an active tenant (CONFLICT)
    2. Refuse when active tenants reached the cap (CAPACITY_EXCEEDED)
    3. Pick a free subdomain, suffixing -1, -2, ... on collision
    4. Pick the lowest free port in the configured range (NO_AVAILABLE_PORTS)
    5. Generate admin password (bcrypt hashed) and access token
    6. Persist as pending and commit
    7. Dispatch provisioning in the background

    Steps 1-6 run under the allocator lock. A unique violation on insert
    retries the allocation.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: DemoSettings,
        allocator: TenantAllocator,
        dispatcher: IProvisioningDispatcher,
    ):
        self.uow = uow
        self.settings = settings
        self.allocator = allocator
        self.dispatcher = dispatcher

    async def execute(self, command: CreateTenantCommand) -> Result[TenantCredentials]:
        async with self.uow:
            return await self.create_within_transaction(command)

    async def create_within_transaction(
        self, command: CreateTenantCommand
    ) -> Result[TenantCredentials]:
        """Same as execute, for callers that already entered the unit of work"""
        email = normalize_email(command.email)

        for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
            async with self.allocator:
                existing = await self.uow.tenants.get_active_by_email(email)
                if existing:
                    return Return.err(
                        Error(
                            "CONFLICT",
                            "An active demo already exists for this email",
                            details={"subdomain": existing.subdomain},
                        )
                    )

                active = await self.uow.tenants.count_active()
                if active >= self.settings.max_concurrent_tenants:
                    logger.warning(f"Demo capacity reached ({active} active)")
                    return Return.err(
                        Error(
                            "CAPACITY_EXCEEDED",
                            "All demo environments are currently in use. Please try again later.",
                        )
                    )

                subdomain = await self._allocate_subdomain(command)
                port = await self._allocate_port()
                if port is None:
                    return Return.err(
                        Error("NO_AVAILABLE_PORTS", "No demo ports are available")
                    )

                admin_password = generate_admin_password()
                password_hash = bcrypt.hashpw(admin_password.encode("utf-8"), bcrypt.gensalt(12))
                now = utcnow()

                tenant = TenantInstance(
                    subdomain=subdomain,
                    name=command.name,
                    email=email,
                    company=command.company,
                    phone=command.phone,
                    resource_port=port,
                    resource_db_name=database_name_for(subdomain),
                    admin_email=email,
                    admin_password_hash=password_hash.decode("utf-8"),
                    access_token=secrets.token_hex(32),
                    status=TenantStatus.pending,
                    expires_at=now + timedelta(hours=self.settings.effective_duration_hours),
                    created_at=now,
                )

                try:
                    tenant = await self.uow.tenants.create(tenant)
                    await self.uow.commit()
                except IntegrityError:
                    await self.uow.rollback()
                    logger.warning(
                        f"Allocation collision for {subdomain}, attempt {attempt}"
                    )
                    continue

                credentials = TenantCredentials(
                    id=str(tenant.id),
                    subdomain=tenant.subdomain,
                    access_url=self.settings.access_url(tenant.subdomain),
                    admin_email=tenant.admin_email,
                    admin_password=admin_password,
                    access_token=tenant.access_token,
                    expires_at=tenant.expires_at.isoformat(),
                    status=tenant.status.value,
                )
                tenant_id = tenant.id

            logger.info(f"Created demo tenant {tenant_id} ({subdomain}) on port {port}")
            self.dispatcher.dispatch(tenant_id)
            return Return.ok(credentials)

        return Return.err(
            Error("CONFLICT", "Could not allocate demo resources, please retry")
        )

    async def _allocate_subdomain(self, command: CreateTenantCommand) -> str:
        base = sanitize_subdomain(command.preferred_subdomain, command.name)
        candidate = base
        suffix = 0
        while await self.uow.tenants.subdomain_exists(candidate):
            suffix += 1
            candidate = f"{base}-{suffix}"
        return candidate

    async def _allocate_port(self):
        in_use = await self.uow.tenants.get_ports_in_use()
        for port in self.settings.port_range:
            if port not in in_use:
                return port
        return None
