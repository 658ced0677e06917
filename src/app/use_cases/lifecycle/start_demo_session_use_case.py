import logging
from datetime import timedelta
from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AccessLog, ContentUser, LoginAttempt, TenantSession
from src.domain.tenancy import TenantContext

from .demo_access import demo_access_error
from .dtos import DemoSessionResponse

logger = logging.getLogger(__name__)

SESSION_EXTEND_WINDOW = timedelta(minutes=30)
UNKNOWN_IP = "unknown"


class StartDemoSessionUseCase:
    """
    Auto-login into a running demo as its seeded admin.

    Business Logic:
    1. Only running, unexpired demos (DEMO_NOT_FOUND / DEMO_EXPIRED / DEMO_<STATUS>)
    2. Find the seeded admin through the tenant-scoped repository
    3. Record the login attempt, successful or not
    4. Extend the visitor's session when they came back within 30 minutes
       from the same IP, otherwise close earlier sessions and open a new one
    5. Append an access log entry and bump the demo's counters
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        identifier: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        path: Optional[str] = None,
    ) -> Result[DemoSessionResponse]:
        ip_address = ip_address or UNKNOWN_IP
        now = utcnow()

        async with self.uow:
            tenant = await self.uow.tenants.get_by_subdomain_or_token(identifier)
            error = demo_access_error(tenant, now)
            if error:
                return Return.err(error)

            users = self.uow.scoped(ContentUser, TenantContext.for_tenant(tenant.id))
            admins = await users.list(filters={"email": tenant.admin_email}, limit=1)
            if not admins:
                await self.uow.activity.add_login_attempt(
                    LoginAttempt(
                        tenant_id=tenant.id,
                        email=tenant.admin_email,
                        success=False,
                        failure_reason="Demo user not found",
                        ip_address=ip_address,
                        user_agent=user_agent,
                    )
                )
                await self.uow.commit()
                logger.error(f"Seeded admin missing for tenant {tenant.id}")
                return Return.err(
                    Error("DEMO_USER_NOT_FOUND", "Demo user not found")
                )
            admin = admins[0]

            await self.uow.activity.add_login_attempt(
                LoginAttempt(
                    tenant_id=tenant.id,
                    email=admin.email,
                    success=True,
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
            )

            session = await self.uow.activity.get_recent_session(
                tenant.id, ip_address, now - SESSION_EXTEND_WINDOW
            )
            if session:
                session.pages_viewed += 1
                session.actions_count += 1
            else:
                await self.uow.activity.close_active_sessions(tenant.id, now)
                session = TenantSession(
                    tenant_id=tenant.id,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    started_at=now,
                )
            session = await self.uow.activity.save_session(session)

            await self.uow.activity.add_access_log(
                AccessLog(
                    tenant_id=tenant.id,
                    path=path or f"/demo/{tenant.subdomain}/session",
                    method="POST",
                    status_code=200,
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
            )

            tenant.request_count += 1
            tenant.last_accessed_at = now
            await self.uow.tenants.update(tenant)
            await self.uow.commit()

            return Return.ok(
                DemoSessionResponse(
                    tenant_id=str(tenant.id),
                    user_id=str(admin.id),
                    role=admin.role.value,
                    subdomain=tenant.subdomain,
                    name=tenant.name,
                    admin_email=admin.email,
                    expires_at=tenant.expires_at.isoformat(),
                    hours_remaining=tenant.hours_remaining(now),
                    session_id=str(session.id),
                )
            )
