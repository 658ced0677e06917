import secrets
from datetime import datetime, timedelta

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import FollowUpKind, ScheduledEmail, TenantInstance

FOLLOW_UP_DELAYS = (
    (FollowUpKind.followup_24h, timedelta(hours=24)),
    (FollowUpKind.followup_3d, timedelta(days=3)),
)


async def schedule_follow_ups(uow: UnitOfWork, tenant: TenantInstance, now: datetime) -> None:
    """Queue the conversion emails of a demo that just expired. The caller commits."""
    for kind, delay in FOLLOW_UP_DELAYS:
        await uow.scheduled_emails.create(
            ScheduledEmail(
                tenant_id=tenant.id,
                email=tenant.email,
                name=tenant.name,
                subdomain=tenant.subdomain,
                kind=kind,
                unsubscribe_token=secrets.token_hex(32),
                send_at=now + delay,
            )
        )
