from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.provisioning_orchestrator import TeardownReport
from src.app.use_cases.sweeps import (
    CleanupVerificationsUseCase,
    ExpireTenantsUseCase,
    SendExpirationWarningsUseCase,
    SendFollowUpEmailsUseCase,
)
from src.domain.base import utcnow
from src.domain.entities import FollowUpKind, ScheduledEmailStatus, TenantStatus


@pytest.fixture
def orchestrator():
    orchestrator = MagicMock()
    orchestrator.teardown = AsyncMock(
        side_effect=lambda tenant, uow: TeardownReport(tenant_id=tenant.id)
    )
    return orchestrator


@pytest.mark.asyncio
async def test_expiration_sweep_expires_due_tenants(
    mock_uow, orchestrator, notifications, make_tenant, track_tenant
):
    past = utcnow() - timedelta(minutes=1)
    first = make_tenant(expires_at=past, email="a@acme.com")
    second = make_tenant(subdomain="beta", expires_at=past, email="b@beta.com")
    mock_uow.tenants.get_expired_running.return_value = [first, second]
    track_tenant(first, second)

    result = await ExpireTenantsUseCase(mock_uow, orchestrator, notifications).execute()

    report = result.value
    assert report.job == "expiration"
    assert report.processed == 2
    assert report.succeeded == 2
    assert report.failed == []
    assert first.status == TenantStatus.expired
    assert second.status == TenantStatus.expired
    # claim, then teardown with follow-ups, per tenant
    assert mock_uow.commit.await_count == 4
    assert notifications.send_expired.await_count == 2


@pytest.mark.asyncio
async def test_expiration_sweep_schedules_follow_ups(
    mock_uow, orchestrator, notifications, make_tenant, track_tenant
):
    tenant = make_tenant(expires_at=utcnow() - timedelta(minutes=1))
    mock_uow.tenants.get_expired_running.return_value = [tenant]
    track_tenant(tenant)

    await ExpireTenantsUseCase(mock_uow, orchestrator, notifications).execute()

    created = [call.args[0] for call in mock_uow.scheduled_emails.create.call_args_list]
    assert [email.kind for email in created] == [
        FollowUpKind.followup_24h,
        FollowUpKind.followup_3d,
    ]
    assert all(email.tenant_id == tenant.id for email in created)
    assert all(email.email == "ceo@acme.com" for email in created)
    assert created[1].send_at - created[0].send_at == timedelta(days=2)
    assert len({email.unsubscribe_token for email in created}) == 2


@pytest.mark.asyncio
async def test_expiration_sweep_continues_after_failure(
    mock_uow, orchestrator, notifications, make_tenant, track_tenant
):
    past = utcnow() - timedelta(minutes=1)
    broken = make_tenant(expires_at=past)
    healthy = make_tenant(subdomain="beta", expires_at=past)
    mock_uow.tenants.get_expired_running.return_value = [broken, healthy]
    track_tenant(broken, healthy)

    async def teardown(tenant, uow):
        if tenant is broken:
            raise RuntimeError("database locked")
        return TeardownReport(tenant_id=tenant.id)

    orchestrator.teardown.side_effect = teardown

    report = (await ExpireTenantsUseCase(mock_uow, orchestrator, notifications).execute()).value

    assert report.succeeded == 1
    assert report.failed == [str(broken.id)]
    assert healthy.status == TenantStatus.expired
    mock_uow.rollback.assert_awaited_once()
    notifications.send_expired.assert_awaited_once()


@pytest.mark.asyncio
async def test_expiration_sweep_skips_tenants_extended_meanwhile(
    mock_uow, orchestrator, notifications, make_tenant, track_tenant
):
    stale = make_tenant(expires_at=utcnow() - timedelta(minutes=1))
    extended = make_tenant(id=stale.id, expires_at=utcnow() + timedelta(hours=24))
    mock_uow.tenants.get_expired_running.return_value = [stale]
    track_tenant(extended)

    report = (await ExpireTenantsUseCase(mock_uow, orchestrator, notifications).execute()).value

    assert report.processed == 1
    assert report.succeeded == 0
    assert extended.status == TenantStatus.running
    mock_uow.rollback.assert_awaited_once()
    mock_uow.commit.assert_not_called()
    orchestrator.teardown.assert_not_called()
    mock_uow.scheduled_emails.create.assert_not_called()
    notifications.send_expired.assert_not_called()


@pytest.mark.asyncio
async def test_expiration_sweep_skips_tenants_terminated_meanwhile(
    mock_uow, orchestrator, notifications, make_tenant, track_tenant
):
    stale = make_tenant(expires_at=utcnow() - timedelta(minutes=1))
    terminated = make_tenant(
        id=stale.id, status=TenantStatus.terminated, expires_at=stale.expires_at
    )
    mock_uow.tenants.get_expired_running.return_value = [stale]
    track_tenant(terminated)

    report = (await ExpireTenantsUseCase(mock_uow, orchestrator, notifications).execute()).value

    assert report.succeeded == 0
    assert terminated.status == TenantStatus.terminated
    orchestrator.teardown.assert_not_called()


@pytest.mark.asyncio
async def test_warning_sweep_warns_once(
    mock_uow, settings, notifications, make_tenant, track_tenant
):
    tenant = make_tenant(expires_at=utcnow() + timedelta(hours=2, minutes=30))
    mock_uow.tenants.get_expiring_between.return_value = [tenant]
    track_tenant(tenant)
    use_case = SendExpirationWarningsUseCase(mock_uow, settings, notifications)

    report = (await use_case.execute()).value

    assert report.succeeded == 1
    assert tenant.expiration_warned is True
    args = notifications.send_expiration_warning.call_args.args
    assert args[2] == "https://acme.demo.example.com"
    assert args[3] == 2

    start, end = mock_uow.tenants.get_expiring_between.call_args.args
    assert end - start == timedelta(hours=1)

    report = (await use_case.execute()).value
    assert report.succeeded == 0
    notifications.send_expiration_warning.assert_awaited_once()


@pytest.mark.asyncio
async def test_warning_sweep_skips_tenant_extended_out_of_window(
    mock_uow, settings, notifications, make_tenant, track_tenant
):
    listed = make_tenant(expires_at=utcnow() + timedelta(hours=2, minutes=30))
    extended = make_tenant(id=listed.id, expires_at=utcnow() + timedelta(hours=26))
    mock_uow.tenants.get_expiring_between.return_value = [listed]
    track_tenant(extended)

    report = (
        await SendExpirationWarningsUseCase(mock_uow, settings, notifications).execute()
    ).value

    assert report.succeeded == 0
    assert extended.expiration_warned is False
    notifications.send_expiration_warning.assert_not_called()


@pytest.mark.asyncio
async def test_cleanup_expires_stale_verifications(mock_uow):
    mock_uow.verifications.expire_stale.return_value = 4

    report = (await CleanupVerificationsUseCase(mock_uow).execute()).value

    assert report.job == "verifications"
    assert report.processed == 4
    mock_uow.commit.assert_awaited_once()


def queue(mock_uow, *emails):
    by_id = {email.id: email for email in emails}
    mock_uow.scheduled_emails.get_due.return_value = list(emails)
    mock_uow.scheduled_emails.get_by_id.side_effect = lambda email_id: by_id.get(email_id)


@pytest.mark.asyncio
async def test_follow_up_sweep_sends_due_emails(
    mock_uow, settings, notifications, make_tenant, track_tenant, make_scheduled_email
):
    tenant = make_tenant(status=TenantStatus.expired)
    track_tenant(tenant)
    scheduled = make_scheduled_email(tenant)
    queue(mock_uow, scheduled)

    report = (
        await SendFollowUpEmailsUseCase(mock_uow, settings, notifications).execute()
    ).value

    assert report.job == "followups"
    assert report.succeeded == 1
    assert scheduled.status == ScheduledEmailStatus.sent
    assert scheduled.processed_at is not None
    notifications.send_follow_up.assert_awaited_once_with(
        "ceo@acme.com",
        "Acme",
        FollowUpKind.followup_24h,
        "https://cms.example.com/demo/upgrade?ref=acme",
        "https://cms.example.com/api/demos/unsubscribe/" + "c" * 64,
    )
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_follow_up_sweep_respects_unsubscribe(
    mock_uow, settings, notifications, make_tenant, track_tenant, make_scheduled_email
):
    tenant = make_tenant(status=TenantStatus.expired)
    track_tenant(tenant)
    scheduled = make_scheduled_email(tenant)
    queue(mock_uow, scheduled)
    mock_uow.scheduled_emails.is_unsubscribed.return_value = True

    report = (
        await SendFollowUpEmailsUseCase(mock_uow, settings, notifications).execute()
    ).value

    assert report.succeeded == 1
    assert scheduled.status == ScheduledEmailStatus.unsubscribed
    notifications.send_follow_up.assert_not_called()


@pytest.mark.asyncio
async def test_follow_up_sweep_skips_converted_tenants(
    mock_uow, settings, notifications, make_tenant, track_tenant, make_scheduled_email
):
    tenant = make_tenant(status=TenantStatus.expired, upgrade_requested=True)
    track_tenant(tenant)
    scheduled = make_scheduled_email(tenant)
    queue(mock_uow, scheduled)

    await SendFollowUpEmailsUseCase(mock_uow, settings, notifications).execute()

    assert scheduled.status == ScheduledEmailStatus.converted
    notifications.send_follow_up.assert_not_called()


@pytest.mark.asyncio
async def test_follow_up_sweep_retries_then_gives_up(
    mock_uow, settings, notifications, make_tenant, track_tenant, make_scheduled_email
):
    tenant = make_tenant(status=TenantStatus.expired)
    track_tenant(tenant)
    scheduled = make_scheduled_email(tenant)
    queue(mock_uow, scheduled)
    notifications.send_follow_up.return_value = False
    use_case = SendFollowUpEmailsUseCase(mock_uow, settings, notifications)

    report = (await use_case.execute()).value

    assert report.failed == [str(scheduled.id)]
    assert scheduled.attempts == 1
    assert scheduled.status == ScheduledEmailStatus.pending
    assert scheduled.processed_at is None

    await use_case.execute()
    await use_case.execute()

    assert scheduled.attempts == 3
    assert scheduled.status == ScheduledEmailStatus.failed
    assert scheduled.processed_at is not None

    await use_case.execute()
    assert notifications.send_follow_up.await_count == 3


@pytest.mark.asyncio
async def test_follow_up_sweep_continues_after_error(
    mock_uow, settings, notifications, make_tenant, track_tenant, make_scheduled_email
):
    tenant = make_tenant(status=TenantStatus.expired)
    track_tenant(tenant)
    broken = make_scheduled_email(tenant)
    healthy = make_scheduled_email(
        tenant, kind=FollowUpKind.followup_3d, unsubscribe_token="d" * 64
    )
    queue(mock_uow, broken, healthy)

    async def update(scheduled):
        if scheduled is broken:
            raise RuntimeError("database locked")
        return scheduled

    mock_uow.scheduled_emails.update.side_effect = update

    report = (
        await SendFollowUpEmailsUseCase(mock_uow, settings, notifications).execute()
    ).value

    assert report.processed == 2
    assert report.succeeded == 1
    assert report.failed == [str(broken.id)]
    assert healthy.status == ScheduledEmailStatus.sent
    mock_uow.rollback.assert_awaited_once()
