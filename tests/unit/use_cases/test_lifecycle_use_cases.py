from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.provisioning_orchestrator import TeardownReport
from src.app.use_cases.lifecycle import (
    ExtendTenantUseCase,
    GetDemoStatusUseCase,
    RequestUpgradeUseCase,
    TerminateTenantUseCase,
    TrackFeatureUsageUseCase,
)
from src.domain.base import utcnow
from src.domain.entities import TenantStatus


@pytest.fixture
def orchestrator():
    orchestrator = MagicMock()
    orchestrator.teardown = AsyncMock(
        side_effect=lambda tenant, uow: TeardownReport(tenant_id=tenant.id)
    )
    return orchestrator


@pytest.mark.asyncio
async def test_extend_defaults_to_24_hours(mock_uow, settings, notifications, make_tenant):
    tenant = make_tenant(expiration_warned=True)
    original = tenant.expires_at
    mock_uow.tenants.get_by_id.return_value = tenant

    result = await ExtendTenantUseCase(mock_uow, settings, notifications).execute(tenant.id)

    assert result.value.hours_added == 24
    assert tenant.expires_at == original + timedelta(hours=24)
    assert tenant.expiration_warned is False
    notifications.send_extension.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("requested,added", [(500, 72), (0, 1), (-5, 1), (12, 12)])
async def test_extend_clamps_hours(mock_uow, settings, notifications, make_tenant, requested, added):
    tenant = make_tenant()
    mock_uow.tenants.get_by_id.return_value = tenant

    result = await ExtendTenantUseCase(mock_uow, settings, notifications).execute(
        tenant.id, requested
    )

    assert result.value.hours_added == added


@pytest.mark.asyncio
async def test_extend_resumes_paused_but_not_terminal(mock_uow, settings, notifications, make_tenant):
    paused = make_tenant(status=TenantStatus.paused)
    mock_uow.tenants.get_by_id.return_value = paused
    await ExtendTenantUseCase(mock_uow, settings, notifications).execute(paused.id)
    assert paused.status == TenantStatus.running

    expired = make_tenant(status=TenantStatus.expired)
    mock_uow.tenants.get_by_id.return_value = expired
    await ExtendTenantUseCase(mock_uow, settings, notifications).execute(expired.id)
    assert expired.status == TenantStatus.expired


@pytest.mark.asyncio
async def test_extend_unknown_tenant(mock_uow, settings, notifications, make_tenant):
    result = await ExtendTenantUseCase(mock_uow, settings, notifications).execute(
        make_tenant().id
    )

    assert result.error.code == "TENANT_NOT_FOUND"
    notifications.send_extension.assert_not_called()


@pytest.mark.asyncio
async def test_terminate_tears_down_and_marks_terminated(mock_uow, orchestrator, make_tenant):
    tenant = make_tenant()
    mock_uow.tenants.get_by_id.return_value = tenant

    result = await TerminateTenantUseCase(mock_uow, orchestrator).execute(tenant.id)

    assert result.value.status == "terminated"
    assert tenant.status == TenantStatus.terminated
    orchestrator.teardown.assert_awaited_once_with(tenant, mock_uow)
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_terminate_is_idempotent(mock_uow, orchestrator, make_tenant):
    tenant = make_tenant(status=TenantStatus.terminated)
    mock_uow.tenants.get_by_id.return_value = tenant

    result = await TerminateTenantUseCase(mock_uow, orchestrator).execute(tenant.id)

    assert result.is_ok()
    assert tenant.status == TenantStatus.terminated


@pytest.mark.asyncio
async def test_upgrade_request_flags_tenant_and_notifies_sales(mock_uow, notifications, make_tenant):
    tenant = make_tenant()
    mock_uow.tenants.get_by_access_token.return_value = tenant

    result = await RequestUpgradeUseCase(mock_uow, notifications).execute(
        tenant.access_token, "Need 10 seats"
    )

    assert result.is_ok()
    assert tenant.upgrade_requested is True
    assert tenant.upgrade_requested_at is not None
    notifications.send_upgrade_request.assert_awaited_once()


@pytest.mark.asyncio
async def test_upgrade_request_unknown_token(mock_uow, notifications):
    result = await RequestUpgradeUseCase(mock_uow, notifications).execute("x" * 64, None)

    assert result.is_err()
    notifications.send_upgrade_request.assert_not_called()


@pytest.mark.asyncio
async def test_track_feature_usage_records_event(mock_uow, make_tenant):
    tenant = make_tenant()
    mock_uow.tenants.get_by_access_token.return_value = tenant

    result = await TrackFeatureUsageUseCase(mock_uow).execute(
        tenant.access_token, "editor", "open", {"page": "home"}
    )

    assert result.is_ok()
    event = mock_uow.activity.add_feature_usage.call_args.args[0]
    assert event.tenant_id == tenant.id
    assert event.feature == "editor"


@pytest.mark.asyncio
async def test_demo_status_for_expired_running_tenant(mock_uow, settings, make_tenant):
    tenant = make_tenant(expires_at=utcnow() - timedelta(minutes=5))
    mock_uow.tenants.get_by_subdomain_or_token.return_value = tenant

    result = await GetDemoStatusUseCase(mock_uow, settings).execute("acme")

    assert result.value.is_ready is False
    assert result.value.hours_remaining == 0


@pytest.mark.asyncio
async def test_demo_status_for_running_tenant(mock_uow, settings, make_tenant):
    tenant = make_tenant()
    mock_uow.tenants.get_by_subdomain_or_token.return_value = tenant

    result = await GetDemoStatusUseCase(mock_uow, settings).execute("acme")

    assert result.value.is_ready is True
    assert result.value.access_url == "https://acme.demo.example.com"
