from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.use_cases.lifecycle import StartDemoSessionUseCase
from src.domain.base import utcnow
from src.domain.entities import ContentUser, ContentUserRole, TenantSession, TenantStatus


@pytest.fixture
def users_repo(mock_uow):
    repo = MagicMock()
    repo.list = AsyncMock(return_value=[])
    mock_uow.scoped = MagicMock(return_value=repo)
    return repo


@pytest.fixture
def admin():
    return ContentUser(
        email="ceo@acme.com",
        name="Acme Admin",
        password_hash="$2b$12$hash",
        role=ContentUserRole.admin,
    )


@pytest.mark.asyncio
async def test_session_opens_for_running_demo(mock_uow, users_repo, admin, make_tenant):
    tenant = make_tenant()
    mock_uow.tenants.get_by_subdomain_or_token.return_value = tenant
    users_repo.list.return_value = [admin]

    result = await StartDemoSessionUseCase(mock_uow).execute("acme", ip_address="10.0.0.1")

    assert result.is_ok()
    session = result.value
    assert session.tenant_id == str(tenant.id)
    assert session.user_id == str(admin.id)
    assert session.role == "admin"
    context = mock_uow.scoped.call_args.args[1]
    assert context.tenant_id == tenant.id
    attempt = mock_uow.activity.add_login_attempt.call_args.args[0]
    assert attempt.success is True
    mock_uow.activity.close_active_sessions.assert_awaited_once()
    mock_uow.activity.add_access_log.assert_awaited_once()
    assert tenant.request_count == 1
    assert tenant.last_accessed_at is not None


@pytest.mark.asyncio
async def test_recent_session_from_same_ip_is_extended(mock_uow, users_repo, admin, make_tenant):
    tenant = make_tenant()
    mock_uow.tenants.get_by_subdomain_or_token.return_value = tenant
    users_repo.list.return_value = [admin]
    existing = TenantSession(tenant_id=tenant.id, ip_address="10.0.0.1")
    mock_uow.activity.get_recent_session.return_value = existing

    result = await StartDemoSessionUseCase(mock_uow).execute("acme", ip_address="10.0.0.1")

    assert result.value.session_id == str(existing.id)
    assert existing.pages_viewed == 2
    mock_uow.activity.close_active_sessions.assert_not_called()


@pytest.mark.asyncio
async def test_missing_admin_records_failed_attempt(mock_uow, users_repo, make_tenant):
    tenant = make_tenant()
    mock_uow.tenants.get_by_subdomain_or_token.return_value = tenant

    result = await StartDemoSessionUseCase(mock_uow).execute("acme")

    assert result.error.code == "DEMO_USER_NOT_FOUND"
    attempt = mock_uow.activity.add_login_attempt.call_args.args[0]
    assert attempt.success is False
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,code",
    [
        (TenantStatus.expired, "DEMO_EXPIRED"),
        (TenantStatus.provisioning, "DEMO_PROVISIONING"),
        (TenantStatus.terminated, "DEMO_TERMINATED"),
    ],
)
async def test_non_running_demo_refused(mock_uow, users_repo, make_tenant, status, code):
    mock_uow.tenants.get_by_subdomain_or_token.return_value = make_tenant(status=status)

    result = await StartDemoSessionUseCase(mock_uow).execute("acme")

    assert result.error.code == code
    assert "suggestion" in result.error.details
    mock_uow.activity.add_login_attempt.assert_not_called()


@pytest.mark.asyncio
async def test_running_demo_past_expiry_refused(mock_uow, users_repo, make_tenant):
    mock_uow.tenants.get_by_subdomain_or_token.return_value = make_tenant(
        expires_at=utcnow() - timedelta(seconds=1)
    )

    result = await StartDemoSessionUseCase(mock_uow).execute("acme")

    assert result.error.code == "DEMO_EXPIRED"


@pytest.mark.asyncio
async def test_unknown_demo(mock_uow, users_repo):
    result = await StartDemoSessionUseCase(mock_uow).execute("nobody")

    assert result.error.code == "DEMO_NOT_FOUND"
