from contextlib import asynccontextmanager
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.app.services.demo_settings import DemoSettings
from src.domain.base import utcnow
from src.domain.entities import (
    FollowUpKind,
    ScheduledEmail,
    TenantInstance,
    TenantStatus,
    VerificationRequest,
)


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.verifications = MagicMock()
    uow.verifications.get_by_token = AsyncMock(return_value=None)
    uow.verifications.get_pending_by_email = AsyncMock(return_value=None)
    uow.verifications.create = AsyncMock(side_effect=lambda v: v)
    uow.verifications.update = AsyncMock(side_effect=lambda v: v)
    uow.verifications.expire_stale = AsyncMock(return_value=0)

    uow.tenants = MagicMock()
    uow.tenants.get_by_id = AsyncMock(return_value=None)
    uow.tenants.reload = AsyncMock(return_value=None)
    uow.tenants.transition = AsyncMock(return_value=True)
    uow.tenants.claim_expired = AsyncMock(return_value=True)
    uow.tenants.get_by_access_token = AsyncMock(return_value=None)
    uow.tenants.get_by_subdomain_or_token = AsyncMock(return_value=None)
    uow.tenants.get_active_by_email = AsyncMock(return_value=None)
    uow.tenants.count_active = AsyncMock(return_value=0)
    uow.tenants.subdomain_exists = AsyncMock(return_value=False)
    uow.tenants.get_ports_in_use = AsyncMock(return_value=set())
    uow.tenants.get_expired_running = AsyncMock(return_value=[])
    uow.tenants.get_expiring_between = AsyncMock(return_value=[])
    uow.tenants.create = AsyncMock(side_effect=lambda t: t)
    uow.tenants.update = AsyncMock(side_effect=lambda t: t)

    uow.activity = MagicMock()
    uow.activity.add_access_log = AsyncMock()
    uow.activity.add_feature_usage = AsyncMock()
    uow.activity.add_login_attempt = AsyncMock()
    uow.activity.get_recent_session = AsyncMock(return_value=None)
    uow.activity.close_active_sessions = AsyncMock(return_value=0)
    uow.activity.save_session = AsyncMock(side_effect=lambda s: s)
    uow.activity.delete_by_tenant = AsyncMock(return_value=0)

    uow.tenant_data = MagicMock()
    uow.tenant_data.purge = AsyncMock(return_value={})

    uow.scheduled_emails = MagicMock()
    uow.scheduled_emails.get_by_id = AsyncMock(return_value=None)
    uow.scheduled_emails.get_by_unsubscribe_token = AsyncMock(return_value=None)
    uow.scheduled_emails.get_due = AsyncMock(return_value=[])
    uow.scheduled_emails.create = AsyncMock(side_effect=lambda e: e)
    uow.scheduled_emails.update = AsyncMock(side_effect=lambda e: e)
    uow.scheduled_emails.is_unsubscribed = AsyncMock(return_value=False)
    uow.scheduled_emails.add_unsubscribe = AsyncMock(return_value=True)

    return uow


@pytest.fixture
def uow_scope(mock_uow):
    @asynccontextmanager
    async def scope():
        yield mock_uow

    return scope


@pytest.fixture
def settings():
    return DemoSettings(
        max_concurrent_tenants=20,
        port_range_start=4000,
        port_range_size=1000,
        site_url="https://cms.example.com",
        base_domain="demo.example.com",
        sales_email="sales@example.com",
    )


@pytest.fixture
def notifications():
    service = MagicMock()
    service.send_verification = AsyncMock(return_value=True)
    service.send_credentials = AsyncMock(return_value=True)
    service.send_expiration_warning = AsyncMock(return_value=True)
    service.send_expired = AsyncMock(return_value=True)
    service.send_extension = AsyncMock(return_value=True)
    service.send_upgrade_request = AsyncMock(return_value=True)
    service.send_follow_up = AsyncMock(return_value=True)
    return service


@pytest.fixture
def make_tenant():
    def factory(**overrides):
        now = utcnow()
        values = dict(
            id=uuid4(),
            subdomain="acme",
            name="Acme",
            email="ceo@acme.com",
            resource_port=4000,
            resource_db_name="demo_acme",
            admin_email="ceo@acme.com",
            admin_password_hash="$2b$12$hash",
            access_token="a" * 64,
            status=TenantStatus.running,
            expires_at=now + timedelta(hours=24),
            created_at=now,
        )
        values.update(overrides)
        return TenantInstance(**values)

    return factory


@pytest.fixture
def make_verification():
    def factory(**overrides):
        now = utcnow()
        values = dict(
            id=uuid4(),
            email="ceo@acme.com",
            name="CEO",
            preferred_subdomain="acme",
            token="b" * 64,
            token_expires_at=now + timedelta(hours=24),
            email_sent_count=1,
            last_email_sent_at=now,
            created_at=now,
        )
        values.update(overrides)
        return VerificationRequest(**values)

    return factory


@pytest.fixture
def track_tenant(mock_uow):
    """Back reload/transition/claim_expired with in-memory tenant rows"""

    def register(*tenants):
        rows = {tenant.id: tenant for tenant in tenants}

        async def reload(tenant_id):
            return rows.get(tenant_id)

        async def transition(tenant_id, expected, status, **values):
            tenant = rows.get(tenant_id)
            if tenant is None or tenant.status != expected:
                return False
            tenant.status = status
            for name, value in values.items():
                setattr(tenant, name, value)
            return True

        async def claim_expired(tenant_id, now):
            tenant = rows.get(tenant_id)
            if tenant is None or tenant.status != TenantStatus.running:
                return False
            if tenant.expires_at >= now:
                return False
            tenant.status = TenantStatus.expired
            return True

        mock_uow.tenants.reload.side_effect = reload
        mock_uow.tenants.get_by_id.side_effect = reload
        mock_uow.tenants.transition.side_effect = transition
        mock_uow.tenants.claim_expired.side_effect = claim_expired
        return rows

    return register


@pytest.fixture
def make_scheduled_email():
    def factory(tenant, **overrides):
        values = dict(
            id=uuid4(),
            tenant_id=tenant.id,
            email=tenant.email,
            name=tenant.name,
            subdomain=tenant.subdomain,
            kind=FollowUpKind.followup_24h,
            unsubscribe_token="c" * 64,
            send_at=utcnow() - timedelta(minutes=1),
        )
        values.update(overrides)
        return ScheduledEmail(**values)

    return factory
