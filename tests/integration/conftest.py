import asyncio
from contextlib import asynccontextmanager
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.demo_settings import DemoSettings
from src.app.services.email_sender import IEmailSender
from src.app.services.mx_resolver import IMxResolver
from src.app.services.notification_service import DemoNotificationService
from src.app.services.provisioner import IInfrastructureProvisioner
from src.app.services.provisioning_dispatcher import IProvisioningDispatcher
from src.app.services.provisioning_orchestrator import ProvisioningOrchestrator
from src.app.services.sample_data_seeder import SampleDataSeeder
from src.app.services.tenant_allocator import TenantAllocator
from src.depends import (
    build_sweep_scheduler,
    get_mx_resolver,
    get_notification_service,
    get_provisioning_dispatcher,
    get_provisioning_orchestrator,
    get_session,
    get_settings,
    get_sweep_scheduler,
    get_tenant_allocator,
    get_unit_of_work,
)
from src.domain.entities import VerificationRequest
from tests.fixtures.json_loader import TestDataLoader

NO_MX_DOMAINS = {"nomx-corp.com"}


class FakeMxResolver(IMxResolver):
    async def has_mx(self, domain: str) -> bool:
        return domain not in NO_MX_DOMAINS


class RecordingEmailSender(IEmailSender):
    def __init__(self):
        self.sent = []

    async def send(self, to: str, subject: str, html: str) -> None:
        self.sent.append({"to": to, "subject": subject, "html": html})


class RecordingDispatcher(IProvisioningDispatcher):
    def __init__(self):
        self.dispatched = []

    def dispatch(self, tenant_id: UUID) -> None:
        self.dispatched.append(tenant_id)


class FakeProvisioner(IInfrastructureProvisioner):
    """Records each infrastructure call instead of touching the host"""

    def __init__(self):
        self.calls = []
        self.fail_on = None
        self.holds = {}

    def hold_at(self, step):
        """Pause the next call of step until released; returns (reached, release)"""
        reached, release = asyncio.Event(), asyncio.Event()
        self.holds[step] = (reached, release)
        return reached, release

    async def _record(self, step, spec):
        self.calls.append((step, spec.subdomain))
        hold = self.holds.pop(step, None)
        if hold is not None:
            reached, release = hold
            reached.set()
            await release.wait()
        if step == self.fail_on:
            raise RuntimeError(f"{step} exploded")

    async def create_database(self, spec):
        await self._record("create_database", spec)

    async def drop_database(self, spec):
        await self._record("drop_database", spec)

    async def write_config(self, spec):
        await self._record("write_config", spec)

    async def remove_config(self, spec):
        await self._record("remove_config", spec)

    async def start_runtime(self, spec):
        await self._record("start_runtime", spec)

    async def stop_runtime(self, spec):
        await self._record("stop_runtime", spec)


@pytest_asyncio.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def uow_scope(db_session):
    @asynccontextmanager
    async def scope():
        yield SqlAlchemyUnitOfWork(db_session)

    return scope


@pytest.fixture
def fresh_uow_scope(engine):
    """Unit of work on a session of its own, like a separate worker or request"""
    Session = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    @asynccontextmanager
    async def scope():
        async with Session() as session:
            yield SqlAlchemyUnitOfWork(session)

    return scope


@pytest.fixture
def demo_settings():
    return DemoSettings.from_config(ApplicationConfig).model_copy(
        update={"base_domain": "demo.example.com", "sales_email": "sales@example.com"}
    )


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def notifications(email_sender, demo_settings):
    return DemoNotificationService(email_sender, demo_settings)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def provisioner():
    return FakeProvisioner()


@pytest.fixture
def orchestrator(uow_scope, provisioner):
    return ProvisioningOrchestrator(uow_scope, provisioner, SampleDataSeeder())


@pytest.fixture
def scheduler(uow_scope, orchestrator, notifications, demo_settings):
    return build_sweep_scheduler(uow_scope, orchestrator, notifications, demo_settings)


@pytest.fixture
def admin_headers():
    return {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY}


@pytest_asyncio.fixture
async def client(
    db_session, demo_settings, notifications, dispatcher, orchestrator, scheduler
):
    from src.api.app import create_app

    app = create_app(ApplicationConfig)
    allocator = TenantAllocator()

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = lambda: demo_settings
    app.dependency_overrides[get_mx_resolver] = lambda: FakeMxResolver()
    app.dependency_overrides[get_notification_service] = lambda: notifications
    app.dependency_overrides[get_tenant_allocator] = lambda: allocator
    app.dependency_overrides[get_provisioning_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_provisioning_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_sweep_scheduler] = lambda: scheduler

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def verify_demo(client, db_session):
    """Request and verify a demo, leaving it pending; returns its credentials"""

    async def verify(payload):
        response = await client.post("/api/demos/request", json=payload)
        assert response.status_code == 201, response.text

        result = await db_session.exec(
            select(VerificationRequest).where(
                VerificationRequest.email == payload["email"].lower()
            )
        )
        token = result.first().token

        response = await client.get(f"/api/demos/verify/{token}")
        assert response.status_code == 200, response.text
        return response.json()

    return verify


@pytest.fixture
def launch_demo(verify_demo, orchestrator):
    """Request, verify and provision a demo; returns its credentials"""

    async def launch(payload):
        credentials = await verify_demo(payload)
        await orchestrator.provision(UUID(credentials["id"]))
        return credentials

    return launch


@pytest.fixture
def open_session(client):
    """Start a demo session and return the bearer token"""

    async def open_(subdomain):
        response = await client.post(f"/api/demo/{subdomain}/session")
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return response.json()["access_token"]

    return open_
