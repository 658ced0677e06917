import logging
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.provisioning_orchestrator import ProvisioningOrchestrator
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import TenantStatus

from .dtos import TerminateTenantResponse

logger = logging.getLogger(__name__)


class TerminateTenantUseCase:
    """
    Tear a demo down and mark it terminated, whatever state it was in.

    Idempotent: terminating a terminated tenant runs the (no-op) teardown
    again and succeeds.
    """

    def __init__(self, uow: UnitOfWork, orchestrator: ProvisioningOrchestrator):
        self.uow = uow
        self.orchestrator = orchestrator

    async def execute(self, tenant_id: UUID) -> Result[TerminateTenantResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            report = await self.orchestrator.teardown(tenant, self.uow)

            tenant.status = TenantStatus.terminated
            await self.uow.tenants.update(tenant)
            await self.uow.commit()

            logger.info(f"Terminated tenant {tenant_id}")
            return Return.ok(
                TerminateTenantResponse(
                    id=str(tenant_id),
                    status=TenantStatus.terminated.value,
                    teardown_failures=report.failures,
                )
            )
