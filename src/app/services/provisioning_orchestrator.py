"""
Provisioning orchestrator

Brings a pending tenant to running, or to failed with a best-effort
teardown, and tears tenants down on termination and expiry.
"""

import logging
from dataclasses import dataclass, field
from typing import AsyncContextManager, Callable, Dict, List, Optional
from uuid import UUID

from src.app.services.provisioner import IInfrastructureProvisioner, ProvisioningSpec
from src.app.services.sample_data_seeder import SampleDataSeeder
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import TenantInstance, TenantStatus

logger = logging.getLogger(__name__)

UnitOfWorkScope = Callable[[], AsyncContextManager[UnitOfWork]]

FAILURE_REASON_MAX_LENGTH = 1024


@dataclass
class TeardownReport:
    tenant_id: UUID
    failures: List[str] = field(default_factory=list)
    purged: Dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class ProvisioningOrchestrator:
    def __init__(
        self,
        uow_scope: UnitOfWorkScope,
        provisioner: IInfrastructureProvisioner,
        seeder: SampleDataSeeder,
    ):
        self.uow_scope = uow_scope
        self.provisioner = provisioner
        self.seeder = seeder

    async def provision(self, tenant_id: UUID) -> Optional[TenantStatus]:
        """
        Returns the status the tenant ended in, None when nothing was done.

        The tenant may be terminated while its infrastructure is being built.
        The final move to running only happens if the row is still
        provisioning, otherwise everything built so far is torn down and the
        other writer's status is kept.
        """
        async with self.uow_scope() as uow:
            async with uow:
                tenant = await uow.tenants.reload(tenant_id)
                if tenant is None:
                    logger.warning(f"Provisioning skipped, tenant {tenant_id} not found")
                    return None
                if tenant.status != TenantStatus.pending:
                    logger.info(
                        f"Provisioning skipped, tenant {tenant_id} is {tenant.status.value}"
                    )
                    return None

                if not await uow.tenants.transition(
                    tenant_id, TenantStatus.pending, TenantStatus.provisioning
                ):
                    await uow.rollback()
                    logger.info(f"Provisioning skipped, tenant {tenant_id} left pending")
                    return None
                await uow.commit()

                step = "validate"
                try:
                    spec = ProvisioningSpec.from_tenant(tenant)
                    step = "database"
                    await self.provisioner.create_database(spec)
                    step = "config"
                    await self.provisioner.write_config(spec)
                    step = "runtime"
                    await self.provisioner.start_runtime(spec)

                    step = "seed"
                    tenant = await uow.tenants.reload(tenant_id)
                    if tenant is None or tenant.status != TenantStatus.provisioning:
                        return await self._abandon(uow, tenant_id)
                    await self.seeder.seed(uow, tenant)
                    marked = await uow.tenants.transition(
                        tenant_id,
                        TenantStatus.provisioning,
                        TenantStatus.running,
                        started_at=utcnow(),
                    )
                    if not marked:
                        await uow.rollback()
                        return await self._abandon(uow, tenant_id)
                    await uow.commit()
                except Exception as exc:
                    logger.exception(
                        f"Provisioning failed for tenant {tenant_id} at step {step}"
                    )
                    return await self._fail(uow, tenant_id, step, exc)

                logger.info(f"Tenant {tenant_id} ({tenant.subdomain}) is running")
                return TenantStatus.running

    async def _abandon(self, uow: UnitOfWork, tenant_id: UUID) -> Optional[TenantStatus]:
        """Another writer moved the tenant on mid-provisioning: undo our side"""
        tenant = await uow.tenants.reload(tenant_id)
        if tenant is None:
            logger.warning(f"Tenant {tenant_id} disappeared during provisioning")
            return None
        logger.warning(
            f"Tenant {tenant_id} became {tenant.status.value} during provisioning, tearing down"
        )
        report = await self.teardown(tenant, uow)
        if not report.ok:
            logger.warning(f"Cleanup of abandoned tenant {tenant_id} left: {report.failures}")
        await uow.commit()
        return tenant.status

    async def _fail(
        self, uow: UnitOfWork, tenant_id: UUID, step: str, exc: Exception
    ) -> Optional[TenantStatus]:
        await uow.rollback()
        tenant = await uow.tenants.reload(tenant_id)
        if tenant is None:
            return None
        report = await self.teardown(tenant, uow)
        if not report.ok:
            logger.warning(
                f"Cleanup after failed provisioning of {tenant_id} left: {report.failures}"
            )
        marked = await uow.tenants.transition(
            tenant_id,
            TenantStatus.provisioning,
            TenantStatus.failed,
            failure_reason=f"{step}: {exc}"[:FAILURE_REASON_MAX_LENGTH],
        )
        await uow.commit()
        return TenantStatus.failed if marked else tenant.status

    async def teardown(self, tenant: TenantInstance, uow: UnitOfWork) -> TeardownReport:
        """
        Stop the runtime, drop the database, remove the config directory and
        purge every record owned by the tenant.

        Each step runs even when an earlier one failed. Failures are logged
        and collected, never raised. The caller commits.
        """
        report = TeardownReport(tenant_id=tenant.id)

        try:
            spec = ProvisioningSpec.from_tenant(tenant)
        except ValueError as exc:
            logger.error(f"Tenant {tenant.id} has invalid infrastructure identifiers: {exc}")
            report.failures.append(f"validate: {exc}")
            spec = None

        if spec is not None:
            steps = (
                ("runtime", self.provisioner.stop_runtime),
                ("database", self.provisioner.drop_database),
                ("config", self.provisioner.remove_config),
            )
            for step, action in steps:
                try:
                    await action(spec)
                except Exception as exc:
                    logger.warning(f"Teardown step {step} failed for tenant {tenant.id}: {exc}")
                    report.failures.append(f"{step}: {exc}")

        try:
            report.purged = await uow.tenant_data.purge(tenant.id)
            report.purged["activity"] = await uow.activity.delete_by_tenant(tenant.id)
        except Exception as exc:
            logger.exception(f"Teardown purge failed for tenant {tenant.id}")
            report.failures.append(f"purge: {exc}")

        logger.info(f"Teardown of tenant {tenant.id} finished, purged {report.purged}")
        return report
