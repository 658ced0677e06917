"""
Infrastructure provisioning interface

The orchestrator drives these steps; adapters talk to Postgres, the file
system and the container or process manager.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import UUID

from src.domain.entities import TenantInstance
from src.domain.identifiers import validate_db_name, validate_subdomain


class InfrastructureError(Exception):
    """Raised by provisioning adapters when a step cannot be completed"""


@dataclass(frozen=True)
class ProvisioningSpec:
    """Validated identifiers of one tenant's infrastructure"""

    tenant_id: UUID
    subdomain: str
    database_name: str
    port: int

    @classmethod
    def from_tenant(cls, tenant: TenantInstance) -> "ProvisioningSpec":
        port = int(tenant.resource_port)
        if not 1 <= port <= 65535:
            raise ValueError(f"Invalid port: {port}")
        return cls(
            tenant_id=tenant.id,
            subdomain=validate_subdomain(tenant.subdomain),
            database_name=validate_db_name(tenant.resource_db_name),
            port=port,
        )


class IInfrastructureProvisioner(ABC):
    """
    Per-tenant infrastructure - application layer

    Every removal step must succeed when the resource is already gone.
    """

    @abstractmethod
    async def create_database(self, spec: ProvisioningSpec) -> None:
        pass

    @abstractmethod
    async def drop_database(self, spec: ProvisioningSpec) -> None:
        pass

    @abstractmethod
    async def write_config(self, spec: ProvisioningSpec) -> None:
        pass

    @abstractmethod
    async def remove_config(self, spec: ProvisioningSpec) -> None:
        pass

    @abstractmethod
    async def start_runtime(self, spec: ProvisioningSpec) -> None:
        pass

    @abstractmethod
    async def stop_runtime(self, spec: ProvisioningSpec) -> None:
        pass
