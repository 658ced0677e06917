"""
Tenant context

Identifies whose data the current request may see. Built once per request
from the auth claims and passed explicitly to the tenant-scoped repository.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class TenantContext:
    tenant_id: Optional[UUID] = None

    @classmethod
    def production(cls) -> "TenantContext":
        return cls(tenant_id=None)

    @classmethod
    def for_tenant(cls, tenant_id: UUID) -> "TenantContext":
        if tenant_id is None:
            raise ValueError("tenant_id is required for a tenant context")
        return cls(tenant_id=tenant_id)

    @property
    def is_tenant(self) -> bool:
        return self.tenant_id is not None

    def owns(self, record_tenant_id: Optional[UUID]) -> bool:
        """True when a record stamped with record_tenant_id is visible here."""
        return record_tenant_id == self.tenant_id
