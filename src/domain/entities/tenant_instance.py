"""
TenantInstance Entity

One time-boxed demo environment.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import ACTIVE_TENANT_STATUSES, TERMINAL_TENANT_STATUSES, TenantStatus


class TenantInstance(SQLModel, table=True):
    """
    TenantInstance entity - a demo environment and the slice of data it owns.

    Business Rules:
    - Subdomain is unique across all tenants
    - Resource port is unique among active tenants
    - One active tenant per email
    - Created and mutated only by the lifecycle use cases
    - Admin password is stored as a bcrypt hash, the plaintext is returned once
    """

    __tablename__ = "tenant_instances"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    subdomain: str = Field(max_length=63, unique=True, index=True)
    name: str = Field(max_length=255)
    email: str = Field(max_length=255, index=True)
    company: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)

    resource_port: int = Field(nullable=False)
    resource_db_name: str = Field(max_length=63)

    admin_email: str = Field(max_length=255)
    admin_password_hash: str = Field(max_length=255)
    access_token: str = Field(unique=True, index=True, max_length=64)

    status: TenantStatus = Field(default=TenantStatus.pending)
    failure_reason: Optional[str] = Field(default=None, max_length=1024)

    request_count: int = Field(default=0)
    upgrade_requested: bool = Field(default=False)
    notes: Optional[str] = Field(default=None, max_length=2000)
    expiration_warned: bool = Field(default=False)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    started_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    last_accessed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    upgrade_requested_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    __table_args__ = (
        Index("idx_tenant_instance_status", "status"),
        Index("idx_tenant_instance_status_expires", "status", "expires_at"),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_TENANT_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_TENANT_STATUSES

    def hours_remaining(self, now: datetime) -> int:
        remaining = (self.expires_at - now).total_seconds()
        return max(0, int(remaining // 3600))
