"""
AccessLog Entity

Append-only record of requests served for a demo.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class AccessLog(SQLModel, table=True):
    """AccessLog entity - immutable, deleted only with the owning tenant."""

    __tablename__ = "tenant_access_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenant_instances.id", nullable=False, index=True)

    path: str = Field(max_length=1024)
    method: str = Field(max_length=10)
    status_code: Optional[int] = Field(default=None)
    response_time_ms: Optional[int] = Field(default=None)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_access_log_tenant_created", "tenant_id", "created_at"),)
