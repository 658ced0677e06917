"""
TenantSession Entity

Browsing session inside a demo, used by analytics.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class TenantSession(SQLModel, table=True):
    """
    TenantSession entity - one visit to a demo environment.

    Business Rules:
    - A new visit from the same IP within 30 minutes extends the session
    - Otherwise earlier active sessions are closed and a new one starts
    - Deleted together with the owning tenant
    """

    __tablename__ = "tenant_sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenant_instances.id", nullable=False, index=True)

    ip_address: str = Field(max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    pages_viewed: int = Field(default=1)
    actions_count: int = Field(default=1)
    is_active: bool = Field(default=True)
    duration_seconds: Optional[int] = Field(default=None)

    # Timestamps
    started_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    ended_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_tenant_session_lookup", "tenant_id", "ip_address", "is_active"),
    )
