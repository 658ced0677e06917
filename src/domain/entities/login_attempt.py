"""
LoginAttempt Entity

Auto-login attempts into a demo admin panel.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class LoginAttempt(SQLModel, table=True):
    """LoginAttempt entity - immutable, deleted only with the owning tenant."""

    __tablename__ = "tenant_login_attempts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenant_instances.id", nullable=False, index=True)

    email: str = Field(max_length=255)
    success: bool = Field(default=False)
    failure_reason: Optional[str] = Field(default=None, max_length=255)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
