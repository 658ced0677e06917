"""
ScheduledEmail and EmailUnsubscribe Entities

Conversion follow-ups queued when a demo expires, and the addresses that
opted out of them.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel, UniqueConstraint

from src.domain.base import utcnow

from .enums import FollowUpKind, ScheduledEmailStatus


class ScheduledEmail(SQLModel, table=True):
    """
    ScheduledEmail entity - one follow-up email due at send_at.

    Business Rules:
    - At most one email of each kind per tenant
    - Skipped (converted) once the tenant asked to upgrade
    - Skipped (unsubscribed) once the address opted out
    - Given up (failed) after repeated delivery failures
    - Outlives the tenant's teardown
    """

    __tablename__ = "scheduled_emails"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenant_instances.id", nullable=False, index=True)

    email: str = Field(max_length=255, index=True)
    name: str = Field(max_length=255)
    subdomain: str = Field(max_length=63)
    kind: FollowUpKind
    unsubscribe_token: str = Field(unique=True, index=True, max_length=64)

    status: ScheduledEmailStatus = Field(default=ScheduledEmailStatus.pending)
    attempts: int = Field(default=0)

    # Timestamps
    send_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    processed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        UniqueConstraint("tenant_id", "kind", name="uq_scheduled_email_tenant_kind"),
        Index("idx_scheduled_email_due", "status", "send_at"),
    )


class EmailUnsubscribe(SQLModel, table=True):
    """Address that no longer receives demo follow-ups"""

    __tablename__ = "email_unsubscribes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
