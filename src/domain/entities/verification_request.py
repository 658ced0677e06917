"""
VerificationRequest Entity

Proof-of-email step that gates demo creation.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import VerificationStatus


class VerificationRequest(SQLModel, table=True):
    """
    VerificationRequest entity - one per (email, pending cycle).

    Business Rules:
    - At most one pending row per email with a non-expired token
    - Token is 256 bits of randomness, hex encoded, single use
    - Expires 24 hours after creation
    - Blocked after more than 5 verification attempts
    - Terminal at completed, expired or blocked
    """

    __tablename__ = "demo_verifications"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    email: str = Field(max_length=255, nullable=False, index=True)
    name: str = Field(max_length=255)
    company: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    preferred_subdomain: Optional[str] = Field(default=None, max_length=63)

    token: str = Field(unique=True, index=True, max_length=64)
    token_expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    status: VerificationStatus = Field(default=VerificationStatus.pending)
    attempt_count: int = Field(default=0)
    email_sent_count: int = Field(default=0)

    linked_tenant_id: Optional[UUID] = Field(default=None)

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    # Timestamps
    last_email_sent_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    last_attempt_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    verified_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_verification_email_status", "email", "status"),
        Index("idx_verification_token_expires_at", "token_expires_at"),
    )
