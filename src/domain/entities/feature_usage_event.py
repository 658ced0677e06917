"""
FeatureUsageEvent Entity

Which product features a prospect touched during the trial.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow


class FeatureUsageEvent(SQLModel, table=True):
    """
    FeatureUsageEvent entity - fire-and-forget analytics from the demo frontend.

    Business Rules:
    - Immutable
    - Aggregated into the feature histogram of the analytics summary
    - Deleted together with the owning tenant
    """

    __tablename__ = "tenant_feature_usage"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenant_instances.id", nullable=False, index=True)

    feature: str = Field(max_length=100)  # e.g., "posts", "themes"
    action: str = Field(max_length=100)  # e.g., "create", "view"
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_feature_usage_feature", "feature"),
        Index("idx_feature_usage_tenant_created", "tenant_id", "created_at"),
    )
