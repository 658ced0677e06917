"""
Lifecycle Use Case DTOs (Data Transfer Objects)

Command and Response classes for the demo tenant lifecycle.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.domain.entities import TenantInstance


# ============================================================================
# Command DTOs
# ============================================================================


class CreateTenantCommand(BaseModel):
    """Business intent to create a demo tenant"""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    company: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    preferred_subdomain: Optional[str] = Field(default=None, max_length=63)


# ============================================================================
# Response DTOs
# ============================================================================


class TenantCredentials(BaseModel):
    """Credentials of a demo; admin_password is only known at creation"""

    id: str
    subdomain: str
    access_url: str
    admin_email: str
    admin_password: Optional[str] = None
    access_token: str
    expires_at: str
    status: str


class TenantSummary(BaseModel):
    id: str
    subdomain: str
    name: str
    email: str
    company: Optional[str] = None
    status: str
    access_url: str
    hours_remaining: int
    request_count: int
    upgrade_requested: bool
    failure_reason: Optional[str] = None
    created_at: str
    expires_at: str
    last_accessed_at: Optional[str] = None

    @classmethod
    def from_tenant(cls, tenant: TenantInstance, access_url: str, now) -> "TenantSummary":
        return cls(
            id=str(tenant.id),
            subdomain=tenant.subdomain,
            name=tenant.name,
            email=tenant.email,
            company=tenant.company,
            status=tenant.status.value,
            access_url=access_url,
            hours_remaining=tenant.hours_remaining(now),
            request_count=tenant.request_count,
            upgrade_requested=tenant.upgrade_requested,
            failure_reason=tenant.failure_reason,
            created_at=tenant.created_at.isoformat(),
            expires_at=tenant.expires_at.isoformat(),
            last_accessed_at=(
                tenant.last_accessed_at.isoformat() if tenant.last_accessed_at else None
            ),
        )


class TenantListResponse(BaseModel):
    items: List[TenantSummary]
    total: int
    page: int
    limit: int
    pages: int


class AccessLogInfo(BaseModel):
    path: str
    method: str
    status_code: Optional[int] = None
    response_time_ms: Optional[int] = None
    ip_address: Optional[str] = None
    created_at: str


class FeatureUsageInfo(BaseModel):
    feature: str
    action: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: str


class TenantDetailResponse(BaseModel):
    tenant: TenantSummary
    phone: Optional[str] = None
    notes: Optional[str] = None
    resource_port: int
    started_at: Optional[str] = None
    upgrade_requested_at: Optional[str] = None
    access_logs: List[AccessLogInfo]
    feature_usage: List[FeatureUsageInfo]


class ExtendTenantResponse(BaseModel):
    id: str
    status: str
    hours_added: int
    expires_at: str


class TerminateTenantResponse(BaseModel):
    id: str
    status: str
    teardown_failures: List[str] = Field(default_factory=list)


class UpgradeRequestResponse(BaseModel):
    subdomain: str
    upgrade_requested: bool
    message: str


class TrackFeatureUsageResponse(BaseModel):
    recorded: bool = True


class FeatureCount(BaseModel):
    feature: str
    count: int


class DailyCount(BaseModel):
    date: str
    count: int


class AnalyticsSummaryResponse(BaseModel):
    total: int
    by_status: Dict[str, int]
    active: int
    upgrade_requests: int
    conversion_rate: float
    top_features: List[FeatureCount]
    demos_by_day: List[DailyCount]


class DemoStatusResponse(BaseModel):
    id: str
    subdomain: str
    name: str
    status: str
    is_ready: bool
    hours_remaining: int
    expires_at: str
    access_url: str


class DemoSessionResponse(BaseModel):
    """Identity of the seeded admin the session logs in as"""

    tenant_id: str
    user_id: str
    role: str
    subdomain: str
    name: str
    admin_email: str
    expires_at: str
    hours_remaining: int
    session_id: str
