"""
Demo Lifecycle Use Cases

Creation, extension, termination and the read views of demo tenants.
"""

from .create_tenant_use_case import CreateTenantUseCase, generate_admin_password
from .demo_access import demo_access_error
from .dtos import (
    AnalyticsSummaryResponse,
    CreateTenantCommand,
    DemoSessionResponse,
    DemoStatusResponse,
    ExtendTenantResponse,
    TenantCredentials,
    TenantDetailResponse,
    TenantListResponse,
    TenantSummary,
    TerminateTenantResponse,
    TrackFeatureUsageResponse,
    UpgradeRequestResponse,
)
from .extend_tenant_use_case import ExtendTenantUseCase
from .get_analytics_summary_use_case import GetAnalyticsSummaryUseCase
from .get_demo_status_use_case import GetDemoStatusUseCase
from .get_tenant_detail_use_case import GetTenantDetailUseCase
from .list_tenants_use_case import ListTenantsUseCase
from .request_upgrade_use_case import RequestUpgradeUseCase
from .start_demo_session_use_case import StartDemoSessionUseCase
from .terminate_tenant_use_case import TerminateTenantUseCase
from .track_feature_usage_use_case import TrackFeatureUsageUseCase

__all__ = [
    "CreateTenantUseCase",
    "ExtendTenantUseCase",
    "TerminateTenantUseCase",
    "RequestUpgradeUseCase",
    "TrackFeatureUsageUseCase",
    "ListTenantsUseCase",
    "GetTenantDetailUseCase",
    "GetAnalyticsSummaryUseCase",
    "GetDemoStatusUseCase",
    "StartDemoSessionUseCase",
    "generate_admin_password",
    "demo_access_error",
    "CreateTenantCommand",
    "TenantCredentials",
    "TenantSummary",
    "TenantListResponse",
    "TenantDetailResponse",
    "ExtendTenantResponse",
    "TerminateTenantResponse",
    "UpgradeRequestResponse",
    "TrackFeatureUsageResponse",
    "AnalyticsSummaryResponse",
    "DemoStatusResponse",
    "DemoSessionResponse",
]
