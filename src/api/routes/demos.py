"""
Demo API Routes

Public endpoints of the verification gateway plus the operator endpoints
for managing demos. Operator endpoints take the X-Admin-API-Key header and
refuse demo session tokens.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, EmailStr, Field

from libs.result import Error
from src.adapter.services.sweep_scheduler import JobAlreadyRunningError, SweepScheduler
from src.api.error import raise_for_error
from src.api.utils.admin_auth import reject_tenant_sessions, verify_admin_api_key
from src.app.services.demo_settings import DemoSettings
from src.app.services.email_validation_service import EmailValidationService
from src.app.services.notification_service import DemoNotificationService
from src.app.services.provisioning_dispatcher import IProvisioningDispatcher
from src.app.services.provisioning_orchestrator import ProvisioningOrchestrator
from src.app.services.tenant_allocator import TenantAllocator
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.demos import (
    RequestDemoCommand,
    RequestDemoResponse,
    RequestDemoUseCase,
    UnsubscribeResponse,
    UnsubscribeUseCase,
    VerifyDemoUseCase,
)
from src.app.use_cases.lifecycle import (
    AnalyticsSummaryResponse,
    CreateTenantUseCase,
    ExtendTenantResponse,
    ExtendTenantUseCase,
    GetAnalyticsSummaryUseCase,
    GetTenantDetailUseCase,
    ListTenantsUseCase,
    RequestUpgradeUseCase,
    TenantCredentials,
    TenantDetailResponse,
    TenantListResponse,
    TerminateTenantResponse,
    TerminateTenantUseCase,
    TrackFeatureUsageResponse,
    TrackFeatureUsageUseCase,
    UpgradeRequestResponse,
)
from src.app.use_cases.sweeps import SweepReport
from src.depends import (
    get_email_validation_service,
    get_notification_service,
    get_provisioning_dispatcher,
    get_provisioning_orchestrator,
    get_settings,
    get_sweep_scheduler,
    get_tenant_allocator,
    get_unit_of_work,
)

router = APIRouter(prefix="/demos", tags=["Demos"])

operator_only = [Depends(verify_admin_api_key), Depends(reject_tenant_sessions)]


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class DemoRequest(BaseModel):
    """Demo request HTTP payload"""

    email: EmailStr = Field(..., description="Business email address")
    name: str = Field(..., min_length=1, max_length=255, description="Full name")
    company: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    preferred_subdomain: Optional[str] = Field(None, max_length=63)


class UpgradeRequest(BaseModel):
    access_token: str = Field(..., min_length=1, max_length=64)
    notes: Optional[str] = Field(None, max_length=2000)


class TrackRequest(BaseModel):
    access_token: str = Field(..., min_length=1, max_length=64)
    feature: str = Field(..., min_length=1, max_length=100)
    action: str = Field(..., min_length=1, max_length=100)
    metadata: Optional[Dict[str, Any]] = None


class ExtendRequest(BaseModel):
    hours: Optional[int] = Field(None, description="Hours to add, clamped to [1, 72]")


# ============================================================================
# Public endpoints
# ============================================================================


@router.post(
    "/request", status_code=status.HTTP_201_CREATED, response_model=RequestDemoResponse
)
async def request_demo(
    body: DemoRequest,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_validation: EmailValidationService = Depends(get_email_validation_service),
    notifications: DemoNotificationService = Depends(get_notification_service),
):
    """
    Request a demo

    Validates the business email and sends a verification link.

    Raises:
        - 400 Bad Request: INVALID_EMAIL_DOMAIN, UNREACHABLE_DOMAIN
        - 409 Conflict: ACTIVE_DEMO_EXISTS
        - 429 Too Many Requests: RATE_LIMITED
    """
    command = RequestDemoCommand(
        email=body.email,
        name=body.name,
        company=body.company,
        phone=body.phone,
        preferred_subdomain=body.preferred_subdomain,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    result = await RequestDemoUseCase(uow, email_validation, notifications).execute(command)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/verify/{token}", response_model=TenantCredentials)
async def verify_demo(
    token: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: DemoSettings = Depends(get_settings),
    allocator: TenantAllocator = Depends(get_tenant_allocator),
    dispatcher: IProvisioningDispatcher = Depends(get_provisioning_dispatcher),
    notifications: DemoNotificationService = Depends(get_notification_service),
):
    """
    Verify the email link and create the demo

    Raises:
        - 404 Not Found: INVALID_TOKEN
        - 403 Forbidden: VERIFICATION_BLOCKED, TOKEN_EXPIRED
        - 400 Bad Request: PROVISIONING_FAILED
    """
    create_tenant = CreateTenantUseCase(uow, settings, allocator, dispatcher)
    use_case = VerifyDemoUseCase(uow, create_tenant, settings, notifications)
    result = await use_case.execute(token)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/upgrade", response_model=UpgradeRequestResponse)
async def request_upgrade(
    body: UpgradeRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifications: DemoNotificationService = Depends(get_notification_service),
):
    result = await RequestUpgradeUseCase(uow, notifications).execute(
        body.access_token, body.notes
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/unsubscribe/{token}", response_model=UnsubscribeResponse)
async def unsubscribe(token: str, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Stop the follow-up emails of an expired demo

    Raises:
        - 404 Not Found: INVALID_TOKEN
    """
    result = await UnsubscribeUseCase(uow).execute(token)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/track", response_model=TrackFeatureUsageResponse)
async def track_feature_usage(
    body: TrackRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await TrackFeatureUsageUseCase(uow).execute(
        body.access_token, body.feature, body.action, body.metadata
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


# ============================================================================
# Operator endpoints
# ============================================================================


@router.get("", response_model=TenantListResponse, dependencies=operator_only)
async def list_demos(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=255),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: DemoSettings = Depends(get_settings),
):
    result = await ListTenantsUseCase(uow, settings).execute(
        status=status_filter, search=search, page=page, limit=limit
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/analytics", response_model=AnalyticsSummaryResponse, dependencies=operator_only
)
async def analytics_summary(uow: UnitOfWork = Depends(get_unit_of_work)):
    result = await GetAnalyticsSummaryUseCase(uow).execute()
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/sweeps/{job}", response_model=SweepReport, dependencies=operator_only
)
async def run_sweep(
    job: str,
    scheduler: SweepScheduler = Depends(get_sweep_scheduler),
):
    """
    Run a scheduled job now: expiration, warnings, followups or verifications

    Raises:
        - 404 Not Found: unknown job
        - 409 Conflict: the job is already running
    """
    try:
        return await scheduler.run_job(job)
    except KeyError:
        raise_for_error(Error("NOT_FOUND", f"Unknown job: {job}"))
    except JobAlreadyRunningError:
        raise_for_error(Error("CONFLICT", f"Job {job} is already running"))


@router.get(
    "/{tenant_id}", response_model=TenantDetailResponse, dependencies=operator_only
)
async def get_demo(
    tenant_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: DemoSettings = Depends(get_settings),
):
    result = await GetTenantDetailUseCase(uow, settings).execute(tenant_id)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/{tenant_id}/extend", response_model=ExtendTenantResponse, dependencies=operator_only
)
async def extend_demo(
    tenant_id: UUID,
    body: Optional[ExtendRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: DemoSettings = Depends(get_settings),
    notifications: DemoNotificationService = Depends(get_notification_service),
):
    hours = body.hours if body else None
    result = await ExtendTenantUseCase(uow, settings, notifications).execute(tenant_id, hours)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.delete(
    "/{tenant_id}", response_model=TerminateTenantResponse, dependencies=operator_only
)
async def terminate_demo(
    tenant_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    orchestrator: ProvisioningOrchestrator = Depends(get_provisioning_orchestrator),
):
    result = await TerminateTenantUseCase(uow, orchestrator).execute(tenant_id)
    if result.is_err():
        raise_for_error(result.error)
    return result.value
