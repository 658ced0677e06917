"""
Demo Access Routes

Used by the demo frontends: status polling while provisioning, and the
auto-login that drops the visitor into the admin panel of their demo.
"""

import json
from datetime import datetime, timedelta
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.api.routes.demos import client_ip
from src.api.utils.jwt import generate_tenant_jwt
from src.app.services.demo_settings import DemoSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.lifecycle import (
    DemoStatusResponse,
    GetDemoStatusUseCase,
    StartDemoSessionUseCase,
)
from src.depends import get_settings, get_unit_of_work
from src.domain.base import utcnow

router = APIRouter(prefix="/demo", tags=["Demo Access"])

ACCESS_COOKIE = "access_token"
DEMO_MODE_COOKIE = "demo_mode"
MIN_SESSION_LIFETIME = timedelta(minutes=1)


@router.get("/{subdomain}/status", response_model=DemoStatusResponse)
async def demo_status(
    subdomain: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: DemoSettings = Depends(get_settings),
):
    """Accepts the subdomain or the demo's access token."""
    result = await GetDemoStatusUseCase(uow, settings).execute(subdomain)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/{subdomain}/session")
async def start_demo_session(
    subdomain: str,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Log into a running demo as its seeded admin

    Sets an httpOnly access_token cookie holding a tenant-tagged JWT and a
    readable demo_mode cookie for the frontend banner.

    Raises:
        - 404 Not Found: DEMO_NOT_FOUND, DEMO_USER_NOT_FOUND
        - 403 Forbidden: DEMO_EXPIRED, DEMO_<STATUS>
    """
    result = await StartDemoSessionUseCase(uow).execute(
        subdomain,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        path=request.url.path,
    )
    if result.is_err():
        raise_for_error(result.error)
    session = result.value

    lifetime = max(
        datetime.fromisoformat(session.expires_at) - utcnow(), MIN_SESSION_LIFETIME
    )
    token = generate_tenant_jwt(
        user_id=UUID(session.user_id),
        tenant_id=UUID(session.tenant_id),
        role=session.role,
        subdomain=session.subdomain,
        expires_delta=lifetime,
    )
    max_age = int(lifetime.total_seconds())

    response.set_cookie(
        ACCESS_COOKIE,
        token,
        max_age=max_age,
        httponly=True,
        secure=ApplicationConfig.COOKIE_SECURE,
        samesite="lax",
    )
    demo_mode = {
        "id": session.tenant_id,
        "subdomain": session.subdomain,
        "name": session.name,
        "adminEmail": session.admin_email,
        "expiresAt": session.expires_at,
        "remainingHours": session.hours_remaining,
    }
    response.set_cookie(
        DEMO_MODE_COOKIE,
        json.dumps(demo_mode, separators=(",", ":")),
        max_age=max_age,
        httponly=False,
        secure=ApplicationConfig.COOKIE_SECURE,
        samesite="lax",
    )

    return {
        "access_token": token,
        "token_type": "bearer",
        "user": {
            "id": session.user_id,
            "email": session.admin_email,
            "role": session.role,
        },
        "demo": demo_mode,
    }
