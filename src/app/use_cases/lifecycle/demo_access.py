from datetime import datetime
from typing import Optional

from libs.result import Error
from src.domain.entities import TenantInstance, TenantStatus

REQUEST_NEW_DEMO = "Request a new demo to keep exploring."
PREPARING = "Your demo is still being prepared, please try again in a minute."
PAUSED = "Your demo is paused, contact us to resume it."


def demo_access_error(tenant: Optional[TenantInstance], now: datetime) -> Optional[Error]:
    """None when the demo may be entered, otherwise the reason it may not."""
    if tenant is None:
        return Error("DEMO_NOT_FOUND", "Demo not found")
    if tenant.status == TenantStatus.expired or (
        tenant.status == TenantStatus.running and tenant.expires_at < now
    ):
        return Error(
            "DEMO_EXPIRED",
            "This demo has expired",
            details={"suggestion": REQUEST_NEW_DEMO},
        )
    if tenant.status != TenantStatus.running:
        if tenant.status == TenantStatus.paused:
            suggestion = PAUSED
        elif tenant.is_active:
            suggestion = PREPARING
        else:
            suggestion = REQUEST_NEW_DEMO
        return Error(
            f"DEMO_{tenant.status.value.upper()}",
            f"This demo is {tenant.status.value}",
            details={"suggestion": suggestion},
        )
    return None
