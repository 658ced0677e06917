"""
Operator Authentication

Operator endpoints take an admin API key. A request that also carries a
demo session token is refused: demo admins never get operator access.
"""

from typing import Optional

from fastapi import Cookie, Header, status

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError
from src.api.utils.jwt import verify_jwt

DEMO_COOKIE_NAME = "access_token"


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def reject_tenant_sessions(
    authorization: Optional[str] = Header(None),
    access_token: Optional[str] = Cookie(None),
):
    """
    Refuse requests authenticated as a demo tenant.

    Raises:
        ClientError: 403 DEMO_DATA_BLOCKED if a tenant-tagged token is present
    """
    for token in (_bearer_token(authorization), access_token):
        if not token:
            continue
        payload = verify_jwt(token)
        if payload and payload.get("is_tenant"):
            raise ClientError(
                Error(
                    "DEMO_DATA_BLOCKED",
                    "Demo sessions cannot access operator endpoints",
                    details={"suggestion": "Upgrade to a paid plan for full access."},
                ),
                status_code=status.HTTP_403_FORBIDDEN,
            )


async def verify_admin_api_key(x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    Args:
        x_admin_api_key: API key from X-Admin-API-Key header

    Raises:
        ClientError: 401 if key is missing or invalid

    Returns:
        True if valid
    """
    if not x_admin_api_key:
        raise ClientError(
            Error("UNAUTHORIZED", "Admin API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if x_admin_api_key != ApplicationConfig.ADMIN_API_KEY:
        raise ClientError(
            Error("INVALID_API_KEY", "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
