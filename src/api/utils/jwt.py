from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from config import ApplicationConfig


def generate_tenant_jwt(
    user_id: UUID,
    tenant_id: UUID,
    role: str,
    subdomain: str,
    expires_delta: timedelta,
) -> str:
    """
    Generate a JWT for a demo session

    Args:
        user_id: Seeded admin of the demo
        tenant_id: Demo tenant the session is confined to
        role: Role of the seeded user
        subdomain: Demo subdomain
        expires_delta: Token lifetime, never past the demo's expiry

    Returns:
        JWT token string (HS256) tagged with is_tenant=True
    """
    now = datetime.now(UTC)
    payload = {
        "user_id": str(user_id),
        "tenant_id": str(tenant_id),
        "role": role,
        "subdomain": subdomain,
        "is_tenant": True,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(
            token, ApplicationConfig.JWT_SECRET, algorithms=["HS256"]
        )
        return payload
    except JWTError:
        return None
