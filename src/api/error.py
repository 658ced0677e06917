from fastapi import status
from libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


ERROR_STATUS = {
    # Validation
    "INVALID_EMAIL_DOMAIN": status.HTTP_400_BAD_REQUEST,
    "UNREACHABLE_DOMAIN": status.HTTP_400_BAD_REQUEST,
    "INVALID_IDENTIFIER": status.HTTP_400_BAD_REQUEST,
    "INVALID_FILTER": status.HTTP_400_BAD_REQUEST,
    "PROVISIONING_FAILED": status.HTTP_400_BAD_REQUEST,
    # Conflict
    "ACTIVE_DEMO_EXISTS": status.HTTP_409_CONFLICT,
    "CONFLICT": status.HTTP_409_CONFLICT,
    # Capacity
    "CAPACITY_EXCEEDED": status.HTTP_503_SERVICE_UNAVAILABLE,
    "NO_AVAILABLE_PORTS": status.HTTP_503_SERVICE_UNAVAILABLE,
    # Rate limit
    "RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
    # Not found
    "INVALID_TOKEN": status.HTTP_404_NOT_FOUND,
    "TENANT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DEMO_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DEMO_USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    # Forbidden
    "VERIFICATION_BLOCKED": status.HTTP_403_FORBIDDEN,
    "TOKEN_EXPIRED": status.HTTP_403_FORBIDDEN,
    "DEMO_EXPIRED": status.HTTP_403_FORBIDDEN,
    "DEMO_DATA_BLOCKED": status.HTTP_403_FORBIDDEN,
}


def raise_for_error(error: Error):
    """Translate a use case error into the matching HTTP exception."""
    status_code = ERROR_STATUS.get(error.code)
    if status_code is None and error.code.startswith("DEMO_"):
        # DEMO_<STATUS> for demos that are not running
        status_code = status.HTTP_403_FORBIDDEN
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)
