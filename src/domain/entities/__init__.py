"""
Demo Control Plane Domain Entities

All domain entities organized by model.
Each entity in its own file, CMS records grouped in content.py.
"""

# Export all enums
from .enums import (
    ACTIVE_TENANT_STATUSES,
    TERMINAL_TENANT_STATUSES,
    ContentStatus,
    ContentUserRole,
    FollowUpKind,
    ScheduledEmailStatus,
    TenantStatus,
    VerificationStatus,
)

# Export all entities
from .verification_request import VerificationRequest
from .tenant_instance import TenantInstance
from .tenant_session import TenantSession
from .access_log import AccessLog
from .feature_usage_event import FeatureUsageEvent
from .login_attempt import LoginAttempt
from .scheduled_email import EmailUnsubscribe, ScheduledEmail
from .content import (
    CONTENT_KINDS,
    TENANT_SCOPED_MODELS,
    ContentUser,
    Course,
    Media,
    Page,
    Post,
    Product,
    TenantScopedRecord,
)

__all__ = [
    # Enums
    "VerificationStatus",
    "TenantStatus",
    "ContentStatus",
    "ContentUserRole",
    "FollowUpKind",
    "ScheduledEmailStatus",
    "ACTIVE_TENANT_STATUSES",
    "TERMINAL_TENANT_STATUSES",
    # Control plane entities
    "VerificationRequest",
    "TenantInstance",
    "TenantSession",
    "AccessLog",
    "FeatureUsageEvent",
    "LoginAttempt",
    "ScheduledEmail",
    "EmailUnsubscribe",
    # Tenant-scoped CMS records
    "TenantScopedRecord",
    "ContentUser",
    "Post",
    "Page",
    "Product",
    "Course",
    "Media",
    "TENANT_SCOPED_MODELS",
    "CONTENT_KINDS",
]
