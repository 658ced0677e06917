"""
Demo Control Plane Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class VerificationStatus(str, Enum):
    """Email verification request status"""

    pending = "pending"
    verified = "verified"
    completed = "completed"
    expired = "expired"
    blocked = "blocked"


class TenantStatus(str, Enum):
    """Demo tenant lifecycle status"""

    pending = "pending"
    provisioning = "provisioning"
    running = "running"
    paused = "paused"
    expired = "expired"
    terminated = "terminated"
    failed = "failed"


TERMINAL_TENANT_STATUSES = (
    TenantStatus.expired,
    TenantStatus.terminated,
    TenantStatus.failed,
)

# A tenant in any non-terminal state holds a subdomain, a port and a seat
# under the concurrency cap.
ACTIVE_TENANT_STATUSES = tuple(
    status for status in TenantStatus if status not in TERMINAL_TENANT_STATUSES
)


class ContentStatus(str, Enum):
    """Publication status of CMS content"""

    draft = "draft"
    published = "published"
    archived = "archived"


class ContentUserRole(str, Enum):
    """Role of a CMS user"""

    admin = "admin"
    editor = "editor"
    author = "author"
    viewer = "viewer"


class FollowUpKind(str, Enum):
    """Conversion emails sent after a demo expires"""

    followup_24h = "followup_24h"
    followup_3d = "followup_3d"


class ScheduledEmailStatus(str, Enum):
    """Outcome of a scheduled email"""

    pending = "pending"
    sent = "sent"
    converted = "converted"
    unsubscribed = "unsubscribed"
    failed = "failed"
