"""
Scheduled Sweep Use Cases

Periodic jobs that expire demos, warn before expiry, send the conversion
follow-ups of expired demos and clean up stale verification requests.
"""

from .cleanup_verifications_use_case import CleanupVerificationsUseCase
from .dtos import SweepReport
from .expire_tenants_use_case import ExpireTenantsUseCase
from .follow_ups import FOLLOW_UP_DELAYS, schedule_follow_ups
from .send_expiration_warnings_use_case import SendExpirationWarningsUseCase
from .send_follow_ups_use_case import SendFollowUpEmailsUseCase

__all__ = [
    "ExpireTenantsUseCase",
    "SendExpirationWarningsUseCase",
    "SendFollowUpEmailsUseCase",
    "CleanupVerificationsUseCase",
    "SweepReport",
    "FOLLOW_UP_DELAYS",
    "schedule_follow_ups",
]
