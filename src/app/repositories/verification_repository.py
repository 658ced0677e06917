from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.domain.entities import VerificationRequest


class IVerificationRepository(ABC):
    """Verification request repository interface - application layer"""

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[VerificationRequest]:
        """Get verification request by its token"""
        pass

    @abstractmethod
    async def get_pending_by_email(
        self, email: str, now: datetime
    ) -> Optional[VerificationRequest]:
        """Get the pending, non-expired verification for an email"""
        pass

    @abstractmethod
    async def create(self, verification: VerificationRequest) -> VerificationRequest:
        """Create a new verification request"""
        pass

    @abstractmethod
    async def update(self, verification: VerificationRequest) -> VerificationRequest:
        """Update existing verification request"""
        pass

    @abstractmethod
    async def expire_stale(self, now: datetime) -> int:
        """Flip pending rows past their TTL to expired, return how many"""
        pass
