from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import ScheduledEmail


class IScheduledEmailRepository(ABC):
    """
    Follow-up email queue interface - application layer

    Rows are written when a demo expires and worked off by the follow-up
    sweep. Opt-outs are kept per address.
    """

    @abstractmethod
    async def get_by_id(self, email_id: UUID) -> Optional[ScheduledEmail]:
        pass

    @abstractmethod
    async def get_by_unsubscribe_token(self, token: str) -> Optional[ScheduledEmail]:
        pass

    @abstractmethod
    async def get_due(self, now: datetime, limit: int = 100) -> List[ScheduledEmail]:
        """Pending emails with send_at <= now, oldest first"""
        pass

    @abstractmethod
    async def create(self, scheduled: ScheduledEmail) -> ScheduledEmail:
        pass

    @abstractmethod
    async def update(self, scheduled: ScheduledEmail) -> ScheduledEmail:
        pass

    @abstractmethod
    async def is_unsubscribed(self, email: str) -> bool:
        pass

    @abstractmethod
    async def add_unsubscribe(self, email: str) -> bool:
        """Record an opt-out, False when the address had already opted out"""
        pass
