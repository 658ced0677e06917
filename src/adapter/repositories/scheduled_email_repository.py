from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.scheduled_email_repository import IScheduledEmailRepository
from src.domain.entities import EmailUnsubscribe, ScheduledEmail, ScheduledEmailStatus


class ScheduledEmailRepository(IScheduledEmailRepository):
    """Follow-up email queue implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, email_id: UUID) -> Optional[ScheduledEmail]:
        return await self.session.get(ScheduledEmail, email_id)

    async def get_by_unsubscribe_token(self, token: str) -> Optional[ScheduledEmail]:
        stmt = select(ScheduledEmail).where(ScheduledEmail.unsubscribe_token == token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_due(self, now: datetime, limit: int = 100) -> List[ScheduledEmail]:
        stmt = (
            select(ScheduledEmail)
            .where(
                ScheduledEmail.status == ScheduledEmailStatus.pending,
                ScheduledEmail.send_at <= now,
            )
            .order_by(ScheduledEmail.send_at.asc())
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, scheduled: ScheduledEmail) -> ScheduledEmail:
        self.session.add(scheduled)
        await self.session.flush()
        await self.session.refresh(scheduled)
        return scheduled

    async def update(self, scheduled: ScheduledEmail) -> ScheduledEmail:
        self.session.add(scheduled)
        await self.session.flush()
        await self.session.refresh(scheduled)
        return scheduled

    async def is_unsubscribed(self, email: str) -> bool:
        stmt = select(EmailUnsubscribe.id).where(EmailUnsubscribe.email == email)
        result = await self.session.exec(stmt)
        return result.first() is not None

    async def add_unsubscribe(self, email: str) -> bool:
        if await self.is_unsubscribed(email):
            return False
        self.session.add(EmailUnsubscribe(email=email))
        await self.session.flush()
        return True
