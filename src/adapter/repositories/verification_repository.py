from datetime import datetime
from typing import Optional

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.verification_repository import IVerificationRepository
from src.domain.entities import VerificationRequest, VerificationStatus


class VerificationRepository(IVerificationRepository):
    """Verification request repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(self, token: str) -> Optional[VerificationRequest]:
        stmt = select(VerificationRequest).where(VerificationRequest.token == token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_pending_by_email(
        self, email: str, now: datetime
    ) -> Optional[VerificationRequest]:
        stmt = (
            select(VerificationRequest)
            .where(
                VerificationRequest.email == email,
                VerificationRequest.status == VerificationStatus.pending,
                VerificationRequest.token_expires_at > now,
            )
            .order_by(VerificationRequest.created_at.desc())
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def create(self, verification: VerificationRequest) -> VerificationRequest:
        self.session.add(verification)
        await self.session.flush()
        await self.session.refresh(verification)
        return verification

    async def update(self, verification: VerificationRequest) -> VerificationRequest:
        self.session.add(verification)
        await self.session.flush()
        await self.session.refresh(verification)
        return verification

    async def expire_stale(self, now: datetime) -> int:
        stmt = (
            update(VerificationRequest)
            .where(
                VerificationRequest.status == VerificationStatus.pending,
                VerificationRequest.token_expires_at < now,
            )
            .values(status=VerificationStatus.expired)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
