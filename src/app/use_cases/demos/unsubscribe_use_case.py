import logging

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

from .dtos import UnsubscribeResponse

logger = logging.getLogger(__name__)


class UnsubscribeUseCase:
    """
    Opt an address out of demo follow-up emails.

    The token comes from the link in a follow-up email. Repeating the call
    succeeds without recording anything new.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, token: str) -> Result[UnsubscribeResponse]:
        async with self.uow:
            scheduled = await self.uow.scheduled_emails.get_by_unsubscribe_token(token)
            if scheduled is None:
                return Return.err(Error("INVALID_TOKEN", "Invalid unsubscribe link"))

            email = scheduled.email
            if await self.uow.scheduled_emails.add_unsubscribe(email):
                await self.uow.commit()
                logger.info(f"{email} unsubscribed from demo emails")

            return Return.ok(
                UnsubscribeResponse(
                    email=email,
                    message="You will not receive further emails about your demo.",
                )
            )
