import logging

from src.app.services.email_sender import IEmailSender

logger = logging.getLogger(__name__)


class LogEmailSender(IEmailSender):
    """Development sender, writes the envelope to the log instead of delivering"""

    async def send(self, to: str, subject: str, html: str) -> None:
        logger.info(f"[EMAIL] To: {to}, Subject: {subject}")
        logger.debug(html)
