"""
Email Sender Service

Delivers HTML email through AWS SES. boto3 is blocking, so every call runs
in a worker thread.
"""

import asyncio
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.app.services.email_sender import EmailDeliveryError, IEmailSender

logger = logging.getLogger(__name__)


class SesEmailSender(IEmailSender):
    def __init__(
        self,
        sender: str,
        region: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ):
        self.sender = sender
        self.region = region
        self.access_key_id = access_key_id or None
        self.secret_access_key = secret_access_key or None
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = boto3.client(
                "ses",
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                region_name=self.region,
            )
        return self._client

    def _send_sync(self, to: str, subject: str, html: str) -> str:
        response = self._get_client().send_email(
            Source=self.sender,
            Destination={"ToAddresses": [to]},
            Message={
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {"Html": {"Data": html, "Charset": "UTF-8"}},
            },
        )
        return response.get("MessageId", "")

    async def send(self, to: str, subject: str, html: str) -> None:
        try:
            message_id = await asyncio.to_thread(self._send_sync, to, subject, html)
        except (ClientError, BotoCoreError) as exc:
            raise EmailDeliveryError(f"SES rejected message to {to}: {exc}") from exc
        logger.info("Email sent via SES", extra={"recipient": to, "message_id": message_id})
