"""
Demo notifications

Renders the lifecycle emails and hands them to the configured sender.
Delivery problems are logged and swallowed; no caller ever fails because an
email could not be sent.
"""

import logging
from datetime import datetime
from html import escape
from typing import Optional

from src.app.services.demo_settings import DemoSettings
from src.app.services.email_sender import IEmailSender
from src.domain.entities import FollowUpKind

logger = logging.getLogger(__name__)

PRODUCT_NAME = "NodePress"


def _layout(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; color: #1f2937; max-width: 600px; margin: 0 auto;">
    <h2 style="color: #4f46e5;">{escape(title)}</h2>
    {body}
    <p style="color: #6b7280; font-size: 12px;">The {PRODUCT_NAME} team</p>
  </body>
</html>"""


def _format_time(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC")


class DemoNotificationService:
    def __init__(self, sender: IEmailSender, settings: DemoSettings):
        self.sender = sender
        self.settings = settings

    async def _deliver(self, to: str, subject: str, html: str) -> bool:
        try:
            await self.sender.send(to, subject, html)
        except Exception:
            logger.exception(f"Failed to send '{subject}' to {to}")
            return False
        logger.info(f"Email sent to {to}: {subject}")
        return True

    async def send_verification(self, to: str, name: str, token: str) -> bool:
        url = self.settings.verification_url(token)
        body = f"""
    <p>Hi {escape(name)},</p>
    <p>Confirm your email address to launch your {PRODUCT_NAME} demo.</p>
    <p><a href="{escape(url)}" style="background: #4f46e5; color: #fff; padding: 10px 18px; border-radius: 6px; text-decoration: none;">Verify and start my demo</a></p>
    <p>This link expires in 24 hours. If you did not request a demo you can ignore this email.</p>"""
        return await self._deliver(
            to, f"Verify your email for your {PRODUCT_NAME} demo", _layout("Confirm your email", body)
        )

    async def send_credentials(
        self,
        to: str,
        name: str,
        access_url: str,
        admin_email: str,
        admin_password: str,
        expires_at: datetime,
    ) -> bool:
        body = f"""
    <p>Hi {escape(name)},</p>
    <p>Your demo environment is being prepared and will be ready in a few minutes.</p>
    <ul>
      <li>URL: <a href="{escape(access_url)}">{escape(access_url)}</a></li>
      <li>Admin email: {escape(admin_email)}</li>
      <li>Password: <code>{escape(admin_password)}</code></li>
    </ul>
    <p>Your demo is available until {_format_time(expires_at)}.</p>"""
        return await self._deliver(
            to, f"Your {PRODUCT_NAME} demo is ready!", _layout("Your demo is ready", body)
        )

    async def send_expiration_warning(
        self, to: str, name: str, access_url: str, hours_remaining: int
    ) -> bool:
        body = f"""
    <p>Hi {escape(name)},</p>
    <p>Your demo at <a href="{escape(access_url)}">{escape(access_url)}</a> expires in about {hours_remaining} hours.</p>
    <p>Upgrade now to keep your content and settings.</p>"""
        return await self._deliver(
            to, f"Your {PRODUCT_NAME} demo expires soon", _layout("Your demo expires soon", body)
        )

    async def send_expired(self, to: str, name: str) -> bool:
        body = f"""
    <p>Hi {escape(name)},</p>
    <p>Your demo has expired and its data has been removed.</p>
    <p>Reply to this email if you would like to talk about a paid plan.</p>"""
        return await self._deliver(
            to, f"Your {PRODUCT_NAME} demo has expired", _layout("Your demo has expired", body)
        )

    async def send_extension(
        self, to: str, name: str, hours: int, expires_at: datetime
    ) -> bool:
        body = f"""
    <p>Hi {escape(name)},</p>
    <p>Your demo has been extended by {hours} hours and now runs until {_format_time(expires_at)}.</p>"""
        return await self._deliver(
            to, f"Your {PRODUCT_NAME} demo has been extended", _layout("Demo extended", body)
        )

    async def send_upgrade_request(
        self,
        name: str,
        email: str,
        company: Optional[str],
        subdomain: str,
        notes: Optional[str],
    ) -> bool:
        if not self.settings.sales_email:
            logger.info(f"Upgrade requested for {subdomain}, no sales address configured")
            return False
        body = f"""
    <p>{escape(name)} ({escape(email)}) asked to upgrade demo <strong>{escape(subdomain)}</strong>.</p>
    <ul>
      <li>Company: {escape(company or "-")}</li>
      <li>Notes: {escape(notes or "-")}</li>
    </ul>"""
        return await self._deliver(
            self.settings.sales_email,
            f"Upgrade request from {subdomain}",
            _layout("New upgrade request", body),
        )

    async def send_follow_up(
        self,
        to: str,
        name: str,
        kind: FollowUpKind,
        upgrade_url: str,
        unsubscribe_url: str,
    ) -> bool:
        if kind == FollowUpKind.followup_24h:
            subject = f"Still thinking about {PRODUCT_NAME}?"
            title = "Pick up where you left off"
            pitch = (
                "Your demo ended yesterday. Everything you tried there can be set up "
                "for real, with your own domain and content."
            )
        else:
            subject = f"Your {PRODUCT_NAME} site is one step away"
            title = "Ready when you are"
            pitch = (
                "It has been a few days since your demo ended. Reply to this email "
                "or use the link below and we will help you move to a paid plan."
            )
        body = f"""
    <p>Hi {escape(name)},</p>
    <p>{pitch}</p>
    <p><a href="{escape(upgrade_url)}" style="background: #4f46e5; color: #fff; padding: 10px 18px; border-radius: 6px; text-decoration: none;">Talk to us about upgrading</a></p>
    <p style="font-size: 12px;"><a href="{escape(unsubscribe_url)}">Unsubscribe from demo emails</a></p>"""
        return await self._deliver(to, subject, _layout(title, body))
