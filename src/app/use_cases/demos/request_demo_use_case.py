import logging
import secrets
from datetime import timedelta

from libs.result import Error, Result, Return
from src.app.services.email_validation_service import EmailValidationService, normalize_email
from src.app.services.notification_service import DemoNotificationService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import VerificationRequest, VerificationStatus

from .dtos import RequestDemoCommand, RequestDemoResponse

logger = logging.getLogger(__name__)

TOKEN_TTL = timedelta(hours=24)
RESEND_WINDOW = timedelta(hours=1)
MAX_EMAILS_PER_HOUR = 3

CHECK_INBOX_MESSAGE = "Check your email to verify your address and launch your demo."


class RequestDemoUseCase:
    """
    Request Demo Use Case

    Business Logic:
    1. Normalize the email and apply the business email policy
       (INVALID_EMAIL_DOMAIN, UNREACHABLE_DOMAIN)
    2. Refuse when the email already owns an active demo (ACTIVE_DEMO_EXISTS)
    3. Reuse a pending, unexpired verification: at most 3 emails per rolling
       hour (RATE_LIMITED), same token
    4. Otherwise create a verification with a fresh 256-bit token, 24h TTL
    5. Send the verification email
    """

    def __init__(
        self,
        uow: UnitOfWork,
        email_validation: EmailValidationService,
        notifications: DemoNotificationService,
    ):
        self.uow = uow
        self.email_validation = email_validation
        self.notifications = notifications

    async def execute(self, command: RequestDemoCommand) -> Result[RequestDemoResponse]:
        email = normalize_email(command.email)

        validation = await self.email_validation.validate(email)
        if not validation.valid:
            logger.info(f"Rejected demo request for {validation.domain}: {validation.code}")
            return Return.err(
                Error(
                    validation.code,
                    validation.reason,
                    reason=validation.reason,
                    details={"domain": validation.domain, "is_business_email": False},
                )
            )

        async with self.uow:
            active = await self.uow.tenants.get_active_by_email(email)
            if active:
                now = utcnow()
                return Return.err(
                    Error(
                        "ACTIVE_DEMO_EXISTS",
                        "You already have an active demo.",
                        details={
                            "subdomain": active.subdomain,
                            "status": active.status.value,
                            "hours_remaining": active.hours_remaining(now),
                        },
                    )
                )

            now = utcnow()
            verification = await self.uow.verifications.get_pending_by_email(email, now)

            if verification:
                last_sent = verification.last_email_sent_at
                if last_sent and now - last_sent < RESEND_WINDOW:
                    if verification.email_sent_count >= MAX_EMAILS_PER_HOUR:
                        return Return.err(
                            Error(
                                "RATE_LIMITED",
                                "Too many verification emails. Please check your spam "
                                "folder or try again in an hour.",
                            )
                        )
                else:
                    verification.email_sent_count = 0
                verification.email_sent_count += 1
                verification.last_email_sent_at = now
                verification = await self.uow.verifications.update(verification)
            else:
                verification = await self.uow.verifications.create(
                    VerificationRequest(
                        email=email,
                        name=command.name,
                        company=command.company,
                        phone=command.phone,
                        preferred_subdomain=command.preferred_subdomain,
                        token=secrets.token_hex(32),
                        token_expires_at=now + TOKEN_TTL,
                        status=VerificationStatus.pending,
                        email_sent_count=1,
                        last_email_sent_at=now,
                        ip_address=command.ip_address,
                        user_agent=command.user_agent,
                        created_at=now,
                    )
                )

            await self.uow.commit()
            token, name = verification.token, verification.name
            expires_at = verification.token_expires_at

        await self.notifications.send_verification(email, name, token)
        return Return.ok(
            RequestDemoResponse(
                message=CHECK_INBOX_MESSAGE,
                email=email,
                expires_at=expires_at.isoformat(),
            )
        )
