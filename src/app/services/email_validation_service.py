"""
Business email policy

Free and disposable providers are refused, the remaining domains must be
able to receive mail.
"""

import re
from dataclasses import dataclass
from typing import Optional

from src.app.services.mx_resolver import IMxResolver

FREE_EMAIL_PROVIDERS = frozenset(
    [
        # Major free providers
        "gmail.com", "googlemail.com",
        "yahoo.com", "yahoo.co.uk", "yahoo.fr", "yahoo.de", "yahoo.it", "yahoo.es",
        "hotmail.com", "hotmail.co.uk", "hotmail.fr", "hotmail.de", "hotmail.it",
        "outlook.com", "outlook.co.uk", "outlook.fr", "outlook.de",
        "live.com", "live.co.uk", "live.fr", "live.de",
        "msn.com",
        "aol.com", "aol.co.uk",
        "icloud.com", "me.com", "mac.com",
        "protonmail.com", "protonmail.ch", "proton.me", "pm.me",
        "zoho.com", "zohomail.com",
        "mail.com", "email.com",
        "gmx.com", "gmx.net", "gmx.de",
        "yandex.com", "yandex.ru",
        "mail.ru", "inbox.ru", "list.ru", "bk.ru",
        "qq.com", "163.com", "126.com", "sina.com",
        "naver.com", "daum.net",
        # Disposable services
        "tempmail.com", "temp-mail.org", "guerrillamail.com", "guerrillamail.org",
        "mailinator.com", "mailnesia.com", "throwaway.email", "fakeinbox.com",
        "trashmail.com", "trashmail.net", "10minutemail.com", "minutemail.com",
        "dispostable.com", "maildrop.cc", "getnada.com", "mohmal.com",
        "yopmail.com", "yopmail.fr", "sharklasers.com", "grr.la", "guerrillamailblock.com",
        "emailondeck.com", "tempmailaddress.com", "tempail.com", "fakemailgenerator.com",
    ]
)

DISPOSABLE_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^temp", r"temp$", r"^fake", r"fake$", r"^trash", r"trash$",
        r"^throwaway", r"throwaway$", r"^disposable", r"disposable$",
        r"^10minute", r"minute$", r"^guerrilla", r"^mailinator",
    )
)


@dataclass
class EmailValidationResult:
    valid: bool
    domain: str
    code: Optional[str] = None
    reason: Optional[str] = None

    @property
    def is_business_email(self) -> bool:
        return self.valid


def normalize_email(email: str) -> str:
    return email.strip().lower()


def extract_domain(email: str) -> str:
    parts = email.split("@")
    return parts[1] if len(parts) > 1 else ""


def is_disposable_domain(domain: str) -> bool:
    return any(pattern.search(domain) for pattern in DISPOSABLE_PATTERNS)


def is_free_email_provider(email: str) -> bool:
    """Quick check without the MX lookup"""
    domain = extract_domain(normalize_email(email))
    return domain in FREE_EMAIL_PROVIDERS or is_disposable_domain(domain)


class EmailValidationService:
    def __init__(self, mx_resolver: IMxResolver):
        self.mx_resolver = mx_resolver

    async def validate(self, email: str) -> EmailValidationResult:
        domain = extract_domain(normalize_email(email))

        if not domain:
            return EmailValidationResult(
                valid=False,
                domain=domain,
                code="INVALID_EMAIL_DOMAIN",
                reason="Email address has no domain.",
            )

        if domain in FREE_EMAIL_PROVIDERS:
            return EmailValidationResult(
                valid=False,
                domain=domain,
                code="INVALID_EMAIL_DOMAIN",
                reason=(
                    f"Free email providers like {domain} are not accepted. "
                    "Please use your business email address."
                ),
            )

        if is_disposable_domain(domain):
            return EmailValidationResult(
                valid=False,
                domain=domain,
                code="INVALID_EMAIL_DOMAIN",
                reason=(
                    "Disposable email addresses are not accepted. "
                    "Please use your business email address."
                ),
            )

        if not await self.mx_resolver.has_mx(domain):
            return EmailValidationResult(
                valid=False,
                domain=domain,
                code="UNREACHABLE_DOMAIN",
                reason=(
                    "This email domain does not appear to be able to receive emails. "
                    "Please use a valid business email."
                ),
            )

        return EmailValidationResult(valid=True, domain=domain)
