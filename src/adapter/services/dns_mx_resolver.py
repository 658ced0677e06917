import logging

import dns.asyncresolver
import dns.exception
import dns.resolver

from src.app.services.mx_resolver import IMxResolver

logger = logging.getLogger(__name__)


class DnsMxResolver(IMxResolver):
    """MX lookups through dnspython's asyncio resolver"""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    async def has_mx(self, domain: str) -> bool:
        try:
            answer = await dns.asyncresolver.resolve(domain, "MX", lifetime=self.timeout)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return False
        except dns.exception.DNSException as exc:
            # Lookup infrastructure failed, the domain gets the benefit of the doubt
            logger.warning(f"MX lookup failed for {domain}: {exc}")
            return True
        return len(answer) > 0
