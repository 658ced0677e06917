from unittest.mock import AsyncMock

import dns.exception
import dns.resolver
import pytest

from src.adapter.services import dns_mx_resolver
from src.adapter.services.dns_mx_resolver import DnsMxResolver


@pytest.fixture
def resolve(monkeypatch):
    mock = AsyncMock()
    monkeypatch.setattr(dns_mx_resolver.dns.asyncresolver, "resolve", mock)
    return mock


@pytest.mark.asyncio
async def test_domain_with_mx_records(resolve):
    resolve.return_value = ["10 mx1.acme.com.", "20 mx2.acme.com."]

    assert await DnsMxResolver(timeout=2).has_mx("acme.com") is True
    resolve.assert_awaited_once_with("acme.com", "MX", lifetime=2)


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", [dns.resolver.NXDOMAIN(), dns.resolver.NoAnswer()])
async def test_missing_domain_or_records(resolve, exc):
    resolve.side_effect = exc

    assert await DnsMxResolver().has_mx("nope.acme.com") is False


@pytest.mark.asyncio
async def test_resolver_outage_gives_benefit_of_doubt(resolve):
    resolve.side_effect = dns.exception.Timeout()

    assert await DnsMxResolver().has_mx("acme.com") is True
