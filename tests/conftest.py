"""Test configuration and fixtures for dohping."""

import asyncio

import pytest

from dohping.models import ProbeStatistics
from dohping.statistics import summarize


class FakeProber:
    """Prober returning canned statistics and recording probed addresses."""

    def __init__(self, stats: ProbeStatistics, delay: float = 0.0):
        self.stats = stats
        self.delay = delay
        self.probed: list[str] = []

    async def probe(self, address: str) -> ProbeStatistics:
        self.probed.append(address)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.stats


@pytest.fixture
def twelve_ms_stats() -> ProbeStatistics:
    """8 of 10 probes answered, averaging 12ms."""
    return summarize([10.2, 14.7, 12.1, 12.9, 11.5, 13.3, 12.0, 12.6], sent=10)


@pytest.fixture
def fixed_prober(twelve_ms_stats: ProbeStatistics) -> FakeProber:
    """Prober reporting 12ms mean latency and 20% loss for every address."""
    return FakeProber(twelve_ms_stats)


@pytest.fixture
def slow_prober(twelve_ms_stats: ProbeStatistics) -> FakeProber:
    """Prober that takes one second per address."""
    return FakeProber(twelve_ms_stats, delay=1.0)


def envelope(*answers: tuple[str, int, int, str], **extra) -> dict:
    """Build a DoH JSON response body from (name, type, ttl, data) tuples."""
    body = {"Status": 0, **extra}
    if answers:
        body["Answer"] = [
            {"name": name, "type": rtype, "TTL": ttl, "data": data}
            for name, rtype, ttl, data in answers
        ]
    return body


@pytest.fixture
def example_envelope() -> dict:
    """Single A record answer for example.com."""
    return envelope(("example.com", 1, 300, "93.184.216.34"))
