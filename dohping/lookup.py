"""
Per-resolver lookup.

Resolves a hostname against one DoH resolver, then probes every IPv4
address in the answer, one after another.
"""

import logging
from typing import Protocol

from .errors import ResolveError
from .models import AddressRecord, ProbeStatistics, ResolverOutcome, ResultRow


logger = logging.getLogger(__name__)


class ResolverClient(Protocol):
    async def query(self, hostname: str, endpoint: str) -> list[AddressRecord]: ...


class Prober(Protocol):
    async def probe(self, address: str) -> ProbeStatistics: ...


class LookupEngine:
    """Runs resolve-then-probe for a single resolver."""

    def __init__(self, client: ResolverClient, prober: Prober):
        self.client = client
        self.prober = prober

    async def lookup(
        self,
        hostname: str,
        resolver_tag: str,
        endpoint: str,
    ) -> ResolverOutcome:
        """
        Resolve and probe through one resolver.

        A resolver error ends the lookup before any probe is sent.
        Answers whose address is not an IPv4 literal are skipped.

        Args:
            hostname: Name to resolve
            resolver_tag: Identifier attached to every produced row
            endpoint: Resolver query URL

        Returns:
            ResolverOutcome with rows in answer order, or the error
        """
        try:
            records = await self.client.query(hostname, endpoint)
        except ResolveError as e:
            e.resolver_tag = resolver_tag
            return ResolverOutcome(resolver_tag=resolver_tag, error=e)

        rows = []
        for record in records:
            if not record.is_ipv4:
                logger.debug(
                    "%s: skipping %s record %r for %s",
                    resolver_tag,
                    record.type_name,
                    record.address,
                    record.name,
                )
                continue

            stats = await self.prober.probe(record.address)
            rows.append(ResultRow(resolver_tag=resolver_tag, record=record, stats=stats))

        return ResolverOutcome(resolver_tag=resolver_tag, rows=tuple(rows))
