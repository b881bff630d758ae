"""
Fan-out runner.

Runs the per-resolver lookup concurrently across every configured
resolver and merges the results:
- One task per resolver, joined with asyncio.gather
- Resolver errors are reported, never raised
- Optional per-resolver deadline
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Callable, Optional, Union
from urllib.parse import urlparse

from .errors import ConfigurationError, DeadlineExceeded, LookupFailure, ResolveError
from .lookup import LookupEngine, Prober, ResolverClient
from .models import ProbeConfig, ResolverConfig, ResolverOutcome, ResultRow, RunSummary
from .prober import ICMPProber
from .transports import DoHJsonClient


logger = logging.getLogger(__name__)

# Type for progress callback
ProgressCallback = Callable[[str, int, int], None]

# Type for resolver error callback
ErrorCallback = Callable[[str, ResolveError], None]

ResolverTable = Union[Mapping[str, str], Iterable[ResolverConfig]]


def _freeze_resolvers(resolvers: ResolverTable) -> tuple[tuple[str, str], ...]:
    """Validate the resolver table and turn it into (tag, endpoint) pairs."""
    if isinstance(resolvers, Mapping):
        pairs = tuple((str(tag), endpoint) for tag, endpoint in resolvers.items())
    else:
        pairs = tuple((r.tag, r.doh_url) for r in resolvers)

    if not pairs:
        raise ConfigurationError("no resolvers configured")

    seen = set()
    for tag, endpoint in pairs:
        if tag in seen:
            raise ConfigurationError(f"duplicate resolver tag: {tag}")
        seen.add(tag)

        parsed = urlparse(endpoint) if isinstance(endpoint, str) else None
        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"resolver {tag} has an invalid endpoint: {endpoint!r}")

    return pairs


def suggested_deadline(config: ProbeConfig, addresses: int, http_timeout: float = 10.0) -> float:
    """
    Deadline covering one DoH query plus probing ``addresses`` records.

    Args:
        config: Probe settings in use
        addresses: Expected number of address records per resolver
        http_timeout: HTTP request timeout in seconds

    Returns:
        Deadline in seconds
    """
    return http_timeout + config.worst_case_seconds * max(addresses, 1)


class LookupRunner:
    """
    Orchestrates resolve-and-probe across all resolvers.

    Lookups share no mutable state; rows are merged only after each
    lookup has finished.
    """

    def __init__(
        self,
        resolvers: ResolverTable,
        probe_config: Optional[ProbeConfig] = None,
        http_timeout: float = 10.0,
        deadline: Optional[float] = None,
        client: Optional[ResolverClient] = None,
        prober: Optional[Prober] = None,
    ):
        """
        Initialize the runner.

        Args:
            resolvers: Mapping of tag to endpoint URL, or ResolverConfig items
            probe_config: ICMP probe settings
            http_timeout: DoH request timeout in seconds
            deadline: Optional per-resolver deadline in seconds
            client: Resolver client (default: DoHJsonClient)
            prober: Address prober (default: ICMPProber)

        Raises:
            ConfigurationError: If the resolver table is empty or invalid
        """
        self.resolvers = _freeze_resolvers(resolvers)
        if deadline is not None and deadline <= 0:
            raise ConfigurationError(f"deadline must be positive, got {deadline}")

        self.deadline = deadline
        self.client = client or DoHJsonClient(timeout=http_timeout)
        self.prober = prober or ICMPProber(probe_config)
        self.engine = LookupEngine(self.client, self.prober)
        self.summary = RunSummary()

    async def _lookup(self, hostname: str, tag: str, endpoint: str) -> ResolverOutcome:
        """
        Run one lookup, applying the deadline if configured.

        Whatever the lookup raises is turned into an outcome for this
        resolver only.
        """
        try:
            if self.deadline is None:
                return await self.engine.lookup(hostname, tag, endpoint)
            return await asyncio.wait_for(
                self.engine.lookup(hostname, tag, endpoint),
                timeout=self.deadline,
            )
        except asyncio.TimeoutError:
            error = DeadlineExceeded(
                f"lookup did not finish within {self.deadline:g}s",
                resolver_tag=tag,
            )
        except ResolveError as e:
            e.resolver_tag = tag
            error = e
        except Exception as e:
            logger.debug("%s lookup raised", tag, exc_info=True)
            error = LookupFailure(f"{type(e).__name__}: {e}", resolver_tag=tag)

        return ResolverOutcome(resolver_tag=tag, error=error)

    async def collect(
        self,
        hostname: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> list[ResolverOutcome]:
        """
        Run all lookups concurrently and wait for every one of them.

        Args:
            hostname: Name to resolve
            progress_callback: Optional callback for progress updates

        Returns:
            One ResolverOutcome per resolver, in collection order
        """
        total = len(self.resolvers)
        done = 0

        async def tracked(tag: str, endpoint: str) -> ResolverOutcome:
            nonlocal done
            outcome = await self._lookup(hostname, tag, endpoint)
            done += 1
            if progress_callback:
                progress_callback(f"{tag} finished", done, total)
            return outcome

        tasks = [tracked(tag, endpoint) for tag, endpoint in self.resolvers]
        return list(await asyncio.gather(*tasks))

    async def run(
        self,
        hostname: str,
        error_callback: Optional[ErrorCallback] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> list[ResultRow]:
        """
        Resolve, probe and merge results from all resolvers.

        Args:
            hostname: Name to resolve
            error_callback: Called with (tag, error) for each failed resolver;
                failures are logged as warnings when omitted
            progress_callback: Optional callback for progress updates

        Returns:
            Rows of all successful resolvers; rows of one resolver keep
            their answer order
        """
        outcomes = await self.collect(hostname, progress_callback)

        merged: list[ResultRow] = []
        summary = RunSummary(resolvers=len(outcomes))

        for outcome in outcomes:
            if outcome.is_success:
                merged.extend(outcome.rows)
                continue

            summary.failed.append(outcome.resolver_tag)
            if error_callback:
                error_callback(outcome.resolver_tag, outcome.error)
            else:
                logger.warning("%s error: %s", outcome.resolver_tag, outcome.error)

        summary.rows = len(merged)
        self.summary = summary
        logger.info(
            "%d/%d resolvers answered, %d rows",
            summary.succeeded,
            summary.resolvers,
            summary.rows,
        )
        return merged

    async def close(self):
        """Clean up resources."""
        if hasattr(self.client, "close"):
            await self.client.close()
