"""
ICMP echo prober.

Sends a fixed-count, fixed-interval sequence of echo requests to one
IPv4 address and aggregates round-trip times and loss.

Probing is strictly sequential per address: one request in flight at a
time, one ICMP session per probe call.
"""

import asyncio
import logging
import random
from typing import Callable, Optional

from icmplib import AsyncSocket, ICMPLibError, ICMPRequest, ICMPv4Socket

from .models import ProbeConfig, ProbeStatistics
from .statistics import summarize


logger = logging.getLogger(__name__)

# Returns an open AsyncSocket; the prober closes it
SocketFactory = Callable[[bool], AsyncSocket]


def open_icmp_socket(privileged: bool) -> AsyncSocket:
    """Open an asynchronous ICMPv4 socket."""
    return AsyncSocket(ICMPv4Socket(privileged=privileged))


class IntervalClock:
    """
    Fixed-period tick source.

    The first tick completes immediately; tick ``n`` completes ``n``
    periods after the first. A tick that is already overdue completes
    immediately, so a late send does not shift the later schedule.
    """

    def __init__(self, period: float):
        self.period = period
        self._next: Optional[float] = None

    async def tick(self) -> None:
        """Wait for the next tick."""
        loop = asyncio.get_running_loop()
        now = loop.time()

        if self._next is None:
            self._next = now

        delay = self._next - now
        if delay > 0:
            await asyncio.sleep(delay)

        self._next += self.period


class ICMPProber:
    """Measures latency and loss to an address with ICMP echo requests."""

    def __init__(
        self,
        config: Optional[ProbeConfig] = None,
        socket_factory: Optional[SocketFactory] = None,
    ):
        """
        Initialize the prober.

        Args:
            config: Probe count, interval, timeout and payload settings
            socket_factory: Callable opening the ICMP socket (default: icmplib)
        """
        self.config = config or ProbeConfig()
        self._open_socket = socket_factory or open_icmp_socket

    async def probe(self, address: str) -> ProbeStatistics:
        """
        Probe one address.

        Never raises for network conditions: timeouts, unreachable
        replies and socket errors all count as lost probes.

        Args:
            address: IPv4 address literal

        Returns:
            ProbeStatistics for the sequence
        """
        config = self.config
        identifier = random.getrandbits(16)
        rtts: list[float] = []

        try:
            sock = self._open_socket(config.privileged)
        except ICMPLibError as e:
            logger.warning("cannot open ICMP socket for %s: %s", address, e)
            return summarize(rtts, config.count)

        with sock:
            clock = IntervalClock(config.interval)

            for sequence in range(config.count):
                await clock.tick()

                request = ICMPRequest(
                    destination=address,
                    id=identifier,
                    sequence=sequence,
                    payload_size=config.payload_size,
                )

                try:
                    sock.send(request)
                    reply = await sock.receive(request, config.timeout)
                    reply.raise_for_status()
                except (ICMPLibError, OSError) as e:
                    logger.debug("%s seq=%d lost: %s", address, sequence, e)
                    continue

                rtts.append((reply.time - request.time) * 1000)

        stats = summarize(rtts, config.count)
        logger.debug(
            "%s: %d/%d replies, mean=%s ms",
            address,
            stats.received,
            stats.sent,
            stats.mean_latency_ms,
        )
        return stats
