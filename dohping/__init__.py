"""
dohping - Compare DNS-over-HTTPS resolvers by the addresses they return.

Resolves a hostname through several DoH resolvers concurrently and
measures ICMP latency and loss to every returned IPv4 address.
"""

__version__ = "1.0.0"

from .errors import (
    ConfigurationError,
    DecodeError,
    DeadlineExceeded,
    LookupFailure,
    ResolveError,
    TransportError,
)
from .models import AddressRecord, ProbeConfig, ProbeStatistics, ResolverOutcome, ResultRow
from .lookup import LookupEngine
from .prober import ICMPProber
from .runner import LookupRunner
from .transports import DoHJsonClient

__all__ = [
    "__version__",
    "AddressRecord",
    "ProbeConfig",
    "ProbeStatistics",
    "ResolverOutcome",
    "ResultRow",
    "ConfigurationError",
    "ResolveError",
    "TransportError",
    "DecodeError",
    "DeadlineExceeded",
    "LookupFailure",
    "DoHJsonClient",
    "ICMPProber",
    "LookupEngine",
    "LookupRunner",
]
