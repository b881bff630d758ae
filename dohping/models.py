"""
Data models for dohping.

Defines structured types for resolved address records, probe
statistics, result rows and resolver/probe configuration.
"""

import ipaddress
from dataclasses import dataclass, field
from typing import Any, Optional

import dns.rdatatype

from .errors import ConfigurationError, DecodeError, ResolveError


def _require(answer: dict[str, Any], key: str, kind: type) -> Any:
    """Fetch a typed field from a DoH answer object."""
    if key not in answer:
        raise DecodeError(f"answer is missing field {key!r}")
    value = answer[key]
    # bool is an int subclass; JSON true/false is never a valid number here
    if not isinstance(value, kind) or isinstance(value, bool):
        raise DecodeError(
            f"answer field {key!r} must be {kind.__name__}, got {type(value).__name__}"
        )
    if kind is int and value < 0:
        raise DecodeError(f"answer field {key!r} must be unsigned, got {value}")
    return value


@dataclass(frozen=True)
class AddressRecord:
    """One DNS answer entry as returned by a DoH JSON resolver."""
    name: str
    record_type: int
    ttl: int
    address: str

    @classmethod
    def from_answer(cls, answer: Any) -> "AddressRecord":
        """
        Build a record from a DoH JSON answer object.

        Args:
            answer: Mapping with ``name``, ``type``, ``TTL`` and ``data`` keys

        Returns:
            AddressRecord

        Raises:
            DecodeError: If the object does not have the expected shape
        """
        if not isinstance(answer, dict):
            raise DecodeError(f"answer must be an object, got {type(answer).__name__}")
        return cls(
            name=_require(answer, "name", str),
            record_type=_require(answer, "type", int),
            ttl=_require(answer, "TTL", int),
            address=_require(answer, "data", str),
        )

    @property
    def is_ipv4(self) -> bool:
        """Check if the address field is a valid IPv4 literal."""
        try:
            ipaddress.IPv4Address(self.address)
        except ValueError:
            return False
        return True

    @property
    def type_name(self) -> str:
        """Mnemonic for the record type (e.g. "A", "CNAME")."""
        return dns.rdatatype.to_text(self.record_type)


@dataclass(frozen=True)
class ProbeStatistics:
    """Outcome of probing one address."""
    sent: int
    received: int

    # Latency stats (in milliseconds), None when nothing was received
    mean_latency_ms: Optional[int] = None
    min_latency_ms: Optional[float] = None
    max_latency_ms: Optional[float] = None
    jitter_ms: Optional[float] = None

    @property
    def lost(self) -> int:
        """Number of probes without a reply."""
        return self.sent - self.received

    @property
    def loss_ratio(self) -> float:
        """Fraction of probes lost, in [0, 1]."""
        if self.sent == 0:
            return 0.0
        return self.lost / self.sent

    @property
    def is_reachable(self) -> bool:
        """Check if at least one probe was answered."""
        return self.received > 0


@dataclass(frozen=True)
class ResultRow:
    """One renderable output line."""
    resolver_tag: str
    record: AddressRecord
    stats: ProbeStatistics


@dataclass(frozen=True)
class ResolverOutcome:
    """Result of a lookup against one resolver: rows or an error."""
    resolver_tag: str
    rows: tuple[ResultRow, ...] = ()
    error: Optional[ResolveError] = None

    @property
    def is_success(self) -> bool:
        """Check if the lookup completed without a resolver error."""
        return self.error is None


@dataclass(frozen=True)
class ResolverConfig:
    """Configuration for a DoH JSON resolver."""
    tag: str
    doh_url: str
    description: Optional[str] = None


@dataclass(frozen=True)
class ProbeConfig:
    """Settings for the ICMP echo probe sequence."""
    count: int = 10
    interval: float = 1.0
    timeout: float = 1.0
    payload_size: int = 56
    privileged: bool = False

    def __post_init__(self):
        if self.count < 1:
            raise ConfigurationError(f"probe count must be positive, got {self.count}")
        if self.interval < 0:
            raise ConfigurationError(f"probe interval must not be negative, got {self.interval}")
        if self.timeout <= 0:
            raise ConfigurationError(f"probe timeout must be positive, got {self.timeout}")
        if self.payload_size < 0:
            raise ConfigurationError(
                f"payload size must not be negative, got {self.payload_size}"
            )

    @property
    def worst_case_seconds(self) -> float:
        """Upper bound on the duration of one probe sequence."""
        return self.count * max(self.interval, self.timeout)


@dataclass
class RunSummary:
    """Counters for a finished fan-out run."""
    resolvers: int = 0
    failed: list[str] = field(default_factory=list)
    rows: int = 0

    @property
    def succeeded(self) -> int:
        """Number of resolvers that returned without error."""
        return self.resolvers - len(self.failed)
