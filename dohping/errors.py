"""
Exception types for dohping.

Resolver-scoped failures derive from ResolveError and never abort
sibling lookups. ConfigurationError is the only fatal error and is
raised before any query is sent.
"""

from typing import Optional


class DohPingError(Exception):
    """Base class for all dohping errors."""


class ConfigurationError(DohPingError):
    """Input configuration is unusable (e.g. empty resolver set)."""


class ResolveError(DohPingError):
    """A lookup against a single resolver failed."""

    kind = "resolve"

    def __init__(self, message: str, resolver_tag: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.resolver_tag = resolver_tag

    def __str__(self) -> str:
        return f"{self.kind} error: {self.message}"


class TransportError(ResolveError):
    """HTTP request to the resolver failed (connection, TLS, timeout, status)."""

    kind = "transport"


class DecodeError(ResolveError):
    """Resolver response is not JSON or not the expected envelope."""

    kind = "decode"


class DeadlineExceeded(ResolveError):
    """The per-resolver deadline expired before the lookup finished."""

    kind = "deadline"


class LookupFailure(ResolveError):
    """The lookup raised something other than a resolver error."""

    kind = "lookup"
