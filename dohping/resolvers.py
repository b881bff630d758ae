"""
Built-in resolver configurations.

Provides DoH endpoints that answer the JSON API
(``application/dns-json``), keyed by the tag shown in the output.
"""

from collections.abc import Iterable
from urllib.parse import urlparse

from .errors import ConfigurationError
from .models import ResolverConfig


# Pre-configured resolver profiles
RESOLVERS: dict[str, ResolverConfig] = {
    "1.1.1.1": ResolverConfig(
        tag="1.1.1.1",
        doh_url="https://1.1.1.1/dns-query",
        description="Cloudflare DNS by IP address",
    ),
    "cloudflare": ResolverConfig(
        tag="cloudflare",
        doh_url="https://cloudflare-dns.com/dns-query",
        description="Cloudflare DNS by hostname",
    ),
    "9.9.9.9": ResolverConfig(
        tag="9.9.9.9",
        doh_url="https://9.9.9.9:5053/dns-query",
        description="Quad9 JSON endpoint with malware blocking",
    ),
    "aliyun": ResolverConfig(
        tag="aliyun",
        doh_url="https://dns.alidns.com/resolve",
        description="Alibaba Cloud public DNS",
    ),
    "google": ResolverConfig(
        tag="google",
        doh_url="https://dns.google/resolve",
        description="Google Public DNS JSON API",
    ),
    "rubyfish": ResolverConfig(
        tag="rubyfish",
        doh_url="https://rubyfish.cn/dns-query",
        description="RubyFish public DoH",
    ),
}

# Default resolvers for quick comparison
DEFAULT_RESOLVERS = ["1.1.1.1", "9.9.9.9", "aliyun"]


def get_resolver(tag: str) -> ResolverConfig:
    """Get a resolver by tag (case-insensitive)."""
    key = tag.lower()
    if key in RESOLVERS:
        return RESOLVERS[key]
    raise ConfigurationError(f"Unknown resolver: {tag}. Available: {list(RESOLVERS.keys())}")


def parse_custom_resolver(spec: str) -> ResolverConfig:
    """
    Create a resolver from a ``TAG=URL`` string.

    A bare URL is accepted too; its host becomes the tag.
    """
    tag, sep, url = spec.partition("=")
    if not sep:
        tag, url = "", spec

    tag, url = tag.strip(), url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Invalid resolver URL: {url!r}")

    return ResolverConfig(
        tag=tag or parsed.hostname or parsed.netloc,
        doh_url=url,
        description=f"Custom resolver at {url}",
    )


def list_resolvers() -> list[str]:
    """List all available resolver tags."""
    return list(RESOLVERS.keys())


def as_endpoint_map(resolvers: Iterable[ResolverConfig]) -> dict[str, str]:
    """Map resolver tags to their endpoint URLs."""
    return {r.tag: r.doh_url for r in resolvers}
