"""
DoH JSON transport.

Queries a DNS-over-HTTPS resolver through its JSON API
(``application/dns-json``) and parses the answer envelope into
address records.
"""

import logging
from typing import Any, Optional

import dns.rcode
import httpx

from .errors import DecodeError, TransportError
from .models import AddressRecord


logger = logging.getLogger(__name__)

DNS_JSON_MEDIA_TYPE = "application/dns-json"


def _rcode_text(status: int) -> str:
    """Mnemonic for a DNS response code, or the number if out of range."""
    try:
        return dns.rcode.to_text(status)
    except ValueError:
        return str(status)


def parse_envelope(payload: Any) -> list[AddressRecord]:
    """
    Parse a DoH JSON response envelope.

    Expected shape::

        {"Status": 0, "Answer": [{"name": ..., "type": 1, "TTL": 300, "data": ...}],
         "Comment": "..."}

    ``Answer`` and ``Comment`` are optional. A missing answer section is
    an empty result, not an error.

    Args:
        payload: Decoded JSON body

    Returns:
        Address records in the order the resolver listed them

    Raises:
        DecodeError: If the envelope does not have the expected shape
    """
    if not isinstance(payload, dict):
        raise DecodeError(f"response must be a JSON object, got {type(payload).__name__}")

    status = payload.get("Status")
    if not isinstance(status, int) or isinstance(status, bool):
        raise DecodeError("response is missing an integer 'Status' field")

    comment = payload.get("Comment")
    if comment is not None and not isinstance(comment, (str, list)):
        raise DecodeError("response 'Comment' field must be a string or a list")

    if status != dns.rcode.NOERROR:
        logger.debug("resolver returned status %s (%s)", status, _rcode_text(status))
    if comment:
        logger.debug("resolver comment: %s", comment)

    answers = payload.get("Answer")
    if answers is None:
        return []
    if not isinstance(answers, list):
        raise DecodeError("response 'Answer' field must be a list")

    return [AddressRecord.from_answer(answer) for answer in answers]


class DoHJsonClient:
    """DNS over HTTPS client for the JSON API."""

    def __init__(
        self,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the DoH client.

        Args:
            timeout: HTTP request timeout in seconds
            client: Pre-built HTTP client to share (owned by the caller)
        """
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP/2 client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                http2=True,
                timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            )
        return self._client

    async def query(self, hostname: str, endpoint: str) -> list[AddressRecord]:
        """
        Resolve A records for a hostname against one resolver.

        Sends exactly one GET request; there is no retry.

        Args:
            hostname: Name to resolve
            endpoint: Resolver query URL (e.g. https://1.1.1.1/dns-query)

        Returns:
            Address records from the answer section (possibly empty)

        Raises:
            TransportError: On invalid URL, connection, TLS, timeout or HTTP status failure
            DecodeError: If the body is not a valid DoH JSON envelope
        """
        client = await self._get_client()

        try:
            response = await client.get(
                endpoint,
                params={"name": hostname, "type": "A"},
                headers={"Accept": DNS_JSON_MEDIA_TYPE},
            )
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(str(e) or type(e).__name__) from e

        try:
            payload = response.json()
        except (ValueError, RecursionError) as e:
            raise DecodeError(f"invalid JSON body: {e}") from e

        records = parse_envelope(payload)
        logger.debug("%s returned %d answer(s) for %s", endpoint, len(records), hostname)
        return records

    async def close(self):
        """Close the HTTP client."""
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None
