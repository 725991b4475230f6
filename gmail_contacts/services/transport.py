"""
HTTP transport for the AuthSub and Contacts endpoints.
Everything above this module sees only "GET url with headers -> status + body".
"""

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from gmail_contacts.config import settings
from gmail_contacts.infrastructure.observability.logging import get_logger, log_request
from gmail_contacts.services.errors import TransportError

logger = get_logger(__name__)


@dataclass
class TransportResponse:
    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    def get(self, url: str, headers: Mapping[str, str]) -> TransportResponse: ...


class HttpxTransport:
    """
    Blocking transport over a persistent httpx client.

    Redirects are not followed; a 302 is handed back to the caller as-is.
    """

    def __init__(self, timeout: float | None = None, client: httpx.Client | None = None):
        self._owns_client = client is None
        self._client = client or self._create_client(timeout or settings.HTTP_TIMEOUT)

    def _create_client(self, timeout: float) -> httpx.Client:
        """Create the HTTP client; connections are kept alive between pages."""
        limits = httpx.Limits(max_keepalive_connections=5, max_connections=10)
        return httpx.Client(timeout=httpx.Timeout(timeout), limits=limits, follow_redirects=False)

    def get(self, url: str, headers: Mapping[str, str]) -> TransportResponse:
        started = time.perf_counter()
        try:
            response = self._client.get(url, headers=dict(headers))
        except httpx.RequestError as e:
            logger.error(
                "HTTP request error",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TransportError(f"GET {url} failed: {e}", url=url) from e

        log_request(
            "GET",
            url,
            response.status_code,
            round((time.perf_counter() - started) * 1000, 2),
        )
        return TransportResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """Close the underlying HTTP client if we created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
