"""
Transport protocol for signed request dispatch.

Defines the seam where concrete HTTP implementations plug in. The client
depends on this protocol, not on httpx directly, so the transport can be
swapped for test fakes without changing signing or decoding logic.

Concrete implementations:
    - HttpxTransport (default, uses httpx.Client)
    - FakeTransport (tests, returns canned responses)

A transport returns every HTTP status as a RawResponse. Only failures
that produced no response at all raise TransportError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import TracebackType
from typing import Protocol, runtime_checkable

import httpx

from silamoney_client.config import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT
from silamoney_client.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    """Undecoded HTTP response.

    Attributes:
        status_code: HTTP status code.
        body: Raw response bytes.
        headers: Header name -> all values, in arrival order.
    """

    status_code: int
    body: bytes
    headers: dict[str, list[str]] = field(default_factory=dict)


@runtime_checkable
class Transport(Protocol):
    """Synchronous transport for signed POST requests."""

    def call(self, path: str, body: bytes, headers: dict[str, str]) -> RawResponse:
        """Send a request body to ``path`` and return the raw response.

        Args:
            path: Endpoint path relative to the transport's base URL.
            body: Serialized request body, sent byte-for-byte.
            headers: Request headers (signatures included).

        Returns:
            RawResponse for any HTTP status.

        Raises:
            TransportError: On connection failure, DNS failure, or timeout.
        """
        ...


def _group_headers(response: httpx.Response) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for name, value in response.headers.multi_items():
        grouped.setdefault(name, []).append(value)
    return grouped


class HttpxTransport:
    """Default transport using httpx.Client.

    Args:
        base_url: Service base URL; paths are appended to it.
        timeout_s: Request timeout in seconds.
        user_agent: User-Agent header value.
        client: Pre-built httpx.Client. When given, the caller owns it
            and ``close()`` leaves it open.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_s)

    @property
    def base_url(self) -> str:
        return self._base_url

    def call(self, path: str, body: bytes, headers: dict[str, str]) -> RawResponse:
        """POST the body to ``{base_url}{path}``."""
        url = f"{self._base_url}{path}"
        logger.debug("POST %s (%d bytes)", url, len(body))

        try:
            response = self._client.post(
                url,
                content=body,
                headers={
                    "Content-Type": "application/json",
                    "User-Agent": self._user_agent,
                    **headers,
                },
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"HTTP request timed out after {self._timeout_s}s",
                error_code="TIMEOUT",
                details={"url": url, "timeout_s": self._timeout_s},
            ) from e
        except httpx.ConnectError as e:
            raise TransportError(
                f"Failed to connect to {url}",
                error_code="CONNECTION_FAILED",
                details={"url": url},
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"HTTP error: {e}",
                error_code="HTTP_ERROR",
                details={"url": url, "error": str(e)},
            ) from e

        logger.debug("POST %s -> HTTP %d", url, response.status_code)
        return RawResponse(
            status_code=response.status_code,
            body=response.content,
            headers=_group_headers(response),
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
