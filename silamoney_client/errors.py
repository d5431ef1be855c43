"""
Error taxonomy for the Sila client.

Every failure the client surfaces is a SilaError subclass carrying a
machine-readable ``error_code`` and a ``details`` dict for diagnostics.

    - EncodingError: message could not be validated or canonically encoded.
    - SigningError: key malformed, or the user key does not fit the
      operation's signature scope. Raised before any network call.
    - TransportError: the request never produced an HTTP response
      (DNS, connection refused, timeout, TLS).
    - DecodeError: a 200/400 body did not match the declared shape.
    - ConfigurationError: environment or credentials cannot be resolved.

Details never contain private keys or signature values.
"""

from __future__ import annotations

from typing import Any


class SilaError(Exception):
    """Base class for all client errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, error_code={self.error_code!r})"


class EncodingError(SilaError):
    pass


class SigningError(SilaError):
    pass


class TransportError(SilaError):
    pass


class DecodeError(SilaError):
    pass


class ConfigurationError(SilaError):
    pass
