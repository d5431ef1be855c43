"""
silamoney-client: sign and dispatch requests to the Sila API.

Public API:

    Client:
        - ``SilaApi``: one method per remote operation, each returning
          an ``ApiResponse``.
        - ``Configuration``, ``Environment``, ``BalanceEnvironment``.

    Protocol core (no I/O):
        - ``build_request()``: validate, canonically encode, and sign a message.
        - ``normalize()``: classify a raw response into an ``ApiResponse``.
        - ``signature_headers()``: the one place signature headers are attached.

    Transport:
        - ``Transport``: injectable protocol.
        - ``HttpxTransport``: default httpx-based transport.

    Errors:
        - ``EncodingError``, ``SigningError``, ``TransportError``,
          ``DecodeError``, ``ConfigurationError`` (all ``SilaError``).
"""

__version__ = "0.1.0"

from silamoney_client.client import SilaApi
from silamoney_client.config import BalanceEnvironment, Configuration, Environment
from silamoney_client.errors import (
    ConfigurationError,
    DecodeError,
    EncodingError,
    SigningError,
    SilaError,
    TransportError,
)
from silamoney_client.headers import (
    AUTH_SIGNATURE,
    USER_SIGNATURE,
    SignatureScope,
    signature_headers,
)
from silamoney_client.messages import SearchFilters, User, Wallet
from silamoney_client.normalizer import ApiResponse, ExpectedShape, ShapeKind, normalize
from silamoney_client.operations import Operation
from silamoney_client.request import SignedRequest, build_request
from silamoney_client.transport import HttpxTransport, RawResponse, Transport
from silamoney_client.wallet import SilaWallet

__all__ = [
    "AUTH_SIGNATURE",
    "USER_SIGNATURE",
    "ApiResponse",
    "BalanceEnvironment",
    "Configuration",
    "ConfigurationError",
    "DecodeError",
    "EncodingError",
    "Environment",
    "ExpectedShape",
    "HttpxTransport",
    "Operation",
    "RawResponse",
    "SearchFilters",
    "ShapeKind",
    "SignatureScope",
    "SignedRequest",
    "SigningError",
    "SilaApi",
    "SilaError",
    "SilaWallet",
    "Transport",
    "TransportError",
    "User",
    "Wallet",
    "build_request",
    "normalize",
    "signature_headers",
]
