"""
Request builder: message -> SignedRequest.

Pure transform, no I/O. The message is validated, checked for the right
identity header, serialized once, and signed over those exact bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from silamoney_client.canonical_json import encode_message
from silamoney_client.errors import EncodingError
from silamoney_client.headers import SignatureScope, signature_headers
from silamoney_client.messages import Message, message_header, validate_message

if TYPE_CHECKING:
    from silamoney_client.operations import Operation


@dataclass(frozen=True)
class SignedRequest:
    """A serialized, signed request ready for a transport."""

    path: str
    body: bytes
    headers: dict[str, str]


def _check_identity(operation: Operation, message: Message, app_handle: str) -> None:
    header = message_header(message)
    if operation.scope is SignatureScope.NONE:
        return
    if header is None:
        raise EncodingError(
            f"{operation.name} requires an identity header",
            error_code="INVALID_MESSAGE",
            details={"operation": operation.name},
        )
    if header.auth_handle != app_handle:
        raise EncodingError(
            f"Header auth_handle {header.auth_handle!r} does not match app handle {app_handle!r}",
            error_code="INVALID_MESSAGE",
            details={"operation": operation.name},
        )
    if operation.scope.user_scoped and not header.user_handle:
        raise EncodingError(
            f"{operation.name} requires a user_handle in the header",
            error_code="INVALID_MESSAGE",
            details={"operation": operation.name},
        )


def build_request(
    operation: Operation,
    message: Message,
    app_handle: str,
    app_private_key: str,
    user_private_key: str | None = None,
) -> SignedRequest:
    """Validate, serialize and sign a message for an operation.

    Raises:
        EncodingError: If the message is invalid or cannot be encoded.
        SigningError: If a key is malformed or the user key does not fit
            the operation's scope.
    """
    _check_identity(operation, message, app_handle)
    body = encode_message(validate_message(message))
    headers = signature_headers(body, operation.scope, app_private_key, user_private_key)
    return SignedRequest(path=operation.path, body=body, headers=headers)
