"""
Signature header plumbing shared by every operation.

The attachment rule lives here and nowhere else:

    NONE          -> no signature headers (public lookups)
    APP           -> {authsignature}
    APP_AND_USER  -> {authsignature, usersignature}

Both signatures are computed over the same body bytes.
"""

from __future__ import annotations

from enum import StrEnum

from silamoney_client.errors import SigningError
from silamoney_client.signing import sign

# Literal wire names; the server matches them exactly.
AUTH_SIGNATURE = "authsignature"
USER_SIGNATURE = "usersignature"


class SignatureScope(StrEnum):
    """Which principals sign an operation's request body."""

    NONE = "NONE"
    APP = "APP"
    APP_AND_USER = "APP_AND_USER"

    @property
    def user_scoped(self) -> bool:
        return self is SignatureScope.APP_AND_USER


def signature_headers(
    body: bytes,
    scope: SignatureScope,
    app_private_key: str,
    user_private_key: str | None = None,
) -> dict[str, str]:
    """Compute the signature headers for a serialized request body.

    Args:
        body: Canonical request body, exactly as it will be sent.
        scope: The operation's signature scope.
        app_private_key: Application private key (hex).
        user_private_key: User private key (hex). Required for
            APP_AND_USER, rejected otherwise.

    Returns:
        Header name -> signature hex.

    Raises:
        SigningError: If the user key does not fit the scope, or a key
            is malformed.
    """
    if scope.user_scoped and not user_private_key:
        raise SigningError(
            "User private key is required for user-scoped operations",
            error_code="USER_KEY_REQUIRED",
        )
    if not scope.user_scoped and user_private_key is not None:
        raise SigningError(
            f"User private key is not accepted for {scope} operations",
            error_code="USER_KEY_UNEXPECTED",
            details={"scope": str(scope)},
        )

    if scope is SignatureScope.NONE:
        return {}

    headers = {AUTH_SIGNATURE: sign(body, app_private_key)}
    if user_private_key is not None:
        headers[USER_SIGNATURE] = sign(body, user_private_key)
    return headers
