"""
Canonical JSON: the one encoding shared by request signing and the
balance-response round trip.

A message is encoded exactly once and those bytes are both signed and
sent. Output has sorted keys at every depth and no whitespace.
Non-ASCII text stays literal UTF-8; NaN and infinities are refused.
"""

import json
from typing import Any

from silamoney_client.errors import DecodeError, EncodingError


def canonical_json(obj: Any) -> str:
    """Encode ``obj`` as the compact, key-sorted text that gets signed."""
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def canonical_json_bytes(obj: Any) -> bytes:
    return canonical_json(obj).encode("utf-8")


def encode_message(payload: dict[str, Any]) -> bytes:
    """Encode a message payload to the bytes that get signed and sent.

    Raises:
        EncodingError: If the payload holds values JSON cannot represent.
    """
    try:
        return canonical_json_bytes(payload)
    except (TypeError, ValueError) as e:
        raise EncodingError(
            f"Message cannot be canonically encoded: {e}",
            error_code="ENCODING_FAILED",
            details={"error": str(e)},
        ) from e


def recanonicalize(body: bytes) -> bytes:
    """Decode a JSON body and re-encode it canonically.

    Removes any dependence on the server's key ordering or whitespace.

    Raises:
        DecodeError: If the body is not valid JSON.
    """
    try:
        return canonical_json_bytes(json.loads(body))
    except ValueError as e:
        raise DecodeError(
            "Response was not valid JSON",
            error_code="INVALID_JSON",
            details={"body_preview": body[:200].decode("utf-8", "replace")},
        ) from e
