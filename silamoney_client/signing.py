"""
ECDSA signing primitive for request authentication.

The remote verifier expects Ethereum-style signatures:

    digest    = keccak256(message bytes)
    signature = secp256k1 ECDSA over digest, deterministic (RFC 6979)
    wire form = hex(r, 32 bytes) + hex(s, 32 bytes) + hex(v), v = recovery id + 27

No ``0x`` prefix on the wire. The signature covers the exact bytes that
are sent as the request body; re-serializing the message before signing
the second header would break verification.

Key material enters as a call argument and is never stored or logged.
"""

from __future__ import annotations

from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import keccak

from silamoney_client.errors import SigningError

_PRIVATE_KEY_BYTES = 32
_SIGNATURE_BYTES = 65
_V_OFFSET = 27


def _as_bytes(message: bytes | str) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return message


def strip_hex_prefix(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


def _private_key_bytes(private_key_hex: str) -> bytes:
    if not isinstance(private_key_hex, str):
        raise SigningError(
            "Private key must be a hex string",
            error_code="SIGNING_FAILED",
            details={"type": type(private_key_hex).__name__},
        )
    try:
        raw = bytes.fromhex(strip_hex_prefix(private_key_hex.strip()))
    except ValueError as e:
        raise SigningError(
            "Private key is not valid hex",
            error_code="SIGNING_FAILED",
        ) from e
    if len(raw) != _PRIVATE_KEY_BYTES:
        raise SigningError(
            f"Private key must be {_PRIVATE_KEY_BYTES} bytes, got {len(raw)}",
            error_code="SIGNING_FAILED",
            details={"length": len(raw)},
        )
    return raw


def keccak_digest(message: bytes | str) -> bytes:
    """Keccak-256 digest of the message bytes (strings are UTF-8 encoded)."""
    return keccak(_as_bytes(message))


def sign(message: bytes | str, private_key_hex: str) -> str:
    """Sign message bytes with a secp256k1 private key.

    Args:
        message: Bytes to sign. Strings are UTF-8 encoded first.
        private_key_hex: 32-byte private key as hex, optional ``0x`` prefix.

    Returns:
        130 lowercase hex chars: r || s || v.

    Raises:
        SigningError: If the key is malformed or outside the curve order.
    """
    key = _private_key_bytes(private_key_hex)
    try:
        signed = Account.unsafe_sign_hash(keccak_digest(message), key)
    except (ValueError, TypeError, ValidationError) as e:
        raise SigningError(
            f"Signing failed: {e}",
            error_code="SIGNING_FAILED",
        ) from e
    return f"{signed.r:064x}{signed.s:064x}{signed.v:02x}"


def recover_address(message: bytes | str, signature_hex: str) -> str:
    """Recover the checksum address that produced a signature.

    Raises:
        SigningError: If the signature is malformed.
    """
    try:
        raw = bytes.fromhex(strip_hex_prefix(signature_hex))
    except ValueError as e:
        raise SigningError("Signature is not valid hex", error_code="SIGNING_FAILED") from e
    if len(raw) != _SIGNATURE_BYTES:
        raise SigningError(
            f"Signature must be {_SIGNATURE_BYTES} bytes, got {len(raw)}",
            error_code="SIGNING_FAILED",
        )
    v = raw[-1] - _V_OFFSET if raw[-1] >= _V_OFFSET else raw[-1]
    try:
        signature = keys.Signature(signature_bytes=raw[:-1] + bytes([v]))
        public_key = signature.recover_public_key_from_msg_hash(keccak_digest(message))
    except (BadSignature, ValidationError) as e:
        raise SigningError(f"Signature recovery failed: {e}", error_code="SIGNING_FAILED") from e
    return public_key.to_checksum_address()


def address_of(private_key_hex: str) -> str:
    """Checksum address derived from a private key."""
    try:
        return Account.from_key(_private_key_bytes(private_key_hex)).address
    except (ValueError, ValidationError) as e:
        raise SigningError(f"Invalid private key: {e}", error_code="SIGNING_FAILED") from e
