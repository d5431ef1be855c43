"""
Typed response records and their strict decoders.

Each record has a ``from_dict`` classmethod that checks required fields
and JSON types and raises DecodeError(SHAPE_MISMATCH) instead of filling
in defaults. Optional fields may be absent or null.

BaseResponse doubles as the canonical error payload: every endpoint
reports HTTP 400 failures as {"status", "message", "reference"}.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from silamoney_client.errors import DecodeError

_MISSING = object()


def freeze_json(value: Any) -> Any:
    """Read-only view of decoded JSON: objects become mapping proxies, arrays tuples."""
    if isinstance(value, dict):
        return MappingProxyType({k: freeze_json(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(freeze_json(v) for v in value)
    return value


def _require_object(data: Any, record: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(
            f"{record}: expected JSON object, got {type(data).__name__}",
            error_code="SHAPE_MISMATCH",
            details={"record": record},
        )
    return data


def _field(
    data: dict[str, Any],
    name: str,
    types: type | tuple[type, ...],
    record: str,
    *,
    required: bool = True,
) -> Any:
    value = data.get(name, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise DecodeError(
                f"{record}: missing required field {name!r}",
                error_code="SHAPE_MISMATCH",
                details={"record": record, "field": name},
            )
        return None
    allowed = types if isinstance(types, tuple) else (types,)
    # bool is an int subclass
    if not isinstance(value, allowed) or (isinstance(value, bool) and bool not in allowed):
        raise DecodeError(
            f"{record}: field {name!r} has type {type(value).__name__}",
            error_code="SHAPE_MISMATCH",
            details={"record": record, "field": name},
        )
    return value


def decode_list(data: Any, decoder: Any, record: str) -> list[Any]:
    """Decode a JSON array element-by-element, preserving order."""
    if not isinstance(data, list):
        raise DecodeError(
            f"{record}: expected JSON array, got {type(data).__name__}",
            error_code="SHAPE_MISMATCH",
            details={"record": record},
        )
    return [decoder(item) for item in data]


# =========================================================================
# Records
# =========================================================================


@dataclass(frozen=True)
class BaseResponse:
    reference: str
    message: str
    status: str
    validation_details: Mapping[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> BaseResponse:
        d = _require_object(data, "BaseResponse")
        return cls(
            reference=_field(d, "reference", str, "BaseResponse"),
            message=_field(d, "message", str, "BaseResponse"),
            status=_field(d, "status", str, "BaseResponse"),
            validation_details=freeze_json(
                _field(d, "validation_details", dict, "BaseResponse", required=False)
            ),
        )


@dataclass(frozen=True)
class LinkAccountResponse:
    reference: str
    message: str
    status: str
    account_name: str | None = None
    selected_account_status: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> LinkAccountResponse:
        d = _require_object(data, "LinkAccountResponse")
        r = "LinkAccountResponse"
        return cls(
            reference=_field(d, "reference", str, r),
            message=_field(d, "message", str, r),
            status=_field(d, "status", str, r),
            account_name=_field(d, "account_name", str, r, required=False),
            selected_account_status=_field(d, "selected_account_status", str, r, required=False),
        )


@dataclass(frozen=True)
class PlaidSamedayAuthResponse:
    reference: str
    message: str
    status: str
    public_token: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PlaidSamedayAuthResponse:
        d = _require_object(data, "PlaidSamedayAuthResponse")
        r = "PlaidSamedayAuthResponse"
        return cls(
            reference=_field(d, "reference", str, r),
            message=_field(d, "message", str, r),
            status=_field(d, "status", str, r),
            public_token=_field(d, "public_token", str, r, required=False),
        )


@dataclass(frozen=True)
class Account:
    """A bank account linked to a user handle."""

    account_number: str
    account_name: str
    account_type: str
    account_status: str
    active: bool
    routing_number: str | None = None
    account_link_status: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Account:
        d = _require_object(data, "Account")
        return cls(
            account_number=_field(d, "account_number", str, "Account"),
            account_name=_field(d, "account_name", str, "Account"),
            account_type=_field(d, "account_type", str, "Account"),
            account_status=_field(d, "account_status", str, "Account"),
            active=_field(d, "active", bool, "Account"),
            routing_number=_field(d, "routing_number", str, "Account", required=False),
            account_link_status=_field(d, "account_link_status", str, "Account", required=False),
        )


@dataclass(frozen=True)
class Transaction:
    user_handle: str
    reference_id: str
    transaction_id: str
    transaction_type: str
    status: str
    sila_amount: int | float
    bank_account_name: str | None = None
    handle_address: str | None = None
    usd_status: str | None = None
    token_status: str | None = None
    created: str | None = None
    last_update: str | None = None
    created_epoch: int | None = None
    last_update_epoch: int | None = None
    descriptor: str | None = None
    destination_handle: str | None = None
    destination_address: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Transaction:
        d = _require_object(data, "Transaction")
        r = "Transaction"
        return cls(
            user_handle=_field(d, "user_handle", str, r),
            reference_id=_field(d, "reference_id", str, r),
            transaction_id=_field(d, "transaction_id", str, r),
            transaction_type=_field(d, "transaction_type", str, r),
            status=_field(d, "status", str, r),
            sila_amount=_field(d, "sila_amount", (int, float), r),
            bank_account_name=_field(d, "bank_account_name", str, r, required=False),
            handle_address=_field(d, "handle_address", str, r, required=False),
            usd_status=_field(d, "usd_status", str, r, required=False),
            token_status=_field(d, "token_status", str, r, required=False),
            created=_field(d, "created", str, r, required=False),
            last_update=_field(d, "last_update", str, r, required=False),
            created_epoch=_field(d, "created_epoch", int, r, required=False),
            last_update_epoch=_field(d, "last_update_epoch", int, r, required=False),
            descriptor=_field(d, "descriptor", str, r, required=False),
            destination_handle=_field(d, "destination_handle", str, r, required=False),
            destination_address=_field(d, "destination_address", str, r, required=False),
        )


@dataclass(frozen=True)
class GetTransactionsResponse:
    success: bool
    page: int
    returned_count: int
    total_count: int
    transactions: tuple[Transaction, ...]
    status: str | None = None
    reference: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> GetTransactionsResponse:
        d = _require_object(data, "GetTransactionsResponse")
        r = "GetTransactionsResponse"
        return cls(
            success=_field(d, "success", bool, r),
            page=_field(d, "page", int, r),
            returned_count=_field(d, "returned_count", int, r),
            total_count=_field(d, "total_count", int, r),
            transactions=tuple(
                decode_list(_field(d, "transactions", list, r), Transaction.from_dict, r)
            ),
            status=_field(d, "status", str, r, required=False),
            reference=_field(d, "reference", str, r, required=False),
        )
