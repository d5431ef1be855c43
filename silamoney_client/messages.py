"""
Request message catalog.

Each message is a frozen dataclass rendering the wire dict via
``to_dict()``. Optional fields left as None are omitted from the wire.

Every message carries a JSON Schema (``SCHEMA``) describing the generic
contract the server expects: required fields present, non-empty strings,
integer amounts. ``validate_message`` runs it before anything is signed.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol, runtime_checkable

import jsonschema  # type: ignore[import-untyped]

from silamoney_client.config import Crypto, Version
from silamoney_client.errors import EncodingError

# =========================================================================
# Schema fragments
# =========================================================================

_NON_EMPTY = {"type": "string", "minLength": 1}
_OPTIONAL_STRING = {"type": "string"}
_AMOUNT = {"type": "integer", "minimum": 1}

HEADER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["created", "auth_handle", "version", "crypto", "reference"],
    "properties": {
        "created": {"type": "integer", "minimum": 0},
        "auth_handle": _NON_EMPTY,
        "user_handle": _NON_EMPTY,
        "version": {"enum": [v.value for v in Version]},
        "crypto": {"enum": [c.value for c in Crypto]},
        "reference": _NON_EMPTY,
    },
}


def _message_schema(
    required: list[str],
    properties: dict[str, Any],
    *,
    header: bool = True,
) -> dict[str, Any]:
    if header:
        required = ["header", *required]
        properties = {"header": HEADER_SCHEMA, **properties}
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": required,
        "properties": properties,
    }


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# =========================================================================
# Header
# =========================================================================


@dataclass(frozen=True)
class Header:
    """Identity header embedded in every authenticated message.

    ``user_handle`` is None for app-only operations and is then left off
    the wire. ``created`` and ``reference`` default to now and a fresh
    UUID; pass them explicitly for reproducible bodies.
    """

    auth_handle: str
    user_handle: str | None = None
    created: int = field(default_factory=lambda: int(time.time()))
    reference: str = field(default_factory=lambda: str(uuid.uuid4()))
    version: Version = Version.ZERO_2
    crypto: Crypto = Crypto.ETH

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "created": self.created,
                "auth_handle": self.auth_handle,
                "user_handle": self.user_handle,
                "version": self.version.value,
                "crypto": self.crypto.value,
                "reference": self.reference,
            }
        )


@runtime_checkable
class Message(Protocol):
    """Anything the request builder can validate, encode and sign."""

    SCHEMA: ClassVar[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]: ...


def message_header(message: Message) -> Header | None:
    """The identity header embedded in a message, if it has one."""
    header = getattr(message, "header", None)
    return header if isinstance(header, Header) else None


def validate_message(message: Message) -> dict[str, Any]:
    """Render a message and check it against its schema.

    Returns:
        The wire dict.

    Raises:
        EncodingError: If the rendered message violates its schema.
    """
    payload = message.to_dict()
    try:
        jsonschema.validate(instance=payload, schema=message.SCHEMA)
    except jsonschema.ValidationError as e:
        raise EncodingError(
            f"{type(message).__name__} is invalid: {e.message}",
            error_code="INVALID_MESSAGE",
            details={
                "message_type": type(message).__name__,
                "path": "/".join(str(p) for p in e.absolute_path),
            },
        ) from e
    return payload


# =========================================================================
# Supporting records
# =========================================================================


@dataclass(frozen=True)
class User:
    """KYC data for registering a user handle."""

    handle: str
    first_name: str
    last_name: str
    address: str
    city: str
    state: str
    zip_code: str
    phone: str
    email: str
    identity_number: str
    crypto_address: str
    birthdate: str  # YYYY-MM-DD
    address_2: str | None = None
    country: str = "US"


@dataclass(frozen=True)
class Wallet:
    """A blockchain address to attach to a user handle."""

    blockchain_address: str
    blockchain_network: str = Crypto.ETH.value
    nickname: str | None = None
    default: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "blockchain_address": self.blockchain_address,
                "blockchain_network": self.blockchain_network,
                "nickname": self.nickname,
                "default": self.default,
            }
        )


@dataclass(frozen=True)
class SearchFilters:
    """Paging and filtering for transaction and wallet listings."""

    page: int | None = None
    per_page: int | None = None
    sort_ascending: bool | None = None
    transaction_id: str | None = None
    reference_id: str | None = None
    transaction_types: tuple[str, ...] | None = None
    statuses: tuple[str, ...] | None = None
    show_timelines: bool | None = None
    start_epoch: int | None = None
    end_epoch: int | None = None
    max_sila_amount: int | None = None
    min_sila_amount: int | None = None
    bank_account_name: str | None = None
    blockchain_network: str | None = None
    blockchain_address: str | None = None
    nickname: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = _drop_none(
            {
                "page": self.page,
                "per_page": self.per_page,
                "sort_ascending": self.sort_ascending,
                "transaction_id": self.transaction_id,
                "reference_id": self.reference_id,
                "show_timelines": self.show_timelines,
                "start_epoch": self.start_epoch,
                "end_epoch": self.end_epoch,
                "max_sila_amount": self.max_sila_amount,
                "min_sila_amount": self.min_sila_amount,
                "bank_account_name": self.bank_account_name,
                "blockchain_network": self.blockchain_network,
                "blockchain_address": self.blockchain_address,
                "nickname": self.nickname,
            }
        )
        if self.transaction_types is not None:
            data["transaction_types"] = list(self.transaction_types)
        if self.statuses is not None:
            data["statuses"] = list(self.statuses)
        return data


# =========================================================================
# Messages
# =========================================================================


@dataclass(frozen=True)
class HeaderMessage:
    """Header-only message (check_handle, request_kyc, check_kyc)."""

    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["message"], {"message": _NON_EMPTY, "kyc_level": _NON_EMPTY}
    )

    header: Header
    kyc_level: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {"header": self.header.to_dict(), "message": "header_msg", "kyc_level": self.kyc_level}
        )


@dataclass(frozen=True)
class EntityMessage:
    """Registers KYC data and a blockchain address for a new handle."""

    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["message", "address", "identity", "contact", "crypto_entry", "entity"],
        {
            "message": _NON_EMPTY,
            "address": {
                "type": "object",
                "required": ["street_address_1", "city", "state", "country", "postal_code"],
                "properties": {
                    "street_address_1": _NON_EMPTY,
                    "city": _NON_EMPTY,
                    "state": _NON_EMPTY,
                    "country": _NON_EMPTY,
                    "postal_code": _NON_EMPTY,
                },
            },
            "identity": {
                "type": "object",
                "required": ["identity_alias", "identity_value"],
                "properties": {"identity_alias": _NON_EMPTY, "identity_value": _NON_EMPTY},
            },
            "contact": {
                "type": "object",
                "required": ["phone", "email"],
                "properties": {"phone": _NON_EMPTY, "email": _NON_EMPTY},
            },
            "crypto_entry": {
                "type": "object",
                "required": ["crypto_address", "crypto_code"],
                "properties": {"crypto_address": _NON_EMPTY, "crypto_code": _NON_EMPTY},
            },
            "entity": {
                "type": "object",
                "required": ["first_name", "last_name", "birthdate"],
                "properties": {
                    "first_name": _NON_EMPTY,
                    "last_name": _NON_EMPTY,
                    "birthdate": _NON_EMPTY,
                },
            },
        },
    )

    header: Header
    user: User

    def to_dict(self) -> dict[str, Any]:
        user = self.user
        return {
            "header": self.header.to_dict(),
            "message": "entity_msg",
            "address": _drop_none(
                {
                    "address_alias": "",
                    "street_address_1": user.address,
                    "street_address_2": user.address_2,
                    "city": user.city,
                    "state": user.state,
                    "country": user.country,
                    "postal_code": user.zip_code,
                }
            ),
            "identity": {"identity_alias": "SSN", "identity_value": user.identity_number},
            "contact": {"contact_alias": "", "phone": user.phone, "email": user.email},
            "crypto_entry": {
                "crypto_alias": "",
                "crypto_address": user.crypto_address,
                "crypto_code": Crypto.ETH.value,
            },
            "entity": {
                "birthdate": user.birthdate,
                "entity_name": f"{user.first_name} {user.last_name}",
                "first_name": user.first_name,
                "last_name": user.last_name,
                "relationship": "user",
            },
        }


@dataclass(frozen=True)
class LinkAccountMessage:
    """Links a bank account, either by Plaid public token or directly."""

    SCHEMA: ClassVar[dict[str, Any]] = {
        **_message_schema(
            ["message"],
            {
                "message": _NON_EMPTY,
                "account_name": _NON_EMPTY,
                "public_token": _NON_EMPTY,
                "selected_account_id": _NON_EMPTY,
                "account_number": _NON_EMPTY,
                "routing_number": _NON_EMPTY,
                "account_type": _NON_EMPTY,
            },
        ),
        "oneOf": [
            {"required": ["public_token"]},
            {"required": ["account_number", "routing_number"]},
        ],
    }

    header: Header
    account_name: str | None = None
    public_token: str | None = None
    account_id: str | None = None
    account_number: str | None = None
    routing_number: str | None = None
    account_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "header": self.header.to_dict(),
                "message": "link_account_msg",
                "account_name": self.account_name,
                "public_token": self.public_token,
                "selected_account_id": self.account_id,
                "account_number": self.account_number,
                "routing_number": self.routing_number,
                "account_type": self.account_type,
            }
        )


@dataclass(frozen=True)
class GetAccountsMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(["message"], {"message": _NON_EMPTY})

    header: Header

    def to_dict(self) -> dict[str, Any]:
        return {"header": self.header.to_dict(), "message": "get_accounts_msg"}


@dataclass(frozen=True)
class GetAccountBalanceMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["account_name"], {"account_name": _NON_EMPTY}
    )

    header: Header
    account_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"header": self.header.to_dict(), "account_name": self.account_name}


@dataclass(frozen=True)
class IssueMessage:
    """Debits a linked account and issues tokens to the handle."""

    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["message", "amount", "account_name"],
        {"message": _NON_EMPTY, "amount": _AMOUNT, "account_name": _NON_EMPTY},
    )

    header: Header
    amount: int
    account_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "message": "issue_msg",
            "amount": self.amount,
            "account_name": self.account_name,
        }


@dataclass(frozen=True)
class RedeemMessage:
    """Burns tokens and credits the named bank account."""

    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["message", "amount", "account_name"],
        {"message": _NON_EMPTY, "amount": _AMOUNT, "account_name": _NON_EMPTY},
    )

    header: Header
    amount: int
    account_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "message": "redeem_msg",
            "amount": self.amount,
            "account_name": self.account_name,
        }


@dataclass(frozen=True)
class TransferMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["message", "amount", "destination_handle"],
        {
            "message": _NON_EMPTY,
            "amount": _AMOUNT,
            "destination_handle": _NON_EMPTY,
            "destination_address": _NON_EMPTY,
        },
    )

    header: Header
    destination_handle: str
    amount: int
    destination_address: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "header": self.header.to_dict(),
                "message": "transfer_msg",
                "amount": self.amount,
                "destination_handle": self.destination_handle,
                "destination_address": self.destination_address,
            }
        )


@dataclass(frozen=True)
class GetTransactionsMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["message", "search_filters"],
        {"message": _NON_EMPTY, "search_filters": {"type": "object"}},
    )

    header: Header
    search_filters: SearchFilters = field(default_factory=SearchFilters)

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "message": "get_transactions_msg",
            "search_filters": self.search_filters.to_dict(),
        }


@dataclass(frozen=True)
class SilaBalanceMessage:
    """Public balance lookup by blockchain address (no identity header)."""

    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["address"], {"address": _NON_EMPTY}, header=False
    )

    address: str

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address}


@dataclass(frozen=True)
class PlaidSamedayAuthMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["account_name"], {"account_name": _NON_EMPTY}
    )

    header: Header
    account_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"header": self.header.to_dict(), "account_name": self.account_name}


@dataclass(frozen=True)
class GetWalletMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema([], {})

    header: Header

    def to_dict(self) -> dict[str, Any]:
        return {"header": self.header.to_dict()}


@dataclass(frozen=True)
class DeleteWalletMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema([], {})

    header: Header

    def to_dict(self) -> dict[str, Any]:
        return {"header": self.header.to_dict()}


@dataclass(frozen=True)
class RegisterWalletMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        ["wallet", "wallet_verification_signature"],
        {
            "wallet": {
                "type": "object",
                "required": ["blockchain_address", "blockchain_network"],
                "properties": {
                    "blockchain_address": _NON_EMPTY,
                    "blockchain_network": _NON_EMPTY,
                    "nickname": _OPTIONAL_STRING,
                    "default": {"type": "boolean"},
                },
            },
            "wallet_verification_signature": _NON_EMPTY,
        },
    )

    header: Header
    wallet: Wallet
    wallet_verification_signature: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "wallet": self.wallet.to_dict(),
            "wallet_verification_signature": self.wallet_verification_signature,
        }


@dataclass(frozen=True)
class UpdateWalletMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        [], {"nickname": _NON_EMPTY, "default": {"type": "boolean"}}
    )

    header: Header
    nickname: str | None = None
    default: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {"header": self.header.to_dict(), "nickname": self.nickname, "default": self.default}
        )


@dataclass(frozen=True)
class GetWalletsMessage:
    SCHEMA: ClassVar[dict[str, Any]] = _message_schema(
        [], {"search_filters": {"type": "object"}}
    )

    header: Header
    search_filters: SearchFilters | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"header": self.header.to_dict()}
        if self.search_filters is not None:
            data["search_filters"] = self.search_filters.to_dict()
        return data
