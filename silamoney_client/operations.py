"""
Operation descriptors: path, signature scope, expected shape, service.

The scope is declared here per operation rather than inferred from
whether a user key happens to be passed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from silamoney_client.headers import SignatureScope
from silamoney_client.normalizer import ExpectedShape
from silamoney_client.responses import (
    Account,
    BaseResponse,
    GetTransactionsResponse,
    LinkAccountResponse,
    PlaidSamedayAuthResponse,
)


class Service(StrEnum):
    API = "API"
    BALANCE = "BALANCE"


@dataclass(frozen=True)
class Operation:
    name: str
    path: str
    scope: SignatureScope
    shape: ExpectedShape
    service: Service = Service.API


_APP = SignatureScope.APP
_USER = SignatureScope.APP_AND_USER
_BASE = ExpectedShape.single(BaseResponse.from_dict)
_RAW = ExpectedShape.raw()

CHECK_HANDLE = Operation("check_handle", "/check_handle", _APP, _BASE)
REGISTER = Operation("register", "/register", _APP, _BASE)
REQUEST_KYC = Operation("request_kyc", "/request_kyc", _USER, _BASE)
CHECK_KYC = Operation("check_kyc", "/check_kyc", _USER, _BASE)
LINK_ACCOUNT = Operation(
    "link_account", "/link_account", _USER, ExpectedShape.single(LinkAccountResponse.from_dict)
)
GET_ACCOUNTS = Operation(
    "get_accounts", "/get_accounts", _USER, ExpectedShape.list_of(Account.from_dict)
)
GET_ACCOUNT_BALANCE = Operation("get_account_balance", "/get_account_balance", _USER, _BASE)
ISSUE_SILA = Operation("issue_sila", "/issue_sila", _USER, _BASE)
TRANSFER_SILA = Operation("transfer_sila", "/transfer_sila", _USER, _BASE)
REDEEM_SILA = Operation("redeem_sila", "/redeem_sila", _USER, _BASE)
GET_TRANSACTIONS = Operation(
    "get_transactions",
    "/get_transactions",
    _USER,
    ExpectedShape.single(GetTransactionsResponse.from_dict),
)
SILA_BALANCE = Operation(
    "sila_balance",
    "/get_sila_balance",
    SignatureScope.NONE,
    ExpectedShape.raw(canonicalize=True),
    Service.BALANCE,
)
PLAID_SAMEDAY_AUTH = Operation(
    "plaid_sameday_auth",
    "/plaid_sameday_auth",
    _APP,
    ExpectedShape.single(PlaidSamedayAuthResponse.from_dict),
)
GET_WALLET = Operation("get_wallet", "/get_wallet", _USER, _RAW)
REGISTER_WALLET = Operation("register_wallet", "/register_wallet", _USER, _RAW)
UPDATE_WALLET = Operation("update_wallet", "/update_wallet", _USER, _RAW)
DELETE_WALLET = Operation("delete_wallet", "/delete_wallet", _USER, _RAW)
GET_WALLETS = Operation("get_wallets", "/get_wallets", _USER, _RAW)

ALL_OPERATIONS: tuple[Operation, ...] = (
    CHECK_HANDLE,
    REGISTER,
    REQUEST_KYC,
    CHECK_KYC,
    LINK_ACCOUNT,
    GET_ACCOUNTS,
    GET_ACCOUNT_BALANCE,
    ISSUE_SILA,
    TRANSFER_SILA,
    REDEEM_SILA,
    GET_TRANSACTIONS,
    SILA_BALANCE,
    PLAID_SAMEDAY_AUTH,
    GET_WALLET,
    REGISTER_WALLET,
    UPDATE_WALLET,
    DELETE_WALLET,
    GET_WALLETS,
)
