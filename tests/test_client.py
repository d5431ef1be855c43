"""
Tests for SilaApi: canned transport responses, no network.

Uses a FakeTransport that records each call and returns a pre-built
RawResponse, exercising the full build -> dispatch -> normalize pipeline.

Test plan:
- Every operation posts to its path with the right signature headers
- Bodies embed the app handle and verify against both keys
- Typed decoding per operation, 400 error payload, balance special case
- Key errors stop before the transport is touched
- Transport errors propagate unchanged
- Configuration and environment resolution
"""

from __future__ import annotations

import json
from typing import Any

import pytest
from pytest_httpx import HTTPXMock

from silamoney_client import (
    AUTH_SIGNATURE,
    USER_SIGNATURE,
    BalanceEnvironment,
    Configuration,
    ConfigurationError,
    Environment,
    SearchFilters,
    SigningError,
    SilaApi,
    TransportError,
    User,
    Wallet,
)
from silamoney_client.responses import Account, BaseResponse, LinkAccountResponse
from silamoney_client.signing import recover_address
from silamoney_client.transport import RawResponse

APP_HANDLE = "app.silamoney.eth"
APP_KEY = "ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
APP_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
USER_HANDLE = "user.silamoney.eth"
USER_KEY = "59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
USER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

SUCCESS = {"reference": "ref", "message": "ok", "status": "SUCCESS"}

# ---------------------------------------------------------------------------
# Fake transports
# ---------------------------------------------------------------------------


class FakeTransport:
    """Returns a canned RawResponse and records calls."""

    def __init__(self, status_code: int = 200, body: Any = SUCCESS) -> None:
        raw = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
        self._response = RawResponse(status_code, raw, {"content-type": ["application/json"]})
        self.calls: list[tuple[str, bytes, dict[str, str]]] = []

    def call(self, path: str, body: bytes, headers: dict[str, str]) -> RawResponse:
        self.calls.append((path, body, headers))
        return self._response

    @property
    def last_path(self) -> str:
        return self.calls[-1][0]

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.calls[-1][1])

    @property
    def last_headers(self) -> dict[str, str]:
        return self.calls[-1][2]


class ErrorTransport:
    """Raises on call to simulate transport failures."""

    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    def call(self, path: str, body: bytes, headers: dict[str, str]) -> RawResponse:
        raise self._exc


def _config() -> Configuration:
    return Configuration(app_handle=APP_HANDLE, private_key=APP_KEY)


def _api(transport: Any = None, balance_transport: Any = None) -> SilaApi:
    return SilaApi(
        _config(),
        transport=transport or FakeTransport(),
        balance_transport=balance_transport or FakeTransport(),
    )


USER = User(
    handle=USER_HANDLE,
    first_name="Example",
    last_name="User",
    address="123 Main St",
    city="New City",
    state="OR",
    zip_code="97204",
    phone="503-123-4567",
    email="example@silamoney.com",
    identity_number="123452222",
    crypto_address=USER_ADDRESS,
    birthdate="1990-05-19",
)


# ---------------------------------------------------------------------------
# Signature scopes per operation
# ---------------------------------------------------------------------------


class TestAppOnlyOperations:
    def test_check_handle(self) -> None:
        transport = FakeTransport()
        response = _api(transport).check_handle(USER_HANDLE)

        assert transport.last_path == "/check_handle"
        assert set(transport.last_headers) == {AUTH_SIGNATURE}
        assert transport.last_body["header"]["user_handle"] == USER_HANDLE
        assert transport.last_body["message"] == "header_msg"
        assert response.data == BaseResponse(reference="ref", message="ok", status="SUCCESS")

    def test_register(self) -> None:
        transport = FakeTransport()
        _api(transport).register(USER)

        body = transport.last_body
        assert transport.last_path == "/register"
        assert set(transport.last_headers) == {AUTH_SIGNATURE}
        assert body["message"] == "entity_msg"
        assert body["crypto_entry"]["crypto_address"] == USER_ADDRESS
        assert body["identity"] == {"identity_alias": "SSN", "identity_value": "123452222"}
        assert body["entity"]["entity_name"] == "Example User"

    def test_plaid_sameday_auth(self) -> None:
        transport = FakeTransport(body={**SUCCESS, "public_token": "public-sandbox-xyz"})
        response = _api(transport).plaid_sameday_auth(USER_HANDLE, "default")

        assert transport.last_path == "/plaid_sameday_auth"
        assert set(transport.last_headers) == {AUTH_SIGNATURE}
        assert response.data.public_token == "public-sandbox-xyz"

    def test_app_signature_verifies(self) -> None:
        transport = FakeTransport()
        _api(transport).check_handle(USER_HANDLE)

        path, body, headers = transport.calls[-1]
        assert recover_address(body, headers[AUTH_SIGNATURE]) == APP_ADDRESS


class TestUserScopedOperations:
    @pytest.mark.parametrize(
        ("method", "args", "path"),
        [
            ("request_kyc", (USER_HANDLE, USER_KEY), "/request_kyc"),
            ("check_kyc", (USER_HANDLE, USER_KEY), "/check_kyc"),
            ("link_account", (USER_HANDLE, USER_KEY, "public-token"), "/link_account"),
            (
                "link_account_direct",
                (USER_HANDLE, USER_KEY, "123456789012", "123456780"),
                "/link_account",
            ),
            ("get_account_balance", (USER_HANDLE, USER_KEY, "default"), "/get_account_balance"),
            ("issue_sila", (USER_HANDLE, 1000, "default", USER_KEY), "/issue_sila"),
            ("transfer_sila", (USER_HANDLE, "dest.silamoney.eth", 100, USER_KEY), "/transfer_sila"),
            ("redeem_sila", (USER_HANDLE, 1000, "default", USER_KEY), "/redeem_sila"),
            ("get_wallet", (USER_HANDLE, USER_KEY), "/get_wallet"),
            ("update_wallet", (USER_HANDLE, USER_KEY, "main", True), "/update_wallet"),
            ("delete_wallet", (USER_HANDLE, USER_KEY), "/delete_wallet"),
            ("get_wallets", (USER_HANDLE, USER_KEY), "/get_wallets"),
        ],
    )
    def test_both_signatures_over_same_body(
        self, method: str, args: tuple[Any, ...], path: str
    ) -> None:
        transport = FakeTransport()
        getattr(_api(transport), method)(*args)

        sent_path, body, headers = transport.calls[-1]
        assert sent_path == path
        assert set(headers) == {AUTH_SIGNATURE, USER_SIGNATURE}
        assert recover_address(body, headers[AUTH_SIGNATURE]) == APP_ADDRESS
        assert recover_address(body, headers[USER_SIGNATURE]) == USER_ADDRESS
        assert json.loads(body)["header"]["auth_handle"] == APP_HANDLE

    def test_empty_user_key_raises_before_dispatch(self) -> None:
        transport = FakeTransport()
        with pytest.raises(SigningError):
            _api(transport).check_kyc(USER_HANDLE, "")
        assert transport.calls == []

    def test_malformed_user_key_raises_before_dispatch(self) -> None:
        transport = FakeTransport()
        with pytest.raises(SigningError):
            _api(transport).issue_sila(USER_HANDLE, 1000, "default", "not-a-key")
        assert transport.calls == []


class TestOperationPayloads:
    def test_request_kyc_level(self) -> None:
        transport = FakeTransport()
        _api(transport).request_kyc(USER_HANDLE, USER_KEY, "DOC_KYC")
        assert transport.last_body["kyc_level"] == "DOC_KYC"

    def test_request_kyc_without_level(self) -> None:
        transport = FakeTransport()
        _api(transport).request_kyc(USER_HANDLE, USER_KEY)
        assert "kyc_level" not in transport.last_body

    def test_transfer_destination_address(self) -> None:
        transport = FakeTransport()
        _api(transport).transfer_sila(USER_HANDLE, "dest.silamoney.eth", 100, USER_KEY, "0xdef")
        assert transport.last_body["destination_address"] == "0xdef"
        assert transport.last_body["destination_handle"] == "dest.silamoney.eth"

    def test_link_account_decodes_response(self) -> None:
        transport = FakeTransport(body={**SUCCESS, "account_name": "default"})
        response = _api(transport).link_account(USER_HANDLE, USER_KEY, "public-token")
        assert isinstance(response.data, LinkAccountResponse)
        assert response.data.account_name == "default"

    def test_get_accounts_list(self) -> None:
        accounts = [
            {
                "account_number": f"*000{i}",
                "account_name": f"acct-{i}",
                "account_type": "CHECKING",
                "account_status": "active",
                "active": True,
            }
            for i in range(3)
        ]
        response = _api(FakeTransport(body=accounts)).get_accounts(USER_HANDLE, USER_KEY)
        assert all(isinstance(a, Account) for a in response.data)
        assert [a.account_name for a in response.data] == ["acct-0", "acct-1", "acct-2"]

    def test_get_transactions_filters(self) -> None:
        transport = FakeTransport(
            body={
                "success": True,
                "page": 2,
                "returned_count": 0,
                "total_count": 0,
                "transactions": [],
            }
        )
        filters = SearchFilters(page=2, per_page=20, transaction_types=("issue", "redeem"))
        response = _api(transport).get_transactions(USER_HANDLE, USER_KEY, filters)

        assert transport.last_body["search_filters"] == {
            "page": 2,
            "per_page": 20,
            "transaction_types": ["issue", "redeem"],
        }
        assert response.data.page == 2

    def test_register_wallet(self) -> None:
        transport = FakeTransport(body={"success": True})
        api = _api(transport)
        wallet = api.generate_wallet()

        response = api.register_wallet(
            USER_HANDLE,
            Wallet(wallet.address, nickname="second"),
            wallet.verification_signature(),
            USER_KEY,
        )

        body = transport.last_body
        assert body["wallet"]["blockchain_address"] == wallet.address
        assert recover_address(wallet.address, body["wallet_verification_signature"]) == wallet.address
        assert response.data == {"success": True}

    def test_wallet_operations_return_raw_json(self) -> None:
        payload = {"success": True, "wallet": {"nickname": "main"}, "is_whitelisted": True}
        response = _api(FakeTransport(body=payload)).get_wallet(USER_HANDLE, USER_KEY)
        assert response.data == payload


class TestSilaBalance:
    def test_uses_balance_transport_unsigned(self) -> None:
        api_transport = FakeTransport()
        balance_transport = FakeTransport(body={"address": "0xabc", "sila_balance": "12.50"})

        response = _api(api_transport, balance_transport).sila_balance("0xabc")

        assert api_transport.calls == []
        path, body, headers = balance_transport.calls[-1]
        assert path == "/get_sila_balance"
        assert body == b'{"address":"0xabc"}'
        assert headers == {}
        assert response.data == {"address": "0xabc", "sila_balance": "12.50"}

    def test_key_order_does_not_matter(self) -> None:
        a = _api(balance_transport=FakeTransport(body=b'{"sila_balance":"12.50","address":"0xabc"}'))
        b = _api(balance_transport=FakeTransport(body=b'{"address":"0xabc","sila_balance":"12.50"}'))
        assert a.sila_balance("0xabc") == b.sila_balance("0xabc")


class TestErrorResponses:
    ERROR = {"status": "FAILURE", "message": "x", "reference": "r"}

    def test_400_is_error_payload(self) -> None:
        response = _api(FakeTransport(400, self.ERROR)).check_handle(USER_HANDLE)
        assert response.status_code == 400
        assert response.data == BaseResponse(reference="r", message="x", status="FAILURE")

    def test_400_ignores_list_shape(self) -> None:
        """get_accounts expects a list on 200, but errors keep the error shape."""
        response = _api(FakeTransport(400, self.ERROR)).get_accounts(USER_HANDLE, USER_KEY)
        assert response.data == BaseResponse(reference="r", message="x", status="FAILURE")

    def test_401_is_raw(self) -> None:
        body = {"success": False, "message": "Invalid authsignature"}
        response = _api(FakeTransport(401, body)).check_kyc(USER_HANDLE, USER_KEY)
        assert response.status_code == 401
        assert response.data == body

    def test_transport_error_propagates(self) -> None:
        exc = TransportError("Failed to connect", error_code="CONNECTION_FAILED")
        with pytest.raises(TransportError) as exc_info:
            _api(ErrorTransport(exc)).check_handle(USER_HANDLE)
        assert exc_info.value is exc


class TestConstruction:
    def test_from_default_uses_sandbox(self) -> None:
        with SilaApi.from_default(APP_HANDLE, APP_KEY) as api:
            assert api.configuration.api_url == "https://sandbox.silamoney.com/0.2"
            assert api.configuration.balance_url == "https://sandbox.silatokenapi.silamoney.com"

    def test_from_environment_production(self) -> None:
        with SilaApi.from_environment(
            Environment.PRODUCTION, BalanceEnvironment.PRODUCTION, APP_HANDLE, APP_KEY
        ) as api:
            assert api.configuration.api_url == "https://api.silamoney.com/0.2"
            assert api.configuration.balance_url == "https://silatokenapi.silamoney.com"

    def test_default_transport_hits_configured_url(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            method="POST", url="https://sandbox.silamoney.com/0.2/check_handle", json=SUCCESS
        )
        with SilaApi.from_default(APP_HANDLE, APP_KEY) as api:
            response = api.check_handle(USER_HANDLE)
        assert response.data.status == "SUCCESS"

        request = httpx_mock.get_requests()[0]
        assert recover_address(request.content, request.headers[AUTH_SIGNATURE]) == APP_ADDRESS


class TestConfiguration:
    def test_repr_hides_private_key(self) -> None:
        assert APP_KEY not in repr(_config())

    def test_empty_app_handle_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            Configuration(app_handle="", private_key=APP_KEY)

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            Configuration(app_handle=APP_HANDLE, private_key=APP_KEY, timeout_s=0)

    def test_from_env(self) -> None:
        config = Configuration.from_env(
            {
                "SILA_APP_HANDLE": APP_HANDLE,
                "SILA_PRIVATE_KEY": APP_KEY,
                "SILA_ENVIRONMENT": "production",
                "SILA_TIMEOUT_S": "12.5",
            }
        )
        assert config.environment is Environment.PRODUCTION
        assert config.balance_environment is BalanceEnvironment.SANDBOX
        assert config.timeout_s == 12.5

    def test_from_env_missing_key(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            Configuration.from_env({"SILA_APP_HANDLE": APP_HANDLE})
        assert exc_info.value.error_code == "CONFIG_MISSING"
        assert exc_info.value.details["missing"] == ["SILA_PRIVATE_KEY"]

    def test_from_env_unknown_environment(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            Configuration.from_env(
                {"SILA_APP_HANDLE": APP_HANDLE, "SILA_PRIVATE_KEY": APP_KEY, "SILA_ENVIRONMENT": "staging"}
            )
        assert exc_info.value.error_code == "CONFIG_INVALID"

    def test_from_env_bad_timeout(self) -> None:
        with pytest.raises(ConfigurationError):
            Configuration.from_env(
                {"SILA_APP_HANDLE": APP_HANDLE, "SILA_PRIVATE_KEY": APP_KEY, "SILA_TIMEOUT_S": "soon"}
            )
