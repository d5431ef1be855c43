"""
Sila API client: one method per remote operation.

Every method runs the same pipeline:

    message -> build_request (validate, encode, sign)
            -> transport.call
            -> normalize (status/shape driven)
            -> ApiResponse

The client holds only immutable configuration and its transports. User
private keys are method arguments and are never stored.
"""

from __future__ import annotations

import logging
from types import TracebackType

from silamoney_client import operations as ops
from silamoney_client.config import BalanceEnvironment, Configuration, Environment
from silamoney_client.messages import (
    DeleteWalletMessage,
    EntityMessage,
    GetAccountBalanceMessage,
    GetAccountsMessage,
    GetTransactionsMessage,
    GetWalletMessage,
    GetWalletsMessage,
    Header,
    HeaderMessage,
    IssueMessage,
    LinkAccountMessage,
    Message,
    PlaidSamedayAuthMessage,
    RedeemMessage,
    RegisterWalletMessage,
    SearchFilters,
    SilaBalanceMessage,
    TransferMessage,
    UpdateWalletMessage,
    User,
    Wallet,
)
from silamoney_client.normalizer import ApiResponse, normalize
from silamoney_client.operations import Operation, Service
from silamoney_client.request import build_request
from silamoney_client.transport import HttpxTransport, Transport
from silamoney_client.wallet import SilaWallet

logger = logging.getLogger(__name__)


class SilaApi:
    """Authenticated client acting as an app on behalf of user handles.

    Args:
        configuration: Resolved credentials and environments.
        transport: Transport for the main API. Defaults to an
            HttpxTransport on ``configuration.api_url``.
        balance_transport: Transport for the token-balance service.
            Defaults to an HttpxTransport on ``configuration.balance_url``.
    """

    def __init__(
        self,
        configuration: Configuration,
        transport: Transport | None = None,
        balance_transport: Transport | None = None,
    ) -> None:
        self._configuration = configuration
        self._owned: list[HttpxTransport] = []
        self._transport = transport or self._own(configuration.api_url)
        self._balance_transport = balance_transport or self._own(configuration.balance_url)

    def _own(self, base_url: str) -> HttpxTransport:
        transport = HttpxTransport(
            base_url,
            timeout_s=self._configuration.timeout_s,
            user_agent=self._configuration.user_agent,
        )
        self._owned.append(transport)
        return transport

    @classmethod
    def from_environment(
        cls,
        environment: Environment,
        balance_environment: BalanceEnvironment,
        app_handle: str,
        private_key: str,
    ) -> SilaApi:
        return cls(
            Configuration(
                app_handle=app_handle,
                private_key=private_key,
                environment=environment,
                balance_environment=balance_environment,
            )
        )

    @classmethod
    def from_default(cls, app_handle: str, private_key: str) -> SilaApi:
        """Client against the sandbox environments."""
        return cls.from_environment(
            Environment.SANDBOX, BalanceEnvironment.SANDBOX, app_handle, private_key
        )

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    # -----------------------------------------------------------------
    # Pipeline
    # -----------------------------------------------------------------

    def _header(self, user_handle: str | None = None) -> Header:
        return Header(auth_handle=self._configuration.app_handle, user_handle=user_handle)

    def _call(
        self,
        operation: Operation,
        message: Message,
        user_private_key: str | None = None,
    ) -> ApiResponse:
        request = build_request(
            operation,
            message,
            self._configuration.app_handle,
            self._configuration.private_key,
            user_private_key,
        )
        logger.debug(
            "Dispatching %s to %s with %s",
            operation.name,
            request.path,
            sorted(request.headers) or "no signatures",
        )
        transport = (
            self._balance_transport if operation.service is Service.BALANCE else self._transport
        )
        raw = transport.call(request.path, request.body, request.headers)
        response = normalize(raw.status_code, raw.body, raw.headers, operation.shape)
        logger.debug("%s -> HTTP %d", operation.name, response.status_code)
        return response

    # -----------------------------------------------------------------
    # Handles and KYC
    # -----------------------------------------------------------------

    def check_handle(self, handle: str) -> ApiResponse:
        """Checks whether a handle is already taken."""
        return self._call(ops.CHECK_HANDLE, HeaderMessage(self._header(handle)))

    def register(self, user: User) -> ApiResponse:
        """Attaches KYC data and a blockchain address to a new handle."""
        return self._call(ops.REGISTER, EntityMessage(self._header(user.handle), user))

    def request_kyc(
        self, user_handle: str, user_private_key: str, kyc_level: str | None = None
    ) -> ApiResponse:
        """Starts KYC verification on a registered handle."""
        message = HeaderMessage(self._header(user_handle), kyc_level=kyc_level or None)
        return self._call(ops.REQUEST_KYC, message, user_private_key)

    def check_kyc(self, user_handle: str, user_private_key: str) -> ApiResponse:
        """Returns whether the handle's entity is verified, failed, or pending."""
        return self._call(ops.CHECK_KYC, HeaderMessage(self._header(user_handle)), user_private_key)

    # -----------------------------------------------------------------
    # Bank accounts
    # -----------------------------------------------------------------

    def link_account(
        self,
        user_handle: str,
        user_private_key: str,
        public_token: str,
        account_name: str | None = None,
        account_id: str | None = None,
    ) -> ApiResponse:
        """Links a bank account using a Plaid public token."""
        message = LinkAccountMessage(
            self._header(user_handle),
            account_name=account_name,
            public_token=public_token,
            account_id=account_id,
        )
        return self._call(ops.LINK_ACCOUNT, message, user_private_key)

    def link_account_direct(
        self,
        user_handle: str,
        user_private_key: str,
        account_number: str,
        routing_number: str,
        account_name: str | None = None,
        account_type: str | None = None,
    ) -> ApiResponse:
        """Links a bank account by account and routing number."""
        message = LinkAccountMessage(
            self._header(user_handle),
            account_name=account_name,
            account_number=account_number,
            routing_number=routing_number,
            account_type=account_type,
        )
        return self._call(ops.LINK_ACCOUNT, message, user_private_key)

    def get_accounts(self, user_handle: str, user_private_key: str) -> ApiResponse:
        """Lists bank accounts linked to the handle (data: tuple of Account)."""
        return self._call(
            ops.GET_ACCOUNTS, GetAccountsMessage(self._header(user_handle)), user_private_key
        )

    def get_account_balance(
        self, user_handle: str, user_private_key: str, account_name: str
    ) -> ApiResponse:
        message = GetAccountBalanceMessage(self._header(user_handle), account_name)
        return self._call(ops.GET_ACCOUNT_BALANCE, message, user_private_key)

    def plaid_sameday_auth(self, user_handle: str, account_name: str) -> ApiResponse:
        """Gets a public token for the second phase of Plaid same-day auth."""
        message = PlaidSamedayAuthMessage(self._header(user_handle), account_name)
        return self._call(ops.PLAID_SAMEDAY_AUTH, message)

    # -----------------------------------------------------------------
    # Tokens
    # -----------------------------------------------------------------

    def issue_sila(
        self, user_handle: str, amount: int, account_name: str, user_private_key: str
    ) -> ApiResponse:
        """Debits a linked account and issues tokens to the handle's address."""
        message = IssueMessage(self._header(user_handle), amount, account_name)
        return self._call(ops.ISSUE_SILA, message, user_private_key)

    def transfer_sila(
        self,
        user_handle: str,
        destination: str,
        amount: int,
        user_private_key: str,
        destination_address: str | None = None,
    ) -> ApiResponse:
        """Transfers tokens to another handle (optionally a specific address)."""
        message = TransferMessage(
            self._header(user_handle),
            destination_handle=destination,
            amount=amount,
            destination_address=destination_address or None,
        )
        return self._call(ops.TRANSFER_SILA, message, user_private_key)

    def redeem_sila(
        self, user_handle: str, amount: int, account_name: str, user_private_key: str
    ) -> ApiResponse:
        """Burns tokens and credits the named bank account."""
        message = RedeemMessage(self._header(user_handle), amount, account_name)
        return self._call(ops.REDEEM_SILA, message, user_private_key)

    def get_transactions(
        self,
        user_handle: str,
        user_private_key: str,
        search_filters: SearchFilters | None = None,
    ) -> ApiResponse:
        message = GetTransactionsMessage(
            self._header(user_handle), search_filters or SearchFilters()
        )
        return self._call(ops.GET_TRANSACTIONS, message, user_private_key)

    def sila_balance(self, address: str) -> ApiResponse:
        """Token balance of a blockchain address. Public, unsigned."""
        return self._call(ops.SILA_BALANCE, SilaBalanceMessage(address))

    # -----------------------------------------------------------------
    # Wallets
    # -----------------------------------------------------------------

    def get_wallet(self, user_handle: str, user_private_key: str) -> ApiResponse:
        """Details of the wallet whose key signs the usersignature header."""
        return self._call(
            ops.GET_WALLET, GetWalletMessage(self._header(user_handle)), user_private_key
        )

    def register_wallet(
        self,
        user_handle: str,
        wallet: Wallet,
        wallet_verification_signature: str,
        user_private_key: str,
    ) -> ApiResponse:
        """Adds another blockchain address to the handle."""
        message = RegisterWalletMessage(
            self._header(user_handle), wallet, wallet_verification_signature
        )
        return self._call(ops.REGISTER_WALLET, message, user_private_key)

    def update_wallet(
        self,
        user_handle: str,
        user_private_key: str,
        nickname: str | None = None,
        default: bool | None = None,
    ) -> ApiResponse:
        message = UpdateWalletMessage(self._header(user_handle), nickname=nickname, default=default)
        return self._call(ops.UPDATE_WALLET, message, user_private_key)

    def delete_wallet(self, user_handle: str, user_private_key: str) -> ApiResponse:
        return self._call(
            ops.DELETE_WALLET, DeleteWalletMessage(self._header(user_handle)), user_private_key
        )

    def get_wallets(
        self,
        user_handle: str,
        user_private_key: str,
        search_filters: SearchFilters | None = None,
    ) -> ApiResponse:
        message = GetWalletsMessage(self._header(user_handle), search_filters)
        return self._call(ops.GET_WALLETS, message, user_private_key)

    @staticmethod
    def generate_wallet(
        private_key: str | None = None, address: str | None = None
    ) -> SilaWallet:
        return SilaWallet(private_key, address)

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    def close(self) -> None:
        """Close transports this client created."""
        for transport in self._owned:
            transport.close()

    def __enter__(self) -> SilaApi:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
