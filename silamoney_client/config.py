"""
Client configuration: environments and credentials.

Environments are closed enums resolved through lookup tables when the
Configuration is built. The resolved Configuration is passed explicitly
to the client; nothing is read from module state at call time.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeVar

from silamoney_client import __version__
from silamoney_client.errors import ConfigurationError


class Environment(StrEnum):
    SANDBOX = "SANDBOX"
    PRODUCTION = "PRODUCTION"


class BalanceEnvironment(StrEnum):
    SANDBOX = "SANDBOX"
    PRODUCTION = "PRODUCTION"


class Version(StrEnum):
    """Header version tag."""

    ZERO_2 = "0.2"
    V0_2 = "v0.2"


class Crypto(StrEnum):
    ETH = "ETH"


_API_URLS: dict[Environment, str] = {
    Environment.SANDBOX: "https://sandbox.silamoney.com/0.2",
    Environment.PRODUCTION: "https://api.silamoney.com/0.2",
}

_BALANCE_URLS: dict[BalanceEnvironment, str] = {
    BalanceEnvironment.SANDBOX: "https://sandbox.silatokenapi.silamoney.com",
    BalanceEnvironment.PRODUCTION: "https://silatokenapi.silamoney.com",
}

DEFAULT_TIMEOUT_S = 30.0
DEFAULT_USER_AGENT = f"SilaSDK-python/{__version__}"


_E = TypeVar("_E", bound=StrEnum)


def _parse_enum(enum_cls: type[_E], value: str, name: str) -> _E:
    try:
        return enum_cls(value.strip().upper())
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(
            f"{name} must be one of {allowed}, got: {value!r}",
            error_code="CONFIG_INVALID",
            details={"name": name},
        ) from e


@dataclass(frozen=True)
class Configuration:
    """Resolved client settings.

    Attributes:
        app_handle: Handle of the integrating application.
        private_key: Application private key (hex). Hidden from repr.
        environment: API environment.
        balance_environment: Token-balance service environment.
        timeout_s: Per-request timeout handed to the transport.
        user_agent: User-Agent header sent with every request.
    """

    app_handle: str
    private_key: str = field(repr=False)
    environment: Environment = Environment.SANDBOX
    balance_environment: BalanceEnvironment = BalanceEnvironment.SANDBOX
    timeout_s: float = DEFAULT_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if not self.app_handle:
            raise ConfigurationError("app_handle must be non-empty", error_code="CONFIG_MISSING")
        if not self.private_key:
            raise ConfigurationError("private_key must be non-empty", error_code="CONFIG_MISSING")
        if self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be > 0, got: {self.timeout_s}",
                error_code="CONFIG_INVALID",
            )

    @property
    def api_url(self) -> str:
        return _API_URLS[self.environment]

    @property
    def balance_url(self) -> str:
        return _BALANCE_URLS[self.balance_environment]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Configuration:
        """Build a Configuration from environment variables.

        Reads SILA_APP_HANDLE and SILA_PRIVATE_KEY (required), plus
        SILA_ENVIRONMENT, SILA_BALANCE_ENVIRONMENT and SILA_TIMEOUT_S.
        """
        env = os.environ if environ is None else environ
        missing = [k for k in ("SILA_APP_HANDLE", "SILA_PRIVATE_KEY") if not env.get(k)]
        if missing:
            raise ConfigurationError(
                f"Missing required settings: {', '.join(missing)}",
                error_code="CONFIG_MISSING",
                details={"missing": missing},
            )

        timeout_raw = env.get("SILA_TIMEOUT_S")
        try:
            timeout_s = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_S
        except ValueError as e:
            raise ConfigurationError(
                f"SILA_TIMEOUT_S must be a number, got: {timeout_raw!r}",
                error_code="CONFIG_INVALID",
            ) from e

        return cls(
            app_handle=env["SILA_APP_HANDLE"],
            private_key=env["SILA_PRIVATE_KEY"],
            environment=_parse_enum(
                Environment, env.get("SILA_ENVIRONMENT", "SANDBOX"), "SILA_ENVIRONMENT"
            ),
            balance_environment=_parse_enum(
                BalanceEnvironment,
                env.get("SILA_BALANCE_ENVIRONMENT", "SANDBOX"),
                "SILA_BALANCE_ENVIRONMENT",
            ),
            timeout_s=timeout_s,
        )
