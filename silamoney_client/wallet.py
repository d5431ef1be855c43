"""
Opaque secp256k1 keypair holder for user handles and extra wallets.
"""

from __future__ import annotations

from eth_account import Account

from silamoney_client.signing import address_of, sign, strip_hex_prefix


class SilaWallet:
    """A private key and its blockchain address.

    Args:
        private_key: Hex private key. A fresh key is generated when omitted.
        address: Expected address. Must match the key's derived address
            when both are given.

    Raises:
        ValueError: If ``address`` does not belong to ``private_key``.
    """

    def __init__(self, private_key: str | None = None, address: str | None = None) -> None:
        if private_key is None:
            account = Account.create()
            private_key = account.key.hex()
        derived = address_of(private_key)
        if address is not None and address.lower() != derived.lower():
            raise ValueError(f"address {address!r} does not match private key")
        self._private_key = strip_hex_prefix(private_key.strip())
        self._address = derived

    @property
    def private_key(self) -> str:
        return self._private_key

    @property
    def address(self) -> str:
        return self._address

    def sign(self, message: bytes | str) -> str:
        """Sign a message with this wallet's key."""
        return sign(message, self._private_key)

    def verification_signature(self) -> str:
        """Signature over the wallet's own address (proves key ownership)."""
        return self.sign(self._address)

    def __repr__(self) -> str:
        return f"SilaWallet(address={self._address!r})"
