"""Local signing backend.

Uses an in-memory private key. Suitable for development and small hot
wallets; key custody itself is handled outside this package.
"""

import logging
from typing import Optional

from eth_account import Account

from swapsettle.signing.base import (
    KeyNotFoundError,
    SignerBackend,
    SignerType,
    SigningError,
)

logger = logging.getLogger(__name__)


class LocalSigner(SignerBackend):
    """Signs EIP-712 orders and transactions with an in-memory key."""

    def __init__(self, private_key: Optional[str]):
        super().__init__(SignerType.LOCAL)
        if not private_key:
            raise KeyNotFoundError("No private key configured for local signer")
        try:
            self._account = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise SigningError(f"Invalid private key: {type(e).__name__}") from e
        logger.info(f"Loaded local signer for {self._account.address}")

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_typed_data(self, typed_data: dict) -> str:
        try:
            signed = self._account.sign_typed_data(full_message=typed_data)
        except Exception as e:
            logger.error(f"Typed data signing failed: {type(e).__name__}: {e}")
            raise SigningError(str(e)) from e
        return "0x" + bytes(signed.signature).hex()

    async def sign_transaction(self, transaction: dict) -> str:
        try:
            signed = self._account.sign_transaction(transaction)
        except Exception as e:
            logger.error(f"Transaction signing failed: {type(e).__name__}: {e}")
            raise SigningError(str(e)) from e
        return "0x" + bytes(signed.raw_transaction).hex()
