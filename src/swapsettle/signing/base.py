"""Base interface for order and transaction signing.

Signing flow:
1. Venue builds an unsigned payload (EIP-712 order or raw transaction)
2. Payload is handed to a signer backend
3. Signer returns a signature or signed transaction, never key material
4. Venue submits the signed payload
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum

logger = logging.getLogger(__name__)


class SignerType(str, Enum):
    """Type of signing backend."""
    LOCAL = "local"           # Private key in memory (hot wallet)
    REMOTE = "remote"         # External custody service


class SignerBackend(ABC):
    """Abstract base class for signing backends.

    Implementations should NEVER expose raw private keys.
    """

    def __init__(self, signer_type: SignerType):
        self.signer_type = signer_type

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed address of the signing key."""

    @abstractmethod
    async def sign_typed_data(self, typed_data: dict) -> str:
        """Sign an EIP-712 payload.

        Args:
            typed_data: Full typed data (domain, types, primaryType, message)

        Returns:
            0x-prefixed 65-byte signature
        """

    @abstractmethod
    async def sign_transaction(self, transaction: dict) -> str:
        """Sign an EVM transaction.

        Returns:
            0x-prefixed raw signed transaction
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.signer_type.value})"


class SigningError(Exception):
    """Exception raised when signing fails."""
    pass


class KeyNotFoundError(SigningError):
    """Exception raised when no signing key is configured."""
    pass
