"""Signing collaborator.

- SignerBackend: opaque sign(payload) -> signature capability
- LocalSigner: in-memory key via eth-account
"""

from swapsettle.signing.base import (
    KeyNotFoundError,
    SignerBackend,
    SignerType,
    SigningError,
)
from swapsettle.signing.factory import create_signer
from swapsettle.signing.local import LocalSigner

__all__ = [
    "KeyNotFoundError",
    "LocalSigner",
    "SignerBackend",
    "SignerType",
    "SigningError",
    "create_signer",
]
