"""HTLC secret generation and hash lock construction.

A cross-chain order is locked by a hash lock that counterparties can verify
without knowing the secrets:

- one fill allowed: hash lock = keccak256(secret)
- N > 1 partial fills: each secret i becomes a Merkle leaf
  keccak256(uint64(i) || keccak256(secret_i)); the hash lock is the sorted-pair
  Merkle root with its top 16 bits replaced by N - 1.

Secret values never leave this process until the settlement watcher discloses
them for a fill index the venue reported ready.
"""

import logging
import secrets as _random
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from eth_utils import keccak

from swapsettle.errors import InvalidSecretsCount

logger = logging.getLogger(__name__)

SECRET_SIZE = 32

# Top 16 bits of a multi-fill hash lock carry the number of parts minus one.
_PARTS_SHIFT = 240
_ROOT_MASK = (1 << _PARTS_SHIFT) - 1


@dataclass(frozen=True, repr=False)
class Secret:
    """32 random bytes gating one fill of an HTLC escrow."""

    value: bytes

    def __post_init__(self):
        if len(self.value) != SECRET_SIZE:
            raise ValueError(f"Secret must be {SECRET_SIZE} bytes, got {len(self.value)}")

    def __repr__(self) -> str:
        return "Secret(***)"

    __str__ = __repr__

    @property
    def hashed(self) -> bytes:
        return hash_secret(self)

    def reveal(self) -> str:
        """Hex form sent to the venue on disclosure."""
        return "0x" + self.value.hex()


class FillMode(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class HashLock:
    """Committed hash gating escrow release."""

    value: bytes
    mode: FillMode

    @classmethod
    def for_single_fill(cls, secret: Secret) -> "HashLock":
        return cls(value=hash_secret(secret), mode=FillMode.SINGLE)

    @classmethod
    def for_multiple_fills(cls, leaves: Sequence[bytes]) -> "HashLock":
        if len(leaves) < 2:
            raise InvalidSecretsCount(
                f"multi-fill hash lock needs at least 2 leaves, got {len(leaves)}"
            )
        root = int.from_bytes(merkle_root(leaves), "big")
        value = (root & _ROOT_MASK) | ((len(leaves) - 1) << _PARTS_SHIFT)
        return cls(value=value.to_bytes(32, "big"), mode=FillMode.MULTIPLE)

    @property
    def parts_count(self) -> int:
        """Number of partial fills this lock admits."""
        if self.mode is FillMode.SINGLE:
            return 1
        return (int.from_bytes(self.value, "big") >> _PARTS_SHIFT) + 1

    @property
    def hex(self) -> str:
        return "0x" + self.value.hex()


@dataclass
class HashLockBundle:
    """Secrets, hash lock and per-index secret hashes for one order."""

    secrets: list[Secret] = field(repr=False)
    hash_lock: HashLock
    secret_hashes: list[bytes]

    @property
    def secret_hashes_hex(self) -> list[str]:
        return ["0x" + h.hex() for h in self.secret_hashes]


def hash_secret(secret: Secret) -> bytes:
    return keccak(secret.value)


def generate_secrets(count: int) -> list[Secret]:
    """Generate ``count`` fresh random secrets."""
    return [Secret(_random.token_bytes(SECRET_SIZE)) for _ in range(count)]


def merkle_leaves(secret_hashes: Sequence[bytes]) -> list[bytes]:
    """Build per-index Merkle leaves from secret hashes."""
    return [
        keccak(index.to_bytes(8, "big") + secret_hash)
        for index, secret_hash in enumerate(secret_hashes)
    ]


def _hash_pair(a: bytes, b: bytes) -> bytes:
    return keccak(a + b) if a <= b else keccak(b + a)


def merkle_root(leaves: Sequence[bytes]) -> bytes:
    """Root of a sorted-leaf, sorted-pair Merkle tree.

    The tree is laid out as a flat array with leaves at the tail in reverse
    order and node i hashing children 2i+1 and 2i+2.
    """
    if not leaves:
        raise ValueError("Cannot build a Merkle tree without leaves")

    ordered = sorted(leaves)
    size = 2 * len(ordered) - 1
    tree: list[bytes] = [b""] * size

    for i, leaf in enumerate(ordered):
        tree[size - 1 - i] = leaf

    for i in range(size - 1 - len(ordered), -1, -1):
        tree[i] = _hash_pair(tree[2 * i + 1], tree[2 * i + 2])

    return tree[0]


def hash_lock_for(secrets: Sequence[Secret]) -> HashLock:
    """Pick the single-fill or multi-fill construction for a set of secrets."""
    if len(secrets) == 1:
        return HashLock.for_single_fill(secrets[0])
    return HashLock.for_multiple_fills(merkle_leaves([hash_secret(s) for s in secrets]))


def build_hash_lock(secrets_count: int) -> HashLockBundle:
    """Generate secrets and the hash lock for a settlement preset.

    Args:
        secrets_count: Number of secrets the venue preset advertises (>= 1)

    Returns:
        HashLockBundle with exactly ``secrets_count`` secrets and secret hashes

    Raises:
        InvalidSecretsCount: If ``secrets_count`` is not a positive integer
    """
    if not isinstance(secrets_count, int) or isinstance(secrets_count, bool) or secrets_count < 1:
        raise InvalidSecretsCount(f"secretsCount must be >= 1, got {secrets_count!r}")

    secrets = generate_secrets(secrets_count)
    secret_hashes = [hash_secret(s) for s in secrets]
    hash_lock = hash_lock_for(secrets)

    logger.debug(
        f"Built {hash_lock.mode.value}-fill hash lock {hash_lock.hex} "
        f"over {secrets_count} secret(s)"
    )
    return HashLockBundle(secrets=secrets, hash_lock=hash_lock, secret_hashes=secret_hashes)
