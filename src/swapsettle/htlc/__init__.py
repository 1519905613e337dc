"""HTLC secrets and hash locks for cross-chain settlement."""

from swapsettle.htlc.hashlock import (
    FillMode,
    HashLock,
    HashLockBundle,
    Secret,
    build_hash_lock,
    generate_secrets,
    hash_lock_for,
    hash_secret,
    merkle_leaves,
    merkle_root,
)

__all__ = [
    "FillMode",
    "HashLock",
    "HashLockBundle",
    "Secret",
    "build_hash_lock",
    "generate_secrets",
    "hash_lock_for",
    "hash_secret",
    "merkle_leaves",
    "merkle_root",
]
