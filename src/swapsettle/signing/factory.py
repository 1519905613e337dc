"""Signer factory.

Creates the signing backend from configuration. In dry-run mode without a
configured key an ephemeral key is generated so the full order flow can run.
"""

import logging
from typing import Optional

from eth_account import Account

from swapsettle.config import Settings, get_settings
from swapsettle.signing.base import KeyNotFoundError, SignerBackend
from swapsettle.signing.local import LocalSigner

logger = logging.getLogger(__name__)


def create_signer(settings: Optional[Settings] = None) -> SignerBackend:
    """Create the configured signer.

    Raises:
        KeyNotFoundError: If no key is configured outside dry-run mode
    """
    settings = settings or get_settings()

    if settings.has_signer:
        return LocalSigner(settings.signer_private_key.get_secret_value())

    if settings.dry_run:
        logger.warning("SIGNER_PRIVATE_KEY not set, using an ephemeral dry-run key")
        return LocalSigner(Account.create().key.hex())

    raise KeyNotFoundError("SIGNER_PRIVATE_KEY is required when DRY_RUN=false")
