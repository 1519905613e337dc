"""Pytest configuration and fixtures."""

import os
from typing import Optional
from unittest.mock import MagicMock

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DRY_RUN"] = "true"
os.environ["DEBUG"] = "true"
os.environ["ONEINCH_API_KEY"] = ""
os.environ["ENABLED_CHAIN_IDS"] = "1,8453"

from swapsettle.chains import CHAINS
from swapsettle.routing.base import (
    CrossChainVenue,
    OrderStatus,
    Quote,
    QuoteRequest,
    SameChainVenue,
    SubmissionReceipt,
)
from swapsettle.routing.router import QuoteRouter, VenueRegistry
from swapsettle.signing.local import LocalSigner

# Well-known development key, never funded on mainnet
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
WALLET = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"

ETHEREUM = 1
BASE = 8453

USDC_ETHEREUM = CHAINS[ETHEREUM].tokens["USDC"]
ETH_ETHEREUM = CHAINS[ETHEREUM].tokens["ETH"]
USDC_BASE = CHAINS[BASE].tokens["USDC"]

ORDER_HASH = "0x" + "ab" * 32


def make_request(
    source_chain_id: int = ETHEREUM,
    dest_chain_id: int = ETHEREUM,
    source_token: str = "USDC",
    dest_token: str = "ETH",
    amount: str = "100000000",
    wallet_address: str = WALLET,
) -> QuoteRequest:
    return QuoteRequest(
        source_token=source_token,
        dest_token=dest_token,
        source_chain_id=source_chain_id,
        dest_chain_id=dest_chain_id,
        amount=amount,
        wallet_address=wallet_address,
    )


def quote_for(
    request: QuoteRequest,
    venue: str = "stub",
    dest_amount: int = 25_000_000_000_000_000,
    secrets_count: Optional[int] = None,
) -> Quote:
    return Quote(
        source_token=request.source_token,
        dest_token=request.dest_token,
        source_chain_id=request.source_chain_id,
        dest_chain_id=request.dest_chain_id,
        source_amount=request.amount_int,
        dest_amount=dest_amount,
        estimated_gas=150_000,
        price_impact_bps=30,
        venue=venue,
        preset="fast" if secrets_count else None,
        secrets_count=secrets_count,
    )


def make_same_chain_venue(name: str = "primary", status: OrderStatus = OrderStatus.SUBMITTED):
    """Same-chain venue stub quoting every request and accepting every order."""
    venue = MagicMock(spec=SameChainVenue)
    venue.name = name
    venue.quote.side_effect = lambda request: quote_for(request, venue=name)
    if status is OrderStatus.PENDING:
        venue.submit.return_value = SubmissionReceipt(status=status, tx_hash="0x" + "cd" * 32)
    else:
        venue.submit.return_value = SubmissionReceipt(status=status, order_hash=ORDER_HASH)
    venue.get_orders_by_maker.return_value = []
    return venue


def make_cross_chain_venue(secrets_count: int = 4):
    """Cross-chain venue stub; the order stays pending unless told otherwise."""
    venue = MagicMock(spec=CrossChainVenue)
    venue.name = "cross"
    venue.quote.side_effect = lambda request: quote_for(
        request, venue="cross", secrets_count=secrets_count
    )
    venue.submit.return_value = SubmissionReceipt(
        status=OrderStatus.SUBMITTED, order_hash=ORDER_HASH
    )
    venue.get_ready_fills.return_value = []
    venue.get_order_status.return_value = OrderStatus.SUBMITTED
    venue.get_orders_by_maker.return_value = []
    return venue


@pytest.fixture
def same_chain_venue():
    return make_same_chain_venue("primary")


@pytest.fixture
def raw_swap_venue():
    return make_same_chain_venue("raw", status=OrderStatus.PENDING)


@pytest.fixture
def cross_chain_venue():
    return make_cross_chain_venue()


@pytest.fixture
def registry(same_chain_venue, raw_swap_venue, cross_chain_venue) -> VenueRegistry:
    """Registry serving Ethereum and Base with the stub venues."""
    return VenueRegistry(
        same_chain={ETHEREUM: same_chain_venue, BASE: same_chain_venue},
        raw_swap={ETHEREUM: raw_swap_venue, BASE: raw_swap_venue},
        cross_chain=cross_chain_venue,
    )


@pytest.fixture
def router(registry) -> QuoteRouter:
    return QuoteRouter(registry)


@pytest.fixture
def signer() -> LocalSigner:
    return LocalSigner(TEST_PRIVATE_KEY)
