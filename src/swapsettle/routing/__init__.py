"""Routing module for swap quotes and venue clients.

Venues:
- 1inch Fusion: same-chain intent swaps (primary)
- 1inch Swap API: raw aggregation swaps (fee-on-transfer fallback)
- 1inch Fusion+: cross-chain HTLC swaps
- Dry-run: simulated venues for all of the above
"""

from swapsettle.routing.base import (
    CrossChainVenue,
    Order,
    OrderStatus,
    Quote,
    QuoteRequest,
    SameChainVenue,
    SubmissionReceipt,
    SwapRoute,
    route_for,
)
from swapsettle.routing.factory import create_venue_registry
from swapsettle.routing.router import QuoteRouter, VenueRegistry

__all__ = [
    # Data model
    "Order",
    "OrderStatus",
    "Quote",
    "QuoteRequest",
    "SubmissionReceipt",
    "SwapRoute",
    "route_for",
    # Venue interfaces
    "CrossChainVenue",
    "SameChainVenue",
    # Routing
    "QuoteRouter",
    "VenueRegistry",
    "create_venue_registry",
]
