"""Quote routing across same-chain and cross-chain venues.

The router decides the settlement mechanism from the chain ids alone and
talks only to the venues registered for that route. For same-chain swaps a
fee-on-transfer rejection from the primary venue is retried exactly once on
the chain's raw swap venue.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from swapsettle.chains import is_valid_address, resolve_token
from swapsettle.errors import (
    ConfigurationError,
    FeeOnTransferRejected,
    InvalidRequest,
    RouteUnavailable,
)
from swapsettle.routing.base import (
    CrossChainVenue,
    Quote,
    QuoteRequest,
    SameChainVenue,
    SwapRoute,
)

logger = logging.getLogger(__name__)


@dataclass
class VenueRegistry:
    """Venue clients keyed by chain id."""

    same_chain: dict[int, SameChainVenue] = field(default_factory=dict)
    raw_swap: dict[int, SameChainVenue] = field(default_factory=dict)
    cross_chain: Optional[CrossChainVenue] = None

    @property
    def chain_ids(self) -> list[int]:
        return sorted(self.same_chain)

    def supports(self, chain_id: int) -> bool:
        return chain_id in self.same_chain

    def validate(self, required_chain_ids: Iterable[int]) -> None:
        """Fail fast when a required chain has no client.

        Raises:
            ConfigurationError: Listing every missing venue
        """
        required = sorted(set(required_chain_ids))
        problems = []

        for chain_id in required:
            if chain_id not in self.same_chain:
                problems.append(f"no same-chain venue for chain {chain_id}")
            if chain_id not in self.raw_swap:
                problems.append(f"no raw swap venue for chain {chain_id}")

        if len(required) > 1 and self.cross_chain is None:
            problems.append("no cross-chain venue")

        if problems:
            raise ConfigurationError("Venue registry incomplete: " + "; ".join(problems))

    async def close(self) -> None:
        """Close every venue's connections."""
        venues: list = [*self.same_chain.values(), *self.raw_swap.values()]
        if self.cross_chain is not None:
            venues.append(self.cross_chain)
        for venue in venues:
            try:
                await venue.close()
            except Exception as e:
                logger.warning(f"Error closing {venue.name}: {e}")


class QuoteRouter:
    """Routes quote requests to the venue responsible for them."""

    def __init__(
        self,
        registry: VenueRegistry,
        required_chain_ids: Optional[Iterable[int]] = None,
    ):
        registry.validate(registry.chain_ids if required_chain_ids is None else required_chain_ids)
        self.registry = registry

    def prepare(self, request: QuoteRequest) -> QuoteRequest:
        """Validate a request and resolve token symbols to addresses.

        Raises:
            InvalidRequest: Malformed amount or wallet address
            AmountTooSmall: Zero amount
            RouteUnavailable: A chain has no registered venue
            TokenUnsupported: Unknown token symbol or bad token address
        """
        request.amount_int  # raises on a malformed or zero amount

        if not is_valid_address(request.wallet_address):
            raise InvalidRequest(
                f"Invalid wallet address {request.wallet_address!r}",
                user_message="Invalid wallet address.",
            )

        for chain_id in (request.source_chain_id, request.dest_chain_id):
            if not self.registry.supports(chain_id):
                raise RouteUnavailable(f"No venue registered for chain {chain_id}")

        if request.route is SwapRoute.CROSS_CHAIN and self.registry.cross_chain is None:
            raise RouteUnavailable("No cross-chain venue registered")

        return replace(
            request,
            source_token=resolve_token(request.source_chain_id, request.source_token),
            dest_token=resolve_token(request.dest_chain_id, request.dest_token),
        )

    async def get_quote(self, request: QuoteRequest) -> Quote:
        """Quote a swap on whichever venue its route calls for."""
        request = self.prepare(request)

        if request.route is SwapRoute.SAME_CHAIN:
            quote, _ = await self.quote_same_chain(request)
            return quote
        return await self.quote_cross_chain(request)

    async def quote_same_chain(self, request: QuoteRequest) -> tuple[Quote, SameChainVenue]:
        """Quote on the chain's primary venue, falling back once on fee-on-transfer.

        Returns:
            The quote and the venue that produced it
        """
        chain_id = request.source_chain_id
        primary = self.registry.same_chain[chain_id]

        try:
            return await primary.quote(request), primary
        except FeeOnTransferRejected as e:
            fallback = self.raw_swap_venue(chain_id)
            if fallback is None:
                raise
            logger.info(f"{primary.name} rejected fee-on-transfer token ({e.detail}); using {fallback.name}")

        return await fallback.quote(request), fallback

    async def quote_cross_chain(self, request: QuoteRequest) -> Quote:
        venue = self.cross_chain_venue
        return await venue.quote(request)

    def raw_swap_venue(self, chain_id: int) -> Optional[SameChainVenue]:
        return self.registry.raw_swap.get(chain_id)

    @property
    def cross_chain_venue(self) -> CrossChainVenue:
        if self.registry.cross_chain is None:
            raise RouteUnavailable("No cross-chain venue registered")
        return self.registry.cross_chain
