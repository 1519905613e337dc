"""Swap engine facade.

Wires the quote router, order executor and settlement watchers together and
keeps an in-memory view of the orders it placed.
"""

import logging
from collections import OrderedDict
from typing import Iterable, Optional

from swapsettle.config import Settings, get_settings
from swapsettle.errors import InvalidRequest, SwapError
from swapsettle.routing.base import Order, OrderStatus, Quote, QuoteRequest, SwapRoute
from swapsettle.routing.factory import create_venue_registry
from swapsettle.routing.router import QuoteRouter, VenueRegistry
from swapsettle.signing.base import SignerBackend
from swapsettle.signing.factory import create_signer
from swapsettle.swap_engine.events import OrderEvent, OrderListener, OrderNotifier
from swapsettle.swap_engine.executor import OrderExecutor
from swapsettle.swap_engine.watcher import WatcherConfig, WatcherRegistry

logger = logging.getLogger(__name__)


class SwapEngine:
    """Entry point for quoting, placing and tracking swaps."""

    max_orders = 10_000

    def __init__(
        self,
        registry: VenueRegistry,
        signer: SignerBackend,
        watcher_config: Optional[WatcherConfig] = None,
        required_chain_ids: Optional[Iterable[int]] = None,
    ):
        self.registry = registry
        self.notifier = OrderNotifier()
        self.router = QuoteRouter(registry, required_chain_ids)
        self.watchers = WatcherRegistry(watcher_config, self.notifier)
        self.executor = OrderExecutor(self.router, signer, self.watchers, self.notifier)
        self._orders: OrderedDict[str, Order] = OrderedDict()
        self.notifier.add_listener(self._track)

    def add_listener(self, listener: OrderListener) -> None:
        """Register an async listener for placed / status / watch_timeout events."""
        self.notifier.add_listener(listener)

    async def _track(self, event: OrderEvent) -> None:
        self._orders[event.order.order_hash] = event.order
        self._orders.move_to_end(event.order.order_hash)
        while len(self._orders) > self.max_orders:
            self._orders.popitem(last=False)

    async def get_quote(self, request: QuoteRequest) -> Quote:
        return await self.router.get_quote(request)

    async def place_order(self, request: QuoteRequest) -> Order:
        return await self.executor.place_order(request)

    def get_order(self, order_hash: str) -> Optional[Order]:
        """Latest local view of an order placed by this engine."""
        return self.watchers.get_order(order_hash) or self._orders.get(order_hash)

    async def get_order_status(self, order_hash: str) -> OrderStatus:
        """One-shot status lookup.

        Cross-chain orders are asked of the venue; same-chain orders are only
        known up to submission.

        Raises:
            InvalidRequest: If the order is unknown and no cross-chain venue exists
        """
        order = self.get_order(order_hash)
        if order is not None and (order.route is SwapRoute.SAME_CHAIN or order.status.is_terminal):
            return order.status

        if self.registry.cross_chain is None:
            raise InvalidRequest(f"Unknown order {order_hash}", user_message="Order not found.")
        return await self.registry.cross_chain.get_order_status(order_hash)

    async def get_active_orders(self, wallet_address: str) -> list[dict]:
        """Active orders of a wallet: the venues' view merged with local watchers.

        A venue that fails the lookup is skipped; locally watched orders are
        always returned.
        """
        orders: list[dict] = []
        seen: set[str] = set()

        venues: list = []
        for venue in self.registry.same_chain.values():
            if all(venue is not known for known in venues):
                venues.append(venue)
        if self.registry.cross_chain is not None:
            venues.append(self.registry.cross_chain)

        for venue in venues:
            try:
                items = await venue.get_orders_by_maker(wallet_address)
            except SwapError as e:
                logger.warning(f"Active order lookup on {venue.name} failed for {wallet_address}: {e}")
                continue
            for item in items:
                order_hash = item.get("orderHash")
                if order_hash:
                    if order_hash in seen:
                        continue
                    seen.add(order_hash)
                orders.append(item)

        lowered = wallet_address.lower()
        for order_hash in self.watchers.active:
            order = self.watchers.get_order(order_hash)
            if order is None or order_hash in seen or order.wallet_address.lower() != lowered:
                continue
            orders.append(
                {
                    "orderHash": order.order_hash,
                    "status": order.status.value,
                    "srcChainId": order.quote.source_chain_id,
                    "dstChainId": order.quote.dest_chain_id,
                    "srcTokenAddress": order.quote.source_token,
                    "dstTokenAddress": order.quote.dest_token,
                    "srcAmount": str(order.quote.source_amount),
                }
            )
        return orders

    async def shutdown(self) -> None:
        """Cancel settlement watchers and close venue connections."""
        await self.watchers.shutdown()
        await self.registry.close()
        logger.info("Swap engine stopped")


def create_engine(
    settings: Optional[Settings] = None,
    registry: Optional[VenueRegistry] = None,
    signer: Optional[SignerBackend] = None,
) -> SwapEngine:
    """Build the engine from configuration.

    Raises:
        ConfigurationError: If an enabled chain has no venue
    """
    settings = settings or get_settings()
    engine = SwapEngine(
        registry=registry or create_venue_registry(settings),
        signer=signer or create_signer(settings),
        watcher_config=WatcherConfig(
            poll_interval=settings.watcher_poll_interval,
            max_iterations=settings.watcher_max_iterations,
        ),
        required_chain_ids=settings.chain_ids,
    )
    logger.info(f"Swap engine ready for chains {settings.chain_ids} (dry_run={settings.dry_run})")
    return engine
