"""Order executor.

Turns a quote request into a submitted order. Every order is built from a
fresh quote, never from one the caller saw earlier.

Same-chain: quote and submit on the chain's primary venue, falling back once
to the raw swap venue when the token charges a fee on transfer.
Cross-chain: build a hash lock from the quote's secrets count, submit with
the secret hashes, then hand the secrets to a background settlement watcher.
"""

import logging
from typing import Awaitable, Optional

from swapsettle.errors import FeeOnTransferRejected, InvalidRequest, SubmissionFailed, SwapError
from swapsettle.htlc.hashlock import build_hash_lock
from swapsettle.routing.base import (
    Order,
    OrderStatus,
    QuoteRequest,
    SubmissionReceipt,
    SwapRoute,
)
from swapsettle.routing.router import QuoteRouter
from swapsettle.signing.base import SignerBackend, SigningError
from swapsettle.swap_engine.events import OrderEventType, OrderNotifier
from swapsettle.swap_engine.watcher import WatcherRegistry

logger = logging.getLogger(__name__)


class OrderExecutor:
    """Places orders on the venue the router selects."""

    def __init__(
        self,
        router: QuoteRouter,
        signer: SignerBackend,
        watchers: WatcherRegistry,
        notifier: Optional[OrderNotifier] = None,
    ):
        self.router = router
        self.signer = signer
        self.watchers = watchers
        self.notifier = notifier

    async def place_order(self, request: QuoteRequest) -> Order:
        """Place an order and return it without waiting for settlement.

        Raises:
            InvalidRequest: If the wallet is not the signing key's address
            SwapError: Classified quote or submission failure
        """
        request = self.router.prepare(request)
        if request.wallet_address.lower() != self.signer.address.lower():
            raise InvalidRequest(
                f"Wallet {request.wallet_address} does not match signer {self.signer.address}",
                user_message="Wallet address does not match the signing key.",
            )

        if request.route is SwapRoute.SAME_CHAIN:
            order = await self._place_same_chain(request)
        else:
            order = await self._place_cross_chain(request)

        if self.notifier:
            await self.notifier.notify(OrderEventType.PLACED, order)
        return order

    async def _place_same_chain(self, request: QuoteRequest) -> Order:
        chain_id = request.source_chain_id
        quote, venue = await self.router.quote_same_chain(request)

        try:
            receipt = await self._submit(venue.submit(request, quote, self.signer), venue.name)
        except FeeOnTransferRejected:
            fallback = self.router.raw_swap_venue(chain_id)
            if fallback is None or fallback is venue:
                raise
            logger.info(f"{venue.name} refused fee-on-transfer token at submit; using {fallback.name}")
            venue = fallback
            quote = await venue.quote(request)
            receipt = await self._submit(venue.submit(request, quote, self.signer), venue.name)

        order = Order(
            order_hash=receipt.reference,
            route=SwapRoute.SAME_CHAIN,
            wallet_address=request.wallet_address,
            status=OrderStatus.CREATED,
            venue=venue.name,
            quote=quote,
            tx_hash=receipt.tx_hash,
        ).with_status(receipt.status)

        logger.info(f"Same-chain order {order.order_hash} on {venue.name}: {order.status.value}")
        return order

    async def _place_cross_chain(self, request: QuoteRequest) -> Order:
        venue = self.router.cross_chain_venue
        quote = await self.router.quote_cross_chain(request)

        bundle = build_hash_lock(quote.secrets_count)

        receipt = await self._submit(
            venue.submit(request, quote, bundle.hash_lock, bundle.secret_hashes, self.signer),
            venue.name,
        )

        order = Order(
            order_hash=receipt.reference,
            route=SwapRoute.CROSS_CHAIN,
            wallet_address=request.wallet_address,
            status=OrderStatus.CREATED,
            venue=venue.name,
            quote=quote,
            hash_lock=bundle.hash_lock,
            secret_hashes=tuple(bundle.secret_hashes_hex),
        ).with_status(OrderStatus.SUBMITTED)

        logger.info(
            f"Cross-chain order {order.order_hash} submitted "
            f"({request.source_chain_id}->{request.dest_chain_id}, hash lock {bundle.hash_lock.hex})"
        )

        self.watchers.start(order, venue, bundle.secrets)
        return order

    async def _submit(self, submission: Awaitable[SubmissionReceipt], venue: str) -> SubmissionReceipt:
        try:
            return await submission
        except SwapError:
            raise
        except SigningError as e:
            raise SubmissionFailed(f"Signing failed for {venue}: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected submission error on {venue}: {type(e).__name__}: {e}")
            raise SubmissionFailed(f"{venue}: {e}") from e
