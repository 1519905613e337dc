"""Settlement watcher for cross-chain orders.

Flow per iteration:
1. Ask the venue which fill indices are ready to accept a secret
2. Disclose the secret of each ready, not yet disclosed index
3. Poll order status; executed / expired / refunded ends the watch
4. Sleep poll_interval and repeat, up to max_iterations

Network failures inside an iteration are logged and the loop moves on.
Reaching max_iterations stops monitoring only; the order is not failed.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from swapsettle.errors import DisclosureFailed, WatcherTimeout
from swapsettle.htlc.hashlock import Secret
from swapsettle.routing.base import CrossChainVenue, Order
from swapsettle.swap_engine.events import OrderEventType, OrderNotifier

logger = logging.getLogger(__name__)


@dataclass
class WatcherConfig:
    """Configuration for settlement watchers."""

    poll_interval: float = 5.0  # seconds
    max_iterations: int = 120  # ~10 minutes at the default interval


class WatcherState(str, Enum):
    WATCHING = "watching"
    DONE = "done"


@dataclass
class WatchOutcome:
    """Result of one watcher run."""

    order: Order
    iterations: int
    disclosed: list[int] = field(default_factory=list)
    timed_out: bool = False


class SettlementWatcher:
    """Drives one cross-chain order to a terminal state."""

    def __init__(
        self,
        order: Order,
        venue: CrossChainVenue,
        secrets: Sequence[Secret],
        config: Optional[WatcherConfig] = None,
        notifier: Optional[OrderNotifier] = None,
    ):
        self.order = order
        self.venue = venue
        self.config = config or WatcherConfig()
        self.notifier = notifier
        self.state = WatcherState.WATCHING
        self.iterations = 0
        self._secrets = list(secrets)
        self._disclosed: set[int] = set()

    @property
    def order_hash(self) -> str:
        return self.order.order_hash

    @property
    def disclosed(self) -> list[int]:
        return sorted(self._disclosed)

    async def run(self) -> WatchOutcome:
        while self.iterations < self.config.max_iterations:
            self.iterations += 1

            await self._disclose_ready_fills()

            status = await self._poll_status()
            if status is not None and status.is_terminal:
                self.order = self.order.with_status(status)
                self.state = WatcherState.DONE
                logger.info(
                    f"Order {self.order_hash} reached {status.value} after "
                    f"{self.iterations} poll(s), {len(self._disclosed)} secret(s) disclosed"
                )
                await self._notify(OrderEventType.STATUS, {"status": status.value})
                return self._outcome()

            if self.iterations < self.config.max_iterations:
                await asyncio.sleep(self.config.poll_interval)

        timeout = WatcherTimeout(
            f"Order {self.order_hash} not terminal after {self.iterations} polls"
        )
        logger.warning(str(timeout))
        self.state = WatcherState.DONE
        await self._notify(OrderEventType.WATCH_TIMEOUT, {"iterations": self.iterations})
        return self._outcome(timed_out=True)

    async def _disclose_ready_fills(self) -> None:
        try:
            ready = await self.venue.get_ready_fills(self.order_hash)
        except Exception as e:
            logger.warning(f"Ready fills check failed for {self.order_hash}: {e}")
            return

        for index in ready:
            if index in self._disclosed:
                continue
            if not 0 <= index < len(self._secrets):
                logger.warning(
                    f"Venue reported fill {index} ready for {self.order_hash}, "
                    f"but only {len(self._secrets)} secret(s) exist"
                )
                continue

            try:
                await self.venue.disclose_secret(self.order_hash, self._secrets[index])
            except Exception as e:
                failure = DisclosureFailed(self.order_hash, index, str(e))
                logger.warning(f"Disclosure of fill {index} for {self.order_hash} failed: {failure}")
                continue

            self._disclosed.add(index)
            logger.info(f"Disclosed secret {index} for order {self.order_hash}")

    async def _poll_status(self):
        try:
            return await self.venue.get_order_status(self.order_hash)
        except Exception as e:
            logger.warning(f"Status poll failed for {self.order_hash}: {e}")
            return None

    async def _notify(self, event_type: OrderEventType, data: dict) -> None:
        if self.notifier:
            await self.notifier.notify(event_type, self.order, data)

    def _outcome(self, timed_out: bool = False) -> WatchOutcome:
        return WatchOutcome(
            order=self.order,
            iterations=self.iterations,
            disclosed=self.disclosed,
            timed_out=timed_out,
        )


class WatcherRegistry:
    """Background watcher tasks keyed by order hash.

    Tasks remove themselves on completion; ``shutdown`` cancels whatever is
    still running.
    """

    max_finished = 1000

    def __init__(
        self,
        config: Optional[WatcherConfig] = None,
        notifier: Optional[OrderNotifier] = None,
    ):
        self.config = config or WatcherConfig()
        self.notifier = notifier
        self._tasks: dict[str, asyncio.Task] = {}
        self._watchers: dict[str, SettlementWatcher] = {}
        self._finished: OrderedDict[str, WatchOutcome] = OrderedDict()

    def start(
        self,
        order: Order,
        venue: CrossChainVenue,
        secrets: Sequence[Secret],
    ) -> asyncio.Task:
        """Start watching an order; returns the existing task if already watched."""
        existing = self._tasks.get(order.order_hash)
        if existing is not None and not existing.done():
            return existing

        watcher = SettlementWatcher(order, venue, secrets, self.config, self.notifier)
        task = asyncio.create_task(
            self._supervise(watcher), name=f"watch-{order.order_hash[:10]}"
        )
        self._tasks[order.order_hash] = task
        self._watchers[order.order_hash] = watcher
        task.add_done_callback(lambda t, h=order.order_hash: self._discard(h, t))

        logger.info(f"Watching order {order.order_hash} ({len(secrets)} secret(s))")
        return task

    async def _supervise(self, watcher: SettlementWatcher) -> Optional[WatchOutcome]:
        try:
            outcome = await watcher.run()
        except asyncio.CancelledError:
            logger.info(f"Watcher for {watcher.order_hash} cancelled")
            raise
        except Exception as e:
            logger.error(f"Watcher for {watcher.order_hash} crashed: {type(e).__name__}: {e}")
            return None

        self._finished[watcher.order_hash] = outcome
        while len(self._finished) > self.max_finished:
            self._finished.popitem(last=False)
        return outcome

    def _discard(self, order_hash: str, task: asyncio.Task) -> None:
        if self._tasks.get(order_hash) is task:
            del self._tasks[order_hash]
            self._watchers.pop(order_hash, None)

    @property
    def active(self) -> list[str]:
        return [h for h, t in self._tasks.items() if not t.done()]

    def is_watching(self, order_hash: str) -> bool:
        return order_hash in self.active

    def get_order(self, order_hash: str) -> Optional[Order]:
        """Latest known state of a watched or recently finished order."""
        watcher = self._watchers.get(order_hash)
        if watcher is not None:
            return watcher.order
        outcome = self._finished.get(order_hash)
        return outcome.order if outcome else None

    def get_task(self, order_hash: str) -> Optional[asyncio.Task]:
        return self._tasks.get(order_hash)

    def get_outcome(self, order_hash: str) -> Optional[WatchOutcome]:
        return self._finished.get(order_hash)

    def cancel(self, order_hash: str) -> bool:
        task = self._tasks.get(order_hash)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def shutdown(self) -> None:
        """Cancel all running watchers and wait for them to finish."""
        tasks = [t for t in self._tasks.values() if not t.done()]
        if not tasks:
            return
        logger.info(f"Cancelling {len(tasks)} settlement watcher(s)")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
