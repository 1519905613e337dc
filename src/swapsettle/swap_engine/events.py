"""Order lifecycle events for persistence and notification collaborators."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from swapsettle.routing.base import Order

logger = logging.getLogger(__name__)


class OrderEventType(str, Enum):
    PLACED = "placed"
    STATUS = "status"
    WATCH_TIMEOUT = "watch_timeout"


@dataclass(frozen=True)
class OrderEvent:
    type: OrderEventType
    order: Order
    data: dict = field(default_factory=dict)


OrderListener = Callable[[OrderEvent], Awaitable[Any]]


class OrderNotifier:
    """Fans order events out to registered async listeners.

    A failing listener is logged and never affects the order flow or the
    other listeners.
    """

    def __init__(self):
        self._listeners: list[OrderListener] = []

    def add_listener(self, listener: OrderListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: OrderListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def notify(self, event_type: OrderEventType, order: Order, data: dict = None) -> None:
        """Notify state change."""
        event = OrderEvent(type=event_type, order=order, data=data or {})
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception as e:
                logger.error(
                    f"Order listener failed for {event_type.value} {order.order_hash}: "
                    f"{type(e).__name__}: {e}"
                )
