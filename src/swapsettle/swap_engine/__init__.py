"""Swap engine: order placement and cross-chain settlement.

Same-chain: 1inch Fusion, with the raw swap API for fee-on-transfer tokens.
Cross-chain: 1inch Fusion+ with HTLC secrets released by a background watcher.

Watchers poll every 5 seconds for up to 120 iterations by default.
"""

from swapsettle.swap_engine.engine import SwapEngine, create_engine
from swapsettle.swap_engine.events import OrderEvent, OrderEventType, OrderNotifier
from swapsettle.swap_engine.executor import OrderExecutor
from swapsettle.swap_engine.watcher import (
    SettlementWatcher,
    WatcherConfig,
    WatcherRegistry,
    WatchOutcome,
)

__all__ = [
    "OrderEvent",
    "OrderEventType",
    "OrderExecutor",
    "OrderNotifier",
    "SettlementWatcher",
    "SwapEngine",
    "WatchOutcome",
    "WatcherConfig",
    "WatcherRegistry",
    "create_engine",
]
