"""Swap data model and venue interfaces."""

import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from swapsettle.errors import AmountTooSmall, InvalidRequest, SwapError

if TYPE_CHECKING:
    from swapsettle.htlc.hashlock import HashLock, Secret
    from swapsettle.signing.base import SignerBackend

logger = logging.getLogger(__name__)

_AMOUNT_RE = re.compile(r"^[0-9]+$")


class SwapRoute(str, Enum):
    """Settlement mechanism for a request."""

    SAME_CHAIN = "same_chain"
    CROSS_CHAIN = "cross_chain"


def route_for(source_chain_id: int, dest_chain_id: int) -> SwapRoute:
    """Derive the route from the two chain ids."""
    if source_chain_id == dest_chain_id:
        return SwapRoute.SAME_CHAIN
    return SwapRoute.CROSS_CHAIN


class OrderStatus(str, Enum):
    """Order state machine states."""

    CREATED = "created"
    SUBMITTED = "submitted"
    PENDING = "pending"
    EXECUTED = "executed"
    EXPIRED = "expired"
    REFUNDED = "refunded"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.EXECUTED, OrderStatus.EXPIRED, OrderStatus.REFUNDED})

_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.CREATED: frozenset({OrderStatus.SUBMITTED, OrderStatus.PENDING}),
    OrderStatus.SUBMITTED: TERMINAL_STATUSES,
    OrderStatus.PENDING: frozenset(),
    OrderStatus.EXECUTED: frozenset(),
    OrderStatus.EXPIRED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


class InvalidTransition(SwapError):
    default_message = "Order is already in a final state."


@dataclass(frozen=True)
class QuoteRequest:
    """A user's swap intent."""

    source_token: str
    dest_token: str
    source_chain_id: int
    dest_chain_id: int
    amount: str  # integer string in the source token's smallest unit
    wallet_address: str
    slippage_percent: Decimal = Decimal("1")

    @property
    def route(self) -> SwapRoute:
        return route_for(self.source_chain_id, self.dest_chain_id)

    @property
    def amount_int(self) -> int:
        """Validated integer amount.

        Raises:
            InvalidRequest: If the amount is not an integer string
            AmountTooSmall: If the amount is zero
        """
        amount = str(self.amount).strip()
        if not _AMOUNT_RE.match(amount):
            raise InvalidRequest(
                f"amount must be a positive integer string, got {self.amount!r}",
                user_message="Amount must be a whole number in the token's smallest unit.",
            )
        value = int(amount)
        if value <= 0:
            raise AmountTooSmall(f"amount must be positive, got {self.amount!r}")
        return value


@dataclass(frozen=True)
class Quote:
    """A normalized swap quote from a venue."""

    source_token: str
    dest_token: str
    source_chain_id: int
    dest_chain_id: int
    source_amount: int
    dest_amount: int  # estimated
    estimated_gas: int
    price_impact_bps: int
    venue: str
    quote_id: Optional[str] = None
    preset: Optional[str] = None
    secrets_count: Optional[int] = None  # cross-chain only
    raw: dict = field(default_factory=dict, compare=False, repr=False)
    timestamp: float = field(default_factory=time.time, compare=False)

    @property
    def route(self) -> SwapRoute:
        return route_for(self.source_chain_id, self.dest_chain_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses and storage."""
        return {
            "source_token": self.source_token,
            "dest_token": self.dest_token,
            "source_chain_id": self.source_chain_id,
            "dest_chain_id": self.dest_chain_id,
            "source_amount": str(self.source_amount),
            "dest_amount": str(self.dest_amount),
            "estimated_gas": str(self.estimated_gas),
            "price_impact_bps": self.price_impact_bps,
            "route": self.route.value,
            "venue": self.venue,
            "preset": self.preset,
            "secrets_count": self.secrets_count,
        }


@dataclass(frozen=True)
class SubmissionReceipt:
    """Venue acknowledgement of a submitted order or transaction."""

    status: OrderStatus
    order_hash: Optional[str] = None
    tx_hash: Optional[str] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def reference(self) -> str:
        """Order hash, or the transaction id when the venue settles directly."""
        ref = self.order_hash or self.tx_hash
        if not ref:
            raise InvalidRequest("Receipt carries neither order hash nor transaction hash")
        return ref


@dataclass(frozen=True)
class Order:
    """A submitted swap order. Only ``status`` changes, via ``with_status``."""

    order_hash: str
    route: SwapRoute
    wallet_address: str
    status: OrderStatus
    venue: str
    quote: Quote
    hash_lock: Optional["HashLock"] = None
    secret_hashes: tuple[str, ...] = ()
    tx_hash: Optional[str] = None
    created_at: float = field(default_factory=time.time, compare=False)

    def with_status(self, status: OrderStatus) -> "Order":
        """Return a copy in the new status.

        Raises:
            InvalidTransition: If the state machine forbids the move
        """
        if status == self.status:
            return self
        if status not in _TRANSITIONS[self.status]:
            raise InvalidTransition(
                f"Order {self.order_hash}: {self.status.value} -> {status.value} not allowed"
            )
        return replace(self, status=status)

    def to_dict(self) -> dict:
        return {
            "order_hash": self.order_hash,
            "route": self.route.value,
            "wallet_address": self.wallet_address,
            "status": self.status.value,
            "venue": self.venue,
            "hash_lock": self.hash_lock.hex if self.hash_lock else None,
            "secret_hashes": list(self.secret_hashes),
            "tx_hash": self.tx_hash,
            "quote": self.quote.to_dict(),
            "created_at": self.created_at,
        }


class SameChainVenue(ABC):
    """Venue settling a swap on a single chain."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Venue name identifier."""

    @abstractmethod
    async def quote(self, request: QuoteRequest) -> Quote:
        """Get a quote. Raises a SwapError on rejection."""

    @abstractmethod
    async def submit(
        self,
        request: QuoteRequest,
        quote: Quote,
        signer: "SignerBackend",
    ) -> SubmissionReceipt:
        """Build, sign and submit an order for a fresh quote."""

    async def get_orders_by_maker(self, address: str) -> list[dict]:
        """Active orders created by a wallet. Venues without an order book return none."""
        return []

    async def close(self) -> None:
        """Release pooled connections."""


class CrossChainVenue(ABC):
    """Venue settling a swap across two chains with HTLC escrows."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Venue name identifier."""

    @abstractmethod
    async def quote(self, request: QuoteRequest) -> Quote:
        """Get a quote carrying the preset's ``secrets_count``."""

    @abstractmethod
    async def submit(
        self,
        request: QuoteRequest,
        quote: Quote,
        hash_lock: "HashLock",
        secret_hashes: list[bytes],
        signer: "SignerBackend",
    ) -> SubmissionReceipt:
        """Submit an order bound to a hash lock and its secret hashes."""

    @abstractmethod
    async def get_ready_fills(self, order_hash: str) -> list[int]:
        """Indices of partial fills whose escrows are ready for a secret."""

    @abstractmethod
    async def disclose_secret(self, order_hash: str, secret: "Secret") -> None:
        """Release one secret to the venue."""

    @abstractmethod
    async def get_order_status(self, order_hash: str) -> OrderStatus:
        """Current order status as seen by the venue."""

    async def get_orders_by_maker(self, address: str) -> list[dict]:
        """Active orders created by a wallet."""
        return []

    async def close(self) -> None:
        """Release pooled connections."""
