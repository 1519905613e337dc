"""Simulated venues for dry-run mode.

Quotes come from a fixed price table, so the same request always yields the
same quote. Orders never leave the process: the cross-chain venue reports
fills ready and the order executed after a configurable number of polls.
"""

import itertools
import logging
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from typing import Optional

from eth_utils import keccak

from swapsettle.chains import symbol_for
from swapsettle.errors import (
    AmountTooSmall,
    FeeOnTransferRejected,
    InvalidRequest,
    TokenUnsupported,
)
from swapsettle.htlc.hashlock import HashLock, Secret
from swapsettle.routing.base import (
    CrossChainVenue,
    OrderStatus,
    Quote,
    QuoteRequest,
    SameChainVenue,
    SubmissionReceipt,
)
from swapsettle.signing.base import SignerBackend

logger = logging.getLogger(__name__)


# Simulated market prices in USD, for demonstration only
SIMULATED_PRICES: dict[str, Decimal] = {
    # ========== Native & wrapped ==========
    "ETH": Decimal("3900.00"),
    "WETH": Decimal("3900.00"),
    "BNB": Decimal("710.00"),
    "WBNB": Decimal("710.00"),
    "AVAX": Decimal("52.00"),
    "WAVAX": Decimal("52.00"),
    "POL": Decimal("0.62"),
    "WPOL": Decimal("0.62"),
    "WBTC": Decimal("100000.00"),
    "CBBTC": Decimal("100000.00"),

    # ========== Stablecoins ==========
    "USDT": Decimal("1.00"),
    "USDC": Decimal("1.00"),
    "DAI": Decimal("1.00"),

    # ========== DeFi & ecosystem ==========
    "LINK": Decimal("28.00"),
    "UNI": Decimal("17.50"),
    "AAVE": Decimal("185.00"),
    "CRV": Decimal("1.10"),
    "GMX": Decimal("32.00"),
    "PENDLE": Decimal("5.40"),
    "CAKE": Decimal("2.80"),
    "JOE": Decimal("0.48"),
    "OP": Decimal("2.10"),
    "VIRTUAL": Decimal("2.60"),

    # ========== Meme ==========
    "PEPE": Decimal("0.000022"),
    "DEGEN": Decimal("0.012"),
    "BRETT": Decimal("0.15"),
}

# Smallest-unit decimals; anything not listed uses 18.
TOKEN_DECIMALS: dict[str, int] = {
    "USDC": 6,
    "USDT": 6,
    "WBTC": 8,
    "CBBTC": 8,
}

# BNB Chain bridged stables use 18 decimals.
_CHAIN_DECIMAL_OVERRIDES: dict[tuple[int, str], int] = {
    (56, "USDC"): 18,
    (56, "USDT"): 18,
}

SIMULATED_IMPACT_BPS = 30
SIMULATED_GAS = 150_000
SIMULATED_CROSS_CHAIN_GAS = 500_000


def token_decimals(chain_id: int, symbol: str) -> int:
    return _CHAIN_DECIMAL_OVERRIDES.get((chain_id, symbol), TOKEN_DECIMALS.get(symbol, 18))


def simulate_dest_amount(
    source_chain_id: int,
    source_token: str,
    dest_chain_id: int,
    dest_token: str,
    amount: int,
) -> int:
    """Convert ``amount`` at simulated prices minus the fixed impact.

    Raises:
        TokenUnsupported: If either token is not in the price table
        AmountTooSmall: If the output rounds down to zero
    """
    src_symbol = symbol_for(source_chain_id, source_token)
    dst_symbol = symbol_for(dest_chain_id, dest_token)
    if src_symbol not in SIMULATED_PRICES or dst_symbol not in SIMULATED_PRICES:
        raise TokenUnsupported(f"No simulated price for {source_token} or {dest_token}")

    src_units = Decimal(amount) / (Decimal(10) ** token_decimals(source_chain_id, src_symbol))
    usd_value = src_units * SIMULATED_PRICES[src_symbol]
    dst_units = usd_value / SIMULATED_PRICES[dst_symbol]
    dst_units *= Decimal(10000 - SIMULATED_IMPACT_BPS) / Decimal(10000)

    dest_amount = int(
        (dst_units * (Decimal(10) ** token_decimals(dest_chain_id, dst_symbol))).to_integral_value(
            rounding=ROUND_DOWN
        )
    )
    if dest_amount <= 0:
        raise AmountTooSmall(f"Simulated output for {amount} {src_symbol} is zero")
    return dest_amount


def _simulated_hash(*parts) -> str:
    return "0x" + keccak(text=":".join(str(p) for p in parts)).hex()


class DryRunSameChainVenue(SameChainVenue):
    """Simulated Fusion venue.

    Tokens in ``fee_on_transfer_tokens`` are rejected the same way Fusion
    rejects them, which exercises the raw swap fallback.
    """

    def __init__(self, chain_id: int, fee_on_transfer_tokens: Optional[set[str]] = None):
        self.chain_id = chain_id
        self.fee_on_transfer_tokens = {t.lower() for t in (fee_on_transfer_tokens or set())}
        self._counter = itertools.count(1)

    @property
    def name(self) -> str:
        return f"fusion_sim ({self.chain_id})"

    def _check_fee_on_transfer(self, request: QuoteRequest) -> None:
        for token in (request.source_token, request.dest_token):
            if token.lower() in self.fee_on_transfer_tokens:
                raise FeeOnTransferRejected(f"fee on transfer token {token} is not supported")

    async def quote(self, request: QuoteRequest) -> Quote:
        self._check_fee_on_transfer(request)
        dest_amount = simulate_dest_amount(
            self.chain_id, request.source_token, self.chain_id, request.dest_token, request.amount_int
        )
        return Quote(
            source_token=request.source_token,
            dest_token=request.dest_token,
            source_chain_id=self.chain_id,
            dest_chain_id=self.chain_id,
            source_amount=request.amount_int,
            dest_amount=dest_amount,
            estimated_gas=SIMULATED_GAS,
            price_impact_bps=SIMULATED_IMPACT_BPS,
            venue=self.name,
            preset="fast",
            raw={"simulated": True},
        )

    async def submit(
        self,
        request: QuoteRequest,
        quote: Quote,
        signer: SignerBackend,
    ) -> SubmissionReceipt:
        self._check_fee_on_transfer(request)
        order_hash = _simulated_hash("fusion", self.chain_id, request.wallet_address, next(self._counter))
        logger.info(f"[dry-run] Fusion order {order_hash} accepted on chain {self.chain_id}")
        return SubmissionReceipt(
            status=OrderStatus.SUBMITTED, order_hash=order_hash, raw={"simulated": True}
        )


class DryRunRawSwapVenue(SameChainVenue):
    """Simulated raw swap venue; returns a transaction hash and PENDING status."""

    def __init__(self, chain_id: int):
        self.chain_id = chain_id
        self._counter = itertools.count(1)

    @property
    def name(self) -> str:
        return f"swap_sim ({self.chain_id})"

    async def quote(self, request: QuoteRequest) -> Quote:
        dest_amount = simulate_dest_amount(
            self.chain_id, request.source_token, self.chain_id, request.dest_token, request.amount_int
        )
        return Quote(
            source_token=request.source_token,
            dest_token=request.dest_token,
            source_chain_id=self.chain_id,
            dest_chain_id=self.chain_id,
            source_amount=request.amount_int,
            dest_amount=dest_amount,
            estimated_gas=SIMULATED_GAS,
            price_impact_bps=SIMULATED_IMPACT_BPS,
            venue=self.name,
            raw={"simulated": True},
        )

    async def submit(
        self,
        request: QuoteRequest,
        quote: Quote,
        signer: SignerBackend,
    ) -> SubmissionReceipt:
        tx_hash = _simulated_hash("swap", self.chain_id, request.wallet_address, next(self._counter))
        logger.info(f"[dry-run] Raw swap broadcast on chain {self.chain_id}: {tx_hash}")
        return SubmissionReceipt(status=OrderStatus.PENDING, tx_hash=tx_hash, raw={"simulated": True})


@dataclass
class SimulatedOrder:
    """Book-keeping for one simulated cross-chain order."""

    order_hash: str
    maker: str
    hash_lock: HashLock
    secret_hashes: list[bytes]
    quote: Quote
    polls: int = 0
    disclosed: set[int] = field(default_factory=set)
    status: OrderStatus = OrderStatus.SUBMITTED


class DryRunCrossChainVenue(CrossChainVenue):
    """Simulated Fusion+ venue.

    Every fill index becomes ready after ``fills_ready_after`` fill polls. The
    order executes on the first status poll after all secrets were disclosed
    and at least ``execute_after`` status polls happened.
    """

    name = "fusion_plus_sim"

    def __init__(
        self,
        secrets_count: int = 4,
        fills_ready_after: int = 1,
        execute_after: int = 2,
    ):
        self.secrets_count = secrets_count
        self.fills_ready_after = fills_ready_after
        self.execute_after = execute_after
        self.orders: dict[str, SimulatedOrder] = {}
        self._fill_polls: dict[str, int] = {}
        self._counter = itertools.count(1)

    async def quote(self, request: QuoteRequest) -> Quote:
        dest_amount = simulate_dest_amount(
            request.source_chain_id,
            request.source_token,
            request.dest_chain_id,
            request.dest_token,
            request.amount_int,
        )
        return Quote(
            source_token=request.source_token,
            dest_token=request.dest_token,
            source_chain_id=request.source_chain_id,
            dest_chain_id=request.dest_chain_id,
            source_amount=request.amount_int,
            dest_amount=dest_amount,
            estimated_gas=SIMULATED_CROSS_CHAIN_GAS,
            price_impact_bps=SIMULATED_IMPACT_BPS,
            venue=self.name,
            preset="fast",
            secrets_count=self.secrets_count,
            raw={"simulated": True},
        )

    async def submit(
        self,
        request: QuoteRequest,
        quote: Quote,
        hash_lock: HashLock,
        secret_hashes: list[bytes],
        signer: SignerBackend,
    ) -> SubmissionReceipt:
        order_hash = _simulated_hash("fusion-plus", hash_lock.hex, next(self._counter))
        self.orders[order_hash] = SimulatedOrder(
            order_hash=order_hash,
            maker=request.wallet_address,
            hash_lock=hash_lock,
            secret_hashes=list(secret_hashes),
            quote=quote,
        )
        self._fill_polls[order_hash] = 0
        logger.info(
            f"[dry-run] Fusion+ order {order_hash} accepted "
            f"({request.source_chain_id}->{request.dest_chain_id}, {len(secret_hashes)} secrets)"
        )
        return SubmissionReceipt(
            status=OrderStatus.SUBMITTED, order_hash=order_hash, raw={"simulated": True}
        )

    def _get(self, order_hash: str) -> Optional[SimulatedOrder]:
        return self.orders.get(order_hash)

    async def get_ready_fills(self, order_hash: str) -> list[int]:
        order = self._get(order_hash)
        if order is None or order.status.is_terminal:
            return []
        self._fill_polls[order_hash] += 1
        if self._fill_polls[order_hash] < self.fills_ready_after:
            return []
        return [i for i in range(len(order.secret_hashes)) if i not in order.disclosed]

    async def disclose_secret(self, order_hash: str, secret: Secret) -> None:
        order = self._get(order_hash)
        if order is None:
            raise InvalidRequest(f"Unknown simulated order {order_hash}")
        try:
            index = order.secret_hashes.index(secret.hashed)
        except ValueError:
            raise InvalidRequest(f"Secret does not match any hash of order {order_hash}") from None
        order.disclosed.add(index)
        logger.info(f"[dry-run] Secret {index} accepted for {order_hash}")

    async def get_order_status(self, order_hash: str) -> OrderStatus:
        order = self._get(order_hash)
        if order is None:
            raise InvalidRequest(f"Unknown simulated order {order_hash}", user_message="Order not found.")
        order.polls += 1
        if (
            order.status is OrderStatus.SUBMITTED
            and order.polls >= self.execute_after
            and len(order.disclosed) == len(order.secret_hashes)
        ):
            order.status = OrderStatus.EXECUTED
        return order.status

    async def get_orders_by_maker(self, address: str) -> list[dict]:
        lowered = address.lower()
        return [
            {
                "orderHash": o.order_hash,
                "status": o.status.value,
                "srcChainId": o.quote.source_chain_id,
                "dstChainId": o.quote.dest_chain_id,
                "srcTokenAddress": o.quote.source_token,
                "dstTokenAddress": o.quote.dest_token,
                "srcAmount": str(o.quote.source_amount),
            }
            for o in self.orders.values()
            if o.maker.lower() == lowered and not o.status.is_terminal
        ]
