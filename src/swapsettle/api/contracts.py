"""Quote and order request/response contracts."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from swapsettle.routing.base import Order, Quote, QuoteRequest


class SwapRequest(BaseModel):
    """Request for a quote or an order."""

    source_token: str = Field(..., description="Source token symbol (e.g., USDC) or 0x address")
    dest_token: str = Field(..., description="Destination token symbol or 0x address")
    source_chain_id: int = Field(..., description="Chain id the tokens are sold on")
    dest_chain_id: int = Field(..., description="Chain id the tokens are received on")
    amount: str = Field(..., description="Amount in the source token's smallest unit")
    wallet_address: str = Field(..., description="Maker wallet address")
    slippage: Decimal = Field(
        default=Decimal("1"),
        gt=0,
        le=50,
        description="Slippage tolerance in percent (raw swaps only)",
    )

    def to_domain(self) -> QuoteRequest:
        return QuoteRequest(
            source_token=self.source_token,
            dest_token=self.dest_token,
            source_chain_id=self.source_chain_id,
            dest_chain_id=self.dest_chain_id,
            amount=self.amount,
            wallet_address=self.wallet_address,
            slippage_percent=self.slippage,
        )


class QuoteResponse(BaseModel):
    """Normalized quote."""

    source_token: str
    dest_token: str
    source_chain_id: int
    dest_chain_id: int
    source_amount: str = Field(..., description="Input amount, smallest unit")
    dest_amount: str = Field(..., description="Estimated output amount, smallest unit")
    estimated_gas: str
    price_impact_bps: int
    route: str = Field(..., description="same_chain or cross_chain")
    venue: str
    preset: Optional[str] = None
    secrets_count: Optional[int] = Field(None, description="Secrets the cross-chain order needs")

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteResponse":
        return cls(**quote.to_dict())


class OrderResponse(BaseModel):
    """Order as placed or last observed."""

    order_hash: str = Field(..., description="Venue order hash, or tx hash for raw swaps")
    route: str
    wallet_address: str
    status: str
    venue: str
    hash_lock: Optional[str] = None
    secret_hashes: list[str] = Field(default_factory=list)
    tx_hash: Optional[str] = None
    watching: bool = Field(False, description="A settlement watcher is running")
    quote: QuoteResponse

    @classmethod
    def from_order(cls, order: Order, watching: bool = False) -> "OrderResponse":
        return cls(
            order_hash=order.order_hash,
            route=order.route.value,
            wallet_address=order.wallet_address,
            status=order.status.value,
            venue=order.venue,
            hash_lock=order.hash_lock.hex if order.hash_lock else None,
            secret_hashes=list(order.secret_hashes),
            tx_hash=order.tx_hash,
            watching=watching,
            quote=QuoteResponse.from_quote(order.quote),
        )


class OrderStatusResponse(BaseModel):
    order_hash: str
    status: str
    terminal: bool


class ActiveOrdersResponse(BaseModel):
    wallet_address: str
    orders: list[dict] = Field(default_factory=list)
    total: int = 0


class ErrorResponse(BaseModel):
    success: bool = False
    error: str = Field(..., description="User-facing error message")
    code: str = Field(..., description="Error class name")
