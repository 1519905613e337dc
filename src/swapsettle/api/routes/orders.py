"""Quote and order endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from swapsettle.api.contracts import (
    ActiveOrdersResponse,
    OrderResponse,
    OrderStatusResponse,
    QuoteResponse,
    SwapRequest,
)
from swapsettle.chains import is_valid_address
from swapsettle.swap_engine.engine import SwapEngine

router = APIRouter()


def get_engine(request: Request) -> SwapEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Swap engine not started")
    return engine


@router.post("/quotes", response_model=QuoteResponse)
async def get_quote(body: SwapRequest, engine: SwapEngine = Depends(get_engine)) -> QuoteResponse:
    """Get a swap quote.

    This is a READ-ONLY operation - nothing is signed or submitted.
    """
    quote = await engine.get_quote(body.to_domain())
    return QuoteResponse.from_quote(quote)


@router.post("/orders", response_model=OrderResponse, status_code=201)
async def place_order(body: SwapRequest, engine: SwapEngine = Depends(get_engine)) -> OrderResponse:
    """Place an order from a fresh quote.

    Cross-chain orders return as soon as they are submitted; settlement
    continues in the background.
    """
    order = await engine.place_order(body.to_domain())
    return OrderResponse.from_order(order, watching=engine.watchers.is_watching(order.order_hash))


@router.get("/orders/{order_hash}")
async def get_order(order_hash: str, engine: SwapEngine = Depends(get_engine)):
    """Get an order placed by this engine, or its venue status if unknown locally."""
    order = engine.get_order(order_hash)
    if order is not None:
        return OrderResponse.from_order(order, watching=engine.watchers.is_watching(order_hash))

    status = await engine.get_order_status(order_hash)
    return OrderStatusResponse(order_hash=order_hash, status=status.value, terminal=status.is_terminal)


@router.get("/orders", response_model=ActiveOrdersResponse)
async def get_active_orders(
    wallet: str = Query(..., description="Maker wallet address"),
    engine: SwapEngine = Depends(get_engine),
) -> ActiveOrdersResponse:
    """List a wallet's active orders across venues."""
    if not is_valid_address(wallet):
        raise HTTPException(status_code=400, detail="Invalid wallet address")
    orders = await engine.get_active_orders(wallet)
    return ActiveOrdersResponse(wallet_address=wallet, orders=orders, total=len(orders))
