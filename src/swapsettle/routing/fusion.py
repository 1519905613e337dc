"""1inch Fusion same-chain venue.

Intent-based swaps settled by resolvers on one chain. Fusion rejects
fee-on-transfer tokens; the router then falls back to the raw swap API.
API docs: https://portal.1inch.dev/documentation/apis/swap/fusion-plus/introduction
"""

import logging
from typing import Optional

import httpx

from swapsettle.errors import MalformedVenueResponse, SubmissionFailed
from swapsettle.routing.base import (
    OrderStatus,
    Quote,
    QuoteRequest,
    SameChainVenue,
    SubmissionReceipt,
)
from swapsettle.routing.extractors import SAME_CHAIN_AMOUNT_EXTRACTORS, extract_amount, hex_or_int
from swapsettle.routing.http import VenueHttpClient
from swapsettle.signing.base import SignerBackend

logger = logging.getLogger(__name__)

# Fusion orders are gasless for the maker; this is the resolver-side estimate.
FUSION_GAS_ESTIMATE = 300_000
FUSION_PRICE_IMPACT_BPS = 5


def _price_impact_bps(data: dict, default: int) -> int:
    value = data.get("priceImpactPercent")
    if value is None:
        return default
    try:
        return int(round(float(value) * 100))
    except (TypeError, ValueError):
        return default


class FusionVenue(SameChainVenue):
    """1inch Fusion provider for one chain."""

    def __init__(
        self,
        chain_id: int,
        api_url: str = "https://api.1inch.dev",
        api_key: str = "",
        timeout: float = 3.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.chain_id = chain_id
        self._http = VenueHttpClient(
            f"{api_url.rstrip('/')}/fusion",
            api_key=api_key,
            timeout=timeout,
            client=client,
            venue=self.name,
        )

    @property
    def name(self) -> str:
        return f"1inch Fusion ({self.chain_id})"

    async def quote(self, request: QuoteRequest) -> Quote:
        data = await self._http.request(
            "GET",
            f"/quoter/v2.0/{self.chain_id}/quote/receive",
            params={
                "fromTokenAddress": request.source_token,
                "toTokenAddress": request.dest_token,
                "amount": str(request.amount_int),
                "walletAddress": request.wallet_address,
                "enableEstimate": "true",
            },
        )

        dest_amount = extract_amount(data, SAME_CHAIN_AMOUNT_EXTRACTORS, self.name)
        logger.info(
            f"Fusion quote on {self.chain_id}: {request.amount_int} {request.source_token} -> "
            f"{dest_amount} {request.dest_token}"
        )

        return Quote(
            source_token=request.source_token,
            dest_token=request.dest_token,
            source_chain_id=self.chain_id,
            dest_chain_id=self.chain_id,
            source_amount=request.amount_int,
            dest_amount=dest_amount,
            estimated_gas=hex_or_int(data.get("gas"), FUSION_GAS_ESTIMATE),
            price_impact_bps=_price_impact_bps(data, FUSION_PRICE_IMPACT_BPS),
            venue=self.name,
            quote_id=data.get("quoteId"),
            preset=data.get("recommended_preset"),
            raw=data,
        )

    async def submit(
        self,
        request: QuoteRequest,
        quote: Quote,
        signer: SignerBackend,
    ) -> SubmissionReceipt:
        """Build the order from the quote, sign it and hand it to the relayer."""
        built = await self._http.request(
            "POST",
            f"/quoter/v2.0/{self.chain_id}/quote/build",
            params={"walletAddress": request.wallet_address, "preset": quote.preset or "fast"},
            json={"quote": quote.raw},
            error_cls=SubmissionFailed,
        )

        typed_data = built.get("typedData")
        order_hash = built.get("orderHash")
        if not typed_data or not order_hash:
            raise MalformedVenueResponse(f"{self.name} build response missing typedData/orderHash")

        signature = await signer.sign_typed_data(typed_data)

        await self._http.request(
            "POST",
            f"/relayer/v2.0/{self.chain_id}/order/submit",
            json={
                "order": typed_data.get("message", {}),
                "signature": signature,
                "extension": built.get("extension", "0x"),
                "quoteId": quote.quote_id,
            },
            error_cls=SubmissionFailed,
        )

        logger.info(f"Fusion order {order_hash} submitted on chain {self.chain_id}")
        return SubmissionReceipt(status=OrderStatus.SUBMITTED, order_hash=order_hash, raw=built)

    async def get_orders_by_maker(self, address: str) -> list[dict]:
        data = await self._http.request(
            "GET",
            f"/orders/v2.0/{self.chain_id}/order/maker/{address}",
            params={"page": 1, "limit": 50},
        )
        if isinstance(data, list):
            return data
        items = data.get("items", []) if isinstance(data, dict) else []
        return items if isinstance(items, list) else []

    async def close(self) -> None:
        await self._http.close()
