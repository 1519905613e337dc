"""1inch Fusion+ cross-chain venue.

Orders are escrowed on both chains behind a hash lock. After the resolver
deploys both escrows for a fill, the venue reports that fill index ready and
the maker discloses the matching secret.
"""

import logging
from typing import Optional

import httpx

from swapsettle.errors import MalformedVenueResponse, SubmissionFailed
from swapsettle.htlc.hashlock import HashLock, Secret
from swapsettle.routing.base import (
    CrossChainVenue,
    OrderStatus,
    Quote,
    QuoteRequest,
    SubmissionReceipt,
)
from swapsettle.routing.extractors import (
    CROSS_CHAIN_AMOUNT_EXTRACTORS,
    extract_amount,
    selected_preset,
)
from swapsettle.routing.http import VenueHttpClient
from swapsettle.signing.base import SignerBackend

logger = logging.getLogger(__name__)

CROSS_CHAIN_GAS_ESTIMATE = 500_000
CROSS_CHAIN_PRICE_IMPACT_BPS = 20

# Venue status strings that end an order; anything else is still settling.
_STATUS_MAP = {
    "executed": OrderStatus.EXECUTED,
    "expired": OrderStatus.EXPIRED,
    "refunded": OrderStatus.REFUNDED,
}


def parse_order_status(value: Optional[str]) -> OrderStatus:
    """Map a venue status string onto the local state machine."""
    return _STATUS_MAP.get(str(value or "").lower(), OrderStatus.SUBMITTED)


class FusionPlusVenue(CrossChainVenue):
    """1inch Fusion+ provider."""

    name = "1inch Fusion+"

    def __init__(
        self,
        api_url: str = "https://api.1inch.dev",
        api_key: str = "",
        timeout: float = 3.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._http = VenueHttpClient(
            f"{api_url.rstrip('/')}/fusion-plus",
            api_key=api_key,
            timeout=timeout,
            client=client,
            venue=self.name,
        )

    async def quote(self, request: QuoteRequest) -> Quote:
        """Get a cross-chain quote.

        The recommended preset decides the auction amounts and how many
        secrets the order needs.

        Raises:
            MalformedVenueResponse: If no amount or secretsCount can be read
        """
        data = await self._http.request(
            "GET",
            "/quoter/v1.0/quote/receive",
            params={
                "srcChain": request.source_chain_id,
                "dstChain": request.dest_chain_id,
                "srcTokenAddress": request.source_token,
                "dstTokenAddress": request.dest_token,
                "amount": str(request.amount_int),
                "walletAddress": request.wallet_address,
                "enableEstimate": "true",
            },
        )

        dest_amount = extract_amount(data, CROSS_CHAIN_AMOUNT_EXTRACTORS, self.name)

        preset_name = data.get("recommendedPreset") or data.get("recommended_preset") or "fast"
        preset = selected_preset(data) or {}
        secrets_count = preset.get("secretsCount")
        if isinstance(secrets_count, bool) or not isinstance(secrets_count, (int, str)):
            raise MalformedVenueResponse(f"{self.name} quote preset has no secretsCount")
        try:
            secrets_count = int(secrets_count)
        except ValueError as e:
            raise MalformedVenueResponse(
                f"{self.name} quote preset secretsCount {secrets_count!r} is not an integer"
            ) from e

        logger.info(
            f"Fusion+ quote {request.source_chain_id}->{request.dest_chain_id}: "
            f"{request.amount_int} -> {dest_amount} ({preset_name}, {secrets_count} secrets)"
        )

        return Quote(
            source_token=request.source_token,
            dest_token=request.dest_token,
            source_chain_id=request.source_chain_id,
            dest_chain_id=request.dest_chain_id,
            source_amount=request.amount_int,
            dest_amount=dest_amount,
            estimated_gas=CROSS_CHAIN_GAS_ESTIMATE,
            price_impact_bps=CROSS_CHAIN_PRICE_IMPACT_BPS,
            venue=self.name,
            quote_id=data.get("quoteId"),
            preset=preset_name,
            secrets_count=secrets_count,
            raw=data,
        )

    async def submit(
        self,
        request: QuoteRequest,
        quote: Quote,
        hash_lock: HashLock,
        secret_hashes: list[bytes],
        signer: SignerBackend,
    ) -> SubmissionReceipt:
        hashes_hex = ["0x" + h.hex() for h in secret_hashes]

        built = await self._http.request(
            "POST",
            "/quoter/v1.0/quote/build",
            params={"preset": quote.preset or "fast"},
            json={
                "quote": quote.raw,
                "secretsHashList": hashes_hex,
                "hashLock": hash_lock.hex,
            },
            error_cls=SubmissionFailed,
        )

        typed_data = built.get("typedData")
        order_hash = built.get("orderHash")
        if not typed_data or not order_hash:
            raise MalformedVenueResponse(f"{self.name} build response missing typedData/orderHash")

        signature = await signer.sign_typed_data(typed_data)

        payload = {
            "order": typed_data.get("message", {}),
            "srcChainId": request.source_chain_id,
            "signature": signature,
            "extension": built.get("extension", "0x"),
            "quoteId": quote.quote_id,
        }
        if len(hashes_hex) > 1:
            payload["secretHashes"] = hashes_hex

        await self._http.request(
            "POST", "/relayer/v1.0/submit", json=payload, error_cls=SubmissionFailed
        )

        logger.info(
            f"Fusion+ order {order_hash} submitted ({hash_lock.mode.value} fill, "
            f"{len(secret_hashes)} secret(s))"
        )
        return SubmissionReceipt(status=OrderStatus.SUBMITTED, order_hash=order_hash, raw=built)

    async def get_ready_fills(self, order_hash: str) -> list[int]:
        data = await self._http.request(
            "GET", f"/orders/v1.0/order/ready-to-accept-secret-fills/{order_hash}"
        )
        fills = data.get("fills") if isinstance(data, dict) else None
        if fills is None:
            return []
        if not isinstance(fills, list):
            raise MalformedVenueResponse(f"{self.name} ready fills is not a list")

        indices = []
        for fill in fills:
            idx = fill.get("idx") if isinstance(fill, dict) else None
            if isinstance(idx, int) and not isinstance(idx, bool):
                indices.append(idx)
            else:
                logger.warning(f"Ignoring malformed ready fill for {order_hash}: {fill!r}")
        return indices

    async def disclose_secret(self, order_hash: str, secret: Secret) -> None:
        await self._http.request(
            "POST",
            "/relayer/v1.0/submit/secret",
            json={"orderHash": order_hash, "secret": secret.reveal()},
        )

    async def get_order_status(self, order_hash: str) -> OrderStatus:
        data = await self._http.request("GET", f"/orders/v1.0/order/status/{order_hash}")
        if not isinstance(data, dict) or "status" not in data:
            raise MalformedVenueResponse(f"{self.name} status response missing 'status'")
        return parse_order_status(data["status"])

    async def get_orders_by_maker(self, address: str) -> list[dict]:
        data = await self._http.request(
            "GET",
            f"/orders/v1.0/order/maker/{address}",
            params={"page": 1, "limit": 100},
        )
        if isinstance(data, list):
            return data
        items = data.get("items", []) if isinstance(data, dict) else []
        return items if isinstance(items, list) else []

    async def close(self) -> None:
        await self._http.close()
