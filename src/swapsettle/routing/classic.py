"""1inch classic aggregation (raw swap) venue.

Fallback for same-chain swaps of tokens that Fusion rejects (fee-on-transfer).
The swap transaction is built by the API, signed locally and broadcast through
the 1inch transaction gateway.
API docs: https://portal.1inch.dev/documentation/apis/swap/classic-swap/introduction
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
from swapsettle.routing.extractors import RAW_SWAP_AMOUNT_EXTRACTORS, extract_amount, hex_or_int
from swapsettle.routing.http import VenueHttpClient
from swapsettle.signing.base import SignerBackend

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 200_000
RAW_SWAP_PRICE_IMPACT_BPS = 10


class ClassicSwapVenue(SameChainVenue):
    """1inch aggregation protocol provider for one chain."""

    def __init__(
        self,
        chain_id: int,
        rpc_url: str,
        api_url: str = "https://api.1inch.dev",
        api_key: str = "",
        slippage_percent: float = 1.0,
        timeout: float = 3.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize raw swap venue.

        Args:
            chain_id: EVM chain id
            rpc_url: JSON-RPC endpoint used for the sender nonce
            api_url: 1inch developer portal base URL
            api_key: 1inch API key (required for production)
            slippage_percent: Default slippage when the request does not carry one
            timeout: Per-request timeout in seconds
            client: Shared HTTP client (tests pass a mock transport here)
        """
        self.chain_id = chain_id
        self.rpc_url = rpc_url
        self.slippage_percent = slippage_percent
        self._http = VenueHttpClient(
            api_url,
            api_key=api_key,
            timeout=timeout,
            client=client,
            venue=self.name,
        )

    @property
    def name(self) -> str:
        return f"1inch Swap ({self.chain_id})"

    async def quote(self, request: QuoteRequest) -> Quote:
        data = await self._http.request(
            "GET",
            f"/swap/v6.0/{self.chain_id}/quote",
            params={
                "src": request.source_token,
                "dst": request.dest_token,
                "amount": str(request.amount_int),
                "includeGas": "true",
            },
        )

        dest_amount = extract_amount(data, RAW_SWAP_AMOUNT_EXTRACTORS, self.name)
        gas = hex_or_int(data.get("gas"), DEFAULT_GAS_LIMIT)

        logger.info(
            f"Raw swap quote on {self.chain_id}: {request.amount_int} -> {dest_amount} (gas {gas})"
        )

        return Quote(
            source_token=request.source_token,
            dest_token=request.dest_token,
            source_chain_id=self.chain_id,
            dest_chain_id=self.chain_id,
            source_amount=request.amount_int,
            dest_amount=dest_amount,
            estimated_gas=gas,
            price_impact_bps=RAW_SWAP_PRICE_IMPACT_BPS,
            venue=self.name,
            raw=data,
        )

    async def _get_nonce(self, address: str) -> int:
        """Pending transaction count for the sender."""
        if not self.rpc_url:
            raise SubmissionFailed(f"No RPC URL configured for chain {self.chain_id}")
        result = await self._http.json_rpc(
            self.rpc_url, "eth_getTransactionCount", [address, "pending"]
        )
        return hex_or_int(result)

    async def submit(
        self,
        request: QuoteRequest,
        quote: Quote,
        signer: SignerBackend,
    ) -> SubmissionReceipt:
        """Build the swap transaction, sign it and broadcast it.

        Returns a PENDING receipt carrying the transaction hash; raw swaps settle
        on chain and have no order hash.
        """
        slippage = request.slippage_percent or self.slippage_percent
        data = await self._http.request(
            "GET",
            f"/swap/v6.0/{self.chain_id}/swap",
            params={
                "src": request.source_token,
                "dst": request.dest_token,
                "amount": str(quote.source_amount),
                "from": request.wallet_address,
                "slippage": str(slippage),
                "disableEstimate": "false",
            },
            error_cls=SubmissionFailed,
        )

        tx = data.get("tx")
        if not isinstance(tx, dict) or not tx.get("to") or "data" not in tx:
            raise MalformedVenueResponse(f"{self.name} swap response missing tx")

        transaction = {
            "to": tx["to"],
            "data": tx["data"],
            "value": hex_or_int(tx.get("value")),
            "gas": hex_or_int(tx.get("gas"), quote.estimated_gas or DEFAULT_GAS_LIMIT),
            "gasPrice": hex_or_int(tx.get("gasPrice")),
            "nonce": await self._get_nonce(signer.address),
            "chainId": self.chain_id,
        }

        raw_tx = await signer.sign_transaction(transaction)

        broadcast = await self._http.request(
            "POST",
            f"/tx-gateway/v1.1/{self.chain_id}/broadcast",
            json={"rawTransaction": raw_tx},
            error_cls=SubmissionFailed,
        )

        tx_hash = broadcast.get("transactionHash")
        if not tx_hash:
            raise MalformedVenueResponse(f"{self.name} broadcast response missing transactionHash")

        logger.info(f"Raw swap broadcast on chain {self.chain_id}: {tx_hash}")
        return SubmissionReceipt(status=OrderStatus.PENDING, tx_hash=tx_hash, raw=data)

    async def close(self) -> None:
        await self._http.close()
