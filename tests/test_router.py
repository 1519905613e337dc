"""Tests for the quote router."""

import pytest

from conftest import (
    BASE,
    ETH_ETHEREUM,
    ETHEREUM,
    USDC_BASE,
    USDC_ETHEREUM,
    make_cross_chain_venue,
    make_request,
    make_same_chain_venue,
)
from swapsettle.errors import (
    AmountTooSmall,
    ConfigurationError,
    FeeOnTransferRejected,
    InsufficientLiquidity,
    InvalidRequest,
    RouteUnavailable,
    TokenUnsupported,
)
from swapsettle.routing.base import SwapRoute, route_for
from swapsettle.routing.router import QuoteRouter, VenueRegistry


class TestRouteSelection:
    """Tests for same-chain vs cross-chain dispatch."""

    def test_route_is_pure_function_of_chains(self):
        """Route depends only on the chain ids."""
        assert route_for(1, 1) is SwapRoute.SAME_CHAIN
        assert route_for(1, 8453) is SwapRoute.CROSS_CHAIN
        assert make_request(ETHEREUM, BASE).route is SwapRoute.CROSS_CHAIN

    @pytest.mark.asyncio
    async def test_same_chain_never_touches_cross_chain(self, router, same_chain_venue, cross_chain_venue):
        """Same-chain requests only reach the same-chain venue."""
        quote = await router.get_quote(make_request(ETHEREUM, ETHEREUM))

        assert quote.venue == "primary"
        same_chain_venue.quote.assert_awaited_once()
        cross_chain_venue.quote.assert_not_called()
        cross_chain_venue.submit.assert_not_called()

    @pytest.mark.asyncio
    async def test_cross_chain_uses_cross_chain_venue(self, router, same_chain_venue, cross_chain_venue):
        """Different chains go to the cross-chain venue."""
        quote = await router.get_quote(make_request(ETHEREUM, BASE, dest_token="USDC"))

        assert quote.venue == "cross"
        assert quote.secrets_count == 4
        same_chain_venue.quote.assert_not_called()

    @pytest.mark.asyncio
    async def test_symbols_resolved_to_addresses(self, router, cross_chain_venue):
        """Token symbols reach the venue as checksummed addresses."""
        await router.get_quote(make_request(ETHEREUM, BASE, dest_token="USDC"))

        sent = cross_chain_venue.quote.await_args.args[0]
        assert sent.source_token == USDC_ETHEREUM
        assert sent.dest_token == USDC_BASE

    @pytest.mark.asyncio
    async def test_quote_idempotent(self, router):
        """Identical requests give identical quotes when the venue is deterministic."""
        first = await router.get_quote(make_request())
        second = await router.get_quote(make_request())

        assert first == second
        assert first.dest_token == ETH_ETHEREUM


class TestFeeOnTransferFallback:
    """Tests for the same-chain fee-on-transfer fallback."""

    @pytest.mark.asyncio
    async def test_fallback_called_exactly_once(self, router, same_chain_venue, raw_swap_venue):
        """Primary rejects fee-on-transfer: raw swap venue quotes once, primary is not retried."""
        same_chain_venue.quote.side_effect = FeeOnTransferRejected("fee on transfer token")

        quote = await router.get_quote(make_request())

        assert quote.venue == "raw"
        assert same_chain_venue.quote.await_count == 1
        assert raw_swap_venue.quote.await_count == 1

    @pytest.mark.asyncio
    async def test_fallback_error_propagates(self, router, same_chain_venue, raw_swap_venue):
        """A failing fallback is not retried either."""
        same_chain_venue.quote.side_effect = FeeOnTransferRejected("fee on transfer token")
        raw_swap_venue.quote.side_effect = InsufficientLiquidity("insufficient liquidity")

        with pytest.raises(InsufficientLiquidity):
            await router.get_quote(make_request())

        assert same_chain_venue.quote.await_count == 1
        assert raw_swap_venue.quote.await_count == 1

    @pytest.mark.asyncio
    async def test_other_errors_do_not_fall_back(self, router, same_chain_venue, raw_swap_venue):
        """Only fee-on-transfer rejections trigger the fallback."""
        same_chain_venue.quote.side_effect = InsufficientLiquidity("insufficient liquidity")

        with pytest.raises(InsufficientLiquidity):
            await router.get_quote(make_request())

        raw_swap_venue.quote.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_fallback_on_cross_chain(self, router, cross_chain_venue, raw_swap_venue):
        """Cross-chain rejections surface unchanged."""
        cross_chain_venue.quote.side_effect = FeeOnTransferRejected("fee on transfer token")

        with pytest.raises(FeeOnTransferRejected):
            await router.get_quote(make_request(ETHEREUM, BASE, dest_token="USDC"))

        raw_swap_venue.quote.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_fallback_reraises(self):
        """Without a raw swap venue the rejection surfaces."""
        primary = make_same_chain_venue()
        primary.quote.side_effect = FeeOnTransferRejected("fee on transfer token")
        router = QuoteRouter(VenueRegistry(same_chain={ETHEREUM: primary}), required_chain_ids=[])

        with pytest.raises(FeeOnTransferRejected):
            await router.get_quote(make_request())


class TestRequestValidation:
    """Tests for request validation."""

    @pytest.mark.asyncio
    async def test_zero_amount(self, router):
        with pytest.raises(AmountTooSmall):
            await router.get_quote(make_request(amount="0"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["1.5", "-5", "abc", ""])
    async def test_malformed_amount(self, router, amount):
        """Amounts must be positive integer strings."""
        with pytest.raises(InvalidRequest):
            await router.get_quote(make_request(amount=amount))

    @pytest.mark.asyncio
    async def test_unsupported_chain(self, router):
        with pytest.raises(RouteUnavailable):
            await router.get_quote(make_request(ETHEREUM, 250))

    @pytest.mark.asyncio
    async def test_unknown_token(self, router):
        with pytest.raises(TokenUnsupported):
            await router.get_quote(make_request(source_token="NOPE"))

    @pytest.mark.asyncio
    async def test_invalid_wallet(self, router, same_chain_venue):
        with pytest.raises(InvalidRequest):
            await router.get_quote(make_request(wallet_address="not-an-address"))

        same_chain_venue.quote.assert_not_called()


class TestVenueRegistry:
    """Tests for startup validation of the registry."""

    def test_missing_chain_rejected(self, registry):
        """A required chain without a client fails at construction."""
        with pytest.raises(ConfigurationError) as exc:
            QuoteRouter(registry, required_chain_ids=[ETHEREUM, BASE, 137])

        assert "137" in str(exc.value)

    def test_missing_cross_chain_rejected(self):
        """Multiple chains need a cross-chain venue."""
        registry = VenueRegistry(
            same_chain={ETHEREUM: make_same_chain_venue(), BASE: make_same_chain_venue()},
            raw_swap={ETHEREUM: make_same_chain_venue(), BASE: make_same_chain_venue()},
        )

        with pytest.raises(ConfigurationError):
            QuoteRouter(registry)

    def test_complete_registry_accepted(self, registry):
        router = QuoteRouter(registry, required_chain_ids=[ETHEREUM, BASE])

        assert router.registry.chain_ids == [ETHEREUM, BASE]

    @pytest.mark.asyncio
    async def test_close_closes_every_venue(self):
        primary = make_same_chain_venue()
        raw = make_same_chain_venue()
        cross = make_cross_chain_venue()
        registry = VenueRegistry({ETHEREUM: primary}, {ETHEREUM: raw}, cross)

        await registry.close()

        primary.close.assert_awaited_once()
        raw.close.assert_awaited_once()
        cross.close.assert_awaited_once()
