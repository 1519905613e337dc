"""Tests for error classification and amount extraction."""

import pytest

from swapsettle.errors import (
    AmountTooSmall,
    FeeOnTransferRejected,
    InsufficientAllowance,
    InsufficientBalance,
    InsufficientLiquidity,
    MalformedVenueResponse,
    RouteUnavailable,
    TokenUnsupported,
    VenueUnavailable,
    classify_venue_error,
)
from swapsettle.routing.extractors import (
    CROSS_CHAIN_AMOUNT_EXTRACTORS,
    RAW_SWAP_AMOUNT_EXTRACTORS,
    SAME_CHAIN_AMOUNT_EXTRACTORS,
    extract_amount,
    field_at,
)


class TestClassifyVenueError:
    """Tests for venue error classification."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Fee on transfer tokens are not supported", FeeOnTransferRejected),
            ("insufficient liquidity", InsufficientLiquidity),
            ("Swap amount too small", AmountTooSmall),
            ("Not enough balance", InsufficientBalance),
            ("Not enough allowance", InsufficientAllowance),
            ("token not supported", TokenUnsupported),
            ("No route found", RouteUnavailable),
        ],
    )
    def test_text_rules(self, text, expected):
        """Venue messages map to their error class."""
        error = classify_venue_error(text, 400)

        assert type(error) is expected
        assert error.detail == text

    def test_fee_on_transfer_is_token_unsupported(self):
        """Fee-on-transfer rejection is a kind of unsupported token."""
        assert isinstance(classify_venue_error("fee on transfer", 400), TokenUnsupported)

    @pytest.mark.parametrize("status", [401, 403, 429, 500, 503])
    def test_status_rules(self, status):
        """Auth, rate-limit and server errors mean the venue is unavailable."""
        assert isinstance(classify_venue_error("boom", status), VenueUnavailable)

    def test_unclassified_returns_none(self):
        """Unknown 4xx text is left for the caller to wrap."""
        assert classify_venue_error("something odd", 400) is None

    def test_user_message_present(self):
        """Every classified error has a user-facing message."""
        error = classify_venue_error("insufficient liquidity")

        assert error.user_message == InsufficientLiquidity.default_message


class TestExtractAmount:
    """Tests for ordered destination-amount extraction."""

    def test_first_match_wins(self):
        """Earlier extractors take priority."""
        payload = {"toTokenAmount": "5", "toAmount": "7", "dstAmount": "9"}

        assert extract_amount(payload, SAME_CHAIN_AMOUNT_EXTRACTORS, "v") == 5
        assert extract_amount(payload, RAW_SWAP_AMOUNT_EXTRACTORS, "v") == 9

    def test_falls_through_invalid_values(self):
        """Zero or non-numeric values do not count as a match."""
        payload = {"toTokenAmount": "0", "toAmount": "abc", "dstAmount": "42"}

        assert extract_amount(payload, SAME_CHAIN_AMOUNT_EXTRACTORS, "v") == 42

    def test_no_match_is_hard_error(self):
        """No placeholder amount: an unparseable quote raises."""
        with pytest.raises(MalformedVenueResponse):
            extract_amount({"quoteId": "q"}, SAME_CHAIN_AMOUNT_EXTRACTORS, "v")

    def test_malformed_is_venue_unavailable(self):
        """Malformed responses belong to the venue-unavailable family."""
        with pytest.raises(VenueUnavailable):
            extract_amount([], SAME_CHAIN_AMOUNT_EXTRACTORS, "v")

    def test_cross_chain_recommended_preset(self):
        """Cross-chain amount comes from the recommended preset."""
        payload = {
            "recommendedPreset": "medium",
            "presets": {
                "fast": {"auctionEndAmount": "100"},
                "medium": {"auctionEndAmount": "200"},
            },
            "dstTokenAmount": "300",
        }

        assert extract_amount(payload, CROSS_CHAIN_AMOUNT_EXTRACTORS, "v") == 200

    def test_cross_chain_top_level_fallback(self):
        """Without presets the top-level destination amount is used."""
        assert extract_amount({"dstTokenAmount": "300"}, CROSS_CHAIN_AMOUNT_EXTRACTORS, "v") == 300

    def test_nested_field(self):
        """field_at follows nested keys."""
        name, extract = field_at("a", "b")

        assert name == "a.b"
        assert extract({"a": {"b": 3}}) == (3, True)
        assert extract({"a": {}}) == (None, False)
