"""Error taxonomy for quoting, order placement and settlement.

Every error carries a ``user_message`` that can be shown to the person who
requested the swap. ``classify_venue_error`` turns raw venue error text into
the matching exception class.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class SwapError(Exception):
    """Base class for all engine errors."""

    default_message = "Swap failed."

    def __init__(self, detail: str = "", user_message: Optional[str] = None):
        self.detail = detail
        self.user_message = user_message or self.default_message
        super().__init__(detail or self.user_message)


class InvalidRequest(SwapError):
    """Raised when a quote or order request is malformed."""

    default_message = "Invalid swap request."


class ConfigurationError(SwapError):
    """Raised at startup when the venue registry is incomplete."""

    default_message = "Swap engine is misconfigured."


class RouteUnavailable(SwapError):
    """No path exists between the two chains or tokens."""

    default_message = "No route available for this swap."


class TokenUnsupported(SwapError):
    default_message = "Token not supported for this swap."


class FeeOnTransferRejected(TokenUnsupported):
    """The aggregation venue refuses fee-on-transfer tokens."""

    default_message = "Token charges a fee on transfers and is not supported by this venue."


class InsufficientLiquidity(SwapError):
    default_message = "Insufficient liquidity for this swap."


class AmountTooSmall(SwapError):
    default_message = "Minimum swap amount not met. Try with a larger amount."


class VenueUnavailable(SwapError):
    """Network, auth or rate-limit failure talking to a venue."""

    default_message = "Swap venue is temporarily unavailable. Please try again later."


class MalformedVenueResponse(VenueUnavailable):
    """The venue answered but the payload could not be understood."""

    default_message = "Swap venue returned an unexpected response."


class SubmissionFailed(SwapError):
    default_message = "Order submission failed."


class InsufficientBalance(SubmissionFailed):
    default_message = "Insufficient token balance for this swap."


class InsufficientAllowance(SubmissionFailed):
    default_message = "Token allowance too low. Approve the token for the settlement contract first."


class InvalidSecretsCount(SwapError):
    default_message = "Settlement preset advertised an invalid number of secrets."


class DisclosureFailed(SwapError):
    """Secret disclosure for one fill index failed (non-fatal)."""

    default_message = "Secret disclosure failed."

    def __init__(self, order_hash: str, index: int, detail: str = ""):
        self.order_hash = order_hash
        self.index = index
        super().__init__(detail or f"disclosure failed for {order_hash} index {index}")


class WatcherTimeout(SwapError):
    """Watcher gave up observing an order (monitoring-only, non-fatal)."""

    default_message = "Order is still settling. Check its status again later."


# Ordered: first match wins. Patterns are lower-case substrings.
_CLASSIFICATION_RULES: list[tuple[tuple[str, ...], type[SwapError]]] = [
    (("fee on transfer",), FeeOnTransferRejected),
    (("insufficient liquidity", "not enough liquidity"), InsufficientLiquidity),
    (("amount too small", "amount is too small", "min amount", "minimum amount"), AmountTooSmall),
    (("not enough balance", "insufficient balance", "insufficient funds"), InsufficientBalance),
    (("allowance",), InsufficientAllowance),
    (("token not supported", "unsupported token", "not supported token", "invalid token"), TokenUnsupported),
    (("no route", "route not found", "cannot find route", "chain not supported"), RouteUnavailable),
]


def classify_venue_error(
    text: str,
    status_code: Optional[int] = None,
) -> Optional[SwapError]:
    """Map venue error text (and HTTP status) to a SwapError.

    Returns None when nothing matches so callers can wrap the original text
    in the error class that fits their context.
    """
    lowered = (text or "").lower()

    for patterns, error_cls in _CLASSIFICATION_RULES:
        if any(p in lowered for p in patterns):
            return error_cls(text)

    if status_code is not None and (status_code in (401, 403, 429) or status_code >= 500):
        return VenueUnavailable(f"HTTP {status_code}: {text}")

    return None
