"""Destination-amount extraction from heterogeneous venue payloads.

Each extractor is a named function returning ``(value, ok)``. Extractors are
tried in order and the first success wins. When none matches the payload is
rejected: no placeholder amount is ever substituted.
"""

import logging
from typing import Any, Callable, Optional, Sequence

from swapsettle.errors import MalformedVenueResponse

logger = logging.getLogger(__name__)

ExtractFn = Callable[[dict], tuple[Optional[int], bool]]
Extractor = tuple[str, ExtractFn]


def _to_positive_int(value: Any) -> tuple[Optional[int], bool]:
    if value is None or isinstance(value, bool):
        return None, False
    try:
        amount = int(str(value).strip())
    except (TypeError, ValueError):
        return None, False
    if amount <= 0:
        return None, False
    return amount, True


def hex_or_int(value: Any, default: int = 0) -> int:
    """Parse a numeric field that may be a decimal string, 0x hex or int."""
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    text = str(value)
    try:
        return int(text, 16) if text.startswith("0x") else int(text)
    except ValueError as e:
        raise MalformedVenueResponse(f"Unparseable numeric field {value!r}") from e


def field_at(*path: str) -> Extractor:
    """Extractor reading a nested key path, e.g. ``field_at("presets", "fast", "auctionEndAmount")``."""

    def extract(payload: dict) -> tuple[Optional[int], bool]:
        node: Any = payload
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return None, False
            node = node[key]
        return _to_positive_int(node)

    return ".".join(path), extract


def preset_field(name: str) -> Extractor:
    """Extractor reading a field of the recommended preset of a cross-chain quote."""

    def extract(payload: dict) -> tuple[Optional[int], bool]:
        preset = selected_preset(payload)
        if preset is None:
            return None, False
        return _to_positive_int(preset.get(name))

    return f"preset.{name}", extract


def selected_preset(payload: dict, preferred: Optional[str] = None) -> Optional[dict]:
    """Return the preset dict a quote recommends (or ``preferred`` if present)."""
    presets = payload.get("presets")
    if not isinstance(presets, dict) or not presets:
        return None
    name = preferred or payload.get("recommended_preset") or payload.get("recommendedPreset")
    if name and isinstance(presets.get(name), dict):
        return presets[name]
    fast = presets.get("fast")
    return fast if isinstance(fast, dict) else None


def extract_amount(payload: dict, extractors: Sequence[Extractor], venue: str) -> int:
    """Run extractors in priority order.

    Raises:
        MalformedVenueResponse: If no extractor yields a positive amount
    """
    if not isinstance(payload, dict):
        raise MalformedVenueResponse(f"{venue} quote payload is not an object")

    for name, extract in extractors:
        value, ok = extract(payload)
        if ok:
            logger.debug(f"{venue}: destination amount from '{name}'")
            return value

    logger.warning(
        f"{venue}: no destination amount in quote (tried {[n for n, _ in extractors]}, "
        f"keys={sorted(payload.keys())})"
    )
    raise MalformedVenueResponse(f"{venue} quote has no destination amount")


SAME_CHAIN_AMOUNT_EXTRACTORS: list[Extractor] = [
    field_at("toTokenAmount"),
    field_at("toAmount"),
    field_at("dstAmount"),
]

RAW_SWAP_AMOUNT_EXTRACTORS: list[Extractor] = [
    field_at("dstAmount"),
    field_at("toAmount"),
    field_at("toTokenAmount"),
]

CROSS_CHAIN_AMOUNT_EXTRACTORS: list[Extractor] = [
    preset_field("auctionEndAmount"),
    preset_field("auctionStartAmount"),
    preset_field("startAmount"),
    field_at("dstTokenAmount"),
]
