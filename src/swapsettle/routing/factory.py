"""Factory for the venue registry.

Creates real 1inch venues when an API key is available and dry-run is off,
otherwise falls back to simulated venues.
"""

import logging
from typing import Optional

import httpx

from swapsettle.config import Settings, get_settings
from swapsettle.routing.router import VenueRegistry

logger = logging.getLogger(__name__)


def create_simulated_registry(chain_ids: list[int]) -> VenueRegistry:
    """Registry of dry-run venues for every chain."""
    from swapsettle.routing.dry_run import (
        DryRunCrossChainVenue,
        DryRunRawSwapVenue,
        DryRunSameChainVenue,
    )

    return VenueRegistry(
        same_chain={cid: DryRunSameChainVenue(cid) for cid in chain_ids},
        raw_swap={cid: DryRunRawSwapVenue(cid) for cid in chain_ids},
        cross_chain=DryRunCrossChainVenue(),
    )


def create_oneinch_registry(
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> VenueRegistry:
    """Registry of live 1inch venues sharing one connection pool.

    Args:
        settings: Application settings
        client: Shared HTTP client (created when omitted)
    """
    from swapsettle.routing.classic import ClassicSwapVenue
    from swapsettle.routing.fusion import FusionVenue
    from swapsettle.routing.fusion_plus import FusionPlusVenue

    client = client or httpx.AsyncClient(timeout=settings.request_timeout)
    common = {
        "api_url": settings.oneinch_api_url,
        "api_key": settings.oneinch_api_key,
        "timeout": settings.request_timeout,
        "client": client,
    }

    registry = VenueRegistry()
    for chain_id in settings.chain_ids:
        registry.same_chain[chain_id] = FusionVenue(chain_id, **common)
        registry.raw_swap[chain_id] = ClassicSwapVenue(
            chain_id,
            rpc_url=settings.get_rpc_url(chain_id),
            slippage_percent=settings.default_slippage,
            **common,
        )
        logger.info(f"Added 1inch venues for chain {chain_id}")

    registry.cross_chain = FusionPlusVenue(**common)
    return registry


def create_venue_registry(
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> VenueRegistry:
    """Create the registry the router validates at startup."""
    settings = settings or get_settings()

    if not settings.dry_run:
        if settings.oneinch_api_key:
            return create_oneinch_registry(settings, client=client)
        logger.warning("ONEINCH_API_KEY not set, using simulated venues")

    logger.info(f"Using simulated venues for chains {settings.chain_ids}")
    return create_simulated_registry(settings.chain_ids)
