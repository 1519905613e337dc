"""Health check endpoints."""

from typing import Optional

from fastapi import APIRouter, Request

from swapsettle.config import get_settings
from swapsettle.swap_engine import SwapEngine

router = APIRouter()


def _engine(request: Request) -> Optional[SwapEngine]:
    return getattr(request.app.state, "engine", None)


def _venue_table(engine: SwapEngine) -> dict:
    registry = engine.registry
    return {
        "same_chain": {str(cid): venue.name for cid, venue in sorted(registry.same_chain.items())},
        "raw_swap": {str(cid): venue.name for cid, venue in sorted(registry.raw_swap.items())},
        "cross_chain": registry.cross_chain.name if registry.cross_chain else None,
    }


@router.get("/health")
async def health_check(request: Request):
    """Liveness plus whether the swap engine is attached."""
    engine = _engine(request)
    return {
        "status": "healthy" if engine else "starting",
        "service": "swapsettle",
        "chains": engine.registry.chain_ids if engine else [],
    }


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Venue wiring, signer and settlement watcher state."""
    settings = get_settings()
    engine = _engine(request)
    if engine is None:
        return {"status": "starting", "service": "swapsettle", "dry_run": settings.dry_run}

    watcher_config = engine.watchers.config
    return {
        "status": "healthy",
        "service": "swapsettle",
        "version": "0.1.0",
        "dry_run": settings.dry_run,
        "signer": engine.executor.signer.address,
        "venues": _venue_table(engine),
        "watchers": {
            "active": len(engine.watchers.active),
            "poll_interval": watcher_config.poll_interval,
            "max_iterations": watcher_config.max_iterations,
        },
        "config": settings.get_safe_dict(),
    }
