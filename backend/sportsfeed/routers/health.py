"""
backend/sportsfeed/routers/health.py

Purpose:
    Operational surface: per-provider health snapshot for dashboards, and
    admin endpoints to force a provider on/off or reset its circuit breaker.

Dependencies:
    - sportsfeed.services.sports_aggregator
    - sportsfeed.services.provider_toggle
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from sportsfeed.services.sports_aggregator import SportsAggregator, get_aggregator

router = APIRouter(prefix="/api/health", tags=["health"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


class ProviderToggleRequest(BaseModel):
    enabled: bool | None = None
    actor: str | None = None


def _known_provider(aggregator: SportsAggregator, name: str) -> str:
    adapter = aggregator.registry.get(name)
    if adapter is None:
        raise HTTPException(status_code=404, detail="Unknown provider.")
    return adapter.name


@router.get("/providers")
async def provider_health(aggregator: SportsAggregator = Depends(get_aggregator)):
    return {"items": await aggregator.get_provider_health()}


@admin_router.put("/providers/{name}/toggle")
async def toggle_provider(
    name: str,
    body: ProviderToggleRequest,
    aggregator: SportsAggregator = Depends(get_aggregator),
):
    provider = _known_provider(aggregator, name)
    return await aggregator.toggles.set_override(provider, body.enabled, actor=body.actor)


@admin_router.delete("/providers/{name}/health")
async def reset_provider_health(name: str, aggregator: SportsAggregator = Depends(get_aggregator)):
    provider = _known_provider(aggregator, name)
    await aggregator.health.clear(provider)
    return {"provider": provider, "cleared": True}
