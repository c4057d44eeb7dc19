"""Router exposing system status, provider connectivity and sample data."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from balance.dependencies import Services, get_services
from balance.models.schemas import ConnectionCheck, HealthData
from balance.services.health_source import MockHealthDataSource


logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/status")
async def get_status(services: Services = Depends(get_services)) -> dict:
    """Return a minimal status payload."""
    config = services.analyzer.provider_config
    return {
        "status": "online",
        "provider": config.provider.value,
        "model": config.model,
        "api_key_configured": bool(config.api_key),
        "history_size": len(services.history_store),
        "history_capacity": services.history_store.capacity,
    }


@router.get("/connection", response_model=ConnectionCheck)
async def check_connection(services: Services = Depends(get_services)):
    """Probe the configured LLM provider with a tiny request."""

    result = await services.llm_client.check_connection(services.analyzer.provider_config)
    if not result.ok:
        logger.warning("Provider connection check failed: %s", result.message)
    return result


@router.get("/sample", response_model=HealthData)
async def get_sample(scenario: str | None = None, services: Services = Depends(get_services)):
    """Health data from the configured source, or from a named mock scenario."""

    if scenario is None:
        return await services.health_source.fetch_health_data()
    try:
        source = MockHealthDataSource(scenario=scenario)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return await source.fetch_health_data()
