"""API endpoints for browsing and pruning analysis history."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from balance.dependencies import Services, get_services
from balance.models.schemas import FocusAnalysis


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("", response_model=list[FocusAnalysis])
async def list_history(services: Services = Depends(get_services)):
    """All stored analyses, newest first."""
    return services.history_store.list()


@router.get("/users/{user_id}", response_model=list[FocusAnalysis])
async def list_user_history(user_id: str, services: Services = Depends(get_services)):
    return services.history_store.list_for_user(user_id)


@router.get("/{analysis_id}", response_model=FocusAnalysis)
async def get_analysis(analysis_id: str, services: Services = Depends(get_services)):
    analysis = services.history_store.get(analysis_id)
    if analysis is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return analysis


@router.delete("/{analysis_id}", status_code=204)
async def delete_analysis(analysis_id: str, services: Services = Depends(get_services)):
    if not services.history_store.delete_by_id(analysis_id):
        raise HTTPException(status_code=404, detail="Analysis not found")


@router.delete("", status_code=204)
async def clear_history(services: Services = Depends(get_services)):
    logger.info("Clearing analysis history via API")
    services.history_store.clear()
