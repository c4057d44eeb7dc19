"""API endpoint running the focus-analysis pipeline."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from balance.dependencies import Services, get_services
from balance.exceptions import (
    APIError,
    BalanceError,
    DecodeError,
    InvalidURL,
    MissingAPIKey,
    NetworkError,
    NoData,
    NoUserContext,
    ValidationFailed,
)
from balance.models.schemas import AnalysisRequest, FocusAnalysis, ValidationResult
from balance.services.health_source import MockHealthDataSource


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analysis", tags=["analysis"])

ERROR_STATUS: dict[type[BalanceError], int] = {
    ValidationFailed: 422,
    NoUserContext: 409,
    MissingAPIKey: 503,
    InvalidURL: 503,
    NetworkError: 504,
    APIError: 502,
    NoData: 502,
    DecodeError: 502,
}


def to_http_exception(exc: BalanceError) -> HTTPException:
    status = next((code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 500)
    detail: dict = {"error": exc.code, "message": str(exc)}
    if isinstance(exc, ValidationFailed):
        detail["messages"] = exc.messages
    if isinstance(exc, APIError):
        detail["status_code"] = exc.status_code
    return HTTPException(status_code=status, detail=detail)


async def _resolve_health_data(payload: AnalysisRequest, services: Services):
    if payload.health_data is not None:
        return payload.health_data
    if payload.scenario:
        try:
            source = MockHealthDataSource(scenario=payload.scenario)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return await source.fetch_health_data()
    return await services.health_source.fetch_health_data()


@router.post("", response_model=FocusAnalysis)
async def create_analysis(payload: AnalysisRequest, services: Services = Depends(get_services)):
    """
    Analyze focus cues for the current user.

    Health data comes from the request body, a named mock scenario, or the
    configured health data source, in that order of preference.
    """

    health_data = await _resolve_health_data(payload, services)
    logger.info("Handling analysis request | activity=%s", payload.user_input.activity.strip() or "-")
    try:
        return await services.analyzer.analyze(health_data, payload.user_input)
    except BalanceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/validate", response_model=ValidationResult)
async def validate_analysis_input(payload: AnalysisRequest, services: Services = Depends(get_services)):
    """Run validation only, returning blocking errors and advisory warnings."""

    health_data = await _resolve_health_data(payload, services)
    return services.analyzer.validate(health_data, payload.user_input)
