"""Construction of the long-lived services shared by the API and scripts."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

import httpx
from sqlalchemy.orm import sessionmaker

from balance.config import Settings, get_settings
from balance.database import create_session_factory
from balance.services.focus_analyzer import FocusAnalyzer
from balance.services.health_source import HealthDataSource, MockHealthDataSource
from balance.services.history_store import HistoryStore
from balance.services.llm_client import LLMClient
from balance.services.user_session import UserSessionManager


logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    history_store: HistoryStore
    user_session: UserSessionManager
    llm_client: LLMClient
    health_source: HealthDataSource
    analyzer: FocusAnalyzer


def build_services(
    settings: Settings,
    session_factory: sessionmaker | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    health_source: HealthDataSource | None = None,
) -> Services:
    """Wire every service once; callers pass the result down explicitly."""

    if session_factory is None:
        session_factory = create_session_factory(settings.database_url, echo=settings.debug)

    history_store = HistoryStore(session_factory, capacity=settings.history_capacity)
    user_session = UserSessionManager(session_factory, test_mode=settings.use_mock_data)
    user_session.load_or_create_user()
    llm_client = LLMClient(timeout=settings.request_timeout_seconds, transport=transport)
    if health_source is None:
        if not settings.use_mock_data:
            # Only mock readings exist; the flag just marks the user as a real one
            logger.warning(
                "USE_MOCK_DATA is off but no health data source is configured; using mock scenario %s",
                settings.mock_scenario,
            )
        health_source = MockHealthDataSource(scenario=settings.mock_scenario)

    analyzer = FocusAnalyzer(
        llm_client=llm_client,
        history_store=history_store,
        user_session=user_session,
        provider_config=settings.provider_config(),
        long_duration_severity=settings.long_duration_severity,
    )
    return Services(
        settings=settings,
        history_store=history_store,
        user_session=user_session,
        llm_client=llm_client,
        health_source=health_source,
        analyzer=analyzer,
    )


@lru_cache()
def get_services() -> Services:
    """FastAPI dependency returning the process-wide services."""

    return build_services(get_settings())
