"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict

import httpx
import pytest
from fastapi.testclient import TestClient

os.environ["LLM_API_KEY"] = os.environ.get("LLM_API_KEY") or "sk-or-v1-test-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "balance-test-logs"))

from balance.logging_config import configure_logging

configure_logging()

from balance.config import Settings
from balance.database import create_session_factory
from balance.dependencies import Services, build_services, get_services
from balance.main import app
from balance.models.schemas import HealthData, Provider, ProviderConfig, UserInput

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def chat_completion_fixture() -> Dict[str, Any]:
    """Return an OpenAI-style chat completion payload."""

    with (FIXTURES_DIR / "chat_completion.json").open("r", encoding="utf-8") as fh:
        return json.load(fh)


@pytest.fixture()
def session_factory():
    """Fresh in-memory database per test."""

    return create_session_factory("sqlite://")


@pytest.fixture()
def provider_config() -> ProviderConfig:
    return ProviderConfig(
        api_key="sk-or-v1-test-key",
        api_url="https://openrouter.ai/api/v1/chat/completions",
        model="amazon/nova-lite-v1",
        provider=Provider.OPENROUTER,
    )


@pytest.fixture()
def well_rested_health() -> HealthData:
    return HealthData(
        heart_rate_samples=[68, 70, 69, 71, 67],
        sleep_hours=8.2,
        step_count=8500,
        active_minutes=45,
        timestamp=datetime(2025, 11, 10, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture()
def studying_input() -> UserInput:
    return UserInput(
        activity="Studying",
        duration_hours=1.0,
        stress_level=3,
        focus_level=7,
        timestamp=datetime(2025, 11, 10, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture()
def completion_transport(chat_completion_fixture) -> Callable[..., httpx.MockTransport]:
    """Factory for a transport that answers every request the same way and records it."""

    def factory(
        status_code: int = 200,
        json_body: Any = None,
        content: bytes | None = None,
        requests: list[httpx.Request] | None = None,
    ) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if requests is not None:
                requests.append(request)
            if content is not None:
                return httpx.Response(status_code, content=content)
            body = chat_completion_fixture if json_body is None else json_body
            return httpx.Response(status_code, json=body)

        return httpx.MockTransport(handler)

    return factory


@pytest.fixture()
def build_test_services(session_factory, completion_transport) -> Callable[..., Services]:
    def factory(transport: httpx.AsyncBaseTransport | None = None, **overrides: Any) -> Services:
        values: Dict[str, Any] = {
            "llm_api_key": "sk-or-v1-test-key",
            "database_url": "sqlite://",
            "mock_scenario": "well_rested",
        }
        values.update(overrides)
        settings = Settings(**values)
        return build_services(
            settings,
            session_factory=session_factory,
            transport=transport or completion_transport(),
        )

    return factory


@pytest.fixture()
def services(build_test_services) -> Services:
    return build_test_services()


@pytest.fixture()
def test_client(services):
    """FastAPI test client wired to in-memory services."""

    app.dependency_overrides[get_services] = lambda: services
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
