"""Pydantic models describing pipeline values and API payloads."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Provider(str, Enum):
    """LLM vendors the client knows how to address."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OPENROUTER = "openrouter"
    ABACUS = "abacus"


class ProviderConfig(BaseModel):
    """Resolved endpoint settings for one LLM call."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(default="", repr=False)
    api_url: str
    model: str
    provider: Provider = Provider.OPENROUTER


class HealthData(BaseModel):
    """Biometric snapshot. Values are not range-checked here; see validators."""

    model_config = ConfigDict(allow_inf_nan=False)

    heart_rate_samples: list[float] = Field(default_factory=list)
    sleep_hours: float = 0.0
    step_count: float = 0.0
    active_minutes: float = 0.0
    timestamp: datetime = Field(default_factory=utcnow)

    @computed_field  # type: ignore[misc]
    @property
    def average_heart_rate(self) -> float:
        if not self.heart_rate_samples:
            return 0.0
        return sum(self.heart_rate_samples) / len(self.heart_rate_samples)


class UserInput(BaseModel):
    """Self-reported activity details."""

    model_config = ConfigDict(allow_inf_nan=False)

    activity: str
    duration_hours: float
    stress_level: int
    focus_level: int
    timestamp: datetime = Field(default_factory=utcnow)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str


class ValidationResult(BaseModel):
    """Ordered validation issues; only ERROR issues make a result invalid."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def is_valid(self) -> bool:
        return not any(issue.severity is Severity.ERROR for issue in self.issues)

    @computed_field  # type: ignore[misc]
    @property
    def errors(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity is Severity.ERROR]

    @computed_field  # type: ignore[misc]
    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity is Severity.WARNING]

    def merge(self, other: ValidationResult) -> ValidationResult:
        return ValidationResult(issues=[*self.issues, *other.issues])


class FocusAnalysis(BaseModel):
    """Parsed LLM analysis. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    summary: str
    focus_score: float = Field(ge=0, le=100)
    recommendations: list[str] = Field(default_factory=list, max_length=5)
    timestamp: datetime = Field(default_factory=utcnow)
    user_id: str | None = None


class User(BaseModel):
    id: str
    name: str
    created_at: datetime = Field(default_factory=utcnow)
    is_test_mode: bool = False


class AnalysisRequest(BaseModel):
    """Body of ``POST /api/analysis``.

    When ``health_data`` is omitted the configured health data source is used,
    optionally switched to a named mock ``scenario``.
    """

    user_input: UserInput
    health_data: HealthData | None = None
    scenario: str | None = None


class ConnectionCheck(BaseModel):
    """Outcome of a provider connectivity probe."""

    ok: bool
    message: str
    provider: Provider
    model: str
