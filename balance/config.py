"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from balance.models.schemas import Provider, ProviderConfig, Severity


PROVIDER_DEFAULTS: dict[Provider, tuple[str, str]] = {
    Provider.OPENAI: ("https://api.openai.com/v1/chat/completions", "gpt-4o-mini"),
    Provider.ABACUS: ("https://api.abacus.ai/v1/chat/completions", "gpt-4o-mini"),
    Provider.ANTHROPIC: ("https://api.anthropic.com/v1/messages", "claude-3-haiku-20240307"),
    # Amazon Nova Lite: best balance of cost and quality on OpenRouter
    Provider.OPENROUTER: ("https://openrouter.ai/api/v1/chat/completions", "amazon/nova-lite-v1"),
}


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    llm_api_key: str = Field(default="", repr=False)
    api_provider: Provider = Field(default=Provider.OPENROUTER)
    llm_api_url: str | None = Field(
        default=None,
        description="Override for the provider's chat-completions endpoint.",
    )
    llm_model: str | None = Field(default=None, description="Override for the provider's default model.")

    database_url: str = Field(
        default="sqlite:///./data/balance.db",
        description="SQLAlchemy-compatible database URL.",
    )
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = Field(default=False)

    history_capacity: int = Field(default=50, ge=1)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    use_mock_data: bool = Field(default=True)
    mock_scenario: str | None = Field(
        default="well_rested",
        description="Named mock scenario, or null for randomised mock readings.",
    )
    long_duration_severity: Severity = Field(
        default=Severity.WARNING,
        description="Severity of the 12-16 hour activity duration notice.",
    )

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("api_provider", mode="before")
    @classmethod
    def normalize_provider(cls, value: object) -> object:
        """Accept provider names in any case; unknown names fall back to OpenRouter."""

        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered not in {p.value for p in Provider}:
                return Provider.OPENROUTER
            return lowered
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper

    def provider_config(self) -> ProviderConfig:
        """Resolve the LLM endpoint, falling back to the provider's defaults."""

        default_url, default_model = PROVIDER_DEFAULTS[self.api_provider]
        return ProviderConfig(
            api_key=self.llm_api_key.strip(),
            api_url=self.llm_api_url or default_url,
            model=self.llm_model or default_model,
            provider=self.api_provider,
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings
