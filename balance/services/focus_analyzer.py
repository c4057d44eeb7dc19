"""LLM-powered focus analysis pipeline."""
from __future__ import annotations

import logging
from enum import Enum

from balance.exceptions import BalanceError, MissingAPIKey, NoUserContext, ValidationFailed
from balance.models.schemas import FocusAnalysis, HealthData, ProviderConfig, Severity, UserInput, ValidationResult
from balance.services.history_store import HistoryStore
from balance.services.llm_client import LLMClient
from balance.services.prompt_builder import build_prompt
from balance.services.response_parser import parse_analysis
from balance.services.user_session import UserSessionManager
from balance.services.validators import validate_health, validate_user_input


logger = logging.getLogger(__name__)


class AnalysisStage(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    BUILDING_PROMPT = "building_prompt"
    AWAITING_RESPONSE = "awaiting_response"
    PARSING = "parsing"
    PERSISTED = "persisted"
    FAILED = "failed"


class FocusAnalyzer:
    """Validate, prompt, call the LLM, parse and persist one analysis.

    Either a complete :class:`FocusAnalysis` is stored and returned, or a
    :class:`~balance.exceptions.BalanceError` is raised and the history is
    left untouched. Invocations are independent; only the history store is
    shared between them.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        history_store: HistoryStore,
        user_session: UserSessionManager,
        provider_config: ProviderConfig,
        long_duration_severity: Severity = Severity.WARNING,
    ) -> None:
        self.llm_client = llm_client
        self.history_store = history_store
        self.user_session = user_session
        self.provider_config = provider_config
        self.long_duration_severity = long_duration_severity

    def validate(self, health_data: HealthData, user_input: UserInput) -> ValidationResult:
        """Combined health + input validation, health issues first."""

        return validate_health(health_data).merge(
            validate_user_input(user_input, self.long_duration_severity)
        )

    async def analyze(self, health_data: HealthData, user_input: UserInput) -> FocusAnalysis:
        stage = AnalysisStage.IDLE
        try:
            if not self.provider_config.api_key.strip():
                raise MissingAPIKey()

            stage = self._advance(stage, AnalysisStage.VALIDATING)
            validation = self.validate(health_data, user_input)
            if not validation.is_valid:
                raise ValidationFailed(validation.errors)
            for warning in validation.warnings:
                logger.info("Validation warning: %s", warning)

            user = self.user_session.current_user()
            if user is None:
                raise NoUserContext()

            stage = self._advance(stage, AnalysisStage.BUILDING_PROMPT)
            prompt = build_prompt(user, health_data, user_input)

            stage = self._advance(stage, AnalysisStage.AWAITING_RESPONSE)
            content = await self.llm_client.complete(prompt, self.provider_config)

            stage = self._advance(stage, AnalysisStage.PARSING)
            analysis = parse_analysis(content, user_id=user.id)

            self.history_store.insert(analysis)
            self._advance(stage, AnalysisStage.PERSISTED)
        except BalanceError as exc:
            logger.warning("Focus analysis failed while %s: %s", stage.value, exc)
            raise

        logger.info(
            "Focus analysis %s | score=%.0f recommendations=%d",
            analysis.id,
            analysis.focus_score,
            len(analysis.recommendations),
        )
        return analysis

    @staticmethod
    def _advance(current: AnalysisStage, new: AnalysisStage) -> AnalysisStage:
        logger.debug("Analysis stage %s -> %s", current.value, new.value)
        return new
