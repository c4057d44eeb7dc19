"""Error taxonomy for the focus-analysis pipeline.

Every error is terminal for the invocation that raised it; nothing in the
pipeline retries. Messages never include the API key.
"""
from __future__ import annotations


class BalanceError(Exception):
    """Base class for all pipeline failures."""

    code = "error"


class ValidationFailed(BalanceError):
    """Health data or user input failed a blocking validation rule."""

    code = "validation_failed"

    def __init__(self, messages: list[str]) -> None:
        self.messages = list(messages)
        super().__init__(", ".join(self.messages) or "Validation failed")


class NoUserContext(BalanceError):
    """No current user is available to stamp the analysis."""

    code = "no_user_context"

    def __init__(self) -> None:
        super().__init__("No active user session")


class LLMError(BalanceError):
    """Base class for failures talking to the LLM provider."""

    code = "llm_error"


class MissingAPIKey(LLMError):
    code = "missing_api_key"

    def __init__(self) -> None:
        super().__init__("API key not configured")


class InvalidURL(LLMError):
    code = "invalid_url"

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid API URL: {url!r}")


class NetworkError(LLMError):
    """Transport failure: DNS, connection refused, timeout."""

    code = "network_error"

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        detail = str(cause) or type(cause).__name__
        super().__init__(f"Network error: {detail}")


class APIError(LLMError):
    """Provider answered with a non-2xx status."""

    code = "api_error"

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"API error ({status_code}): {message}")


class NoData(LLMError):
    code = "no_data"

    def __init__(self) -> None:
        super().__init__("No data received")


class DecodeError(LLMError):
    code = "decode_error"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Could not decode provider response: {detail}")
