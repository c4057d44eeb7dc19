"""HTTP client for OpenAI-style chat-completion endpoints."""
from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from balance.exceptions import (
    APIError,
    DecodeError,
    InvalidURL,
    LLMError,
    MissingAPIKey,
    NetworkError,
    NoData,
)
from balance.models.schemas import ConnectionCheck, Provider, ProviderConfig
from balance.services.prompt_builder import load_prompt_config, system_prompt


logger = logging.getLogger(__name__)

OPENROUTER_HEADERS = {
    "HTTP-Referer": "BalanceApp",
    "X-Title": "BalanceApp/1.0",
}
OPENROUTER_KEY_PREFIX = "sk-or-v1-"


class LLMClient:
    """Sends one prompt per call and returns the first choice's text.

    Each call is a single round trip; nothing is retried. ``transport`` lets
    tests swap in an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._transport = transport

    @staticmethod
    def build_headers(config: ProviderConfig) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }
        if config.provider is Provider.OPENROUTER:
            headers.update(OPENROUTER_HEADERS)
        return headers

    def build_payload(self, prompt: str, config: ProviderConfig) -> dict[str, Any]:
        return {
            "model": config.model,
            "messages": [
                {"role": "system", "content": system_prompt()},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    async def complete(self, prompt: str, config: ProviderConfig) -> str:
        """Return the model's reply text or raise an :class:`LLMError`."""

        if not config.api_key.strip():
            raise MissingAPIKey()
        url = self._validate_url(config.api_url)

        logger.info("Requesting completion | provider=%s model=%s", config.provider.value, config.model)
        response = await self._post(url, self.build_payload(prompt, config), config, self.timeout)

        if not 200 <= response.status_code <= 299:
            message = _extract_error_message(response)
            logger.warning("Provider returned status %d: %s", response.status_code, message)
            raise APIError(response.status_code, message)

        if not response.content:
            raise NoData()

        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(f"invalid JSON ({exc})") from exc
        except (KeyError, IndexError, TypeError) as exc:
            raise DecodeError(f"unexpected response shape ({exc!r})") from exc

        if not isinstance(content, str):
            raise DecodeError("message content is not a string")

        logger.debug("Received %d characters from provider", len(content))
        return content

    async def check_connection(self, config: ProviderConfig) -> ConnectionCheck:
        """Send a tiny probe request and describe the outcome. Never raises."""

        def result(ok: bool, message: str) -> ConnectionCheck:
            return ConnectionCheck(ok=ok, message=message, provider=config.provider, model=config.model)

        if not config.api_key.strip():
            return result(False, "API key is empty")
        if config.provider is Provider.OPENROUTER and not config.api_key.startswith(OPENROUTER_KEY_PREFIX):
            return result(False, f"API key format incorrect (should start with '{OPENROUTER_KEY_PREFIX}')")

        payload = {
            "model": config.model,
            "messages": [{"role": "user", "content": load_prompt_config()["connection_probe"]}],
            "max_tokens": 20,
        }
        try:
            url = self._validate_url(config.api_url)
            response = await self._post(url, payload, config, timeout=10.0)
        except LLMError as exc:
            return result(False, str(exc))

        if 200 <= response.status_code <= 299:
            return result(True, f"API connected successfully (model: {config.model})")
        return result(False, f"API error (status {response.status_code}): {_extract_error_message(response)}")

    async def _post(
        self,
        url: httpx.URL,
        payload: dict[str, Any],
        config: ProviderConfig,
        timeout: float,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                return await client.post(url, json=payload, headers=self.build_headers(config))
        except httpx.InvalidURL as exc:
            raise InvalidURL(str(url)) from exc
        except httpx.DecodingError as exc:
            raise DecodeError(f"undecodable response body ({exc})") from exc
        except httpx.RequestError as exc:
            logger.warning("LLM request failed: %s", type(exc).__name__)
            raise NetworkError(exc) from exc

    @staticmethod
    def _validate_url(raw: str) -> httpx.URL:
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL as exc:
            raise InvalidURL(raw) from exc
        if url.scheme not in {"http", "https"} or not url.host:
            raise InvalidURL(raw)
        return url


def _extract_error_message(response: httpx.Response) -> str:
    """Best-effort ``{"error": {"message": ...}}`` lookup."""

    fallback = f"API returned status code {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return fallback
