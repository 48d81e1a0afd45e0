from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from investment_helper.core.config import Settings
from investment_helper.llm.prompts import (
    NO_NEWS_MESSAGE,
    SYSTEM_PROMPT,
    DigestItem,
    build_fallback_message,
    build_news_digest_prompt,
)
from investment_helper.llm.types import AnalysisResult, AttemptOutcome, AttemptResult, ProviderConfig

LOGGER = logging.getLogger(__name__)


def _extract_text_from_chat_response(data: dict[str, Any]) -> str:
    choices = data.get("choices") or []
    if not choices:
        return ""
    message = choices[0].get("message") or {}
    return str(message.get("content") or "").strip()


def build_providers(settings: Settings) -> tuple[ProviderConfig | None, ProviderConfig | None]:
    primary = None
    if settings.gemini_api_key:
        primary = ProviderConfig(
            name="gemini",
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            model=settings.gemini_model,
        )
    secondary = None
    if settings.openai_api_key:
        secondary = ProviderConfig(
            name="openai",
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
        )
    return primary, secondary


class AnalysisClient:
    """Text generation over two OpenAI-compatible chat-completion providers.

    Rate limits (HTTP 429) are retried on the same provider with ``2**attempt``
    second backoff up to ``max_retries`` times. Any other failure on the
    primary's first attempt switches once to the secondary provider. When
    nothing succeeds the static fallback report is returned instead of raising.
    """

    def __init__(
        self,
        primary: ProviderConfig | None,
        secondary: ProviderConfig | None = None,
        *,
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        temperature: float = 0.7,
        max_tokens: int = 3000,
        min_output_chars: int = 100,
        timezone: str = "Asia/Seoul",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.primary = primary
        self.secondary = secondary
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.min_output_chars = min_output_chars
        self._sleep = sleep
        self.tz = ZoneInfo(timezone)

    @classmethod
    def from_settings(cls, settings: Settings) -> AnalysisClient:
        primary, secondary = build_providers(settings)
        return cls(
            primary,
            secondary,
            timeout_seconds=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            min_output_chars=settings.llm_min_output_chars,
            timezone=settings.scheduler_timezone,
        )

    def _today(self) -> date:
        return datetime.now(self.tz).date()

    @property
    def configured(self) -> bool:
        return self.primary is not None or self.secondary is not None

    def _select_provider(self, prefer_primary: bool) -> ProviderConfig | None:
        if prefer_primary and self.primary is not None:
            return self.primary
        return self.secondary or self.primary

    async def _attempt(self, provider: ProviderConfig, prompt: str) -> AttemptResult:
        headers = {"Authorization": f"Bearer {provider.api_key}", "Content-Type": "application/json"}
        payload = {
            "model": provider.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(provider.completions_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            return AttemptResult(AttemptOutcome.PROVIDER_ERROR, error=f"transport error: {exc}")

        if response.status_code == 429:
            return AttemptResult(AttemptOutcome.RATE_LIMITED, status_code=429, error="rate limited")
        if response.status_code < 200 or response.status_code >= 300:
            body = response.text.strip()
            if len(body) > 250:
                body = f"{body[:250]}..."
            return AttemptResult(
                AttemptOutcome.PROVIDER_ERROR,
                status_code=response.status_code,
                error=f"HTTP {response.status_code}: {body}",
            )

        try:
            text = _extract_text_from_chat_response(response.json())
        except (ValueError, AttributeError, TypeError) as exc:
            return AttemptResult(AttemptOutcome.PROVIDER_ERROR, status_code=response.status_code, error=str(exc))

        if len(text) < self.min_output_chars:
            return AttemptResult(
                AttemptOutcome.PROVIDER_ERROR,
                status_code=response.status_code,
                error=f"output too short ({len(text)} chars)",
            )
        return AttemptResult(AttemptOutcome.SUCCESS, text=text, status_code=response.status_code)

    async def run(self, prompt: str, prefer_primary: bool = True) -> AnalysisResult:
        provider = self._select_provider(prefer_primary)
        if provider is None:
            LOGGER.warning("No LLM provider configured; returning fallback analysis")
            return AnalysisResult(AttemptOutcome.EXHAUSTED, build_fallback_message(self._today()), attempts=0)

        attempt = 0
        calls = 0
        while True:
            LOGGER.info("Requesting analysis from %s (%s), attempt %d", provider.name, provider.model, attempt + 1)
            result = await self._attempt(provider, prompt)
            calls += 1

            if result.outcome is AttemptOutcome.SUCCESS:
                LOGGER.info("Analysis generated by %s (%d chars)", provider.name, len(result.text))
                return AnalysisResult(AttemptOutcome.SUCCESS, result.text, attempts=calls, provider=provider.name)

            LOGGER.error("LLM call failed on %s (attempt %d): %s", provider.name, attempt + 1, result.error)

            if result.outcome is AttemptOutcome.RATE_LIMITED and attempt < self.max_retries:
                wait_seconds = 2**attempt
                LOGGER.warning("Rate limited by %s, retrying in %ss", provider.name, wait_seconds)
                await self._sleep(wait_seconds)
                attempt += 1
                continue

            if provider is self.primary and attempt == 0 and self.secondary is not None:
                LOGGER.warning("Falling back from %s to %s", provider.name, self.secondary.name)
                provider = self.secondary
                continue

            break

        LOGGER.error("All LLM attempts failed after %d calls; returning fallback analysis", calls)
        return AnalysisResult(
            AttemptOutcome.EXHAUSTED,
            build_fallback_message(self._today()),
            attempts=calls,
            provider=provider.name,
        )

    async def analyze(self, prompt: str, prefer_primary: bool = True) -> str:
        result = await self.run(prompt, prefer_primary=prefer_primary)
        return result.text

    async def summarize_news(self, items: Sequence[DigestItem]) -> str:
        if not items:
            return NO_NEWS_MESSAGE
        return await self.analyze(build_news_digest_prompt(items))
