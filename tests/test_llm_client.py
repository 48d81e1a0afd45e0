from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

import httpx
import pytest

from investment_helper.llm.client import AnalysisClient, build_providers
from investment_helper.llm.prompts import NO_NEWS_MESSAGE, SYSTEM_NOTICE_MARKER, format_korean_date
from investment_helper.llm.types import AttemptOutcome, ProviderConfig

from conftest import make_settings

PRIMARY = ProviderConfig(name="gemini", api_key="g-key", base_url="https://gemini.example/v1beta/openai/", model="g")
SECONDARY = ProviderConfig(name="openai", api_key="o-key", base_url="https://openai.example/v1", model="o")

GOOD_TEXT = "시장 분석 결과입니다. " * 20


def _response(status_code: int, payload: dict | None = None, text: str = "") -> httpx.Response:
    request = httpx.Request("POST", "https://llm.example/chat/completions")
    if payload is not None:
        return httpx.Response(status_code=status_code, json=payload, request=request)
    return httpx.Response(status_code=status_code, text=text, request=request)


def _completion(text: str) -> httpx.Response:
    return _response(200, {"choices": [{"message": {"role": "assistant", "content": text}}]})


def _patched_client(responses):
    patcher = patch("investment_helper.llm.client.httpx.AsyncClient")
    MockClient = patcher.start()
    mock_client = AsyncMock()
    mock_client.post.side_effect = responses
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    MockClient.return_value = mock_client
    return patcher, mock_client


@pytest.fixture
def mock_http():
    started = []

    def _start(responses):
        patcher, client = _patched_client(responses)
        started.append(patcher)
        return client

    yield _start
    for patcher in started:
        patcher.stop()


def test_build_providers_reads_keys() -> None:
    primary, secondary = build_providers(make_settings(gemini_api_key="g", openai_api_key=None))
    assert primary is not None and primary.name == "gemini"
    assert secondary is None
    assert primary.completions_url == "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"


@pytest.mark.asyncio
async def test_without_providers_returns_fallback_report() -> None:
    client = AnalysisClient(None, None)

    result = await client.run("anything")

    assert result.outcome is AttemptOutcome.EXHAUSTED
    assert result.is_fallback
    assert result.attempts == 0
    assert SYSTEM_NOTICE_MARKER in result.text
    assert not client.configured


@pytest.mark.asyncio
async def test_success_sends_system_and_user_messages(mock_http) -> None:
    http = mock_http([_completion(GOOD_TEXT)])
    client = AnalysisClient(PRIMARY, SECONDARY, temperature=0.7, max_tokens=3000)

    text = await client.analyze("뉴스를 분석해주세요")

    assert text == GOOD_TEXT.strip()
    call = http.post.await_args
    assert call.args[0] == "https://gemini.example/v1beta/openai/chat/completions"
    assert call.kwargs["headers"]["Authorization"] == "Bearer g-key"
    body = call.kwargs["json"]
    assert [message["role"] for message in body["messages"]] == ["system", "user"]
    assert body["messages"][1]["content"] == "뉴스를 분석해주세요"
    assert body["max_tokens"] == 3000


@pytest.mark.asyncio
async def test_rate_limit_retries_with_exponential_backoff(mock_http) -> None:
    mock_http([_response(429, text="slow down"), _response(429, text="slow down"), _completion(GOOD_TEXT)])
    sleep = AsyncMock()
    client = AnalysisClient(PRIMARY, None, max_retries=3, sleep=sleep)

    result = await client.run("prompt")

    assert result.outcome is AttemptOutcome.SUCCESS
    assert result.attempts == 3
    assert [call.args[0] for call in sleep.await_args_list] == [1, 2]


@pytest.mark.asyncio
async def test_rate_limit_exhaustion_returns_fallback(mock_http) -> None:
    http = mock_http([_response(429, text="slow down")] * 4)
    sleep = AsyncMock()
    client = AnalysisClient(PRIMARY, SECONDARY, max_retries=3, sleep=sleep)

    result = await client.run("prompt")

    assert result.outcome is AttemptOutcome.EXHAUSTED
    assert SYSTEM_NOTICE_MARKER in result.text
    assert http.post.await_count == 4
    assert [call.args[0] for call in sleep.await_args_list] == [1, 2, 4]
    assert result.provider == "gemini"


@pytest.mark.asyncio
async def test_primary_error_falls_back_to_secondary(mock_http) -> None:
    http = mock_http([_response(500, text="internal"), _completion(GOOD_TEXT)])
    client = AnalysisClient(PRIMARY, SECONDARY)

    result = await client.run("prompt")

    assert result.outcome is AttemptOutcome.SUCCESS
    assert result.provider == "openai"
    urls = [call.args[0] for call in http.post.await_args_list]
    assert urls == [PRIMARY.completions_url, SECONDARY.completions_url]
    assert http.post.await_args.kwargs["headers"]["Authorization"] == "Bearer o-key"


@pytest.mark.asyncio
async def test_secondary_failure_is_not_retried(mock_http) -> None:
    http = mock_http([_response(500, text="internal"), _response(503, text="down")])
    client = AnalysisClient(PRIMARY, SECONDARY)

    result = await client.run("prompt")

    assert result.is_fallback
    assert http.post.await_count == 2


@pytest.mark.asyncio
async def test_short_output_is_rejected(mock_http) -> None:
    http = mock_http([_completion("too short")])
    client = AnalysisClient(PRIMARY, None, min_output_chars=100)

    result = await client.run("prompt")

    assert result.is_fallback
    assert http.post.await_count == 1


@pytest.mark.asyncio
async def test_transport_error_uses_secondary(mock_http) -> None:
    mock_http([httpx.ConnectError("no route"), _completion(GOOD_TEXT)])
    client = AnalysisClient(PRIMARY, SECONDARY)

    result = await client.run("prompt")

    assert result.provider == "openai"
    assert result.outcome is AttemptOutcome.SUCCESS


@pytest.mark.asyncio
async def test_prefer_secondary(mock_http) -> None:
    http = mock_http([_completion(GOOD_TEXT)])
    client = AnalysisClient(PRIMARY, SECONDARY)

    result = await client.run("prompt", prefer_primary=False)

    assert result.provider == "openai"
    assert http.post.await_args.args[0] == SECONDARY.completions_url


@pytest.mark.asyncio
async def test_summarize_news_without_items_skips_llm(mock_http) -> None:
    http = mock_http([])
    client = AnalysisClient(PRIMARY, SECONDARY)

    assert await client.summarize_news([]) == NO_NEWS_MESSAGE
    http.post.assert_not_awaited()


@pytest.mark.asyncio
async def test_fallback_report_is_dated_in_configured_timezone() -> None:
    # UTC+14 and UTC-11 are always on different calendar days
    east = AnalysisClient(None, None, timezone="Pacific/Kiritimati")
    west = AnalysisClient(None, None, timezone="Pacific/Pago_Pago")

    east_text = await east.analyze("prompt")
    west_text = await west.analyze("prompt")

    east_day = format_korean_date(datetime.now(ZoneInfo("Pacific/Kiritimati")).date())
    west_day = format_korean_date(datetime.now(ZoneInfo("Pacific/Pago_Pago")).date())
    assert east_day != west_day
    assert east_text.startswith(f"# {east_day} ")
    assert west_text.startswith(f"# {west_day} ")


def test_from_settings_uses_scheduler_timezone() -> None:
    client = AnalysisClient.from_settings(make_settings(scheduler_timezone="Europe/London"))
    assert client.tz == ZoneInfo("Europe/London")
