from __future__ import annotations

from datetime import UTC, datetime

import pytest

from investment_helper.core.config import Settings
from investment_helper.db.init import init_db
from investment_helper.db.models import NewsItem
from investment_helper.db.session import build_engine, build_session_factory
from investment_helper.news.models import CollectionSummary


def make_settings(**overrides) -> Settings:
    defaults = dict(
        app_env="test",
        database_url="sqlite:///:memory:",
        database_path=None,
        gemini_api_key=None,
        openai_api_key=None,
        rss_feed_delay_seconds=0.0,
        scheduler_enabled=False,
        enable_midday_report=False,
        enable_weekly_report=False,
        enable_periodic_news_collection=False,
        notification_webhook_url=None,
    )
    defaults.update(overrides)
    return Settings(**defaults)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def session_factory(settings):
    engine = build_engine(settings)
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


def add_news(session_factory, count: int, *, processed: bool = False, prefix: str = "item", **fields) -> list[int]:
    ids: list[int] = []
    with session_factory() as session:
        for index in range(count):
            row = NewsItem(
                title=fields.get("title", f"{prefix} headline {index}"),
                content=fields.get("content", f"{prefix} body {index} about stock markets and interest rate moves"),
                url=f"https://news.example.org/{prefix}/{index}",
                source=fields.get("source", "Example Wire"),
                published_at=fields.get("published_at", datetime.now(UTC)),
                tags=fields.get("tags", ["stock"]),
                category=fields.get("category", "international"),
                processed=processed,
            )
            session.add(row)
            session.flush()
            ids.append(row.id)
        session.commit()
    return ids


class FakeCollector:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self.error = error

    async def collect(self) -> CollectionSummary:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return CollectionSummary()


class FakeLLM:
    """Deterministic stand-in for AnalysisClient that records every prompt."""

    configured = True

    def __init__(self, fail_on_call: int | None = None) -> None:
        self.prompts: list[str] = []
        self.fail_on_call = fail_on_call

    async def analyze(self, prompt: str, prefer_primary: bool = True) -> str:
        self.prompts.append(prompt)
        if self.fail_on_call is not None and len(self.prompts) == self.fail_on_call:
            raise RuntimeError("llm exploded")
        return f"analysis #{len(self.prompts)} " + "가치 투자 관점의 분석 내용입니다. " * 10

    async def summarize_news(self, items) -> str:
        if not items:
            return "분석할 새로운 뉴스가 없습니다."
        return await self.analyze("digest:" + "|".join(item.title for item in items))
