from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session, sessionmaker

from investment_helper.db.models import NewsItem, Report
from investment_helper.llm.client import AnalysisClient
from investment_helper.llm.prompts import NO_NEWS_MESSAGE
from investment_helper.news.store import NewsStore
from investment_helper.reports.prompts import (
    NO_NEWS_INSIGHTS,
    build_key_insights_prompt,
    build_recommendations_prompt,
    build_report_prompt,
    build_summary_prompt,
    build_title,
)
from investment_helper.reports.types import (
    InvestmentRecommendations,
    NewsAnalysis,
    ReportType,
    ensure_report_type,
)

LOGGER = logging.getLogger(__name__)

MAX_CATEGORY_DIGEST = 8
TAGS_PER_ITEM = 3
RECENT_WINDOW = timedelta(hours=12)


class Collector(Protocol):
    async def collect(self) -> object: ...


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def news_categories(items: Sequence[NewsItem]) -> list[str]:
    categories: dict[str, None] = {}
    for item in items:
        if item.category:
            categories.setdefault(item.category)
        for tag in (item.tags or [])[:TAGS_PER_ITEM]:
            categories.setdefault(tag)
    return list(categories)[:MAX_CATEGORY_DIGEST]


def count_recent(items: Sequence[NewsItem], now: datetime | None = None) -> int:
    now = now or datetime.now(UTC)
    return sum(1 for item in items if now - _as_utc(item.published_at) <= RECENT_WINDOW)


class ReportGenerator:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        collector: Collector,
        news_store: NewsStore,
        llm: AnalysisClient,
        *,
        news_batch_size: int = 25,
        timezone: str = "Asia/Seoul",
    ) -> None:
        self.session_factory = session_factory
        self.collector = collector
        self.news_store = news_store
        self.llm = llm
        self.news_batch_size = news_batch_size
        self.tz = ZoneInfo(timezone)

    async def extract_key_insights(self, items: Sequence[NewsItem]) -> str:
        prompt = build_key_insights_prompt(
            headlines=[(item.title, item.source) for item in items],
            total=len(items),
            recent_count=count_recent(items),
            categories=news_categories(items),
        )
        return await self.llm.analyze(prompt)

    async def build_recommendations(self, news_analysis: str, report_type: ReportType) -> InvestmentRecommendations:
        content = await self.llm.analyze(build_recommendations_prompt(news_analysis))
        return InvestmentRecommendations(
            generated_at=datetime.now(UTC),
            report_type=report_type,
            content=content,
        )

    async def generate(self, report_type: str = "morning") -> Report:
        """Run the full collection-to-report pipeline and persist one report.

        Exceptions are not caught here: when any step fails nothing is stored
        and no news item changes state.
        """
        kind = ensure_report_type(report_type)
        LOGGER.info("Generating %s report", kind)

        await self.collector.collect()

        unprocessed = self.news_store.get_unprocessed(limit=self.news_batch_size)
        LOGGER.info("Found %d unprocessed news items", len(unprocessed))

        if unprocessed:
            news_analysis = await self.llm.summarize_news(unprocessed)
            key_insights = await self.extract_key_insights(unprocessed)
        else:
            news_analysis = NO_NEWS_MESSAGE
            key_insights = NO_NEWS_INSIGHTS

        body = await self.llm.analyze(build_report_prompt(kind, news_analysis, key_insights))
        summary = await self.llm.analyze(build_summary_prompt(body, kind))
        content = body if unprocessed else f"> {NO_NEWS_MESSAGE}\n\n{body}"
        recommendations = await self.build_recommendations(news_analysis, kind)

        analysis = NewsAnalysis(
            processed_count=len(unprocessed),
            key_insights=key_insights,
            categories=news_categories(unprocessed),
            analyzed_at=datetime.now(UTC),
        )

        with self.session_factory() as session:
            report = Report(
                title=build_title(kind, datetime.now(self.tz).date()),
                content=content,
                summary=summary,
                news_analysis=analysis.model_dump(mode="json", by_alias=True),
                investment_recommendations=recommendations.model_dump(mode="json", by_alias=True),
                report_type=kind,
            )
            session.add(report)
            session.commit()
            session.refresh(report)

        self.news_store.mark_processed([item.id for item in unprocessed])

        LOGGER.info("%s report stored: id=%s processed_news=%d", kind, report.id, len(unprocessed))
        return report
