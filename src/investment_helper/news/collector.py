from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from investment_helper.core.config import Settings
from investment_helper.db.models import NewsItem
from investment_helper.news.cleaning import build_content, extract_tags
from investment_helper.news.feeds import FEED_SOURCES, fetch_feed
from investment_helper.news.models import CollectionSummary, FeedEntry, FeedSource

LOGGER = logging.getLogger(__name__)


def persist_entries(
    session: Session,
    source: FeedSource,
    entries: Iterable[FeedEntry],
    max_chars: int = 2000,
) -> int:
    inserted = 0
    seen: set[str] = set()
    for entry in entries:
        if entry.link in seen:
            continue
        seen.add(entry.link)

        existing = session.execute(select(NewsItem.id).where(NewsItem.url == entry.link)).first()
        if existing:
            continue

        content = build_content(entry.title, entry.body, max_chars=max_chars)
        session.add(
            NewsItem(
                title=entry.title,
                content=content,
                url=entry.link,
                source=source.name,
                published_at=entry.published_at,
                tags=extract_tags(f"{entry.title} {content}", source.category),
                category=source.category,
                processed=False,
            )
        )
        inserted += 1
        LOGGER.debug("Stored news item: %s", entry.title[:50])

    session.commit()
    return inserted


class NewsCollector:
    def __init__(
        self,
        settings: Settings,
        session_factory: sessionmaker[Session],
        sources: Sequence[FeedSource] = FEED_SOURCES,
    ) -> None:
        self.settings = settings
        self.session_factory = session_factory
        self.sources = tuple(sources)

    async def collect_from_feed(self, source: FeedSource) -> int:
        entries = await fetch_feed(
            source,
            timeout_seconds=self.settings.rss_timeout_seconds,
            limit=self.settings.rss_items_per_feed,
        )
        with self.session_factory() as session:
            inserted = persist_entries(session, source, entries, max_chars=self.settings.news_content_max_chars)
        LOGGER.info("%s: stored %d new items", source.name, inserted)
        return inserted

    async def collect(self) -> CollectionSummary:
        summary = CollectionSummary(feeds_total=len(self.sources))
        LOGGER.info("News collection started (%d feeds)", summary.feeds_total)

        for index, source in enumerate(self.sources):
            if index > 0 and self.settings.rss_feed_delay_seconds > 0:
                await asyncio.sleep(self.settings.rss_feed_delay_seconds)
            try:
                summary.stored += await self.collect_from_feed(source)
                summary.feeds_ok += 1
            except Exception as exc:
                LOGGER.error("News collection failed for %s: %s", source.name, exc)
                summary.failed_feeds.append(source.name)

        LOGGER.info(
            "News collection finished: %d/%d feeds ok, %d new items",
            summary.feeds_ok,
            summary.feeds_total,
            summary.stored,
        )
        return summary
