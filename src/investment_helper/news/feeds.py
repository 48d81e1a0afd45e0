from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import feedparser
import httpx
from dateutil import parser as dtparser

from investment_helper.core.exceptions import FeedFetchError
from investment_helper.news.cleaning import clean_content, clean_text
from investment_helper.news.models import FeedEntry, FeedSource

LOGGER = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; Investment-Helper/1.0)"

FEED_SOURCES: tuple[FeedSource, ...] = (
    FeedSource(name="연합뉴스 경제", url="https://www.yna.co.kr/rss/economy.xml", category="korean"),
    FeedSource(name="매일경제", url="https://www.mk.co.kr/rss/30000001/", category="korean"),
    FeedSource(
        name="Federal Reserve News",
        url="https://www.federalreserve.gov/feeds/press_all.xml",
        category="central_bank",
    ),
    FeedSource(name="BBC Business", url="https://feeds.bbci.co.uk/news/business/rss.xml", category="international"),
)


def _parse_published(entry: Any) -> datetime:
    raw = entry.get("published") or entry.get("updated")
    if raw:
        try:
            parsed = dtparser.parse(str(raw))
        except (ValueError, OverflowError):
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=UTC)
            return parsed.astimezone(UTC)
    return datetime.now(UTC)


def _entry_body(entry: Any) -> str:
    summary = entry.get("summary")
    if summary:
        return str(summary)
    for content in entry.get("content") or []:
        value = content.get("value") if isinstance(content, dict) else None
        if value:
            return str(value)
    return ""


def parse_feed(payload: bytes | str, limit: int = 15) -> list[FeedEntry]:
    parsed = feedparser.parse(payload)
    if parsed.bozo and not parsed.entries:
        raise FeedFetchError(f"Unparseable feed: {parsed.get('bozo_exception')}")

    entries: list[FeedEntry] = []
    for entry in parsed.entries[:limit]:
        title = clean_text(str(entry.get("title") or ""))
        link = str(entry.get("link") or "").strip()
        if not title or not link:
            continue
        entries.append(
            FeedEntry(
                title=title,
                link=link,
                body=clean_content(_entry_body(entry)),
                published_at=_parse_published(entry),
            )
        )
    return entries


async def fetch_feed(source: FeedSource, timeout_seconds: float = 10.0, limit: int = 15) -> list[FeedEntry]:
    LOGGER.debug("Fetching RSS %s: %s", source.name, source.url)
    try:
        async with httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            response = await client.get(source.url)
            response.raise_for_status()
    except httpx.HTTPError as exc:
        raise FeedFetchError(f"{source.name}: {exc}") from exc

    return parse_feed(response.content, limit=limit)
