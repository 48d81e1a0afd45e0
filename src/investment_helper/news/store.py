from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, sessionmaker

from investment_helper.db.models import NewsItem

LOGGER = logging.getLogger(__name__)


class NewsStore:
    """Read-side queries over collected news plus the processed flag update."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def get_unprocessed(self, limit: int = 25) -> list[NewsItem]:
        with self.session_factory() as session:
            rows = session.execute(
                select(NewsItem)
                .where(NewsItem.processed.is_(False))
                .order_by(NewsItem.published_at.desc(), NewsItem.id.desc())
                .limit(limit)
            ).scalars()
            return list(rows)

    def mark_processed(self, ids: Sequence[int]) -> int:
        if not ids:
            return 0
        with self.session_factory() as session:
            session.execute(update(NewsItem).where(NewsItem.id.in_(list(ids))).values(processed=True))
            session.commit()
        LOGGER.info("Marked %d news items as processed", len(ids))
        return len(ids)

    def get_recent(self, hours: int = 24, limit: int = 50) -> list[NewsItem]:
        since = datetime.now(UTC) - timedelta(hours=hours)
        with self.session_factory() as session:
            rows = session.execute(
                select(NewsItem)
                .where(NewsItem.published_at > since)
                .order_by(NewsItem.published_at.desc())
                .limit(limit)
            ).scalars()
            return list(rows)

    def get_by_category(self, category: str, limit: int = 10) -> list[NewsItem]:
        with self.session_factory() as session:
            rows = session.execute(
                select(NewsItem)
                .where(NewsItem.category == category)
                .order_by(NewsItem.published_at.desc())
                .limit(limit)
            ).scalars()
            return list(rows)

    def exists(self, url: str) -> bool:
        with self.session_factory() as session:
            return session.execute(select(NewsItem.id).where(NewsItem.url == url)).first() is not None

    def count(self, processed: bool | None = None) -> int:
        stmt = select(func.count(NewsItem.id))
        if processed is not None:
            stmt = stmt.where(NewsItem.processed.is_(processed))
        with self.session_factory() as session:
            return int(session.execute(stmt).scalar_one())

    def get_stats(self) -> dict[str, Any]:
        since = datetime.now(UTC) - timedelta(hours=24)
        with self.session_factory() as session:
            recent = session.execute(
                select(func.count(NewsItem.id)).where(NewsItem.published_at > since)
            ).scalar_one()
        return {
            "total": self.count(),
            "processed": self.count(processed=True),
            "unprocessed": self.count(processed=False),
            "recent24h": int(recent),
            "collectionTime": datetime.now(UTC),
        }
