from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

NewsCategory = Literal["korean", "central_bank", "international"]


@dataclass(frozen=True, slots=True)
class FeedSource:
    name: str
    url: str
    category: NewsCategory


@dataclass(slots=True)
class FeedEntry:
    title: str
    link: str
    body: str
    published_at: datetime


@dataclass(slots=True)
class CollectionSummary:
    feeds_total: int = 0
    feeds_ok: int = 0
    stored: int = 0
    failed_feeds: list[str] = field(default_factory=list)
