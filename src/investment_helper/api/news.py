from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from investment_helper.api.deps import get_runtime, parse_int
from investment_helper.api.schemas import NewsItemOut
from investment_helper.db.models import NewsItem
from investment_helper.services.runtime import Runtime

router = APIRouter(prefix="/news", tags=["news"])


@router.get("/stats")
def news_stats(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    return runtime.news_store.get_stats()


@router.get("/recent", response_model=list[NewsItemOut])
def recent_news(
    hours: str | None = None,
    limit: str | None = None,
    runtime: Runtime = Depends(get_runtime),
) -> list[NewsItem]:
    return runtime.news_store.get_recent(hours=parse_int(hours, 24), limit=parse_int(limit, 50))


@router.get("/category/{category}", response_model=list[NewsItemOut])
def news_by_category(
    category: str,
    limit: str | None = None,
    runtime: Runtime = Depends(get_runtime),
) -> list[NewsItem]:
    return runtime.news_store.get_by_category(category, limit=parse_int(limit, 10))


@router.get("/unprocessed", response_model=list[NewsItemOut])
def unprocessed_news(limit: str | None = None, runtime: Runtime = Depends(get_runtime)) -> list[NewsItem]:
    return runtime.news_store.get_unprocessed(limit=parse_int(limit, 25))
