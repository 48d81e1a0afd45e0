from __future__ import annotations

from datetime import datetime

from pydantic import Field

from investment_helper.reports.types import CamelModel, InvestmentRecommendations, NewsAnalysis


class NewsItemOut(CamelModel):
    id: int
    title: str
    content: str
    url: str
    source: str
    published_at: datetime
    tags: list[str] | None = None
    category: str | None = None
    processed: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReportOut(CamelModel):
    id: int
    title: str
    content: str
    summary: str
    news_analysis: NewsAnalysis | None = None
    investment_recommendations: InvestmentRecommendations | None = None
    report_type: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReportListOut(CamelModel):
    reports: list[ReportOut]
    total: int
    page: int
    limit: int


class GenerateOut(CamelModel):
    success: bool
    report: ReportOut
    duration: int
    generated_at: datetime
    type: str


class MockNewsRequest(CamelModel):
    count: int = Field(default=5, ge=0, le=100)
