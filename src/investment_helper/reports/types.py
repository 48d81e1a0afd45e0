from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from investment_helper.core.exceptions import InvalidReportTypeError

ReportType = Literal["morning", "evening"]
REPORT_TYPES: tuple[str, ...] = ("morning", "evening")


def ensure_report_type(value: str) -> ReportType:
    if value not in REPORT_TYPES:
        raise InvalidReportTypeError('Type must be "morning" or "evening"')
    return value  # type: ignore[return-value]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class NewsAnalysis(CamelModel):
    processed_count: int = Field(ge=0)
    key_insights: str
    categories: list[str] = Field(default_factory=list, max_length=8)
    analyzed_at: datetime


class InvestmentRecommendations(CamelModel):
    generated_at: datetime
    report_type: ReportType
    content: str
    risk_level: Literal["conservative"] = "conservative"
    time_horizon: Literal["long-term"] = "long-term"
