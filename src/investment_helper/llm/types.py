from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    PROVIDER_ERROR = "provider_error"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    name: str
    api_key: str
    base_url: str
    model: str

    @property
    def completions_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"


@dataclass(frozen=True, slots=True)
class AttemptResult:
    outcome: AttemptOutcome
    text: str = ""
    status_code: int | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    outcome: AttemptOutcome
    text: str
    attempts: int
    provider: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.outcome is AttemptOutcome.EXHAUSTED
