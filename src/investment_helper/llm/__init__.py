"""LLM analysis client."""

from investment_helper.llm.client import AnalysisClient, build_providers
from investment_helper.llm.types import AnalysisResult, AttemptOutcome, ProviderConfig

__all__ = ["AnalysisClient", "AnalysisResult", "AttemptOutcome", "ProviderConfig", "build_providers"]
