"""Runtime self-checks exposed through the ``/test`` endpoints.

These run against the live database and feeds; they are an operator tool,
separate from the pytest suite.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from investment_helper.core.exceptions import UnknownTestSuiteError
from investment_helper.db.models import NewsItem, Report
from investment_helper.llm.client import AnalysisClient
from investment_helper.llm.prompts import NO_NEWS_MESSAGE
from investment_helper.news.collector import NewsCollector
from investment_helper.news.store import NewsStore
from investment_helper.reports.generator import ReportGenerator
from investment_helper.reports.store import ReportStore

LOGGER = logging.getLogger(__name__)

MOCK_NEWS_HOST = "test.example.com"
COLLECTION_TIME_LIMIT_MS = 30_000

_MOCK_NEWS: tuple[dict[str, Any], ...] = (
    {
        "slug": "fed-rates",
        "title": "Fed Considers Interest Rate Adjustment",
        "content": "The Federal Reserve is considering adjusting interest rates in response to current economic "
        "conditions. Market analysts are closely watching for signs of policy changes.",
        "source": "Test Financial News",
        "tags": ["fed", "interest rate", "policy"],
        "category": "central_bank",
    },
    {
        "slug": "tech-stocks",
        "title": "Tech Stocks Show Strong Performance",
        "content": "Major technology companies reported strong quarterly earnings, driving up stock prices across "
        "the sector. Investors are optimistic about future growth prospects.",
        "source": "Test Tech News",
        "tags": ["tech", "stocks", "earnings"],
        "category": "international",
    },
    {
        "slug": "oil-prices",
        "title": "Oil Prices Fluctuate Amid Global Tensions",
        "content": "Crude oil prices experienced volatility due to geopolitical tensions and supply chain concerns. "
        "Energy sector investors are monitoring the situation closely.",
        "source": "Test Energy News",
        "tags": ["oil", "energy", "geopolitical"],
        "category": "international",
    },
    {
        "slug": "krw-usd",
        "title": "Korean Won Strengthens Against Dollar",
        "content": "The Korean won showed strength against the US dollar in recent trading sessions, influenced by "
        "positive economic indicators and export data.",
        "source": "Test Currency News",
        "tags": ["currency", "krw", "usd", "exchange rate"],
        "category": "korean",
    },
    {
        "slug": "inflation",
        "title": "Inflation Data Shows Mixed Signals",
        "content": "Latest inflation data presents a mixed picture, with some sectors showing price increases while "
        "others remain stable. Economists are divided on future trends.",
        "source": "Test Economic News",
        "tags": ["inflation", "economic data", "prices"],
        "category": "international",
    },
)


@dataclass(slots=True)
class ScenarioResult:
    success: bool
    duration: int
    data: dict[str, Any] | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class Scenario:
    name: str
    description: str
    expected_outcome: str
    execute: Callable[[], Awaitable[ScenarioResult]]


@dataclass(slots=True)
class Suite:
    name: str
    description: str
    scenarios: list[Scenario] = field(default_factory=list)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def validate_report(report: Report, expected_type: str) -> dict[str, Any]:
    errors: list[str] = []
    warnings: list[str] = []

    if not report.title:
        errors.append("Report title is missing")
    if not report.content:
        errors.append("Report content is missing")
    if not report.summary:
        errors.append("Report summary is missing")
    if report.report_type != expected_type:
        errors.append(f"Report type mismatch: expected {expected_type}, got {report.report_type}")

    if report.content and len(report.content) < 100:
        warnings.append("Report content seems too short")
    if report.summary and len(report.summary) < 50:
        warnings.append("Report summary seems too short")

    analysis = report.news_analysis
    if not analysis:
        errors.append("News analysis is missing")
    else:
        if not isinstance(analysis.get("processedCount"), int):
            errors.append("News analysis processedCount is invalid")
        if not analysis.get("keyInsights"):
            warnings.append("Key insights are missing from news analysis")

    if not report.investment_recommendations:
        warnings.append("Investment recommendations are missing")

    return {"isValid": not errors, "errors": errors, "warnings": warnings}


def _processed_count(report: Report) -> int:
    return int((report.news_analysis or {}).get("processedCount", 0))


class DiagnosticsService:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        collector: NewsCollector,
        news_store: NewsStore,
        report_store: ReportStore,
        generator: ReportGenerator,
        llm: AnalysisClient,
    ) -> None:
        self.session_factory = session_factory
        self.collector = collector
        self.news_store = news_store
        self.report_store = report_store
        self.generator = generator
        self.llm = llm
        self.started_at = time.monotonic()
        self._suites = self._build_suites()

    # -- scenarios ---------------------------------------------------------

    async def _collect_basic(self) -> ScenarioResult:
        started = time.perf_counter()
        before = self.news_store.count()
        await self.collector.collect()
        stats = self.news_store.get_stats()
        return ScenarioResult(
            success=True,
            duration=_elapsed_ms(started),
            data={
                "newNewsCount": stats["total"] - before,
                "totalNews": stats["total"],
                "unprocessed": stats["unprocessed"],
            },
        )

    async def _collect_speed(self) -> ScenarioResult:
        started = time.perf_counter()
        await self.collector.collect()
        duration = _elapsed_ms(started)
        if duration < 10_000:
            grade = "excellent"
        elif duration < 20_000:
            grade = "good"
        else:
            grade = "slow"
        within_limit = duration < COLLECTION_TIME_LIMIT_MS
        return ScenarioResult(
            success=within_limit,
            duration=duration,
            data={"maxAllowedTime": COLLECTION_TIME_LIMIT_MS, "actualTime": duration, "performanceGrade": grade},
            error=None if within_limit else f"Exceeded time limit: {duration}ms > {COLLECTION_TIME_LIMIT_MS}ms",
        )

    async def _generate_and_validate(self, report_type: str) -> ScenarioResult:
        started = time.perf_counter()
        report = await self.generator.generate(report_type)
        validation = validate_report(report, report_type)
        return ScenarioResult(
            success=validation["isValid"],
            duration=_elapsed_ms(started),
            data={
                "reportId": report.id,
                "reportType": report.report_type,
                "contentLength": len(report.content or ""),
                "summaryLength": len(report.summary or ""),
                "newsProcessed": _processed_count(report),
                "validation": validation,
            },
            error=None if validation["isValid"] else ", ".join(validation["errors"]),
        )

    async def _morning_report(self) -> ScenarioResult:
        return await self._generate_and_validate("morning")

    async def _evening_report(self) -> ScenarioResult:
        return await self._generate_and_validate("evening")

    async def _report_without_news(self) -> ScenarioResult:
        started = time.perf_counter()
        pending = self.news_store.get_unprocessed(limit=10_000)
        self.news_store.mark_processed([item.id for item in pending])
        report = await self.generator.generate("morning")
        return ScenarioResult(
            success=True,
            duration=_elapsed_ms(started),
            data={
                "reportId": report.id,
                "hasDefaultContent": NO_NEWS_MESSAGE in (report.content or ""),
                "newsProcessed": _processed_count(report),
            },
        )

    async def _full_pipeline(self) -> ScenarioResult:
        started = time.perf_counter()
        steps: list[dict[str, Any]] = []
        try:
            step_started = time.perf_counter()
            await self.collector.collect()
            steps.append(
                {
                    "name": "news_collection",
                    "duration": _elapsed_ms(step_started),
                    "success": True,
                    "data": self.news_store.get_stats(),
                }
            )

            step_started = time.perf_counter()
            report = await self.generator.generate("morning")
            steps.append(
                {
                    "name": "report_generation",
                    "duration": _elapsed_ms(step_started),
                    "success": True,
                    "data": {"reportId": report.id, "newsProcessed": _processed_count(report)},
                }
            )

            step_started = time.perf_counter()
            validation = validate_report(report, "morning")
            steps.append(
                {
                    "name": "data_validation",
                    "duration": _elapsed_ms(step_started),
                    "success": validation["isValid"],
                    "data": validation,
                }
            )
        except Exception as exc:
            return ScenarioResult(success=False, duration=_elapsed_ms(started), error=str(exc), data={"steps": steps})

        return ScenarioResult(
            success=all(step["success"] for step in steps),
            duration=_elapsed_ms(started),
            data={
                "steps": steps,
                "totalSteps": len(steps),
                "successfulSteps": sum(1 for step in steps if step["success"]),
            },
        )

    def _build_suites(self) -> dict[str, Suite]:
        suites = [
            Suite(
                "news-collection",
                "Test news collection from various RSS sources",
                [
                    Scenario(
                        "collect-news-basic",
                        "Test basic news collection functionality",
                        "News should be collected and stored in database",
                        self._collect_basic,
                    ),
                    Scenario(
                        "news-processing-speed",
                        "Test news processing performance",
                        "News collection should complete within reasonable time",
                        self._collect_speed,
                    ),
                ],
            ),
            Suite(
                "report-generation",
                "Test report generation with different scenarios",
                [
                    Scenario(
                        "morning-report-generation",
                        "Test morning report generation",
                        "Morning report should be generated with proper content",
                        self._morning_report,
                    ),
                    Scenario(
                        "evening-report-generation",
                        "Test evening report generation",
                        "Evening report should be generated with proper content",
                        self._evening_report,
                    ),
                    Scenario(
                        "report-with-no-news",
                        "Test report generation when no new news is available",
                        "Report should be generated with default content",
                        self._report_without_news,
                    ),
                ],
            ),
            Suite(
                "integration",
                "End-to-end integration testing of the complete pipeline",
                [
                    Scenario(
                        "full-pipeline-test",
                        "Test complete pipeline from news collection to report generation",
                        "Complete pipeline should work without errors",
                        self._full_pipeline,
                    ),
                ],
            ),
        ]
        return {suite.name: suite for suite in suites}

    # -- public API --------------------------------------------------------

    def available_suites(self) -> dict[str, str]:
        return {name: suite.description for name, suite in self._suites.items()}

    def scenarios(self) -> list[dict[str, str]]:
        return [
            {
                "suite": suite.name,
                "name": scenario.name,
                "description": scenario.description,
                "expectedOutcome": scenario.expected_outcome,
            }
            for suite in self._suites.values()
            for scenario in suite.scenarios
        ]

    async def run_suite(self, name: str) -> dict[str, Any]:
        suite = self._suites.get(name)
        if suite is None:
            raise UnknownTestSuiteError(f"Test suite '{name}' not found")

        LOGGER.info("Running diagnostics suite %s", name)
        started = time.perf_counter()
        results: list[dict[str, Any]] = []
        passed = failed = 0

        for scenario in suite.scenarios:
            LOGGER.info("Executing scenario %s", scenario.name)
            try:
                result = await scenario.execute()
            except Exception as exc:
                LOGGER.error("Scenario %s crashed: %s", scenario.name, exc)
                result = ScenarioResult(success=False, duration=0, error=str(exc))

            if result.success:
                passed += 1
                LOGGER.info("Scenario %s passed in %dms", scenario.name, result.duration)
            else:
                failed += 1
                LOGGER.error("Scenario %s failed: %s", scenario.name, result.error)
            results.append(
                {
                    "scenario": scenario.name,
                    "result": {
                        "success": result.success,
                        "duration": result.duration,
                        "data": result.data,
                        "error": result.error,
                    },
                }
            )

        total_duration = _elapsed_ms(started)
        LOGGER.info("Suite %s finished: %d/%d passed in %dms", name, passed, passed + failed, total_duration)
        return {
            "success": failed == 0,
            "totalDuration": total_duration,
            "results": results,
            "summary": {"passed": passed, "failed": failed, "total": passed + failed},
        }

    def create_mock_news(self, count: int = 5) -> list[NewsItem]:
        stamp = int(time.time() * 1000)
        now = datetime.now(UTC)
        created: list[NewsItem] = []
        with self.session_factory() as session:
            for index, item in enumerate(_MOCK_NEWS[: max(count, 0)], start=1):
                news = NewsItem(
                    title=item["title"],
                    content=item["content"],
                    url=f"https://{MOCK_NEWS_HOST}/{item['slug']}-{stamp}-{index}",
                    source=item["source"],
                    published_at=now,
                    tags=list(item["tags"]),
                    category=item["category"],
                    processed=False,
                )
                session.add(news)
                created.append(news)
            session.commit()
        LOGGER.info("Created %d mock news items", len(created))
        return created

    def cleanup_test_data(self) -> dict[str, int]:
        with self.session_factory() as session:
            news_deleted = session.execute(
                delete(NewsItem).where(NewsItem.url.like(f"%{MOCK_NEWS_HOST}%"))
            ).rowcount
            reports_deleted = session.execute(delete(Report).where(Report.title.like("%Test%"))).rowcount
            session.commit()
        LOGGER.info("Deleted %s mock news items and %s test reports", news_deleted, reports_deleted)
        return {"news": int(news_deleted or 0), "reports": int(reports_deleted or 0)}

    def system_health(self) -> dict[str, Any]:
        services = {"database": False, "newsService": False, "llmService": False, "reportsService": False}

        try:
            with self.session_factory() as session:
                session.execute(select(NewsItem.id).limit(1))
            services["database"] = True
        except Exception as exc:
            LOGGER.error("Database health check failed: %s", exc)

        try:
            self.news_store.get_stats()
            services["newsService"] = True
        except Exception as exc:
            LOGGER.error("News service health check failed: %s", exc)

        services["llmService"] = self.llm.configured

        try:
            self.report_store.get_stats()
            services["reportsService"] = True
        except Exception as exc:
            LOGGER.error("Reports service health check failed: %s", exc)

        healthy = sum(services.values())
        if healthy == len(services):
            status = "healthy"
        elif healthy >= 2:
            status = "degraded"
        else:
            status = "unhealthy"

        metrics: dict[str, Any] = {"uptime": round(time.monotonic() - self.started_at, 1)}
        if services["database"]:
            metrics["newsCount"] = self.news_store.count()
            metrics["reportsCount"] = self.report_store.count()
        return {"status": status, "services": services, "metrics": metrics}
