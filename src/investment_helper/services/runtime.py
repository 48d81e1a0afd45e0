from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from investment_helper.core.config import Settings
from investment_helper.db.init import init_db
from investment_helper.db.session import build_engine, build_session_factory
from investment_helper.llm.client import AnalysisClient
from investment_helper.news.collector import NewsCollector
from investment_helper.news.store import NewsStore
from investment_helper.reports.diagnostics import DiagnosticsService
from investment_helper.reports.generator import ReportGenerator
from investment_helper.reports.scheduler import ReportScheduler, SchedulerConfig
from investment_helper.reports.store import ReportStore


@dataclass(slots=True)
class Runtime:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    collector: NewsCollector
    news_store: NewsStore
    report_store: ReportStore
    llm: AnalysisClient
    generator: ReportGenerator
    scheduler: ReportScheduler
    diagnostics: DiagnosticsService


def build_runtime(
    settings: Settings,
    *,
    llm: AnalysisClient | None = None,
    collector: NewsCollector | None = None,
    create_schema: bool = True,
) -> Runtime:
    engine = build_engine(settings)
    if create_schema:
        init_db(engine)
    session_factory = build_session_factory(engine)

    collector = collector or NewsCollector(settings, session_factory)
    news_store = NewsStore(session_factory)
    report_store = ReportStore(session_factory, timezone=settings.scheduler_timezone)
    llm = llm or AnalysisClient.from_settings(settings)
    generator = ReportGenerator(
        session_factory,
        collector,
        news_store,
        llm,
        news_batch_size=settings.report_news_batch_size,
        timezone=settings.scheduler_timezone,
    )
    scheduler = ReportScheduler(SchedulerConfig.from_settings(settings), generator, collector)
    diagnostics = DiagnosticsService(session_factory, collector, news_store, report_store, generator, llm)

    return Runtime(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        collector=collector,
        news_store=news_store,
        report_store=report_store,
        llm=llm,
        generator=generator,
        scheduler=scheduler,
        diagnostics=diagnostics,
    )
