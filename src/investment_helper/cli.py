from __future__ import annotations

import asyncio
import logging
from typing import Annotated

import typer
from sqlalchemy import text

from investment_helper.core.config import get_settings
from investment_helper.core.exceptions import InvalidReportTypeError
from investment_helper.core.logging import configure_logging
from investment_helper.db.init import init_db
from investment_helper.db.session import build_engine
from investment_helper.reports.scheduler import SchedulerConfig
from investment_helper.services.runtime import Runtime, build_runtime

app = typer.Typer(help="Investment Helper command-line interface")
LOGGER = logging.getLogger(__name__)


def _build_runtime() -> Runtime:
    settings = get_settings()
    configure_logging(settings)
    return build_runtime(settings)


@app.command("init-db")
def init_db_command() -> None:
    settings = get_settings()
    configure_logging(settings)
    engine = build_engine(settings)
    init_db(engine)
    typer.echo("Initialized database schema")


@app.command("healthcheck")
def healthcheck_command() -> None:
    settings = get_settings()
    configure_logging(settings)
    failed = False

    typer.echo(f"[INFO] APP_ENV={settings.app_env} TZ={settings.scheduler_timezone}")

    engine = build_engine(settings)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        typer.echo("[OK]  DB connection")
    except Exception as exc:
        typer.echo(f"[FAIL] DB connection ({exc})")
        failed = True

    if settings.gemini_api_key:
        typer.echo("[OK]  GEMINI_API_KEY configured")
    else:
        typer.echo("[WARN] GEMINI_API_KEY not set")

    if settings.openai_api_key:
        typer.echo("[OK]  OPENAI_API_KEY configured")
    else:
        typer.echo("[WARN] OPENAI_API_KEY not set")

    if not (settings.gemini_api_key or settings.openai_api_key):
        typer.echo("[FAIL] missing LLM API key (set GEMINI_API_KEY or OPENAI_API_KEY)")
        failed = True

    if settings.notification_webhook_url:
        typer.echo("[OK]  NOTIFICATION_WEBHOOK_URL configured")
    else:
        typer.echo("[WARN] NOTIFICATION_WEBHOOK_URL not set (notifications are log-only)")

    if failed:
        raise typer.Exit(code=1)


@app.command("collect-news")
def collect_news_command() -> None:
    runtime = _build_runtime()
    summary = asyncio.run(runtime.collector.collect())
    typer.echo(
        f"Collected news | feeds_ok={summary.feeds_ok}/{summary.feeds_total} stored={summary.stored}"
    )
    if summary.failed_feeds:
        typer.echo(f"Failed feeds: {', '.join(summary.failed_feeds)}")


@app.command("generate-report")
def generate_report_command(
    report_type: Annotated[str, typer.Argument(help="morning or evening")],
) -> None:
    runtime = _build_runtime()
    try:
        result = asyncio.run(runtime.scheduler.generate_manual(report_type))
    except InvalidReportTypeError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1) from None

    report = result.report
    typer.echo(f"Generated report id={report.id} title={report.title} duration={result.duration}s")


@app.command("scheduler-status")
def scheduler_status_command() -> None:
    settings = get_settings()
    configure_logging(settings)
    config = SchedulerConfig.from_settings(settings)
    typer.echo(f"Timezone: {config.timezone}")
    for entry in config.entries:
        state = "on " if entry.enabled else "off"
        typer.echo(f"[{state}] {entry.name:<16} {entry.cron:<14} {entry.description}")


@app.command("serve")
def serve_command(
    host: Annotated[str, typer.Option()] = "0.0.0.0",
    port: Annotated[int, typer.Option(min=1, max=65535)] = 3000,
) -> None:
    import uvicorn

    from investment_helper.api.app import create_app

    uvicorn.run(create_app(get_settings()), host=host, port=port)


if __name__ == "__main__":
    app()
