from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from investment_helper.core.exceptions import InvalidReportTypeError
from investment_helper.reports.scheduler import ReportScheduler, ScheduleEntry, SchedulerConfig

from conftest import make_settings


def _scheduler(generator=None, collector=None, **settings_overrides) -> ReportScheduler:
    config = SchedulerConfig.from_settings(make_settings(**settings_overrides))
    return ReportScheduler(config, generator or MagicMock(), collector or MagicMock())


def test_default_schedule_entries() -> None:
    config = SchedulerConfig.from_settings(make_settings())

    assert config.timezone == "Asia/Seoul"
    assert config.entry("morning-report").cron == "0 8 * * *"
    assert config.entry("evening-report").cron == "0 18 * * *"
    assert config.entry("weekly-outlook").cron == "0 19 * * sun"
    assert config.entry("news-collection").job == "collect"
    enabled = {entry.name for entry in config.entries if entry.enabled}
    assert enabled == {"morning-report", "evening-report"}


def test_optional_entries_follow_settings() -> None:
    config = SchedulerConfig.from_settings(
        make_settings(enable_midday_report=True, enable_weekly_report=True, enable_periodic_news_collection=True)
    )
    assert all(entry.enabled for entry in config.entries)
    assert config.entry("midday-report").report_type == "morning"
    assert config.entry("weekly-outlook").report_type == "evening"


def test_unknown_entry_raises_key_error() -> None:
    with pytest.raises(KeyError):
        SchedulerConfig.from_settings(make_settings()).entry("hourly")


@pytest.mark.asyncio
async def test_manual_generation_returns_result() -> None:
    report = MagicMock(id=7)
    generator = MagicMock()
    generator.generate = AsyncMock(return_value=report)
    scheduler = _scheduler(generator=generator)

    result = await scheduler.generate_manual("evening")

    generator.generate.assert_awaited_once_with("evening")
    assert result.success is True
    assert result.report is report
    assert result.type == "manual"
    assert result.duration >= 0


@pytest.mark.asyncio
async def test_manual_generation_rejects_bad_type_and_propagates_errors() -> None:
    generator = MagicMock()
    generator.generate = AsyncMock(side_effect=RuntimeError("llm down"))
    scheduler = _scheduler(generator=generator)

    with pytest.raises(InvalidReportTypeError):
        await scheduler.generate_manual("weekly")
    with pytest.raises(RuntimeError, match="llm down"):
        await scheduler.generate_manual("morning")


@pytest.mark.asyncio
async def test_scheduled_run_swallows_failures() -> None:
    generator = MagicMock()
    generator.generate = AsyncMock(side_effect=RuntimeError("boom"))
    scheduler = _scheduler(generator=generator, notification_webhook_url="https://hooks.example/x")

    result = await scheduler.run_entry(scheduler.config.entry("evening-report"))

    assert result is None
    generator.generate.assert_awaited_once_with("evening")


@pytest.mark.asyncio
async def test_collect_entry_only_collects() -> None:
    generator = MagicMock()
    generator.generate = AsyncMock()
    collector = MagicMock()
    collector.collect = AsyncMock()
    scheduler = _scheduler(generator=generator, collector=collector)

    entry = ScheduleEntry("news-collection", "0 */2 * * *", "every two hours", True, "collect")
    assert await scheduler.run_entry(entry) is None

    collector.collect.assert_awaited_once()
    generator.generate.assert_not_awaited()


@pytest.mark.asyncio
async def test_start_registers_enabled_jobs_only() -> None:
    scheduler = _scheduler(enable_weekly_report=True)

    scheduler.start()
    try:
        assert scheduler.running
        job_ids = {job.id for job in scheduler._scheduler.get_jobs()}
        assert job_ids == {"morning-report", "evening-report", "weekly-outlook"}
    finally:
        scheduler.shutdown()
    assert not scheduler.running


def test_status_lists_every_schedule() -> None:
    status = _scheduler().status()

    assert status["timezone"] == "Asia/Seoul"
    assert status["running"] is False
    assert set(status["schedules"]) == {
        "morning-report",
        "evening-report",
        "midday-report",
        "weekly-outlook",
        "news-collection",
    }
    assert status["schedules"]["morning-report"]["cron"] == "0 8 * * *"
    assert status["schedules"]["midday-report"]["enabled"] is False
