from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from investment_helper.core.config import Settings
from investment_helper.db.models import Report
from investment_helper.news.collector import NewsCollector
from investment_helper.reports.generator import ReportGenerator
from investment_helper.reports.types import ReportType, ensure_report_type

LOGGER = logging.getLogger(__name__)

JobKind = Literal["report", "collect"]


@dataclass(frozen=True, slots=True)
class ScheduleEntry:
    name: str
    cron: str
    description: str
    enabled: bool
    job: JobKind = "report"
    report_type: ReportType | None = None


@dataclass(frozen=True, slots=True)
class SchedulerConfig:
    timezone: str
    entries: tuple[ScheduleEntry, ...]
    notification_webhook_url: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> SchedulerConfig:
        entries = (
            ScheduleEntry("morning-report", "0 8 * * *", "매일 오전 8시 (KST)", True, "report", "morning"),
            ScheduleEntry("evening-report", "0 18 * * *", "매일 오후 6시 (KST)", True, "report", "evening"),
            ScheduleEntry(
                "midday-report", "0 12 * * *", "매일 정오 12시 (KST)", settings.enable_midday_report, "report", "morning"
            ),
            ScheduleEntry(
                "weekly-outlook",
                "0 19 * * sun",
                "매주 일요일 오후 7시 (KST)",
                settings.enable_weekly_report,
                "report",
                "evening",
            ),
            ScheduleEntry(
                "news-collection",
                "0 */2 * * *",
                "2시간마다 뉴스 수집",
                settings.enable_periodic_news_collection,
                "collect",
            ),
        )
        return cls(
            timezone=settings.scheduler_timezone,
            entries=entries,
            notification_webhook_url=settings.notification_webhook_url,
        )

    def entry(self, name: str) -> ScheduleEntry:
        for entry in self.entries:
            if entry.name == name:
                return entry
        raise KeyError(name)


@dataclass(slots=True)
class ManualRunResult:
    success: bool
    report: Report
    duration: int
    generated_at: datetime
    type: str = "manual"


class ReportScheduler:
    def __init__(self, config: SchedulerConfig, generator: ReportGenerator, collector: NewsCollector) -> None:
        self.config = config
        self.generator = generator
        self.collector = collector
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return
        scheduler = AsyncIOScheduler(timezone=self.config.timezone)
        for entry in self.config.entries:
            if not entry.enabled:
                LOGGER.debug("Schedule %s is disabled", entry.name)
                continue
            scheduler.add_job(
                self.run_entry,
                CronTrigger.from_crontab(entry.cron, timezone=self.config.timezone),
                args=[entry],
                id=entry.name,
                name=entry.name,
                replace_existing=True,
            )
            LOGGER.info("Registered schedule %s (%s, %s)", entry.name, entry.cron, self.config.timezone)
        scheduler.start()
        self._scheduler = scheduler

    def shutdown(self) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None

    async def run_entry(self, entry: ScheduleEntry) -> Report | None:
        LOGGER.info("Scheduled job %s started", entry.name)
        started = time.perf_counter()
        try:
            if entry.job == "collect":
                await self.collector.collect()
                LOGGER.info("Scheduled news collection finished in %.1fs", time.perf_counter() - started)
                return None
            report = await self.generator.generate(entry.report_type or "morning")
        except Exception as exc:
            LOGGER.exception("Scheduled job %s failed", entry.name)
            self._notify_failed(entry.name, exc)
            return None

        duration = round(time.perf_counter() - started)
        LOGGER.info("Scheduled job %s finished in %ss, report id=%s", entry.name, duration, report.id)
        self._notify_generated(entry.name, report.id, duration)
        return report

    async def generate_manual(self, report_type: str) -> ManualRunResult:
        kind = ensure_report_type(report_type)
        LOGGER.info("Manual %s report requested", kind)
        started = time.perf_counter()
        try:
            report = await self.generator.generate(kind)
        except Exception:
            LOGGER.exception("Manual %s report failed", kind)
            raise
        duration = round(time.perf_counter() - started)
        LOGGER.info("Manual %s report finished in %ss, report id=%s", kind, duration, report.id)
        return ManualRunResult(success=True, report=report, duration=duration, generated_at=datetime.now(UTC))

    def _notify_generated(self, name: str, report_id: int, duration: int) -> None:
        LOGGER.info("%s report generated - id=%s, duration=%ss", name.upper(), report_id, duration)
        self._send_webhook(
            {
                "type": "success",
                "reportType": name,
                "reportId": report_id,
                "duration": duration,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )

    def _notify_failed(self, name: str, error: Exception) -> None:
        LOGGER.error("%s report failed - error=%s", name.upper(), error)
        self._send_webhook(
            {
                "type": "error",
                "reportType": name,
                "error": str(error),
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )

    def _send_webhook(self, payload: dict[str, Any]) -> None:
        if not self.config.notification_webhook_url:
            return
        # delivery is not implemented; the payload is only logged
        LOGGER.debug("Webhook notification: %s", json.dumps(payload, ensure_ascii=False))

    def status(self) -> dict[str, Any]:
        schedules = {
            entry.name: {
                "schedule": entry.description,
                "cron": entry.cron,
                "enabled": entry.enabled,
                "job": entry.job,
                "reportType": entry.report_type,
            }
            for entry in self.config.entries
        }
        return {
            "schedules": schedules,
            "timezone": self.config.timezone,
            "running": self.running,
            "currentTime": datetime.now(UTC),
        }
