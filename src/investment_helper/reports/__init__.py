"""Report generation, storage and scheduling."""

from investment_helper.reports.generator import ReportGenerator
from investment_helper.reports.scheduler import ReportScheduler, SchedulerConfig
from investment_helper.reports.store import ReportStore

__all__ = ["ReportGenerator", "ReportScheduler", "ReportStore", "SchedulerConfig"]
