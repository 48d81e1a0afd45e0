from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from investment_helper.db.models import Report


class ReportStore:
    def __init__(self, session_factory: sessionmaker[Session], timezone: str = "Asia/Seoul") -> None:
        self.session_factory = session_factory
        self.tz = ZoneInfo(timezone)

    def _day_bounds(self, day: date) -> tuple[datetime, datetime]:
        start = datetime.combine(day, time.min, tzinfo=self.tz).astimezone(UTC)
        return start, start + timedelta(days=1)

    def list_reports(self, page: int = 1, limit: int = 10) -> tuple[list[Report], int]:
        page = max(page, 1)
        limit = max(limit, 1)
        with self.session_factory() as session:
            reports = list(
                session.execute(
                    select(Report)
                    .order_by(Report.created_at.desc(), Report.id.desc())
                    .offset((page - 1) * limit)
                    .limit(limit)
                ).scalars()
            )
            total = session.execute(select(func.count(Report.id))).scalar_one()
        return reports, int(total)

    def get_report(self, report_id: int) -> Report | None:
        with self.session_factory() as session:
            return session.get(Report, report_id)

    def get_reports_by_date_range(self, start: datetime, end: datetime) -> list[Report]:
        with self.session_factory() as session:
            rows = session.execute(
                select(Report)
                .where(Report.created_at >= start, Report.created_at < end)
                .order_by(Report.created_at.desc(), Report.id.desc())
            ).scalars()
            return list(rows)

    def get_reports_by_date(self, day: date) -> list[Report]:
        start, end = self._day_bounds(day)
        return self.get_reports_by_date_range(start, end)

    def count(self, report_type: str | None = None) -> int:
        stmt = select(func.count(Report.id))
        if report_type is not None:
            stmt = stmt.where(Report.report_type == report_type)
        with self.session_factory() as session:
            return int(session.execute(stmt).scalar_one())

    def get_stats(self) -> dict[str, Any]:
        start, end = self._day_bounds(datetime.now(self.tz).date())
        with self.session_factory() as session:
            today = session.execute(
                select(func.count(Report.id)).where(Report.created_at >= start, Report.created_at < end)
            ).scalar_one()
            latest = session.execute(select(func.max(Report.created_at))).scalar_one_or_none()
        return {
            "total": self.count(),
            "morningReports": self.count("morning"),
            "eveningReports": self.count("evening"),
            "todayReports": int(today),
            "latestReportTime": latest,
            "statsTime": datetime.now(UTC),
        }
