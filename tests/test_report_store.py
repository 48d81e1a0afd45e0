from __future__ import annotations

from datetime import UTC, date, datetime

from investment_helper.db.models import Report
from investment_helper.reports.store import ReportStore


def _add_report(session_factory, created_at: datetime, report_type: str = "morning") -> int:
    with session_factory() as session:
        report = Report(
            title="오전 투자 리포트",
            content="body",
            summary="summary",
            report_type=report_type,
            created_at=created_at,
        )
        session.add(report)
        session.commit()
        return report.id


def test_reports_by_date_uses_local_day(session_factory) -> None:
    # 23:30 UTC on June 3 is 08:30 on June 4 in Seoul
    report_id = _add_report(session_factory, datetime(2025, 6, 3, 23, 30, tzinfo=UTC))
    store = ReportStore(session_factory, timezone="Asia/Seoul")

    assert [report.id for report in store.get_reports_by_date(date(2025, 6, 4))] == [report_id]
    assert store.get_reports_by_date(date(2025, 6, 3)) == []


def test_local_day_boundaries_are_half_open(session_factory) -> None:
    # Seoul midnight on June 4 is 15:00 UTC on June 3
    before = _add_report(session_factory, datetime(2025, 6, 3, 14, 59, 59, tzinfo=UTC))
    at_start = _add_report(session_factory, datetime(2025, 6, 3, 15, 0, tzinfo=UTC))
    at_end = _add_report(session_factory, datetime(2025, 6, 4, 15, 0, tzinfo=UTC), "evening")
    store = ReportStore(session_factory, timezone="Asia/Seoul")

    assert [report.id for report in store.get_reports_by_date(date(2025, 6, 3))] == [before]
    assert [report.id for report in store.get_reports_by_date(date(2025, 6, 4))] == [at_start]
    assert [report.id for report in store.get_reports_by_date(date(2025, 6, 5))] == [at_end]


def test_same_instant_in_utc_store(session_factory) -> None:
    report_id = _add_report(session_factory, datetime(2025, 6, 3, 23, 30, tzinfo=UTC))
    store = ReportStore(session_factory, timezone="UTC")

    assert [report.id for report in store.get_reports_by_date(date(2025, 6, 3))] == [report_id]
    assert store.get_reports_by_date(date(2025, 6, 4)) == []


def test_list_reports_pages_newest_first(session_factory) -> None:
    first = _add_report(session_factory, datetime(2025, 6, 1, 0, 0, tzinfo=UTC))
    second = _add_report(session_factory, datetime(2025, 6, 2, 0, 0, tzinfo=UTC), "evening")
    store = ReportStore(session_factory)

    reports, total = store.list_reports(page=1, limit=1)
    assert total == 2
    assert [report.id for report in reports] == [second]
    assert [report.id for report in store.list_reports(page=2, limit=1)[0]] == [first]
    assert store.count("evening") == 1
