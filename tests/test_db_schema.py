from __future__ import annotations

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError

from investment_helper.db.init import init_db
from investment_helper.db.models import Report
from investment_helper.db.session import build_engine, build_session_factory

from conftest import make_settings

REQUIRED_TABLES = {"news_sources", "reports"}


def test_required_tables_exist() -> None:
    engine = build_engine(make_settings())
    init_db(engine)

    inspector = inspect(engine)
    tables = set(inspector.get_table_names())
    assert REQUIRED_TABLES.issubset(tables)

    news_columns = {column["name"] for column in inspector.get_columns("news_sources")}
    assert {"title", "content", "url", "source", "published_at", "tags", "category", "processed"} <= news_columns
    report_columns = {column["name"] for column in inspector.get_columns("reports")}
    assert {"summary", "news_analysis", "investment_recommendations", "report_type"} <= report_columns


def test_database_path_overrides_url(tmp_path) -> None:
    db_file = tmp_path / "nested" / "investment.db"
    settings = make_settings(database_path=str(db_file))
    assert settings.resolved_database_url == f"sqlite:///{db_file}"

    engine = build_engine(settings)
    init_db(engine)
    assert db_file.exists()
    engine.dispose()


def test_report_type_is_constrained() -> None:
    engine = build_engine(make_settings())
    init_db(engine)
    session_factory = build_session_factory(engine)

    with session_factory() as session:
        session.add(Report(title="t", content="c", summary="s", report_type="weekly"))
        with pytest.raises(IntegrityError):
            session.commit()
