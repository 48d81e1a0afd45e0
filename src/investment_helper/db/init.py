from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import Engine

from investment_helper.db import models  # noqa: F401
from investment_helper.db.base import Base


def init_db(engine: Engine) -> None:
    database = engine.url.database
    if engine.url.get_backend_name() == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
