from __future__ import annotations

import logging

from investment_helper.core.config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    # httpx logs every request at INFO; keep it out of the report logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
