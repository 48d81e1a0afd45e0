from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

from dateutil import parser as dtparser
from fastapi import APIRouter, Depends, HTTPException

from investment_helper.api.deps import get_runtime, parse_int
from investment_helper.api.schemas import GenerateOut, ReportListOut, ReportOut
from investment_helper.db.models import Report
from investment_helper.reports.types import REPORT_TYPES
from investment_helper.services.runtime import Runtime

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def _dump(report: Report) -> dict[str, Any]:
    return ReportOut.model_validate(report).model_dump(mode="json", by_alias=True)


def _processed(report: Report) -> int:
    return int((report.news_analysis or {}).get("processedCount", 0))


def _check_type(report_type: str) -> None:
    if report_type not in REPORT_TYPES:
        raise HTTPException(status_code=400, detail='Type must be "morning" or "evening"')


@router.get("", response_model=ReportListOut)
def list_reports(
    page: str | None = None,
    limit: str | None = None,
    runtime: Runtime = Depends(get_runtime),
) -> dict[str, Any]:
    page_num = parse_int(page, 1)
    limit_num = parse_int(limit, 10)
    reports, total = runtime.report_store.list_reports(page_num, limit_num)
    return {"reports": reports, "total": total, "page": page_num, "limit": limit_num}


@router.get("/stats")
def report_stats(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    return runtime.report_store.get_stats()


@router.get("/scheduler/status")
def scheduler_status(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    return runtime.scheduler.status()


@router.get("/date/{date_string}", response_model=list[ReportOut])
def reports_by_date(date_string: str, runtime: Runtime = Depends(get_runtime)) -> list[Report]:
    try:
        day = dtparser.isoparse(date_string).date()
    except ValueError:
        raise HTTPException(
            status_code=400, detail="잘못된 날짜 형식입니다. YYYY-MM-DD 형식을 사용해주세요."
        ) from None
    return runtime.report_store.get_reports_by_date(day)


@router.get("/{report_id}", response_model=ReportOut | None)
def get_report(report_id: int, runtime: Runtime = Depends(get_runtime)) -> Report | None:
    return runtime.report_store.get_report(report_id)


@router.post("/generate/{report_type}", response_model=GenerateOut)
async def generate_report(report_type: str, runtime: Runtime = Depends(get_runtime)) -> GenerateOut:
    _check_type(report_type)
    result = await runtime.scheduler.generate_manual(report_type)
    return GenerateOut.model_validate(result)


# Manual pipeline checks; intended for development and staging.


@router.post("/test/generate/{report_type}")
async def test_generate_report(report_type: str, runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    _check_type(report_type)
    LOGGER.info("Manual %s report generation test started", report_type)
    start_time = datetime.now(UTC)
    started = time.perf_counter()
    try:
        report = await runtime.generator.generate(report_type)
    except Exception as exc:
        LOGGER.exception("Manual %s report generation test failed", report_type)
        return {
            "success": False,
            "error": str(exc),
            "metrics": {
                "duration": int((time.perf_counter() - started) * 1000),
                "newsProcessed": 0,
                "startTime": start_time,
                "endTime": datetime.now(UTC),
            },
        }

    duration = int((time.perf_counter() - started) * 1000)
    LOGGER.info("Manual %s report generated in %dms", report_type, duration)
    return {
        "success": True,
        "report": _dump(report),
        "metrics": {
            "duration": duration,
            "newsProcessed": _processed(report),
            "startTime": start_time,
            "endTime": datetime.now(UTC),
        },
    }


@router.post("/test/news/collect")
async def test_news_collection(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    start_time = datetime.now(UTC)
    started = time.perf_counter()
    try:
        await runtime.collector.collect()
        stats = runtime.news_store.get_stats()
    except Exception as exc:
        LOGGER.exception("Manual news collection test failed")
        return {
            "success": False,
            "error": str(exc),
            "metrics": {
                "duration": int((time.perf_counter() - started) * 1000),
                "startTime": start_time,
                "endTime": datetime.now(UTC),
            },
        }
    return {
        "success": True,
        "stats": stats,
        "metrics": {
            "duration": int((time.perf_counter() - started) * 1000),
            "startTime": start_time,
            "endTime": datetime.now(UTC),
        },
    }


@router.get("/test/flow/status")
def test_flow_status(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    return {
        "news": runtime.news_store.get_stats(),
        "reports": runtime.report_store.get_stats(),
        "scheduler": runtime.scheduler.status(),
        "system": {
            "currentTime": datetime.now(UTC),
            "timezone": runtime.settings.scheduler_timezone,
            "environment": runtime.settings.app_env,
        },
    }


@router.post("/test/flow/full")
async def test_full_flow(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    start_time = datetime.now(UTC)
    started = time.perf_counter()
    steps: list[dict[str, Any]] = []

    step_started = time.perf_counter()
    try:
        await runtime.collector.collect()
        steps.append(
            {
                "step": "news_collection",
                "success": True,
                "duration": int((time.perf_counter() - step_started) * 1000),
                "result": runtime.news_store.get_stats(),
            }
        )
    except Exception as exc:
        steps.append(
            {
                "step": "news_collection",
                "success": False,
                "duration": int((time.perf_counter() - step_started) * 1000),
                "error": str(exc),
            }
        )

    for report_type in REPORT_TYPES:
        step_started = time.perf_counter()
        try:
            report = await runtime.generator.generate(report_type)
            steps.append(
                {
                    "step": f"{report_type}_report",
                    "success": True,
                    "duration": int((time.perf_counter() - step_started) * 1000),
                    "result": {"id": report.id, "title": report.title, "newsProcessed": _processed(report)},
                }
            )
        except Exception as exc:
            steps.append(
                {
                    "step": f"{report_type}_report",
                    "success": False,
                    "duration": int((time.perf_counter() - step_started) * 1000),
                    "error": str(exc),
                }
            )

    success = all(step["success"] for step in steps)
    total = int((time.perf_counter() - started) * 1000)
    LOGGER.info("Full flow test %s in %dms", "completed" if success else "failed", total)
    return {
        "success": success,
        "steps": steps,
        "totalDuration": total,
        "startTime": start_time,
        "endTime": datetime.now(UTC),
    }
