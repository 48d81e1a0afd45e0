from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from investment_helper.api.deps import get_runtime
from investment_helper.api.schemas import MockNewsRequest, NewsItemOut
from investment_helper.core.exceptions import UnknownTestSuiteError
from investment_helper.services.runtime import Runtime

router = APIRouter(prefix="/test", tags=["diagnostics"])


@router.get("/health")
def health(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    report = runtime.diagnostics.system_health()
    return {**report, "timestamp": datetime.now(UTC)}


@router.get("/suites")
def suites(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    descriptions = runtime.diagnostics.available_suites()
    return {"suites": list(descriptions), "descriptions": descriptions}


@router.post("/suites/{suite_name}/run")
async def run_suite(suite_name: str, runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    try:
        return await runtime.diagnostics.run_suite(suite_name)
    except UnknownTestSuiteError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None


@router.post("/data/mock-news")
def create_mock_news(
    request: MockNewsRequest | None = Body(default=None),
    runtime: Runtime = Depends(get_runtime),
) -> dict[str, Any]:
    count = request.count if request is not None else 5
    created = runtime.diagnostics.create_mock_news(count)
    items = [NewsItemOut.model_validate(item).model_dump(mode="json", by_alias=True) for item in created]
    return {"success": True, "created": len(items), "news": items}


@router.delete("/data/cleanup")
def cleanup(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    deleted = runtime.diagnostics.cleanup_test_data()
    return {"success": True, "deleted": deleted}


@router.get("/scenarios")
def scenarios(runtime: Runtime = Depends(get_runtime)) -> dict[str, Any]:
    return {"scenarios": runtime.diagnostics.scenarios()}
