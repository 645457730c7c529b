import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from core.config import settings
from routers.deps import get_report_store
from services.report_store import ReportStore, StoreUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def root():
    return {
        "message": "Career Analysis Report API",
        "version": settings.APP_VERSION,
        "features": [
            "Structured AI career analysis (SFIA 9 / DigComp 2.2)",
            "Validated, immutable report storage",
            "Chart-ready report and industry series",
            "Saved analyses per user",
        ],
        "endpoints": {
            "/api/career-pathway-analysis-structured": "POST - Generate a structured report",
            "/api/career-analyses/{id}": "GET - Fetch a stored report / DELETE - Remove it (owner only)",
            "/api/users/{user_id}/career-analyses": "GET - List a user's reports, newest first",
            "/api/users/{user_id}/saved-analyses": "GET - Saved analyses cache",
            "/api/career-analyses/{id}/charts": "GET - Chart series for a report",
            "/api/charts/industry": "POST - Chart series for industry data",
            "/api/admin/dashboard/sample-activity": "GET - Sample dashboard data",
            "/health": "GET - Health check",
        },
    }


@router.get("/health")
async def health_check(store: ReportStore = Depends(get_report_store)):
    ai_status = "configured" if settings.OPENAI_API_KEY else "unconfigured"
    store_status = "available"
    try:
        # cheap read to verify
        await run_in_threadpool(store.count_by_user, "_health")
    except StoreUnavailableError as e:
        logger.warning(f"Health check: report store unavailable: {e}")
        store_status = "unavailable"

    return {
        "status": "healthy" if store_status == "available" and ai_status == "configured" else "degraded",
        "ai_service": ai_status,
        "report_store": store_status,
        "store_backend": settings.REPORT_STORE_BACKEND,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
    }
