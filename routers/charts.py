from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from models.schemas import ErrorResponse, IndustryData
from routers.deps import get_report_store, get_sample_data_provider
from services.chart_adapters import industry_charts, report_charts
from services.report_store import ReportStore
from services.sample_data import SampleDataProvider


router = APIRouter(prefix="/api", tags=["charts"])


@router.get("/career-analyses/{analysis_id}/charts", responses={404: {"model": ErrorResponse}})
def get_report_charts(analysis_id: str, store: ReportStore = Depends(get_report_store)):
    record = store.get_by_id(analysis_id)
    return {"analysisId": record.id, **report_charts(record.result)}


@router.post("/charts/industry")
def get_industry_charts(industry: IndustryData):
    return {"industry": industry.name, **industry_charts(industry)}


@router.get("/admin/dashboard/sample-activity")
def get_sample_activity(
    days: int = Query(30, ge=1, le=365),
    today: Optional[date] = None,
    provider: SampleDataProvider = Depends(get_sample_data_provider),
):
    """
    Illustrative dashboard series; not measured usage.
    """
    return {
        "sample": True,
        "dailyActivity": provider.daily_activity(days, today),
        "featureUsage": provider.feature_usage(),
    }
