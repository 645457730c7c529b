from typing import List

from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool

from models.schemas import AnalysisRecord, ErrorResponse, SavedAnalysisEntry
from routers.deps import get_report_store, get_requesting_user_id, get_saved_analyses_cache
from services.report_store import ReportStore
from services.saved_analyses import SavedAnalysesCache


router = APIRouter(prefix="/api", tags=["analyses"])


@router.get(
    "/career-analyses/{analysis_id}",
    response_model=AnalysisRecord,
    responses={404: {"model": ErrorResponse}},
)
def get_career_analysis(analysis_id: str, store: ReportStore = Depends(get_report_store)):
    return store.get_by_id(analysis_id)


@router.get("/users/{user_id}/career-analyses", response_model=List[AnalysisRecord])
def list_career_analyses(user_id: str, store: ReportStore = Depends(get_report_store)):
    return store.list_by_user(user_id)


@router.delete(
    "/career-analyses/{analysis_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_career_analysis(
    analysis_id: str,
    requesting_user_id: str = Depends(get_requesting_user_id),
    store: ReportStore = Depends(get_report_store),
    cache: SavedAnalysesCache = Depends(get_saved_analyses_cache),
):
    store.delete(analysis_id, requesting_user_id)
    cache.forget(analysis_id)


@router.get("/users/{user_id}/saved-analyses", response_model=List[SavedAnalysisEntry])
async def list_saved_analyses(
    user_id: str,
    store: ReportStore = Depends(get_report_store),
    cache: SavedAnalysesCache = Depends(get_saved_analyses_cache),
):
    return await run_in_threadpool(cache.list_saved, user_id, store)
