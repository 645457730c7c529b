from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status

from core.config import settings
from core.firebase_client import firebase_configured, get_db
from core.openai_client import get_openai_client
from services.analysis_service import CareerAnalysisService, CompletionClient
from services.report_store import FirestoreReportStore, InMemoryReportStore, ReportStore, StoreUnavailableError
from services.sample_data import SampleDataProvider, SeededSampleDataProvider
from services.saved_analyses import SavedAnalysesCache


def connect_firestore():
    if not firebase_configured():
        raise StoreUnavailableError("Firebase credentials are not configured")
    return get_db()


# One store and one cache per process
@lru_cache
def get_report_store() -> ReportStore:
    if settings.REPORT_STORE_BACKEND == "memory":
        return InMemoryReportStore()
    return FirestoreReportStore(collection=settings.ANALYSES_COLLECTION, connect=connect_firestore)


@lru_cache
def get_saved_analyses_cache() -> SavedAnalysesCache:
    return SavedAnalysesCache(settings.SAVED_ANALYSES_PATH)


def get_completion_client() -> CompletionClient:
    return get_openai_client()


def get_sample_data_provider() -> SampleDataProvider:
    return SeededSampleDataProvider(settings.SAMPLE_DATA_SEED)


def get_analysis_service(
    client: CompletionClient = Depends(get_completion_client),
    store: ReportStore = Depends(get_report_store),
    cache: SavedAnalysesCache = Depends(get_saved_analyses_cache),
) -> CareerAnalysisService:
    return CareerAnalysisService(client, store, cache)


# Set by the auth gateway in front of this service
def get_requesting_user_id(x_user_id: str | None = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id
