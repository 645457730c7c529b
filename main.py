import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.openai_client import AIServiceError
from routers import analyses, analyze, charts, utils
from services.report_store import AnalysisNotFoundError, AnalysisPermissionError, StoreUnavailableError
from services.report_structure import ReportValidationError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Career Analysis Report API",
    version=settings.APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Analysis-Id"],
)


@app.exception_handler(ReportValidationError)
async def report_validation_error_handler(request: Request, exc: ReportValidationError):
    return JSONResponse(
        status_code=502,
        content={
            "error": "invalid_report",
            "message": f"The AI response did not match the report structure: {exc.message}",
            "section": exc.section,
        },
    )


@app.exception_handler(AIServiceError)
async def ai_service_error_handler(request: Request, exc: AIServiceError):
    return JSONResponse(status_code=502, content={"error": "ai_service_error", "message": exc.message})


@app.exception_handler(AnalysisNotFoundError)
async def not_found_handler(request: Request, exc: AnalysisNotFoundError):
    return JSONResponse(status_code=404, content={"message": str(exc)})


@app.exception_handler(AnalysisPermissionError)
async def permission_error_handler(request: Request, exc: AnalysisPermissionError):
    return JSONResponse(status_code=403, content={"message": str(exc)})


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error(f"Report store unavailable on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"message": "Report store unavailable"})


# Mount routers
app.include_router(analyze.router)
app.include_router(analyses.router)
app.include_router(charts.router)
app.include_router(utils.router)
