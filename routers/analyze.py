from fastapi import APIRouter, Depends, Response

from models.report import CareerAnalysisReport
from models.schemas import CareerAnalysisRequest, ErrorResponse
from routers.deps import get_analysis_service
from services.analysis_service import CareerAnalysisService


router = APIRouter(prefix="/api", tags=["analysis"])


@router.post(
    "/career-pathway-analysis-structured",
    response_model=CareerAnalysisReport,
    response_model_by_alias=True,
    responses={502: {"model": ErrorResponse}},
)
async def career_pathway_analysis_structured(
    request: CareerAnalysisRequest,
    response: Response,
    service: CareerAnalysisService = Depends(get_analysis_service),
):
    """
    Generate a structured career analysis report; stored when ``userId`` is given
    """
    report, record = await service.analyze_and_save(request)
    if record is not None:
        response.headers["X-Analysis-Id"] = record.id
    return report
