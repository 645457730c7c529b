import json
import logging
from typing import Dict, List, Optional, Protocol, Tuple

from starlette.concurrency import run_in_threadpool

from frameworks import FIRST_ANALYSIS_BADGE
from models.report import CareerAnalysisReport
from models.schemas import AnalysisRecord, CareerAnalysisRequest, NewAnalysisRecord
from services.report_store import ReportStore, StoreUnavailableError
from services.report_structure import ensure_pathway_gaps, parse_report_json
from services.saved_analyses import SavedAnalysesCache

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    async def complete_json(self, messages: List[Dict[str, str]]) -> str: ...


SYSTEM_PROMPT = (
    "You are an expert career analyst specializing in the SFIA 9 and DigComp 2.2 frameworks "
    "with deep knowledge of education and career pathways worldwide. Always answer with a single "
    "JSON object matching the requested structure."
)

REPORT_SHAPE = {
    "executiveSummary": {
        "summary": "string",
        "careerGoal": "string",
        "fitScore": {"score": 7, "outOf": 10, "description": "string"},
        "keyFindings": ["string"],
    },
    "skillMapping": {
        "sfia9": [{"skill": "string", "level": "Level 3 - Apply", "description": "string"}],
        "digcomp22": [{"competency": "string", "level": "Intermediate", "description": "string"}],
    },
    "skillGapAnalysis": {
        "aiAnalysis": "string",
        "gaps": [{"skill": "string", "importance": "High|Medium|Low", "description": "string"}],
        "strengths": [{"skill": "string", "level": "string", "relevance": "High", "description": "string"}],
        "recommendations": [{"area": "string", "suggestion": "string", "impactLevel": "High"}],
    },
    "careerPathway": {
        "aiRecommendations": "string",
        "withDegree": [{
            "step": 1, "role": "string", "timeframe": "string", "keySkillsNeeded": ["string"],
            "description": "string", "requiredQualification": "string",
        }],
        "withoutDegree": [{
            "step": 1, "role": "string", "timeframe": "string", "keySkillsNeeded": ["string"],
            "description": "string", "alternativeQualification": "string",
        }],
    },
    "developmentPlan": {
        "personalizedGrowthInsights": "string",
        "skillsToAcquire": [{"skill": "string", "priority": "High", "resources": ["string"]}],
        "recommendedCertifications": {"university": ["string"], "vocational": ["string"], "online": ["string"]},
        "suggestedProjects": ["string"],
        "learningPath": "string",
        "roadmapStages": [{
            "stage": 1, "title": "string", "timeframe": "string",
            "focusAreas": ["string"], "milestones": ["string"], "description": "string",
        }],
    },
    "similarRoles": [{
        "role": "string", "similarityScore": 0.75, "potentialSalaryRange": "string",
        "locationSpecificDemand": "string", "keySkillsOverlap": ["string"], "uniqueRequirements": ["string"],
    }],
    "socialSkills": {
        "criticalSoftSkills": [{"skill": "string", "importance": "High", "developmentStrategies": ["string"]}],
        "communicationRecommendations": "string",
        "leadershipDevelopment": "string",
        "teamworkStrategies": "string",
        "networkingOpportunities": [{"type": "string", "specificRecommendation": "string", "location": "string"}],
    },
    "reviewNotes": {"firstReview": "string", "secondReview": "string"},
}

PROMPT_TEMPLATE = """Analyze this career information and take the given state and country into account
so salaries, institutions and demand are localized.

Current Professional Level: {professional_level}
Current Skills: {current_skills}
Educational Background: {educational_background}
Career History: {career_history}
Desired Role or Career Goal: {desired_role}
State/Province: {state}
Country: {country}

Respond with one JSON object in exactly this structure:
{shape}

Rules:
- Map skills to SFIA 9 levels and digital competencies to DigComp 2.2 levels.
- Gap importance is one of High, Medium, Low.
- Every key skill of the first withDegree step that is not among the current skills must appear as a gap.
- similarityScore is a fraction between 0 and 1.
- fitScore.score must not exceed fitScore.outOf.
- Review the whole answer twice and summarize both reviews in reviewNotes.
"""


class CareerAnalysisService:
    """Runs one analysis: prompt, AI call, validation, and optionally storage."""

    def __init__(self, client: CompletionClient, store: Optional[ReportStore] = None,
                 cache: Optional[SavedAnalysesCache] = None) -> None:
        self.client = client
        self.store = store
        self.cache = cache

    def build_prompt(self, request: CareerAnalysisRequest) -> List[Dict[str, str]]:
        prompt = PROMPT_TEMPLATE.format(
            professional_level=request.professional_level,
            current_skills=request.current_skills,
            educational_background=request.educational_background,
            career_history=request.career_history,
            desired_role=request.desired_role,
            state=request.state or "Not specified",
            country=request.country or "Not specified",
            shape=json.dumps(REPORT_SHAPE, indent=2),
        )
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    async def analyze(self, request: CareerAnalysisRequest) -> CareerAnalysisReport:
        logger.info(f"Requesting career analysis for desired role {request.desired_role!r}")
        text = await self.client.complete_json(self.build_prompt(request))
        report = parse_report_json(text)
        return ensure_pathway_gaps(report, request.current_skills)

    def _save(self, request: CareerAnalysisRequest, report: CareerAnalysisReport) -> AnalysisRecord:
        first_analysis = self.store.count_by_user(request.user_id) == 0
        new_record = NewAnalysisRecord(
            user_id=request.user_id,
            professional_level=request.professional_level,
            current_skills=request.current_skills,
            educational_background=request.educational_background,
            career_history=request.career_history,
            desired_role=request.desired_role,
            state=request.state,
            country=request.country,
            result=report,
            progress=100,
            badges=[FIRST_ANALYSIS_BADGE] if first_analysis else [],
        )
        record = self.store.create(new_record)
        if self.cache is not None:
            self.cache.remember(record)
        return record

    async def analyze_and_save(self, request: CareerAnalysisRequest
                               ) -> Tuple[CareerAnalysisReport, Optional[AnalysisRecord]]:
        """Analyze and, when the request names a user, store the result.

        A failed save is logged and the report is still returned, with no record.
        """
        report = await self.analyze(request)
        if not request.user_id or self.store is None:
            return report, None

        try:
            record = await run_in_threadpool(self._save, request, report)
        except StoreUnavailableError as e:
            logger.error(f"Analysis for user {request.user_id} not saved: {e}")
            return report, None
        return report, record
