import copy
import json

import pytest
from fastapi.testclient import TestClient

from main import app
from models.schemas import CareerAnalysisRequest, NewAnalysisRecord
from routers.deps import (
    get_completion_client,
    get_report_store,
    get_sample_data_provider,
    get_saved_analyses_cache,
)
from services.report_store import InMemoryReportStore
from services.report_structure import validate_report
from services.sample_data import SeededSampleDataProvider
from services.saved_analyses import SavedAnalysesCache

RAW_REPORT = {
    "executiveSummary": {
        "summary": "Strong analytical base with a clear path into data engineering.",
        "careerGoal": "Data Engineer",
        "fitScore": {"score": 7, "outOf": 10, "description": "Good fit"},
        "keyFindings": ["Solid SQL", "Limited cloud exposure"],
    },
    "skillMapping": {
        "sfia9": [
            {"skill": "Data Management", "level": "Level 3 - Apply", "description": "Maintains schemas"},
            {"skill": "Programming", "level": "Senior", "description": "Python daily"},
        ],
        "digcomp22": [
            {"competency": "Managing data", "level": "Intermediate", "description": "Spreadsheets and SQL"},
        ],
    },
    "skillGapAnalysis": {
        "aiAnalysis": "Cloud and orchestration are the main gaps.",
        "gaps": [
            {"skill": "Cloud Platforms", "importance": "High", "description": "No AWS or GCP use"},
            {"skill": "Data Management", "importance": "High", "description": "Needs warehouse design"},
            {"skill": "Airflow", "importance": "Low", "description": "Scheduling"},
        ],
        "strengths": [
            {"skill": "SQL", "level": "Advanced", "relevance": "High", "description": "Daily use"},
        ],
        "recommendations": [],
    },
    "careerPathway": {
        "aiRecommendations": "Start with a junior data engineering role.",
        "withDegree": [
            {
                "step": 1,
                "role": "Junior Data Engineer",
                "timeframe": "0-1 years",
                "keySkillsNeeded": ["SQL", "Python", "Spark"],
                "description": "Build pipelines",
                "requiredQualification": "BSc Computer Science",
            },
            {
                "step": 2,
                "role": "Data Engineer",
                "timeframe": "1-3 years",
                "keySkillsNeeded": ["Cloud Platforms"],
                "description": "Own pipelines",
            },
        ],
    },
    "developmentPlan": {"personalizedGrowthInsights": "Focus on cloud certifications."},
    "similarRoles": [
        {"role": "Analytics Engineer", "similarityScore": 0.8},
        {"role": "BI Developer", "similarityScore": 0.6},
    ],
}


@pytest.fixture
def raw_report():
    return copy.deepcopy(RAW_REPORT)


@pytest.fixture
def report(raw_report):
    return validate_report(raw_report)


@pytest.fixture
def analysis_request():
    return CareerAnalysisRequest(
        professional_level="Mid-level",
        current_skills="SQL, Python, Excel",
        educational_background="BSc Mathematics",
        career_history="Data analyst, 3 years",
        desired_role="Data Engineer",
        state="Victoria",
        country="Australia",
        user_id="user-1",
    )


def _new_record(report, user_id="user-1", desired_role="Data Engineer"):
    return NewAnalysisRecord(
        user_id=user_id,
        professional_level="Mid-level",
        current_skills="SQL, Python",
        educational_background="BSc Mathematics",
        career_history="Data analyst",
        desired_role=desired_role,
        result=report,
        progress=100,
    )


@pytest.fixture
def make_new_record():
    return _new_record


class FakeCompletionClient:
    """Returns canned completion text and records every prompt it was sent."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = []

    async def complete_json(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload)


@pytest.fixture
def fake_client(raw_report):
    return FakeCompletionClient(raw_report)


@pytest.fixture
def store():
    return InMemoryReportStore()


@pytest.fixture
def cache():
    return SavedAnalysesCache()


@pytest.fixture
def client(fake_client, store, cache):
    app.dependency_overrides[get_completion_client] = lambda: fake_client
    app.dependency_overrides[get_report_store] = lambda: store
    app.dependency_overrides[get_saved_analyses_cache] = lambda: cache
    app.dependency_overrides[get_sample_data_provider] = lambda: SeededSampleDataProvider(7)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
