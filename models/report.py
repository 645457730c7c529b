from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    """camelCase on the wire, snake_case in Python; frozen once built."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def _level_to_text(value):
    # The AI sometimes answers SFIA levels as bare numbers
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


# ---------- Executive summary ----------
class FitScore(ReportModel):
    score: float = Field(..., ge=0)
    out_of: float = Field(..., gt=0)
    description: str = ""

    @model_validator(mode="after")
    def score_within_scale(self):
        if self.score > self.out_of:
            raise ValueError(f"fit score {self.score} exceeds scale of {self.out_of}")
        return self


class ExecutiveSummary(ReportModel):
    summary: str
    career_goal: str
    # None only on records upgraded from the plain-text summary shape
    fit_score: Optional[FitScore] = None
    key_findings: List[str] = Field(default_factory=list)


# ---------- Skill mapping ----------
class SkillEntry(ReportModel):
    skill: str
    level: str
    description: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def level_as_text(cls, value):
        return _level_to_text(value)


class CompetencyEntry(ReportModel):
    competency: str
    level: str
    description: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def level_as_text(cls, value):
        return _level_to_text(value)


class SkillMapping(ReportModel):
    sfia9: List[SkillEntry]
    digcomp22: List[CompetencyEntry]


# ---------- Skill gap analysis ----------
class GapEntry(ReportModel):
    skill: str
    importance: Literal["High", "Medium", "Low"]
    description: str = ""


class StrengthEntry(ReportModel):
    skill: str
    level: str
    relevance: str = ""
    description: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def level_as_text(cls, value):
        return _level_to_text(value)


class Recommendation(ReportModel):
    area: str
    suggestion: str
    impact_level: str = ""


class SkillGapAnalysis(ReportModel):
    ai_analysis: str
    gaps: List[GapEntry]
    strengths: List[StrengthEntry]
    recommendations: List[Recommendation] = Field(default_factory=list)


# ---------- Career pathway ----------
class PathwayStep(ReportModel):
    step: Optional[int] = None
    role: str
    timeframe: str
    key_skills_needed: List[str]
    description: str = ""
    required_qualification: Optional[str] = None
    alternative_qualification: Optional[str] = None


class CareerPathway(ReportModel):
    ai_recommendations: str
    with_degree: List[PathwayStep]
    without_degree: Optional[List[PathwayStep]] = None


# ---------- Development plan ----------
class SkillToAcquire(ReportModel):
    skill: str
    priority: str = ""
    resources: List[str] = Field(default_factory=list)


class RecommendedCertifications(ReportModel):
    university: List[str] = Field(default_factory=list)
    vocational: List[str] = Field(default_factory=list)
    online: List[str] = Field(default_factory=list)


class RoadmapStage(ReportModel):
    stage: int
    title: str
    timeframe: str = ""
    focus_areas: List[str] = Field(default_factory=list)
    milestones: List[str] = Field(default_factory=list)
    description: str = ""


class DevelopmentPlan(ReportModel):
    personalized_growth_insights: str
    skills_to_acquire: List[SkillToAcquire] = Field(default_factory=list)
    recommended_certifications: RecommendedCertifications = Field(default_factory=RecommendedCertifications)
    suggested_projects: List[str] = Field(default_factory=list)
    learning_path: str = ""
    roadmap_stages: List[RoadmapStage] = Field(default_factory=list)


# ---------- Similar roles ----------
class SimilarRole(ReportModel):
    role: str
    similarity_score: float = Field(..., ge=0, le=1)
    potential_salary_range: str = ""
    location_specific_demand: str = ""
    key_skills_overlap: List[str] = Field(default_factory=list)
    unique_requirements: List[str] = Field(default_factory=list)


# ---------- Social skills / review notes ----------
class CriticalSoftSkill(ReportModel):
    skill: str
    importance: str = ""
    development_strategies: List[str] = Field(default_factory=list)


class NetworkingOpportunity(ReportModel):
    type: str
    specific_recommendation: str = ""
    location: str = ""


class SocialSkills(ReportModel):
    critical_soft_skills: List[CriticalSoftSkill] = Field(default_factory=list)
    communication_recommendations: str = ""
    leadership_development: str = ""
    teamwork_strategies: str = ""
    networking_opportunities: List[NetworkingOpportunity] = Field(default_factory=list)


class ReviewNotes(ReportModel):
    first_review: str = ""
    second_review: str = ""


class CareerAnalysisReport(ReportModel):
    executive_summary: ExecutiveSummary
    skill_mapping: SkillMapping
    skill_gap_analysis: SkillGapAnalysis
    career_pathway: CareerPathway
    development_plan: DevelopmentPlan
    similar_roles: List[SimilarRole]
    social_skills: Optional[SocialSkills] = None
    review_notes: Optional[ReviewNotes] = None


# Top-level sections validation reports against, in document order
REPORT_SECTIONS = tuple(
    field.alias or name for name, field in CareerAnalysisReport.model_fields.items()
)
