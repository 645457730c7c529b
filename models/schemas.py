from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.report import CareerAnalysisReport


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CareerAnalysisRequest(CamelModel):
    # Profile
    professional_level: str = Field(..., min_length=1, description="Current professional level")
    current_skills: str = Field(..., min_length=1, description="Free-text list of current skills")
    educational_background: str = Field(..., description="Degrees, certificates, courses")
    career_history: str = Field(..., description="Roles held so far")
    desired_role: str = Field(..., min_length=1, description="Target role or career goal")

    # Location (localizes salaries, institutions and demand)
    state: Optional[str] = Field(None, description="State or province")
    country: Optional[str] = Field(None, description="Country")

    # Owner; when absent the analysis is returned but not stored
    user_id: Optional[str] = Field(None, description="Owning user id")


class NewAnalysisRecord(CamelModel):
    """Everything a store needs to insert a record; ids and timestamps are its job."""
    user_id: str
    professional_level: str
    current_skills: str
    educational_background: str
    career_history: str
    desired_role: str
    state: Optional[str] = None
    country: Optional[str] = None
    result: CareerAnalysisReport
    progress: int = Field(0, ge=0, le=100)
    badges: List[str] = Field(default_factory=list)


class AnalysisRecord(NewAnalysisRecord):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(frozen=True)

    def to_document(self) -> Dict:
        """Shape written to the document store (id lives on the document key)."""
        data = self.model_dump(by_alias=True, exclude={"id", "result"})
        data["result"] = self.result.model_dump(mode="json", by_alias=True)
        return data


class SavedAnalysisMetadata(CamelModel):
    id: str
    date_created: datetime
    desired_role: str
    professional_level: str


class SavedAnalysisEntry(CamelModel):
    user_id: str
    report: CareerAnalysisReport
    metadata: SavedAnalysisMetadata
    stale: bool = False


class ErrorResponse(BaseModel):
    message: str
    error: Optional[str] = None
    section: Optional[str] = None


# ---------- Industry chart inputs ----------
class IndustryRole(CamelModel):
    title: str
    category: str = ""
    description: str = ""
    prevalence: str = "Medium"
    salary_range: Optional[str] = None
    growth_rate: Optional[str] = None


class IndustrySkill(CamelModel):
    name: str
    category: str = ""
    description: str = ""
    importance: str = "Medium"
    trend_direction: str = ""


class IndustryData(CamelModel):
    name: str
    category: str = ""
    description: str = ""
    market_size: Optional[str] = None
    trend_direction: Optional[str] = None
    growth_rate: Optional[str] = None
    top_companies: List[str] = Field(default_factory=list)
    key_regions: List[str] = Field(default_factory=list)
    roles: List[IndustryRole] = Field(default_factory=list)
    skills: List[IndustrySkill] = Field(default_factory=list)
