"""Validation boundary between raw AI output and the report schema.

Raw completions are upgraded from legacy field names, lightly normalized and
then validated into a frozen ``CareerAnalysisReport``. Nothing untyped is
allowed past this module.
"""
import copy
import json
import logging
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from frameworks import GAP_IMPORTANCE_SYNONYMS
from models.report import CareerAnalysisReport, GapEntry

logger = logging.getLogger(__name__)

# Legacy top-level name -> canonical name
LEGACY_SECTION_NAMES = {
    "socialSkillsDevelopment": "socialSkills",
    "qualityReview": "reviewNotes",
    "gapAnalysis": "skillGapAnalysis",
}


class ReportValidationError(Exception):
    """Raised when AI output does not fit the report schema."""

    def __init__(self, section: str, message: str, errors: List[Dict] | None = None) -> None:
        super().__init__(f"{section}: {message}")
        self.section = section
        self.message = message
        self.errors = errors or []


# ---------- Legacy shapes ----------
def upgrade_legacy_report(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Rename drifted field names to the canonical ones. Returns a new dict."""
    if not isinstance(raw, dict):
        return raw
    data = copy.deepcopy(raw)

    for legacy, canonical in LEGACY_SECTION_NAMES.items():
        if legacy in data:
            value = data.pop(legacy)
            data.setdefault(canonical, value)

    summary = data.get("executiveSummary")
    if isinstance(summary, str):
        data["executiveSummary"] = {
            "summary": summary,
            "careerGoal": "",
            "fitScore": None,
            "keyFindings": [],
        }

    mapping = data.get("skillMapping")
    if isinstance(mapping, dict) and isinstance(mapping.get("digcomp22"), list):
        for entry in mapping["digcomp22"]:
            if isinstance(entry, dict) and "competency" not in entry and "competence" in entry:
                entry["competency"] = entry.pop("competence")

    return data


# ---------- Normalization ----------
def _normalize_importance(value: Any) -> Any:
    if isinstance(value, str):
        return GAP_IMPORTANCE_SYNONYMS.get(value.strip().lower(), value)
    return value


def _normalize_similarity(value: Any) -> Any:
    # "75" meaning 75% overlap
    if isinstance(value, (int, float)) and not isinstance(value, bool) and 1 < value <= 100:
        return value / 100
    return value


def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
    gap_analysis = data.get("skillGapAnalysis")
    if isinstance(gap_analysis, dict) and isinstance(gap_analysis.get("gaps"), list):
        for gap in gap_analysis["gaps"]:
            if isinstance(gap, dict) and "importance" in gap:
                gap["importance"] = _normalize_importance(gap["importance"])

    roles = data.get("similarRoles")
    if isinstance(roles, list):
        for role in roles:
            if isinstance(role, dict) and "similarityScore" in role:
                role["similarityScore"] = _normalize_similarity(role["similarityScore"])
    return data


# ---------- Validation ----------
def validate_report(raw: Any) -> CareerAnalysisReport:
    """Validate a decoded AI response into a report or raise ``ReportValidationError``."""
    if not isinstance(raw, dict):
        raise ReportValidationError("report", f"expected a JSON object, got {type(raw).__name__}")

    data = _normalize(copy.deepcopy(raw))
    try:
        return CareerAnalysisReport.model_validate(data)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        first = errors[0]
        section = str(first["loc"][0]) if first["loc"] else "report"
        location = ".".join(str(part) for part in first["loc"])
        logger.warning(f"Report failed validation in {section} ({len(errors)} errors)")
        raise ReportValidationError(section, f"{location}: {first['msg']}", errors) from e


def parse_report_json(text: str) -> CareerAnalysisReport:
    """Decode completion text, upgrade legacy names, validate."""
    try:
        raw = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise ReportValidationError("report", f"invalid JSON: {e}") from e
    return validate_report(upgrade_legacy_report(raw))


# ---------- Cross-section consistency ----------
def _mentions(text: str, skill: str) -> bool:
    # whole-word match: "Java" is not covered by "JavaScript"
    pattern = r"(?<!\w)" + re.escape(skill.strip().lower()) + r"(?!\w)"
    return re.search(pattern, text.lower()) is not None


def ensure_pathway_gaps(report: CareerAnalysisReport, current_skills: str) -> CareerAnalysisReport:
    """Add a High gap for every first-step key skill the user has not listed.

    The first degree-pathway step is the next move the user is asked to make,
    so any skill it needs that is missing from ``current_skills`` must show up
    as a gap. Returns the same report when nothing is missing.
    """
    steps = report.career_pathway.with_degree
    if not steps:
        return report

    gaps = list(report.skill_gap_analysis.gaps)
    known = {gap.skill.strip().lower() for gap in gaps}
    first_step = steps[0]
    added = []
    for skill in first_step.key_skills_needed:
        name = skill.strip()
        if not name or name.lower() in known or _mentions(current_skills or "", name):
            continue
        known.add(name.lower())
        added.append(GapEntry(
            skill=name,
            importance="High",
            description=f"Needed for {first_step.role} but not among the listed current skills.",
        ))

    if not added:
        return report

    logger.info(f"Added {len(added)} pathway gaps missing from the AI gap list")
    gap_analysis = report.skill_gap_analysis.model_copy(update={"gaps": gaps + added})
    return report.model_copy(update={"skill_gap_analysis": gap_analysis})
