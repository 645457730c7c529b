import json

import pytest

from models.report import REPORT_SECTIONS
from services.report_structure import (
    ReportValidationError,
    ensure_pathway_gaps,
    parse_report_json,
    upgrade_legacy_report,
    validate_report,
)


def test_valid_report_parses(raw_report):
    report = validate_report(raw_report)
    assert report.executive_summary.fit_score.score == 7
    assert [s.role for s in report.career_pathway.with_degree] == ["Junior Data Engineer", "Data Engineer"]
    assert report.social_skills is None


def test_report_sections_in_document_order():
    assert REPORT_SECTIONS[:2] == ("executiveSummary", "skillMapping")
    assert "similarRoles" in REPORT_SECTIONS


def test_missing_section_is_named(raw_report):
    del raw_report["skillMapping"]
    with pytest.raises(ReportValidationError) as exc_info:
        validate_report(raw_report)
    assert exc_info.value.section == "skillMapping"


def test_array_where_object_expected_is_named(raw_report):
    raw_report["skillGapAnalysis"]["gaps"] = "none"
    with pytest.raises(ReportValidationError) as exc_info:
        validate_report(raw_report)
    assert exc_info.value.section == "skillGapAnalysis"


def test_fit_score_above_scale_rejected(raw_report):
    raw_report["executiveSummary"]["fitScore"]["score"] = 12
    with pytest.raises(ReportValidationError) as exc_info:
        validate_report(raw_report)
    assert exc_info.value.section == "executiveSummary"


def test_non_object_rejected():
    with pytest.raises(ReportValidationError) as exc_info:
        validate_report(["not", "a", "report"])
    assert exc_info.value.section == "report"


def test_undecodable_text_rejected():
    with pytest.raises(ReportValidationError) as exc_info:
        parse_report_json("Sure! Here is your report:")
    assert exc_info.value.section == "report"


def test_importance_synonyms_folded(raw_report):
    raw_report["skillGapAnalysis"]["gaps"][0]["importance"] = "Critical"
    raw_report["skillGapAnalysis"]["gaps"][2]["importance"] = "very low"
    report = validate_report(raw_report)
    assert [g.importance for g in report.skill_gap_analysis.gaps] == ["High", "High", "Low"]


def test_percentage_similarity_scaled(raw_report):
    raw_report["similarRoles"][0]["similarityScore"] = 75
    report = validate_report(raw_report)
    assert report.similar_roles[0].similarity_score == pytest.approx(0.75)


def test_numeric_level_kept_as_text(raw_report):
    raw_report["skillMapping"]["sfia9"][0]["level"] = 4
    report = validate_report(raw_report)
    assert report.skill_mapping.sfia9[0].level == "4"


def test_validation_does_not_mutate_input(raw_report):
    raw_report["similarRoles"][0]["similarityScore"] = 75
    validate_report(raw_report)
    assert raw_report["similarRoles"][0]["similarityScore"] == 75


def test_report_is_frozen(report):
    with pytest.raises(Exception):
        report.similar_roles = []


def test_legacy_names_upgraded(raw_report):
    raw_report["socialSkillsDevelopment"] = {"communicationRecommendations": "Present weekly"}
    raw_report["qualityReview"] = {"firstReview": "ok"}
    raw_report["gapAnalysis"] = raw_report.pop("skillGapAnalysis")
    raw_report["skillMapping"]["digcomp22"] = [
        {"competence": "Managing data", "level": "Intermediate", "description": ""}
    ]

    upgraded = upgrade_legacy_report(raw_report)
    report = validate_report(upgraded)

    assert "gapAnalysis" in raw_report
    assert report.social_skills.communication_recommendations == "Present weekly"
    assert report.review_notes.first_review == "ok"
    assert report.skill_mapping.digcomp22[0].competency == "Managing data"
    assert len(report.skill_gap_analysis.gaps) == 3


def test_string_executive_summary_upgraded(raw_report):
    raw_report["executiveSummary"] = "A short summary."
    report = parse_report_json(json.dumps(raw_report))
    assert report.executive_summary.summary == "A short summary."
    assert report.executive_summary.key_findings == []
    # no invented 0/10 score for a summary that was never scored
    assert report.executive_summary.fit_score is None


def test_pathway_gaps_added_for_missing_first_step_skills(report):
    # SQL and Python are listed, Spark is not
    updated = ensure_pathway_gaps(report, "sql, python, excel")
    gaps = [g.skill for g in updated.skill_gap_analysis.gaps]
    assert gaps[-1] == "Spark"
    assert updated.skill_gap_analysis.gaps[-1].importance == "High"
    assert len(report.skill_gap_analysis.gaps) == 3


def test_pathway_gaps_skip_existing_gaps(report):
    updated = ensure_pathway_gaps(report, "")
    names = [g.skill.lower() for g in updated.skill_gap_analysis.gaps]
    assert names.count("sql") == 1
    assert "spark" in names and "python" in names


def test_pathway_gaps_noop_returns_same_report(report):
    assert ensure_pathway_gaps(report, "SQL, Python, Spark") is report


def test_pathway_gaps_match_whole_skill_names(raw_report):
    raw_report["skillGapAnalysis"]["gaps"] = []
    raw_report["careerPathway"]["withDegree"][0]["keySkillsNeeded"] = ["Java", "R", "Docker"]
    report = validate_report(raw_report)

    # "JavaScript" does not cover Java and "Docker" does not cover R
    updated = ensure_pathway_gaps(report, "JavaScript, Docker")

    assert [g.skill for g in updated.skill_gap_analysis.gaps] == ["Java", "R"]


def test_pathway_gaps_match_symbols_in_skill_names(report):
    steps = report.career_pathway.with_degree
    step = steps[0].model_copy(update={"key_skills_needed": ["C++", "C#"]})
    pathway = report.career_pathway.model_copy(update={"with_degree": [step] + list(steps[1:])})
    report = report.model_copy(update={"career_pathway": pathway})

    updated = ensure_pathway_gaps(report, "c++; Python")

    assert [g.skill for g in updated.skill_gap_analysis.gaps][-1] == "C#"
    assert "C++" not in [g.skill for g in updated.skill_gap_analysis.gaps]
