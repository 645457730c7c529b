"""Pure transforms from report sections to chart-ready records.

Adapters accept validated report models or plain dicts (stored documents,
cached copies) and never raise: a missing section degrades to an empty list.
"""
import math
import re
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from frameworks import (
    CHART_PALETTE,
    DEFAULT_GROWTH_RATE,
    DEFAULT_IMPORTANCE,
    DEFAULT_LEVEL,
    FULL_MARK,
    GAP_IMPORTANCE_LEVELS,
    GAP_RANK,
    GAP_REQUIRED_LEVEL,
    GROWTH_RATE_RULES,
    IMPORTANCE_VALUES,
    LEVEL_TERMS,
    MIN_LEVEL,
    RELEVANCE_RANK,
    TREND_MULTIPLIERS,
    Framework,
)

_DIGITS = re.compile(r"\d+")


def _pick(obj: Any, *names: str, default: Any = None) -> Any:
    """Read the first present attribute/key among ``names``."""
    if obj is None:
        return default
    for name in names:
        if isinstance(obj, dict):
            if obj.get(name) is not None:
                return obj[name]
        else:
            value = getattr(obj, name, None)
            if value is not None:
                return value
    return default


def _items(obj: Any, *names: str) -> List[Any]:
    value = _pick(obj, *names, default=[])
    return list(value) if isinstance(value, (list, tuple)) else []


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int, low: int = MIN_LEVEL, high: int = FULL_MARK) -> int:
    return max(low, min(high, value))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number_on_scale(value: Any, default: int) -> int:
    """Round and clamp a number onto 1-5; NaN and infinities give ``default``."""
    if isinstance(value, int):
        return _clamp(value)
    if not math.isfinite(value):
        return default
    return _clamp(_round_half_up(max(min(value, FULL_MARK), MIN_LEVEL)))


def _color(index: int) -> str:
    return CHART_PALETTE[index % len(CHART_PALETTE)]


# ---------- Level normalization ----------
def level_to_value(level: Any) -> int:
    """Map a free-text or numeric proficiency level onto the 1-5 scale.

    Numbers are clamped, then the first digit run in a string, then the
    first term of ``LEVEL_TERMS`` found in the lowercased text; anything
    else is ``DEFAULT_LEVEL``.
    """
    if level is None or isinstance(level, bool):
        return DEFAULT_LEVEL

    if _is_number(level):
        return _number_on_scale(level, DEFAULT_LEVEL)

    text = str(level)
    match = _DIGITS.search(text)
    if match:
        digits = match.group().lstrip("0")
        # anything of two or more digits is past the top of the scale
        if len(digits) > 1:
            return FULL_MARK
        return _clamp(int(digits or "0"))

    lowered = text.lower()
    for term, value in LEVEL_TERMS:
        if term in lowered:
            return value
    return DEFAULT_LEVEL


def importance_to_value(text: Any) -> int:
    """Critical/Very High 5 ... Very Low 1; numbers are clamped to 1-5; default 3."""
    if _is_number(text):
        return _number_on_scale(text, DEFAULT_IMPORTANCE)
    if not isinstance(text, str):
        return DEFAULT_IMPORTANCE
    return IMPORTANCE_VALUES.get(text.strip().lower(), DEFAULT_IMPORTANCE)


# ---------- Radar: top skills ----------
def _gap_required_level(importance: Any) -> int:
    if isinstance(importance, str):
        for label in GAP_IMPORTANCE_LEVELS:
            if importance.strip().lower() == label.lower():
                return GAP_REQUIRED_LEVEL[label]
    return GAP_REQUIRED_LEVEL["Medium"]


def merge_report_skills(report: Any) -> List[Dict[str, Any]]:
    """Unify framework, gap and strength entries by case-insensitive name.

    Enumeration order is SFIA 9, DigComp 2.2, gaps, strengths; an entry seen
    again only raises levels ("max level wins").
    """
    mapping = _pick(report, "skill_mapping", "skillMapping")
    gap_analysis = _pick(report, "skill_gap_analysis", "skillGapAnalysis")

    merged: Dict[str, Dict[str, Any]] = {}

    def upsert(name: Any, current: int, required: int, framework: str) -> None:
        if not isinstance(name, str) or not name.strip():
            return
        key = name.strip().lower()
        entry = merged.get(key)
        if entry is None:
            merged[key] = {
                "skill": name.strip(),
                "currentLevel": current,
                "requiredLevel": required,
                "framework": framework,
            }
        else:
            entry["currentLevel"] = max(entry["currentLevel"], current)
            entry["requiredLevel"] = max(entry["requiredLevel"], required)

    for entry in _items(mapping, "sfia9"):
        current = level_to_value(_pick(entry, "level"))
        upsert(_pick(entry, "skill"), current, current + 1, Framework.SFIA_9.value)

    for entry in _items(mapping, "digcomp22"):
        current = level_to_value(_pick(entry, "level"))
        upsert(_pick(entry, "competency", "competence", "skill"), current, current + 1, Framework.DIGCOMP_22.value)

    for gap in _items(gap_analysis, "gaps"):
        name = _pick(gap, "skill")
        required = _gap_required_level(_pick(gap, "importance"))
        key = name.strip().lower() if isinstance(name, str) else None
        if key in merged:
            merged[key]["requiredLevel"] = max(merged[key]["requiredLevel"], required)
        else:
            upsert(name, MIN_LEVEL, required, "Gap Analysis")

    for strength in _items(gap_analysis, "strengths"):
        name = _pick(strength, "skill")
        current = level_to_value(_pick(strength, "level"))
        key = name.strip().lower() if isinstance(name, str) else None
        if key in merged:
            merged[key]["currentLevel"] = max(merged[key]["currentLevel"], current)
        else:
            upsert(name, current, current, "Strength Analysis")

    return list(merged.values())


def extract_top_skills(report: Any, limit: int = 6) -> List[Dict[str, Any]]:
    """Radar axes for the largest skill gaps, at most ``limit`` of them."""
    skills = merge_report_skills(report)
    # sorted() is stable with reverse=True, so equal gaps keep first-seen order
    ranked = sorted(skills, key=lambda s: s["requiredLevel"] - s["currentLevel"], reverse=True)
    return [
        {
            "skill": s["skill"],
            "currentLevel": s["currentLevel"],
            "requiredLevel": s["requiredLevel"],
            "fullMark": FULL_MARK,
            "framework": s["framework"],
        }
        for s in ranked[:max(limit, 0)]
    ]


# ---------- Bars ----------
def comparative_bar_data(report: Any, limit: int = 8) -> List[Dict[str, Any]]:
    gap_analysis = _pick(report, "skill_gap_analysis", "skillGapAnalysis")
    bars = []
    for gap in _items(gap_analysis, "gaps"):
        name = _pick(gap, "skill")
        if not isinstance(name, str):
            continue
        importance = _pick(gap, "importance", default="Medium")
        required = _gap_required_level(importance)
        bars.append({
            "name": name,
            "currentLevel": MIN_LEVEL,
            "requiredLevel": required,
            "gap": required - MIN_LEVEL,
            "importance": importance,
        })
    bars.sort(key=lambda b: b["gap"], reverse=True)
    return bars[:max(limit, 0)]


def framework_skill_bars(report: Any, framework: Framework, limit: int = 7) -> List[Dict[str, Any]]:
    """Rows for one framework: gaps first, then by importance/relevance."""
    mapping = _pick(report, "skill_mapping", "skillMapping")
    gap_analysis = _pick(report, "skill_gap_analysis", "skillGapAnalysis")
    if framework == Framework.SFIA_9:
        entries = [(_pick(e, "skill"), _pick(e, "level")) for e in _items(mapping, "sfia9")]
    else:
        entries = [(_pick(e, "competency", "competence"), _pick(e, "level")) for e in _items(mapping, "digcomp22")]

    gaps = {}
    for gap in _items(gap_analysis, "gaps"):
        name = _pick(gap, "skill")
        if isinstance(name, str):
            gaps.setdefault(name.strip().lower(), gap)
    strengths = {}
    for strength in _items(gap_analysis, "strengths"):
        name = _pick(strength, "skill")
        if isinstance(name, str):
            strengths.setdefault(name.strip().lower(), strength)

    rows = []
    for name, level in entries:
        if not isinstance(name, str):
            continue
        gap = gaps.get(name.strip().lower())
        strength = strengths.get(name.strip().lower())
        importance = _pick(gap, "importance", default="Medium")
        relevance = _pick(strength, "relevance", default="Medium")
        rank = 0
        if gap is not None:
            rank = GAP_RANK.get(str(importance).lower(), 1)
        elif strength is not None:
            rank = RELEVANCE_RANK.get(str(relevance).lower(), 1)
        rows.append({
            "name": name,
            "framework": framework.value,
            "level": level or "Not Specified",
            "required": 1,
            "validated": 1 if strength is not None else 0,
            "userHas": 1 if strength is not None and gap is None else 0,
            "importance": importance,
            "relevance": relevance,
            "_isGap": gap is not None,
            "_rank": rank,
        })

    rows.sort(key=lambda r: (not r["_isGap"], -r["_rank"]))
    for row in rows:
        del row["_isGap"], row["_rank"]
    return rows[:max(limit, 0)]


# ---------- Pie / percentage views ----------
def to_pie_data(items: Iterable[Any]) -> List[Dict[str, Any]]:
    """Flatten ``{skill|name, value|importance|prevalence}`` records into pie slices."""
    slices = []
    for item in items or []:
        name = _pick(item, "skill", "name", "title", "role")
        if not isinstance(name, str):
            continue
        raw = _pick(item, "value", "importance", "prevalence")
        if _is_number(raw) and math.isfinite(raw):
            value = max(raw, 0)
        else:
            value = importance_to_value(raw)
        slices.append({"name": name, "value": value, "color": _color(len(slices))})
    return slices


def to_percentages(points: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Rescale ``value`` fields so they read as shares of 100."""
    points = [dict(p) for p in points or []]
    total = sum(p.get("value", 0) for p in points)
    for point in points:
        point["value"] = _round_half_up(point.get("value", 0) / total * 100) if total > 0 else 0
    return points


def gap_priority_distribution(report: Any) -> List[Dict[str, Any]]:
    gap_analysis = _pick(report, "skill_gap_analysis", "skillGapAnalysis")
    counts = Counter()
    for gap in _items(gap_analysis, "gaps"):
        importance = _pick(gap, "importance")
        if isinstance(importance, str):
            counts[importance.strip().title()] += 1
    slices = [
        {"name": label, "value": counts[label], "color": _color(i)}
        for i, label in enumerate(GAP_IMPORTANCE_LEVELS)
        if counts[label]
    ]
    return to_percentages(slices)


def similar_roles_chart(report: Any) -> List[Dict[str, Any]]:
    roles = _items(report, "similar_roles", "similarRoles")
    points = []
    for role in roles:
        name = _pick(role, "role")
        score = _pick(role, "similarity_score", "similarityScore", default=0)
        if not isinstance(name, str) or not _is_number(score) or not math.isfinite(score):
            continue
        points.append({"name": name, "value": _round_half_up(score * 100), "color": _color(len(points))})
    return points


def report_charts(report: Any) -> Dict[str, Any]:
    """Every chart series the report view draws."""
    return {
        "radar": extract_top_skills(report),
        "comparativeBar": comparative_bar_data(report),
        "gapPriority": gap_priority_distribution(report),
        "frameworkBars": {
            "sfia9": framework_skill_bars(report, Framework.SFIA_9),
            "digcomp22": framework_skill_bars(report, Framework.DIGCOMP_22),
        },
        "similarRoles": similar_roles_chart(report),
    }


# ---------- Industry views ----------
def role_prevalence_data(roles: Iterable[Any]) -> List[Dict[str, Any]]:
    data = []
    for role in roles or []:
        title = _pick(role, "title")
        if not isinstance(title, str):
            continue
        data.append({
            "name": title,
            "value": importance_to_value(_pick(role, "prevalence")),
            "category": _pick(role, "category", default=""),
            "color": _color(len(data)),
        })
    return data


def skill_importance_data(skills: Iterable[Any]) -> List[Dict[str, Any]]:
    data = []
    for skill in skills or []:
        name = _pick(skill, "name")
        if not isinstance(name, str):
            continue
        data.append({
            "name": name if len(name) <= 15 else name[:12] + "...",
            "fullName": name,
            "value": importance_to_value(_pick(skill, "importance")),
            "category": _pick(skill, "category", default=""),
            "trendDirection": _pick(skill, "trend_direction", "trendDirection", default=""),
            "color": _color(len(data)),
        })
    return data


def market_overview_data(industry: Any) -> List[Dict[str, Any]]:
    companies = _items(industry, "top_companies", "topCompanies")
    regions = _items(industry, "key_regions", "keyRegions")
    data = [
        {"name": "Jobs", "value": len(_items(industry, "roles")) * 10},
        {"name": "Skills", "value": len(_items(industry, "skills")) * 15},
        {"name": "Companies", "value": len(companies) * 20 if companies else 60},
        {"name": "Regions", "value": len(regions) * 25 if regions else 75},
    ]
    return to_percentages(data)


def skill_category_radar(skills: Iterable[Any]) -> List[Dict[str, Any]]:
    skills = list(skills or [])
    counts = Counter(_pick(s, "category", default="") or "Other" for s in skills)
    return [
        {"subject": category, "count": count, "fullMark": len(skills)}
        for category, count in counts.items()
    ]


def _growth_rate_value(growth_rate: Optional[str]) -> int:
    if not isinstance(growth_rate, str) or not growth_rate:
        return DEFAULT_GROWTH_RATE
    for needles, value in GROWTH_RATE_RULES:
        if any(needle in growth_rate for needle in needles):
            return value
    return DEFAULT_GROWTH_RATE


def _trend_multiplier(trend_direction: Optional[str]) -> float:
    if not isinstance(trend_direction, str):
        return 1.0
    lowered = trend_direction.lower()
    for needle, multiplier in TREND_MULTIPLIERS:
        if needle in lowered:
            return multiplier
    return 1.0


def synthesize_industry_trends(growth_rate: Optional[str], trend_direction: Optional[str],
                               start_year: int = 2020, years: int = 6) -> List[Dict[str, Any]]:
    """Illustrative yearly series derived from qualitative growth text.

    This is not historical data; every point is flagged ``illustrative``.
    """
    growth = _growth_rate_value(growth_rate)
    multiplier = _trend_multiplier(trend_direction)
    base = 100
    series = []
    for i in range(max(years, 0)):
        level = base * (1 + (growth / 100) * i) * multiplier
        series.append({
            "year": start_year + i,
            "marketSize": _round_half_up(level),
            "jobDemand": _round_half_up(level * 0.9),
            "skillDemand": _round_half_up(level * 1.1),
            "illustrative": True,
        })
    return series


def industry_charts(industry: Any) -> Dict[str, Any]:
    roles = _items(industry, "roles")
    skills = _items(industry, "skills")
    return {
        "rolePrevalence": role_prevalence_data(roles),
        "skillImportance": skill_importance_data(skills),
        "marketOverview": market_overview_data(industry),
        "skillCategories": skill_category_radar(skills),
        "trends": synthesize_industry_trends(
            _pick(industry, "growth_rate", "growthRate"),
            _pick(industry, "trend_direction", "trendDirection"),
        ),
    }
