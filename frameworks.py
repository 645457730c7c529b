from enum import Enum


class Framework(str, Enum):
    """The two skill-classification tracks a report maps skills onto."""
    SFIA_9 = "SFIA 9"
    DIGCOMP_22 = "DigComp 2.2"


# Radar charts are drawn on a 1-5 scale
FULL_MARK = 5
MIN_LEVEL = 1
DEFAULT_LEVEL = 2

# Free-text level terms, checked in this order; the first substring hit wins.
# Lower tiers come first so "experienced" (3) is seen before "expert" (4).
LEVEL_TERMS = (
    ("novice", 1),
    ("basic", 1),
    ("foundation", 1),
    ("beginner", 1),
    ("initial", 1),

    ("intermediate", 2),
    ("practitioner", 2),
    ("applied", 2),

    ("advanced", 3),
    ("experienced", 3),
    ("established", 3),
    ("proficient", 3),

    ("expert", 4),
    ("senior", 4),
    ("authority", 4),
    ("extensive", 4),

    ("master", 5),
    ("leading", 5),
    ("strategic", 5),
    ("principal", 5),
    ("specialized", 5),
)

# Importance / prevalence text used by pie and bar charts
IMPORTANCE_VALUES = {
    "critical": 5,
    "very high": 5,
    "high": 4,
    "medium": 3,
    "low": 2,
    "very low": 1,
}
DEFAULT_IMPORTANCE = 3

# Canonical gap importance buckets and the synonyms folded into them
GAP_IMPORTANCE_LEVELS = ("High", "Medium", "Low")
GAP_IMPORTANCE_SYNONYMS = {
    "critical": "High",
    "very high": "High",
    "high": "High",
    "medium": "Medium",
    "moderate": "Medium",
    "low": "Low",
    "very low": "Low",
}

# Level a gap of given importance implies the target role requires
GAP_REQUIRED_LEVEL = {
    "High": 4,
    "Medium": 3,
    "Low": 2,
}

# Ranking weights for framework bar rows (gap importance / strength relevance)
GAP_RANK = {"critical": 4, "high": 3, "medium": 2, "low": 1}
RELEVANCE_RANK = {"very high": 4, "high": 3, "medium": 2, "low": 1}

CHART_PALETTE = (
    "#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8",
    "#82CA9D", "#FF6B6B", "#6B66FF", "#FFD700", "#8A2BE2",
)

# Industry trend heuristics: (substrings, growth % per year)
GROWTH_RATE_RULES = (
    (("10%", "fast"), 10),
    (("5%", "moderate"), 5),
    (("2%", "slow"), 2),
    (("-", "decline"), -3),
)
DEFAULT_GROWTH_RATE = 5

TREND_MULTIPLIERS = (
    ("growing", 1.2),
    ("stable", 1.0),
    ("declining", 0.8),
)

FIRST_ANALYSIS_BADGE = "career-explorer"
