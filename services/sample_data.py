"""Illustrative admin dashboard data.

None of this is measured. Values come from an injected, seeded generator so
that tests and screenshots are reproducible.
"""
import math
import random
from datetime import date, timedelta
from typing import Dict, List, Optional, Protocol

from frameworks import CHART_PALETTE

FEATURES = (
    "Career Analysis",
    "Skill Assessment",
    "Learning Resources",
    "Career Pathway",
    "Organization Pathway",
    "Skill Details",
)


class SampleDataProvider(Protocol):
    def daily_activity(self, days: int, today: Optional[date] = None) -> List[Dict]: ...

    def feature_usage(self) -> List[Dict]: ...


class SeededSampleDataProvider:
    def __init__(self, seed: int = 42) -> None:
        self.seed = seed

    def _rng(self) -> random.Random:
        # fresh generator per call: same seed, same answer
        return random.Random(self.seed)

    def daily_activity(self, days: int, today: Optional[date] = None) -> List[Dict]:
        rng = self._rng()
        today = today or date.today()
        data = []
        for i in range(days - 1, -1, -1):
            day = today - timedelta(days=i)
            base_users = rng.randint(5, 9)
            growth = math.sin(i / 10) * 1.5 + 1
            data.append({
                "date": day.isoformat(),
                "newUsers": max(1, math.floor(base_users * growth)),
                "activeUsers": max(0, math.floor((base_users + 20) * growth)),
                "apiCalls": max(0, math.floor((base_users * 25 + 100) * growth)),
            })
        return data

    def feature_usage(self) -> List[Dict]:
        rng = self._rng()
        values = sorted((rng.randint(10, 45) for _ in FEATURES), reverse=True)
        return [
            {"name": name, "value": value, "color": CHART_PALETTE[i % len(CHART_PALETTE)]}
            for i, (name, value) in enumerate(zip(FEATURES, values))
        ]
