# neuro_core/analytics.py
from __future__ import annotations
from dataclasses import dataclass
from statistics import mean
from typing import Dict, List, Optional, Sequence

from .types import AssessmentResult


@dataclass(frozen=True)
class Trend:
    domain: Optional[str]
    count: int
    first_half_avg: float
    second_half_avg: float
    change: float
    improving: bool


def trend(results: Sequence[AssessmentResult], domain: Optional[str] = None) -> Trend:
    """Compare the mean score of the older half of ``results`` with the newer half.

    ``results`` are in insertion order (oldest first), as the store returns them.
    With fewer than two results there is nothing to compare and change is 0.
    """

    rows = [r for r in results if domain is None or r.domain == domain]
    if len(rows) < 2:
        avg = float(rows[0].score) if rows else 0.0
        return Trend(domain, len(rows), avg, avg, 0.0, False)
    mid = len(rows) // 2
    first = mean(r.score for r in rows[:mid])
    second = mean(r.score for r in rows[mid:])
    change = round(second - first, 2)
    return Trend(domain, len(rows), round(first, 2), round(second, 2), change, change > 0)


def summarize(results: Sequence[AssessmentResult]) -> Dict[str, object]:
    if not results:
        return {"count": 0, "average_score": 0.0, "high_risk_count": 0, "by_domain": {}}
    by_domain: Dict[str, List[int]] = {}
    for r in results:
        by_domain.setdefault(r.domain, []).append(r.score)
    return {
        "count": len(results),
        "average_score": round(mean(r.score for r in results), 1),
        "high_risk_count": sum(1 for r in results if r.risk_level == "high"),
        "by_domain": {d: round(mean(v), 1) for d, v in by_domain.items()},
    }
