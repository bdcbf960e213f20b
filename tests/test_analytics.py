from __future__ import annotations

from neuro_core.analytics import summarize, trend
from neuro_core.scoring import classify_risk
from neuro_core.store import InMemoryResultStore
from neuro_core.types import AssessmentResult


def _result(rid: str, domain: str, score: int) -> AssessmentResult:
    return AssessmentResult(
        id=rid, domain=domain, score=score, risk_level=classify_risk(score),
        recommendations=[], responses={}, duration_ms=0, question_count=1,
    )


def test_store_is_insertion_ordered_per_domain():
    store = InMemoryResultStore()
    for i, (d, s) in enumerate([("motor", 60), ("speech", 90), ("motor", 80)]):
        store.add_result(_result(f"r{i}", d, s))
    assert [r.id for r in store.get_results_by_type("motor")] == ["r0", "r2"]
    assert store.get_latest_result("motor").id == "r2"
    assert store.get_latest_result("behavioral") is None
    assert store.get("r1").domain == "speech"
    assert len(store) == 3


def test_trend_compares_halves():
    rows = [_result(f"r{i}", "cognitive", s) for i, s in enumerate([60, 70, 80, 90])]
    t = trend(rows)
    assert (t.first_half_avg, t.second_half_avg) == (65, 85)
    assert t.change == 20 and t.improving


def test_trend_filters_by_domain_and_handles_single_result():
    rows = [_result("a", "motor", 90), _result("b", "speech", 40)]
    t = trend(rows, "motor")
    assert t.count == 1
    assert t.change == 0 and not t.improving
    assert trend([], "motor").first_half_avg == 0


def test_trend_declining():
    rows = [_result(f"r{i}", "speech", s) for i, s in enumerate([90, 80, 50])]
    t = trend(rows)
    # first half is the single oldest result
    assert t.first_half_avg == 90
    assert t.second_half_avg == 65
    assert not t.improving


def test_summarize():
    rows = [_result("a", "motor", 90), _result("b", "motor", 50), _result("c", "speech", 65)]
    s = summarize(rows)
    assert s["count"] == 3
    assert s["average_score"] == 68.3
    assert s["high_risk_count"] == 2
    assert s["by_domain"] == {"motor": 70.0, "speech": 65.0}
    assert summarize([])["count"] == 0
