from __future__ import annotations

from datetime import timedelta

import pytest

from neuro_core.capture import (
    AudioAnalysis,
    AudioCapture,
    ChoiceCapture,
    DateCapture,
    DrawingCapture,
    ErrorCapture,
    GaitCapture,
    GameCapture,
    Point,
    TextCapture,
    TimedTextCapture,
)
from neuro_core.heuristics import severity_penalty
from neuro_core.scoring import classify_risk, domain_breakdown, round_half_up, score_domain
from tests.conftest import TODAY, responses, steady_motion, tap_capture


ANIMALS = ("dog", "cat", "horse", "lion", "tiger", "zebra", "otter", "eagle", "shark", "whale")


def _full_cognitive():
    return responses(
        ("recall", TextCapture(text="apple, chair, penny")),
        ("countdown", TextCapture(text="100,93,86,79,72")),
        ("orientation", DateCapture(value=TODAY)),
        ("fluency", TimedTextCapture(entries=ANIMALS)),
    )


def test_cognitive_perfect_core_tasks_is_low_risk():
    score = score_domain("cognitive", _full_cognitive())
    assert score >= 90
    assert classify_risk(score) == "low"


def test_cognitive_partial_recall_and_countdown():
    resp = responses(
        ("recall", TextCapture(text="Apple and chair")),
        ("countdown", TextCapture(text="100, 93, 80")),
    )
    parts = domain_breakdown("cognitive", resp)
    assert parts["recall"]["credit"] == pytest.approx(2 / 3)
    assert parts["countdown"]["credit"] == pytest.approx(0.4)
    # (15 * 2/3 + 10 * 0.4) / 25
    assert score_domain("cognitive", resp) == 56


def test_recall_needs_whole_words():
    resp = responses(("recall", TextCapture(text="pineapple, armchair, halfpenny")))
    assert domain_breakdown("cognitive", resp)["recall"]["credit"] == 0
    assert score_domain("cognitive", resp) == 0
    resp = responses(("recall", TextCapture(text="Penny; pineapple")))
    assert domain_breakdown("cognitive", resp)["recall"]["credit"] == pytest.approx(1 / 3)


def test_orientation_on_another_day_scores_zero():
    resp = responses(("orientation", DateCapture(value=TODAY - timedelta(days=1))))
    assert score_domain("cognitive", resp) == 0
    resp = responses(("orientation", DateCapture(value=TODAY)))
    assert score_domain("cognitive", resp) == 100


def test_fluency_caps_at_five_distinct_entries():
    few = responses(("fluency", TimedTextCapture(entries=("dog", "Dog", " cat ", ""))))
    assert score_domain("cognitive", few) == 40
    many = responses(("fluency", TimedTextCapture(entries=ANIMALS)))
    assert score_domain("cognitive", many) == 100


def test_error_responses_leave_denominator_untouched():
    resp = responses(
        ("recall", TextCapture(text="apple chair penny")),
        ("countdown", ErrorCapture(message="permission denied")),
    )
    assert domain_breakdown("cognitive", resp).keys() == {"recall"}
    assert score_domain("cognitive", resp) == 100


def test_games_weighted_independently():
    resp = responses(
        ("recall", TextCapture(text="apple chair penny")),
        ("memory_game", GameCapture(score=50)),
    )
    # (15 * 1.0 + 15 * 0.5) / 30
    assert score_domain("cognitive", resp) == 75


def test_unscored_items_are_ignored():
    resp = responses(("memorize", TextCapture(text="ok")))
    assert score_domain("cognitive", resp) == 0


@pytest.mark.parametrize("domain", ["cognitive", "motor", "speech"])
def test_empty_weighted_domains_score_zero(domain):
    assert score_domain(domain, {}) == 0


def test_empty_behavioral_scores_full():
    assert score_domain("behavioral", {}) == 100


def test_scoring_is_idempotent():
    resp = _full_cognitive()
    first = score_domain("cognitive", resp)
    assert all(score_domain("cognitive", resp) == first for _ in range(3))


def test_motor_tap_only_uses_tap_weight():
    resp = responses(("tap", tap_capture(count=20, duration_sec=5.0, accuracy=0.8)))
    # 4 taps/sec * 5 + 0.8 * 50
    assert score_domain("motor", resp) == 60


def test_motor_tap_rate_contribution_is_capped():
    resp = responses(("tap", tap_capture(count=200, duration_sec=10.0, accuracy=1.0)))
    assert score_domain("motor", resp) == 100


def test_motor_tremor_variance():
    assert score_domain("motor", responses(("tremor", steady_motion()))) == 100
    assert score_domain("motor", responses(("tremor", steady_motion(jitter=4.0)))) == 0


def test_motor_gait_and_drawing():
    gait = GaitCapture(step_length=1.0, step_time=0.7, variability=0.0, steps=10)
    line = DrawingCapture(points=tuple(Point(x=float(i), y=float(i)) for i in range(20)))
    resp = responses(("gait", gait), ("drawing", line))
    parts = domain_breakdown("motor", resp)
    assert parts["gait"]["credit"] == pytest.approx(1.0)
    assert parts["drawing"]["credit"] == pytest.approx(1.0)
    assert score_domain("motor", resp) == 100


def test_motor_all_four_equally_weighted():
    resp = responses(
        ("tremor", steady_motion()),
        ("tap", tap_capture(count=20, duration_sec=5.0, accuracy=0.8)),
        ("drawing", DrawingCapture(points=tuple(Point(x=float(i), y=0.0) for i in range(12)))),
        ("gait", GaitCapture(step_length=1.0, step_time=0.7, variability=0.0)),
    )
    assert score_domain("motor", resp) == 90


def test_short_drawing_contributes_zero():
    resp = responses(("drawing", DrawingCapture(points=(Point(0, 0), Point(1, 1)))))
    assert score_domain("motor", resp) == 0


def test_speech_averages_clarity_and_fluency():
    resp = responses(
        ("reading", AudioCapture(duration=30, analysis=AudioAnalysis(clarity=80, fluency=90))),
        ("naming", AudioCapture(duration=30, analysis=AudioAnalysis(clarity=60, fluency=70))),
    )
    assert score_domain("speech", resp) == 75


def test_behavioral_all_severe_floors_at_zero():
    resp = responses(
        ("mood", ChoiceCapture(value="Nearly every day")),
        ("anxiety", ChoiceCapture(value="Nearly every day")),
        ("sleep", ChoiceCapture(value="Poor")),
        ("memory_concern", ChoiceCapture(value="Very much")),
        ("daily_activities", ChoiceCapture(value="Severe difficulty")),
    )
    score = score_domain("behavioral", resp)
    assert score == 0
    assert classify_risk(score) == "high"


def test_behavioral_mixed_answers():
    resp = responses(
        ("mood", ChoiceCapture(value="Several days")),
        ("anxiety", ChoiceCapture(value="Not at all")),
        ("sleep", ChoiceCapture(value="Fair")),
        ("memory_concern", ChoiceCapture(value="Moderately")),
        ("daily_activities", ChoiceCapture(value="Mild difficulty")),
    )
    assert score_domain("behavioral", resp) == 70


def test_behavioral_counts_only_most_severe_tier_per_answer():
    resp = responses(("notes", TextCapture(text="mild most days, severe on some")))
    assert score_domain("behavioral", resp) == 80


def test_severity_keywords_match_at_word_start():
    assert severity_penalty("Fair") == 10
    assert severity_penalty("fairly rested") == 10
    assert severity_penalty("Moderately") == 10
    assert severity_penalty("that seems unfair") == 0
    assert severity_penalty("unmoderated forum") == 0


def test_behavioral_ignores_error_responses():
    resp = responses(("mood", ErrorCapture(message="severe failure")))
    assert score_domain("behavioral", resp) == 100


@pytest.mark.parametrize(
    "score,expected",
    [(100, "low"), (85, "low"), (84, "moderate"), (70, "moderate"), (69, "high"), (0, "high")],
)
def test_risk_boundaries(score, expected):
    assert classify_risk(score) == expected


def test_round_half_up():
    assert round_half_up(84.5) == 85
    assert round_half_up(2.5) == 3
    assert round_half_up(69.49) == 69


def test_unknown_domain_rejected():
    with pytest.raises(ValueError):
        score_domain("vision", {})
