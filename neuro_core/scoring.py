from __future__ import annotations
from typing import Dict, Iterable, Mapping, Optional, Tuple
from datetime import date, datetime
import math, re

from .capture import (
    AudioCapture, ChoiceCapture, DateCapture, DrawingCapture, GaitCapture, GameCapture,
    MotionCapture, ReactionCapture, SpatialCapture, StroopCapture, TapCapture, TextCapture,
    TimedTextCapture, RawCapture,
)
from .config import (
    BEHAVIORAL_BASE,
    COGNITIVE_WEIGHTS,
    COUNTDOWN_EXPECTED,
    FLUENCY_FULL_AT,
    GAIT_TARGET_STEP_SEC,
    MOTOR_WEIGHTS,
    RECALL_TARGETS,
    RISK_LOW_MIN,
    RISK_MODERATE_MIN,
    SPEECH_WEIGHTS,
    TAP_RATE_CAP,
)
from .features import clamp01, drawing_smoothness, reaction_summary, tap_performance, tremor_index
from .heuristics import severity_penalty
from .types import PerformanceSample, Response, TestItem

_SPLIT_RX = re.compile(r"[\s,;]+")


def round_half_up(x: float) -> int:
    return int(math.floor(float(x) + 0.5))


def classify_risk(score: float) -> str:
    s = float(score)
    if s >= RISK_LOW_MIN: return "low"
    if s >= RISK_MODERATE_MIN: return "moderate"
    return "high"


def _tokens(text: str) -> list[str]:
    return [t for t in _SPLIT_RX.split((text or "").lower()) if t]


def _recall(capture: RawCapture) -> Optional[float]:
    if not isinstance(capture, TextCapture): return None
    # whole words only: "pineapple" is not "apple"
    toks = set(_tokens(capture.text))
    found = sum(1 for target in RECALL_TARGETS if target in toks)
    return found / len(RECALL_TARGETS)


def _countdown(capture: RawCapture) -> Optional[float]:
    if not isinstance(capture, TextCapture): return None
    hits = 0
    got = _tokens(capture.text)
    for i, expected in enumerate(COUNTDOWN_EXPECTED):
        if i < len(got) and got[i] == str(expected):
            hits += 1
    return hits / len(COUNTDOWN_EXPECTED)


def _orientation(capture: RawCapture, recorded_at_ms: int, today: Optional[date]) -> Optional[float]:
    if not isinstance(capture, DateCapture): return None
    ref = today or datetime.fromtimestamp(recorded_at_ms / 1000.0).date()
    return 1.0 if capture.value == ref else 0.0


def _fluency(capture: RawCapture) -> Optional[float]:
    if isinstance(capture, TimedTextCapture):
        entries = capture.entries
    elif isinstance(capture, TextCapture):
        entries = tuple(_tokens(capture.text))
    else:
        return None
    distinct = {e.strip().lower() for e in entries if e and e.strip()}
    return min(len(distinct) / float(FLUENCY_FULL_AT), 1.0)


def _gait_score(c: GaitCapture) -> float:
    raw = (c.step_length * 20.0
           + (1.0 - abs(c.step_time - GAIT_TARGET_STEP_SEC)) * 30.0
           + (1.0 - c.variability) * 50.0)
    return max(0.0, min(100.0, raw))


def _subscore(capture: RawCapture) -> Optional[Tuple[float, float]]:
    """(score 0..100, accuracy 0..1) for performance-style captures, else None."""
    if isinstance(capture, GameCapture):
        s = max(0.0, min(100.0, capture.score))
        return s, s / 100.0
    if isinstance(capture, ReactionCapture):
        _, acc, s = reaction_summary(capture)
        return s, acc
    if isinstance(capture, (SpatialCapture, StroopCapture)):
        acc = clamp01(capture.correct / capture.total) if capture.total > 0 else 0.0
        return 100.0 * acc, acc
    if isinstance(capture, MotionCapture):
        idx = tremor_index(capture)
        if idx is None: return None
        s = max(0.0, 100.0 - idx)
        return s, s / 100.0
    if isinstance(capture, TapCapture):
        tps, acc = tap_performance(capture)
        return min(TAP_RATE_CAP, tps * 5.0) + acc * 50.0, acc
    if isinstance(capture, DrawingCapture):
        s = drawing_smoothness(capture)
        return s, s / 100.0
    if isinstance(capture, GaitCapture):
        s = _gait_score(capture)
        return s, s / 100.0
    if isinstance(capture, AudioCapture):
        a = capture.analysis
        s = max(0.0, min(100.0, (a.clarity + a.fluency) / 2.0))
        return s, s / 100.0
    return None


def _cognitive_credit(item_id: str, r: Response, today: Optional[date]) -> Optional[float]:
    c = r.capture
    if item_id == "recall": return _recall(c)
    if item_id == "countdown": return _countdown(c)
    if item_id == "orientation": return _orientation(c, r.recorded_at_epoch_ms, today)
    if item_id == "fluency": return _fluency(c)
    sub = _subscore(c)
    return None if sub is None else clamp01(sub[0] / 100.0)


def _motor_credit(item_id: str, r: Response, today: Optional[date]) -> Optional[float]:
    expected = {"tremor": MotionCapture, "tap": TapCapture, "drawing": DrawingCapture, "gait": GaitCapture}
    if not isinstance(r.capture, expected.get(item_id, ())): return None
    sub = _subscore(r.capture)
    return None if sub is None else clamp01(sub[0] / 100.0)


def _speech_credit(item_id: str, r: Response, today: Optional[date]) -> Optional[float]:
    if not isinstance(r.capture, AudioCapture): return None
    sub = _subscore(r.capture)
    return None if sub is None else clamp01(sub[0] / 100.0)


_WEIGHTED = {
    "cognitive": (COGNITIVE_WEIGHTS, _cognitive_credit),
    "motor": (MOTOR_WEIGHTS, _motor_credit),
    "speech": (SPEECH_WEIGHTS, _speech_credit),
}


def domain_breakdown(
    domain: str, responses: Mapping[str, Response], today: Optional[date] = None
) -> Dict[str, Dict[str, float]]:
    """Per sub-task credit (0..1) and weight for the weighted domains.

    Error responses and sub-tasks without a usable capture are left out, so
    they touch neither the numerator nor the denominator.
    """

    weights, credit_fn = _WEIGHTED[domain]
    out: Dict[str, Dict[str, float]] = {}
    for iid, r in responses.items():
        w = weights.get(iid)
        if w is None or r.is_error:
            continue
        credit = credit_fn(iid, r, today)
        if credit is None:
            continue
        out[iid] = {"credit": float(credit), "weight": float(w)}
    return out


def _weighted_score(parts: Dict[str, Dict[str, float]]) -> int:
    den = sum(p["weight"] for p in parts.values())
    if den <= 0:
        return 0
    num = sum(p["weight"] * p["credit"] for p in parts.values())
    return max(0, min(100, round_half_up(100.0 * num / den)))


def score_behavioral(responses: Mapping[str, Response]) -> int:
    score = BEHAVIORAL_BASE
    for r in responses.values():
        c = r.capture
        if isinstance(c, TextCapture):
            score -= severity_penalty(c.text)
        elif isinstance(c, ChoiceCapture):
            score -= severity_penalty(c.value)
        elif isinstance(c, TimedTextCapture):
            score -= severity_penalty(" ".join(c.entries))
    return max(0, min(100, score))


def score_domain(domain: str, responses: Mapping[str, Response], today: Optional[date] = None) -> int:
    """
    Reduce a session's responses into a 0..100 domain score.
    Pure: the same response map always yields the same score.
    """
    if domain == "behavioral":
        return score_behavioral(responses)
    if domain not in _WEIGHTED:
        raise ValueError(f"unknown domain: {domain}")
    return _weighted_score(domain_breakdown(domain, responses, today))


def performance_sample(item: TestItem, capture: RawCapture, time_spent_ms: int = 0) -> Optional[PerformanceSample]:
    if capture.kind == "error":
        return None
    if isinstance(capture, ChoiceCapture) and "correct_answer" in item.payload:
        ok = capture.value.strip() == str(item.payload["correct_answer"]).strip()
        return PerformanceSample(score=100.0 if ok else 0.0, accuracy=1.0 if ok else 0.0,
                                 time_spent_ms=int(time_spent_ms))
    sub = _subscore(capture)
    if sub is None:
        return None
    return PerformanceSample(score=float(sub[0]), accuracy=float(sub[1]), time_spent_ms=int(time_spent_ms))


def score_adaptive(items: Iterable[TestItem], responses: Mapping[str, Response]) -> int:
    """Mean performance score of the non-error items of an adaptive run."""
    scores = []
    for it in items:
        r = responses.get(it.id)
        if r is None:
            continue
        sample = performance_sample(it, r.capture)
        if sample is not None:
            scores.append(sample.score)
    if not scores:
        return 0
    return max(0, min(100, round_half_up(sum(scores) / len(scores))))
