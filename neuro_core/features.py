# neuro_core/features.py
from __future__ import annotations
import math
from typing import Optional, Sequence, Tuple
from statistics import mean, pvariance

from .capture import MotionCapture, TapCapture, DrawingCapture, ReactionCapture, Point
from .config import TREMOR_MIN_SAMPLES, REACTION_FAST_MS, REACTION_SLOW_MS


def clamp01(x: float) -> float:
    try:
        xf = float(x)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(xf): return 0.0
    if xf < 0.0: return 0.0
    if xf > 1.0: return 1.0
    return xf


def tremor_index(capture: MotionCapture) -> Optional[float]:
    """0..100 tremor magnitude from the summed per-axis acceleration variance."""
    s = capture.samples
    if len(s) < TREMOR_MIN_SAMPLES:
        return None
    total = pvariance([p.x for p in s]) + pvariance([p.y for p in s]) + pvariance([p.z for p in s])
    return min(total * 100.0, 100.0)


def tap_performance(capture: TapCapture) -> Tuple[float, float]:
    """Return (taps per second, mean hit accuracy in 0..1)."""
    taps = capture.taps
    if not taps:
        return 0.0, 0.0
    dur = capture.duration_sec
    if dur is None:
        dur = (taps[-1].timestamp - taps[0].timestamp) / 1000.0
    tps = len(taps) / dur if dur and dur > 0 else 0.0
    acc = clamp01(mean(t.accuracy for t in taps))
    return tps, acc


def _heading(a: Point, b: Point) -> float:
    return math.atan2(b.y - a.y, b.x - a.x)


def heading_change(points: Sequence[Point]) -> float:
    total = 0.0
    for i in range(1, len(points) - 1):
        d = _heading(points[i], points[i + 1]) - _heading(points[i - 1], points[i])
        # wrap into [-pi, pi] so a crossing of the atan2 branch cut is not a full turn
        d = (d + math.pi) % (2 * math.pi) - math.pi
        total += abs(d)
    return total


def drawing_smoothness(capture: DrawingCapture) -> float:
    pts = capture.points
    if len(pts) <= 3:
        return 0.0
    return max(0.0, 100.0 - (heading_change(pts) / len(pts)) * 50.0)


def reaction_summary(capture: ReactionCapture) -> Tuple[float, float, float]:
    """Return (mean reaction ms, hit accuracy 0..1, score 0..100)."""
    attempts = capture.hits + capture.misses
    acc = clamp01(capture.hits / attempts) if attempts > 0 else 0.0
    if not capture.reaction_times_ms:
        return 0.0, acc, 100.0 * 0.5 * acc
    avg = mean(capture.reaction_times_ms)
    span = max(REACTION_SLOW_MS - REACTION_FAST_MS, 1.0)
    speed = clamp01((REACTION_SLOW_MS - avg) / span)
    return avg, acc, 100.0 * (0.5 * acc + 0.5 * speed)
