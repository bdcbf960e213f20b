# autoplay.py
from __future__ import annotations
import argparse, datetime, json, math, os, random
from typing import Optional
from neuro_core.capture import (
    AudioAnalysis, AudioCapture, ChoiceCapture, ContinueCapture, DateCapture, DrawingCapture,
    GaitCapture, GameCapture, MotionCapture, MotionSample, Point, ReactionCapture, RawCapture,
    SpatialCapture, StroopCapture, Tap, TapCapture, TextCapture, TimedTextCapture,
)
from neuro_core.config import DOMAINS, ADAPTIVE_FAMILIES
from neuro_core.engine import AssessmentEngine
from neuro_core.generator import ProceduralItemGenerator
from neuro_core.types import TestItem

ANIMALS = ["dog", "cat", "horse", "lion", "tiger", "zebra", "otter", "eagle", "shark", "whale"]

# behavioral answers per profile, picked by option position
_RADIO_PICK = {"healthy": 0, "impaired": -1}

def _motion(rng: random.Random, jitter: float) -> MotionCapture:
    return MotionCapture(samples=tuple(
        MotionSample(x=rng.gauss(0, jitter), y=rng.gauss(0, jitter), z=9.81 + rng.gauss(0, jitter), timestamp=i * 33.0)
        for i in range(60)
    ))

def _spiral(turn_noise: float, rng: random.Random) -> DrawingCapture:
    pts = []
    for i in range(80):
        a = i * 0.2 + rng.uniform(-turn_noise, turn_noise)
        pts.append(Point(x=200 + i * math.cos(a), y=200 + i * math.sin(a)))
    return DrawingCapture(points=tuple(pts), strokes=(tuple(pts),), total_time=8.0, path_length=float(len(pts)))

def _capture_for(item: TestItem, profile: str, rng: random.Random) -> RawCapture:
    ok = profile == "healthy"
    k = item.kind
    if k == "continue":
        return ContinueCapture()
    if k == "text":
        if item.id == "countdown":
            return TextCapture(text="100, 93, 86, 79, 72" if ok else "100, 90, 80")
        if item.id == "recall":
            return TextCapture(text="apple, chair, penny" if ok else "apple")
        return TextCapture(text="I walked to the shop and cooked dinner." if ok else "not sure")
    if k == "date":
        today = datetime.date.today()
        return DateCapture(value=today if ok else today - datetime.timedelta(days=3))
    if k == "timed_text":
        return TimedTextCapture(entries=tuple(ANIMALS if ok else ANIMALS[:3]))
    if k == "radio":
        opts = [str(o) for o in item.payload.get("options") or []]
        if "correct_answer" in item.payload:
            ans = str(item.payload["correct_answer"])
            if not ok and rng.random() < 0.7:
                ans = next(o for o in opts if o != ans)
            return ChoiceCapture(value=ans)
        return ChoiceCapture(value=opts[_RADIO_PICK[profile]])
    if k == "motion":
        return _motion(rng, 0.02 if ok else 0.4)
    if k == "tap":
        n = 80 if ok else 30
        return TapCapture(taps=tuple(Tap(timestamp=i * 250.0, x=0, y=0, accuracy=0.95 if ok else 0.5) for i in range(n)),
                          duration_sec=20.0)
    if k == "drawing":
        return _spiral(0.01 if ok else 0.6, rng)
    if k == "gait":
        return GaitCapture(step_length=0.7, step_time=0.7, variability=0.05, steps=10) if ok \
            else GaitCapture(step_length=0.3, step_time=1.2, variability=0.5, steps=10)
    if k == "audio":
        a = AudioAnalysis(volume=60, clarity=92, fluency=90, pauses=2) if ok \
            else AudioAnalysis(volume=40, clarity=55, fluency=50, pauses=12)
        return AudioCapture(duration=float(item.time_limit_seconds or 30), analysis=a)
    if k == "reaction_time":
        rts = tuple(rng.uniform(250, 350) if ok else rng.uniform(700, 950) for _ in range(10))
        return ReactionCapture(reaction_times_ms=rts, hits=10 if ok else 6, misses=0 if ok else 4)
    if k == "spatial_memory":
        n = int(item.payload.get("sequence_length", 3))
        return SpatialCapture(correct=n if ok else max(0, n // 3), total=n)
    if k == "executive_function":
        return StroopCapture(correct=19 if ok else 9, total=20, mean_rt_ms=700 if ok else 1400)
    return GameCapture(score=92 if ok else 45)

def run(domain: str, profile: str, seed: Optional[int], adaptive: bool, family: str) -> dict:
    rng = random.Random(seed or 1234)
    engine = AssessmentEngine(generator=ProceduralItemGenerator(seed=seed))
    sess = engine.start_session(domain, adaptive=adaptive, family=family)
    answered = 0
    while not sess.finished:
        it = sess.current_item()
        if it is None: break
        sess.submit(_capture_for(it, profile, rng), item_id=it.id); answered += 1
    if answered <= 0 or sess.result is None: raise RuntimeError("Driver answered 0 items.")
    return sess.result.to_dict()

def main():
    ap = argparse.ArgumentParser(description="Run a simulated screening session end to end.")
    ap.add_argument("--domain", choices=list(DOMAINS), default="cognitive")
    ap.add_argument("--profile", choices=["healthy", "impaired"], default="healthy")
    ap.add_argument("--adaptive", action="store_true")
    ap.add_argument("--family", choices=list(ADAPTIVE_FAMILIES), default="cognitive")
    ap.add_argument("--seed", type=int, default=1337)
    ap.add_argument("--out", default=None, help="write the result JSON here instead of stdout")
    a = ap.parse_args()
    os.environ["RUN_ID"] = datetime.datetime.now().strftime("auto_%Y%m%d_%H%M%S")
    res = run(a.domain, a.profile, a.seed, a.adaptive, a.family)
    text = json.dumps(res, indent=2, default=str)
    if a.out:
        with open(a.out, "w", encoding="utf-8") as f: f.write(text + "\n")
        print(f"Result: {a.out}  score={res['score']} risk={res['risk_level']}")
    else:
        print(text)

if __name__ == "__main__":
    main()
