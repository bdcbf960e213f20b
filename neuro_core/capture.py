"""Raw capture payloads produced by the per-modality collaborators.

Every capture is a frozen dataclass tagged with a ``kind`` class attribute so
scoring can dispatch on the concrete type. ``parse_capture`` turns the JSON
shape the host sends into one of these variants.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Tuple, Union

from .errors import ValidationError


@dataclass(frozen=True)
class ContinueCapture:
    kind: ClassVar[str] = "continue"


@dataclass(frozen=True)
class TextCapture:
    kind: ClassVar[str] = "text"
    text: str


@dataclass(frozen=True)
class TimedTextCapture:
    kind: ClassVar[str] = "timed_text"
    entries: Tuple[str, ...]


@dataclass(frozen=True)
class DateCapture:
    kind: ClassVar[str] = "date"
    value: date


@dataclass(frozen=True)
class ChoiceCapture:
    kind: ClassVar[str] = "choice"
    value: str


@dataclass(frozen=True)
class MotionSample:
    x: float; y: float; z: float; timestamp: float


@dataclass(frozen=True)
class MotionCapture:
    kind: ClassVar[str] = "motion"
    samples: Tuple[MotionSample, ...]


@dataclass(frozen=True)
class Tap:
    timestamp: float; x: float; y: float; accuracy: float


@dataclass(frozen=True)
class TapCapture:
    kind: ClassVar[str] = "tap"
    taps: Tuple[Tap, ...]
    duration_sec: Optional[float] = None


@dataclass(frozen=True)
class Point:
    x: float; y: float


@dataclass(frozen=True)
class DrawingCapture:
    kind: ClassVar[str] = "drawing"
    points: Tuple[Point, ...]
    strokes: Tuple[Tuple[Point, ...], ...] = ()
    total_time: float = 0.0
    path_length: float = 0.0


@dataclass(frozen=True)
class AudioAnalysis:
    volume: float = 0.0
    clarity: float = 0.0
    fluency: float = 0.0
    pauses: int = 0


@dataclass(frozen=True)
class AudioCapture:
    kind: ClassVar[str] = "audio"
    duration: float
    sample_rate: int = 44100
    analysis: AudioAnalysis = field(default_factory=AudioAnalysis)


@dataclass(frozen=True)
class GaitCapture:
    kind: ClassVar[str] = "gait"
    step_length: float
    step_time: float
    variability: float
    steps: int = 0


@dataclass(frozen=True)
class ReactionCapture:
    kind: ClassVar[str] = "reaction"
    reaction_times_ms: Tuple[float, ...]
    hits: int
    misses: int = 0


@dataclass(frozen=True)
class SpatialCapture:
    kind: ClassVar[str] = "spatial"
    correct: int
    total: int


@dataclass(frozen=True)
class StroopCapture:
    kind: ClassVar[str] = "stroop"
    correct: int
    total: int
    mean_rt_ms: float = 0.0


@dataclass(frozen=True)
class GameCapture:
    kind: ClassVar[str] = "game"
    score: float
    level: int = 1
    moves: int = 0


@dataclass(frozen=True)
class ErrorCapture:
    kind: ClassVar[str] = "error"
    message: str


RawCapture = Union[
    ContinueCapture, TextCapture, TimedTextCapture, DateCapture, ChoiceCapture,
    MotionCapture, TapCapture, DrawingCapture, AudioCapture, GaitCapture,
    ReactionCapture, SpatialCapture, StroopCapture, GameCapture, ErrorCapture,
]

# item kind -> capture tag the collaborator for that kind emits
ITEM_CAPTURE_KIND: Dict[str, str] = {
    "continue": "continue",
    "text": "text",
    "date": "date",
    "timed_text": "timed_text",
    "radio": "choice",
    "motion": "motion",
    "tap": "tap",
    "drawing": "drawing",
    "audio": "audio",
    "gait": "gait",
    "reaction_time": "reaction",
    "spatial_memory": "spatial",
    "executive_function": "stroop",
    "memory_game": "game",
    "number_sequence": "game",
    "word_association": "game",
    "pattern_recognition": "game",
}


def capture_kind_for(item_kind: str) -> str:
    return ITEM_CAPTURE_KIND.get(item_kind, item_kind)


def _points(raw: Any) -> Tuple[Point, ...]:
    return tuple(Point(x=float(p["x"]), y=float(p["y"])) for p in raw or [])


def _motion(p: Mapping[str, Any]) -> MotionCapture:
    out = []
    for s in p.get("samples") or []:
        acc = s.get("acceleration", s)
        out.append(MotionSample(x=float(acc["x"]), y=float(acc["y"]), z=float(acc["z"]),
                                timestamp=float(s.get("timestamp", 0.0))))
    return MotionCapture(samples=tuple(out))


def _tap(p: Mapping[str, Any]) -> TapCapture:
    taps = tuple(
        Tap(timestamp=float(t["timestamp"]), x=float(t.get("x", 0.0)), y=float(t.get("y", 0.0)),
            accuracy=float(t.get("accuracy", 0.0)))
        for t in p.get("taps") or []
    )
    dur = p.get("duration_sec")
    return TapCapture(taps=taps, duration_sec=(float(dur) if dur is not None else None))


def _drawing(p: Mapping[str, Any]) -> DrawingCapture:
    return DrawingCapture(
        points=_points(p.get("points")),
        strokes=tuple(_points(s) for s in p.get("strokes") or []),
        total_time=float(p.get("total_time", 0.0)),
        path_length=float(p.get("path_length", 0.0)),
    )


def _audio(p: Mapping[str, Any]) -> AudioCapture:
    a = p.get("analysis") or {}
    return AudioCapture(
        duration=float(p["duration"]),
        sample_rate=int(p.get("sample_rate", 44100)),
        analysis=AudioAnalysis(
            volume=float(a.get("volume", 0.0)),
            clarity=float(a.get("clarity", 0.0)),
            fluency=float(a.get("fluency", 0.0)),
            pauses=int(a.get("pauses", 0)),
        ),
    )


_PARSERS: Dict[str, Callable[[Mapping[str, Any]], Any]] = {
    "continue": lambda p: ContinueCapture(),
    "text": lambda p: TextCapture(text=str(p.get("text") or "")),
    "timed_text": lambda p: TimedTextCapture(entries=tuple(str(e) for e in p.get("entries") or [])),
    "date": lambda p: DateCapture(value=date.fromisoformat(str(p["value"]))),
    "choice": lambda p: ChoiceCapture(value=str(p.get("value") or "")),
    "motion": _motion,
    "tap": _tap,
    "drawing": _drawing,
    "audio": _audio,
    "gait": lambda p: GaitCapture(
        step_length=float(p["step_length"]), step_time=float(p["step_time"]),
        variability=float(p["variability"]), steps=int(p.get("steps", 0)),
    ),
    "reaction": lambda p: ReactionCapture(
        reaction_times_ms=tuple(float(v) for v in p.get("reaction_times_ms") or []),
        hits=int(p.get("hits", 0)), misses=int(p.get("misses", 0)),
    ),
    "spatial": lambda p: SpatialCapture(correct=int(p["correct"]), total=int(p["total"])),
    "stroop": lambda p: StroopCapture(
        correct=int(p["correct"]), total=int(p["total"]), mean_rt_ms=float(p.get("mean_rt_ms", 0.0)),
    ),
    "game": lambda p: GameCapture(
        score=float(p["score"]), level=int(p.get("level", 1)), moves=int(p.get("moves", 0)),
    ),
    "error": lambda p: ErrorCapture(message=str(p.get("message") or "capture failed")),
}


def parse_capture(kind: str, payload: Optional[Mapping[str, Any]]) -> RawCapture:
    """Build a capture variant from its JSON shape.

    ``kind`` may be a capture tag or an item kind. Missing or malformed fields
    raise ``ValidationError`` so the host can show the message list.
    """

    tag = capture_kind_for(kind)
    parser = _PARSERS.get(tag)
    if parser is None:
        raise ValidationError([f"unknown capture kind: {kind}"])
    try:
        return parser(payload or {})
    except KeyError as e:
        raise ValidationError([f"{tag} capture is missing field {e.args[0]!r}"]) from e
    except (TypeError, ValueError) as e:
        raise ValidationError([f"{tag} capture is malformed: {e}"]) from e


def capture_to_dict(capture: RawCapture) -> Dict[str, Any]:
    d = asdict(capture)
    if isinstance(capture, DateCapture):
        d["value"] = capture.value.isoformat()
    d["kind"] = capture.kind
    return d
