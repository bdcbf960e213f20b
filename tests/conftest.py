from __future__ import annotations

from datetime import date, datetime

import pytest

from neuro_core.capture import (
    MotionCapture,
    MotionSample,
    Tap,
    TapCapture,
)
from neuro_core.engine import AssessmentEngine
from neuro_core.generator import ProceduralItemGenerator
from neuro_core.store import InMemoryResultStore
from neuro_core.types import Response, TestItem


TODAY = date(2024, 5, 14)
NOON_MS = int(datetime(2024, 5, 14, 12, 0, 0).timestamp() * 1000)

SEVERE_OPTIONS = ["Not at all", "Several days", "Nearly every day"]


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, start_ms: int = NOON_MS):
        self.now = int(start_ms)

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += int(ms)


def responses(*pairs, at_ms: int = NOON_MS) -> dict[str, Response]:
    return {iid: Response(item_id=iid, capture=cap, recorded_at_epoch_ms=at_ms) for iid, cap in pairs}


def build_items(
    n: int = 3,
    *,
    domain: str = "behavioral",
    optional_at: tuple[int, ...] = (),
    time_limit: int | None = None,
) -> list[TestItem]:
    """Small radio battery for sequencing tests."""

    return [
        TestItem(
            id=f"q{idx}",
            domain=domain,
            kind="radio",
            time_limit_seconds=time_limit,
            payload={"prompt": f"Question {idx}", "options": list(SEVERE_OPTIONS)},
            optional=idx in optional_at,
        )
        for idx in range(n)
    ]


def tap_capture(count: int = 20, duration_sec: float = 5.0, accuracy: float = 0.8) -> TapCapture:
    return TapCapture(
        taps=tuple(Tap(timestamp=i * 100.0, x=10.0, y=10.0, accuracy=accuracy) for i in range(count)),
        duration_sec=duration_sec,
    )


def steady_motion(count: int = 30, jitter: float = 0.0) -> MotionCapture:
    return MotionCapture(
        samples=tuple(
            MotionSample(x=jitter * (i % 2), y=0.0, z=9.81, timestamp=i * 33.0) for i in range(count)
        )
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryResultStore:
    return InMemoryResultStore()


@pytest.fixture
def engine(store, clock) -> AssessmentEngine:
    return AssessmentEngine(store, clock=clock, generator=ProceduralItemGenerator(seed=7))
