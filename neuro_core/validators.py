from __future__ import annotations
from datetime import date
from typing import List, Optional
from .capture import (
    AudioCapture, ChoiceCapture, DateCapture, DrawingCapture, MotionCapture, RawCapture,
    TapCapture, TextCapture, TimedTextCapture, capture_kind_for,
)
from .config import (
    AUDIO_MIN_SECONDS, DATE_WINDOW_DAYS, DRAWING_MIN_POINTS, MOTION_MIN_SAMPLES,
    TAP_MIN_TAPS, TEXT_MAX_LENGTH, TIMED_TEXT_MIN_ITEMS,
)
from .errors import ValidationError
from .types import TestItem

def check(item: TestItem, capture: RawCapture, today: Optional[date] = None) -> List[str]:
    """Return human-readable problems with ``capture`` for ``item``; empty means valid."""
    if capture.kind == "error":
        return []
    expected = capture_kind_for(item.kind)
    if capture.kind != expected:
        return [f"{item.id} expects a {expected} response, got {capture.kind}"]
    errs: List[str] = []
    if isinstance(capture, TextCapture):
        t = capture.text.strip()
        min_len = int(item.payload.get("min_length", 0) or 0)
        if not t: errs.append("This field is required")
        elif len(t) < min_len: errs.append(f"Please enter at least {min_len} characters")
        if len(t) > TEXT_MAX_LENGTH: errs.append(f"Response must be {TEXT_MAX_LENGTH} characters or fewer")
    elif isinstance(capture, DateCapture):
        ref = today or date.today()
        if abs((capture.value - ref).days) > DATE_WINDOW_DAYS:
            errs.append("Please enter a date close to today")
    elif isinstance(capture, TimedTextCapture):
        n = len([e for e in capture.entries if e.strip()])
        if n < TIMED_TEXT_MIN_ITEMS: errs.append(f"Please enter at least {TIMED_TEXT_MIN_ITEMS} items")
    elif isinstance(capture, ChoiceCapture):
        if not capture.value.strip(): errs.append("Please select an option")
        else:
            opts = item.payload.get("options")
            if opts and capture.value not in [str(o) for o in opts]:
                errs.append(f"'{capture.value}' is not one of the offered options")
    elif isinstance(capture, MotionCapture):
        if len(capture.samples) < MOTION_MIN_SAMPLES: errs.append("Insufficient motion data collected")
    elif isinstance(capture, TapCapture):
        if len(capture.taps) < TAP_MIN_TAPS: errs.append(f"Please tap at least {TAP_MIN_TAPS} times")
    elif isinstance(capture, DrawingCapture):
        if len(capture.points) < DRAWING_MIN_POINTS: errs.append("Drawing is too short")
    elif isinstance(capture, AudioCapture):
        if capture.duration < AUDIO_MIN_SECONDS: errs.append(f"Recording must be at least {AUDIO_MIN_SECONDS:g} seconds")
    return errs

def validate(item: TestItem, capture: RawCapture, today: Optional[date] = None) -> None:
    errs = check(item, capture, today)
    if errs:
        raise ValidationError(errs)
