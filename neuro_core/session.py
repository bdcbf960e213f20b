from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging

from .config import DEFAULT_ITEM_SECONDS
from .sequencer import TestSequencer
from .types import SessionProgress, SessionState

log = logging.getLogger(__name__)


@dataclass
class Countdown:
    key: str
    remaining_seconds: float
    on_expire: Callable[[], None]
    fired: bool = False


class Scheduler:
    """Cooperative countdowns driven by explicit ``tick`` calls.

    Nothing here reads a wall clock; the host (or a test) decides how much
    time each tick represents.
    """

    def __init__(self) -> None:
        self._timers: Dict[str, Countdown] = {}

    def schedule(self, key: str, seconds: float, on_expire: Callable[[], None]) -> Countdown:
        cd = Countdown(key=key, remaining_seconds=max(0.0, float(seconds)), on_expire=on_expire)
        self._timers[key] = cd
        return cd

    def cancel(self, key: str) -> None:
        self._timers.pop(key, None)

    def remaining(self, key: str) -> Optional[float]:
        cd = self._timers.get(key)
        return None if cd is None else cd.remaining_seconds

    def tick(self, seconds: float = 1.0) -> List[str]:
        """Advance every countdown; fire and drop the ones that reach zero."""
        fired: List[str] = []
        for key, cd in list(self._timers.items()):
            cd.remaining_seconds = max(0.0, cd.remaining_seconds - float(seconds))
            if cd.remaining_seconds <= 0.0 and not cd.fired:
                cd.fired = True
                self._timers.pop(key, None)
                fired.append(key)
                cd.on_expire()
        return fired


class SessionController:
    ITEM_TIMER = "item"

    def __init__(self, state: SessionState, sequencer: TestSequencer, mode: str = "battery"):
        self.state = state
        self.sequencer = sequencer
        self.mode = mode
        self.scheduler = Scheduler()

    def elapsed_seconds(self, now_ms: int) -> float:
        return max(0, int(now_ms) - self.state.start_epoch_ms) / 1000.0

    def estimated_remaining_seconds(self) -> int:
        seq = self.sequencer
        total = 0
        for idx in range(seq.index, seq.total_items):
            limit = seq.items[idx].time_limit_seconds if idx < len(seq.items) else None
            total += int(limit) if limit else DEFAULT_ITEM_SECONDS
        return total

    def completion_rate(self) -> float:
        total = self.sequencer.total_items
        return len(self.state.completed_indices) / total if total else 0.0

    def start_item_timer(self, on_expire: Callable[[], None], seconds: Optional[float] = None) -> Optional[float]:
        item = self.sequencer.current_item()
        if item is None:
            return None
        secs = seconds if seconds is not None else item.time_limit_seconds
        if not secs:
            return None
        self.scheduler.schedule(self.ITEM_TIMER, float(secs), on_expire)
        log.debug("timer %ss started for %s", secs, item.id)
        return float(secs)

    def stop_item_timer(self) -> None:
        self.scheduler.cancel(self.ITEM_TIMER)

    def tick(self, seconds: float = 1.0) -> bool:
        return self.ITEM_TIMER in self.scheduler.tick(seconds)

    def progress(self, now_ms: int, difficulty_level: Optional[int] = None) -> SessionProgress:
        return SessionProgress(
            session_id=self.state.session_id,
            domain=self.state.domain,
            mode=self.mode,
            current_item_index=self.state.current_item_index,
            total_items=self.sequencer.total_items,
            completed_indices=list(self.state.completed_indices),
            skipped_indices=list(self.state.skipped_indices),
            completion_rate=self.completion_rate(),
            elapsed_seconds=self.elapsed_seconds(now_ms),
            estimated_remaining_seconds=self.estimated_remaining_seconds(),
            time_remaining_seconds=self.scheduler.remaining(self.ITEM_TIMER),
            difficulty_level=difficulty_level,
        )
