# neuro_core/difficulty.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import logging, math

from .config import ADAPTIVE_MAX_ITEMS, ADAPTIVE_START_LEVEL, LEVEL_MAX, LEVEL_MIN
from .types import DifficultyState, PerformanceSample

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DifficultyTier:
    level: int; name: str; multiplier: float


DIFFICULTY_TIERS: tuple[DifficultyTier, ...] = (
    DifficultyTier(1, "Very Easy", 0.5),
    DifficultyTier(2, "Easy", 0.7),
    DifficultyTier(3, "Below Average", 0.8),
    DifficultyTier(4, "Average", 1.0),
    DifficultyTier(5, "Above Average", 1.2),
    DifficultyTier(6, "Hard", 1.5),
    DifficultyTier(7, "Very Hard", 1.8),
    DifficultyTier(8, "Expert", 2.0),
    DifficultyTier(9, "Master", 2.5),
    DifficultyTier(10, "Legendary", 3.0),
)


def tier_for(level: int) -> DifficultyTier:
    lvl = clamp_level(level)
    return DIFFICULTY_TIERS[lvl - 1]


def clamp_level(level: float) -> int:
    return max(LEVEL_MIN, min(LEVEL_MAX, int(level)))


def staircase_step(score: float, accuracy: float) -> float:
    """Level delta for one completed item; the first matching rule wins."""
    if score >= 90 and accuracy >= 0.9:
        return 1.0
    if score >= 70 and accuracy >= 0.7:
        return 0.5
    if score < 50 or accuracy < 0.5:
        return -1.0
    if score < 70 or accuracy < 0.7:
        return -0.5
    return 0.0


class AdaptiveDifficultyController:
    def __init__(self, start_level: Optional[int] = None, max_items: int = ADAPTIVE_MAX_ITEMS):
        lvl = clamp_level(ADAPTIVE_START_LEVEL if start_level is None else start_level)
        self.state = DifficultyState(level=lvl, history=[lvl])
        self.max_items = int(max_items)
        self.items_done = 0

    @property
    def level(self) -> int:
        return self.state.level

    @property
    def history(self) -> List[int]:
        return list(self.state.history)

    @property
    def multiplier(self) -> float:
        return tier_for(self.state.level).multiplier

    def is_complete(self) -> bool:
        return self.items_done >= self.max_items

    def update(self, sample: Optional[PerformanceSample]) -> int:
        """Apply one completed item. ``None`` (an error item) holds the level."""

        before = self.state.level
        if sample is None:
            after = before
        else:
            raw = before + staircase_step(sample.score, sample.accuracy)
            # half-up, so 4.5 -> 5 and 3.5 -> 4
            after = clamp_level(math.floor(raw + 0.5))
        self.state.level = after
        self.state.history.append(after)
        self.items_done += 1
        log.debug("difficulty %d -> %d after item %d", before, after, self.items_done)
        return after
