from __future__ import annotations

import pytest

from neuro_core.difficulty import (
    DIFFICULTY_TIERS,
    AdaptiveDifficultyController,
    staircase_step,
    tier_for,
)
from neuro_core.types import PerformanceSample


PERFECT = PerformanceSample(score=100.0, accuracy=1.0)
POOR = PerformanceSample(score=10.0, accuracy=0.1)


def test_starts_at_average():
    ctl = AdaptiveDifficultyController()
    assert ctl.level == 4
    assert tier_for(ctl.level).name == "Average"
    assert ctl.history == [4]


def test_perfect_streak_saturates_at_ten():
    ctl = AdaptiveDifficultyController(start_level=4, max_items=12)
    levels = [ctl.update(PERFECT) for _ in range(12)]
    assert levels[:6] == [5, 6, 7, 8, 9, 10]
    assert all(b >= a for a, b in zip(levels, levels[1:])), "perfect streak must never step down"
    assert max(levels) == 10
    assert levels[-1] == 10


def test_poor_streak_clamps_at_one():
    ctl = AdaptiveDifficultyController(start_level=4)
    for _ in range(8):
        ctl.update(POOR)
    assert ctl.level == 1
    assert min(ctl.history) == 1


@pytest.mark.parametrize(
    "score,accuracy,step",
    [
        (90, 0.9, 1.0),
        (89, 0.95, 0.5),
        (70, 0.7, 0.5),
        (95, 0.6, -0.5),
        (69, 0.9, -0.5),
        (95, 0.4, -1.0),
        (49, 1.0, -1.0),
    ],
)
def test_staircase_rule_order(score, accuracy, step):
    assert staircase_step(score, accuracy) == step


def test_half_steps_round_half_up():
    ctl = AdaptiveDifficultyController(start_level=4)
    assert ctl.update(PerformanceSample(score=75, accuracy=0.75)) == 5
    # 5 - 0.5 = 4.5 rounds back up to 5
    assert ctl.update(PerformanceSample(score=60, accuracy=0.8)) == 5


def test_error_item_holds_level_but_is_recorded():
    ctl = AdaptiveDifficultyController(start_level=6)
    assert ctl.update(None) == 6
    assert ctl.history == [6, 6]
    assert ctl.items_done == 1


def test_run_completes_after_ten_items():
    ctl = AdaptiveDifficultyController()
    for i in range(10):
        assert not ctl.is_complete()
        ctl.update(PERFECT)
    assert ctl.is_complete()
    assert len(ctl.history) == 11


def test_start_level_is_clamped():
    assert AdaptiveDifficultyController(start_level=42).level == 10
    assert AdaptiveDifficultyController(start_level=-3).level == 1


def test_tiers_cover_one_to_ten():
    assert [t.level for t in DIFFICULTY_TIERS] == list(range(1, 11))
    assert tier_for(1).multiplier == 0.5
    assert tier_for(10).name == "Legendary"
    assert tier_for(10).multiplier == 3.0
