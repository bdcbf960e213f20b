"""Procedural content for the adaptive run.

The engine only relies on ``ItemGenerator.generate_item``; swapping in another
generator (fixed fixtures in tests, an LLM-backed one) needs no engine change.
"""
from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .config import ADAPTIVE_BASE_SECONDS, ADAPTIVE_FAMILIES, ADAPTIVE_MIN_SECONDS
from .difficulty import clamp_level, tier_for
from .types import TestItem

MATH_OPERATIONS: Tuple[str, ...] = ("+", "-", "*", "/")
_OP_SYMBOL = {"+": "+", "-": "-", "*": "×", "/": "÷"}
STROOP_WORDS: Tuple[str, ...] = ("RED", "BLUE", "GREEN", "YELLOW", "PURPLE", "ORANGE")
STROOP_COLORS: Tuple[str, ...] = ("red", "blue", "green", "yellow", "purple", "orange")

_FAMILY_KIND = {
    "cognitive": "radio",
    "reaction_time": "reaction_time",
    "spatial_memory": "spatial_memory",
    "executive_function": "executive_function",
}


class ItemGenerator(Protocol):
    def generate_item(self, family: str, difficulty: int, index: int) -> TestItem: ...


def time_limit_seconds(family: str, difficulty: int) -> int:
    base = ADAPTIVE_BASE_SECONDS.get(family, 30)
    return max(ADAPTIVE_MIN_SECONDS, base - 2 * int(difficulty))


def expected_score(difficulty: int) -> int:
    return 50 + 5 * int(difficulty)


class ProceduralItemGenerator:
    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)

    def generate_item(self, family: str, difficulty: int, index: int) -> TestItem:
        if family not in ADAPTIVE_FAMILIES:
            raise ValueError(f"unknown adaptive family: {family}")
        d = clamp_level(difficulty)
        builder = getattr(self, f"_{family}")
        payload: Dict[str, Any] = builder(d)
        payload["multiplier"] = tier_for(d).multiplier
        payload["tier"] = tier_for(d).name
        payload["expected_score"] = expected_score(d)
        return TestItem(
            id=f"{family}_{index}",
            domain="cognitive",
            kind=_FAMILY_KIND[family],
            difficulty=d,
            time_limit_seconds=time_limit_seconds(family, d),
            payload=payload,
        )

    # ---- families ----
    def math_operands(self, d: int) -> Tuple[str, int, int]:
        op = MATH_OPERATIONS[(d // 3) % len(MATH_OPERATIONS)]
        r = self.rng
        if op == "+":
            a = r.randrange(10 + d * 5); b = r.randrange(10 + d * 5)
        elif op == "-":
            a = r.randrange(20 + d * 10); b = r.randrange(a + 1)
        elif op == "*":
            a = r.randrange(5 + d * 2); b = r.randrange(5 + d * 2)
        else:
            q = r.randrange(20 + d * 10); b = r.randrange(5 + d) + 1
            a = q * b
        return op, a, b

    def _cognitive(self, d: int) -> Dict[str, Any]:
        op, a, b = self.math_operands(d)
        answer = solve(op, a, b)
        options: List[int] = [answer]
        while len(options) < 4:
            wrong = answer + self.rng.randrange(20) - 10
            if wrong != answer and wrong not in options:
                options.append(wrong)
        self.rng.shuffle(options)
        return {
            "question": f"What is {a} {_OP_SYMBOL[op]} {b}?",
            "operation": op,
            "operands": [a, b],
            "options": [str(o) for o in options],
            "correct_answer": str(answer),
        }

    def _reaction_time(self, d: int) -> Dict[str, Any]:
        return {
            "target_size": max(10, 20 - d * 2),
            "display_time_ms": max(200, 1000 - d * 100),
            "wait_time_ms": max(500, 2000 - d * 150),
        }

    def _spatial_memory(self, d: int) -> Dict[str, Any]:
        grid = min(6, 3 + d // 3)
        length = min(8, 3 + d // 2)
        cells = grid * grid
        return {
            "sequence_length": length,
            "grid_size": grid,
            "display_time_ms": max(300, 1000 - d * 80),
            "sequence": [self.rng.randrange(cells) for _ in range(length)],
        }

    def _executive_function(self, d: int) -> Dict[str, Any]:
        word = self.rng.choice(STROOP_WORDS)
        ink = self.rng.choice(STROOP_COLORS)
        # the task is to name the ink, so the ink is the correct answer
        return {"word": word, "color": ink, "correct_color": ink, "options": list(STROOP_COLORS)}


def solve(op: str, a: int, b: int) -> int:
    if op == "+": return a + b
    if op == "-": return a - b
    if op == "*": return a * b
    if op == "/": return a // b
    raise ValueError(f"unknown operation: {op}")
