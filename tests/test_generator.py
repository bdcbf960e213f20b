from __future__ import annotations

import pytest

from neuro_core.generator import (
    STROOP_COLORS,
    ProceduralItemGenerator,
    expected_score,
    solve,
    time_limit_seconds,
)


@pytest.mark.parametrize("difficulty", range(1, 11))
def test_math_answer_matches_question_shown(difficulty):
    for seed in range(25):
        item = ProceduralItemGenerator(seed=seed).generate_item("cognitive", difficulty, 0)
        p = item.payload
        a, b = p["operands"]
        assert p["correct_answer"] == str(solve(p["operation"], a, b))
        assert p["correct_answer"] in p["options"]
        assert len(set(p["options"])) == 4
        assert f"{a} " in p["question"] and f" {b}?" in p["question"]


@pytest.mark.parametrize(
    "difficulty,op",
    [(1, "+"), (2, "+"), (3, "-"), (5, "-"), (6, "*"), (8, "*"), (9, "/"), (10, "/")],
)
def test_operation_follows_level(difficulty, op):
    item = ProceduralItemGenerator(seed=1).generate_item("cognitive", difficulty, 0)
    assert item.payload["operation"] == op


def test_division_is_exact():
    gen = ProceduralItemGenerator(seed=3)
    for _ in range(50):
        op, a, b = gen.math_operands(9)
        assert op == "/"
        assert b >= 1 and a % b == 0


def test_items_are_immutable_and_tagged():
    item = ProceduralItemGenerator(seed=2).generate_item("reaction_time", 4, 3)
    assert item.id == "reaction_time_3"
    assert item.kind == "reaction_time"
    assert item.difficulty == 4
    with pytest.raises(TypeError):
        item.payload["target_size"] = 1  # type: ignore[index]


def test_reaction_parameters_tighten_with_level():
    gen = ProceduralItemGenerator(seed=0)
    easy = gen.generate_item("reaction_time", 1, 0).payload
    hard = gen.generate_item("reaction_time", 10, 1).payload
    assert (easy["target_size"], easy["display_time_ms"], easy["wait_time_ms"]) == (18, 900, 1850)
    assert (hard["target_size"], hard["display_time_ms"], hard["wait_time_ms"]) == (10, 200, 500)


def test_spatial_parameters():
    p = ProceduralItemGenerator(seed=0).generate_item("spatial_memory", 6, 0).payload
    assert p["sequence_length"] == 6
    assert p["grid_size"] == 5
    assert p["display_time_ms"] == 520
    assert len(p["sequence"]) == 6
    assert all(0 <= c < 25 for c in p["sequence"])


def test_stroop_correct_color_is_the_ink():
    gen = ProceduralItemGenerator(seed=5)
    for i in range(20):
        p = gen.generate_item("executive_function", 5, i).payload
        assert p["correct_color"] == p["color"]
        assert p["color"] in STROOP_COLORS


def test_time_limits_and_expected_score():
    assert time_limit_seconds("cognitive", 4) == 22
    assert time_limit_seconds("spatial_memory", 10) == 40
    assert time_limit_seconds("cognitive", 10) == 10
    assert time_limit_seconds("executive_function", 1) == 43
    assert expected_score(4) == 70


def test_same_seed_same_items():
    a = ProceduralItemGenerator(seed=11).generate_item("cognitive", 7, 0)
    b = ProceduralItemGenerator(seed=11).generate_item("cognitive", 7, 0)
    assert a.payload["question"] == b.payload["question"]
    assert a.payload["options"] == b.payload["options"]


def test_unknown_family_rejected():
    with pytest.raises(ValueError):
        ProceduralItemGenerator().generate_item("vision", 4, 0)
