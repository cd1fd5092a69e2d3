from __future__ import annotations

import pytest

from journey_core import config
from journey_core.config import STAGES
from journey_core.scoring import percentage_for, score, winning_stage
from journey_core.types import Option, Question

from tests.conftest import build_questions


def test_scores_always_have_four_non_negative_keys(questions):
    answer_sets = [{}, {0: 0}, {0: 3, 5: 2, 9: 1}, {i: i % 4 for i in range(10)}]
    for answers in answer_sets:
        res = score(answers, questions, timestamp=0)
        assert set(res.scores) == set(STAGES)
        assert all(v >= 0 for v in res.scores.values())


def test_tie_resolves_to_lowest_stage():
    assert winning_stage({"stage1": 2, "stage2": 2, "stage3": 0, "stage4": 0}) == "stage1"
    assert winning_stage({"stage1": 0, "stage2": 1, "stage3": 4, "stage4": 4}) == "stage3"


def test_tie_through_scoring_picks_lower_stage():
    qs = [
        Question(id=1, text="q1", options=[Option("a", {"stage2": 2}), Option("b", {"stage1": 2})]),
        Question(id=2, text="q2", options=[Option("a", {"stage2": 1}), Option("b", {"stage1": 1})]),
    ]
    res = score({0: 0, 1: 1}, qs, timestamp=0)
    assert res.scores["stage1"] == 1 and res.scores["stage2"] == 2
    res = score({0: 1, 1: 0}, qs, timestamp=0)
    assert res.scores["stage1"] == 2 and res.scores["stage2"] == 1
    assert res.stage == "stage1"

    res = score({0: 0, 1: 0}, qs[:1] + [Question(id=2, text="q2", options=[Option("x", {"stage1": 2})])], timestamp=0)
    assert res.scores["stage1"] == res.scores["stage2"] == 2
    assert res.stage == "stage1"


def test_empty_answers_lowest_stage_zero_percent(questions):
    res = score({}, questions, timestamp=0)
    assert res.stage == "stage1"
    assert res.percentage == 0
    assert all(v == 0 for v in res.scores.values())


def test_stage3_scenario_is_eighty_percent(questions):
    # 8 answers on stage3 (24 points), two on stage1 (6 points)
    answers = {i: 2 for i in range(8)}
    answers.update({8: 0, 9: 0})
    res = score(answers, questions, locale="en", timestamp=123)
    assert res.scores["stage3"] == 24
    assert res.stage == "stage3"
    assert res.percentage == 80
    assert res.timestamp == 123 and res.locale == "en"


def test_out_of_range_indices_are_ignored(questions):
    res = score({-1: 0, 10: 1, 3: 7, 4: -2, "x": 0, 2: 3}, questions, timestamp=0)
    assert res.scores == {"stage1": 0, "stage2": 0, "stage3": 0, "stage4": 3}
    assert res.stage == "stage4"


def test_percentage_rounds_half_up_and_clamps():
    assert percentage_for(1, 2, 3) == 17  # 16.67
    assert percentage_for(1, 8, 1) == 13  # 12.5
    assert percentage_for(50, 1, 3) == 100
    assert percentage_for(5, 0, 3) == 0


def test_malformed_content_percentage_is_clamped():
    qs = [Question(id=1, text="q", options=[Option("a", {"stage1": 9})])]
    res = score({0: 0}, qs, timestamp=0)
    assert res.scores["stage1"] == 9
    assert res.percentage == 100


def test_max_option_score_is_validated(questions, monkeypatch):
    with pytest.raises(ValueError):
        score({}, questions, max_option_score=0)
    monkeypatch.setattr(config, "MAX_OPTION_SCORE", 5, raising=False)
    res = score({i: 3 for i in range(10)}, build_questions(max_score=5), timestamp=0)
    assert res.percentage == 100


def test_reanswering_takes_latest_value(questions):
    answers = {0: 0}
    answers[0] = 3
    res = score(answers, questions, timestamp=0)
    assert res.scores["stage1"] == 0 and res.scores["stage4"] == 3
