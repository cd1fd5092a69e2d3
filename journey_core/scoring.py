from __future__ import annotations
from typing import Mapping, Optional, Sequence
import time

from .config import STAGES, DEFAULT_LOCALE
from . import config
from .types import Question, Result, StageScores


def empty_scores() -> StageScores:
    return {s: 0 for s in STAGES}


def _as_index(v) -> Optional[int]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    try:
        return int(str(v).strip())
    except (TypeError, ValueError):
        return None


def winning_stage(scores: Mapping[str, int]) -> str:
    """First stage in enumeration order holding the strictly highest score."""
    best = STAGES[0]
    best_score = scores.get(best, 0)
    for stage in STAGES[1:]:
        if scores.get(stage, 0) > best_score:
            best, best_score = stage, scores.get(stage, 0)
    return best


def percentage_for(winning_score: int, question_count: int, max_option_score: int) -> int:
    denom = int(question_count) * int(max_option_score)
    if denom <= 0:
        return 0
    # half-up rounding of winning / denom * 100 in integer arithmetic
    pct = (200 * int(winning_score) + denom) // (2 * denom)
    return max(0, min(100, pct))


def accumulate(answers: Mapping[int, int], questions: Sequence[Question]) -> StageScores:
    scores = empty_scores()
    for q_raw, o_raw in answers.items():
        qi = _as_index(q_raw); oi = _as_index(o_raw)
        if qi is None or oi is None: continue
        if not (0 <= qi < len(questions)): continue
        options = questions[qi].options
        if not (0 <= oi < len(options)): continue
        for stage, pts in (options[oi].score or {}).items():
            if stage not in scores: continue
            try:
                add = int(pts)
            except (TypeError, ValueError):
                continue
            if add > 0:
                scores[stage] += add
    return scores


def score(
    answers: Mapping[int, int],
    questions: Sequence[Question],
    *,
    locale: str = DEFAULT_LOCALE,
    timestamp: Optional[int] = None,
    max_option_score: Optional[int] = None,
) -> Result:
    """
    Turn an answer set into a Result.
    answers: {question_index: option_index}; missing keys are unanswered and
    out-of-range indices are skipped.
    percentage = round(winning / (len(questions) * K) * 100), K = MAX_OPTION_SCORE.
    """
    k = config.validate_max_option_score(
        config.MAX_OPTION_SCORE if max_option_score is None else max_option_score
    )
    scores = accumulate(answers, questions)
    stage = winning_stage(scores)
    pct = percentage_for(scores[stage], len(questions), k)
    ts = int(time.time() * 1000) if timestamp is None else int(timestamp)
    return Result(stage=stage, scores=scores, percentage=pct, timestamp=ts, locale=locale)
