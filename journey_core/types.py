from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Union

from .config import STAGES, DEFAULT_LOCALE

StageScores = Dict[str, int]


class JourneyError(Exception):
    """Base error for the assessment engine."""


class ContentUnavailable(JourneyError):
    """Locale content could not be retrieved and no fallback applied."""

    def __init__(self, locale: str, reason: str = ""):
        self.locale = locale
        self.reason = reason
        msg = f"content for locale {locale!r} is unavailable"
        super().__init__(f"{msg}: {reason}" if reason else msg)


@dataclass(frozen=True)
class Option:
    text: str
    score: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Question:
    id: Union[str, int]; text: str
    options: List[Option] = field(default_factory=list)


@dataclass(frozen=True)
class Result:
    stage: str
    scores: Mapping[str, int]
    percentage: int
    timestamp: int
    locale: str = DEFAULT_LOCALE

    @property
    def stage_number(self) -> str:
        return self.stage.replace("stage", "")

    def to_dict(self) -> Dict[str, object]:
        """JSON-friendly form used for persistence and share tokens."""

        return {
            "stage": self.stage,
            "scores": {s: int(self.scores.get(s, 0)) for s in STAGES},
            "percentage": int(self.percentage),
            "timestamp": int(self.timestamp),
            "lang": self.locale,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> Optional["Result"]:
        # imported late; codec depends on this module
        from .codec import result_from_payload
        return result_from_payload(raw)
