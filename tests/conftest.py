from __future__ import annotations

import pytest

from journey_core.config import STAGES
from journey_core.types import Option, Question


def build_questions(count: int = 10, *, max_score: int = 3) -> list[Question]:
    """Deterministic questions; option i gives ``max_score`` to stage i+1."""

    questions: list[Question] = []
    for idx in range(count):
        questions.append(
            Question(
                id=idx + 1,
                text=f"Question {idx + 1}",
                options=[Option(text=f"{stage} answer", score={stage: max_score}) for stage in STAGES],
            )
        )
    return questions


def build_content(count: int = 3, *, title: str = "AI Developer Journey", share_text: str | None = None) -> dict:
    """Raw locale content in the shape of the bundled JSON files."""

    payload = {
        "title": title,
        "assessment": {
            "questions": [
                {
                    "id": idx + 1,
                    "question": f"Question {idx + 1}",
                    "options": [
                        {"text": f"{stage} answer", "score": {stage: 3}} for stage in STAGES
                    ],
                }
                for idx in range(count)
            ]
        },
        "stages": {stage: {"title": f"Title {stage[-1]}"} for stage in STAGES},
    }
    if share_text is not None:
        payload["share"] = {"text": share_text}
    return payload


class FakeSource:
    """Content source counting fetches; ``fail`` locales raise."""

    def __init__(self, contents: dict[str, dict] | None = None, fail: set[str] | None = None):
        self.contents = contents or {"en": build_content(), "zh-TW": build_content(title="AI 開發者旅程")}
        self.fail = set(fail or ())
        self.calls: list[str] = []
        self.gate = None

    async def fetch(self, locale: str) -> dict:
        self.calls.append(locale)
        if self.gate is not None:
            await self.gate.wait()
        if locale in self.fail or locale not in self.contents:
            raise OSError(f"Failed to load {locale} translations")
        return self.contents[locale]


class BrokenStore:
    def get(self, key):
        raise OSError("storage disabled")

    def set(self, key, value):
        raise OSError("storage disabled")


@pytest.fixture
def questions() -> list[Question]:
    return build_questions()


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()
