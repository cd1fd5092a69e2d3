from __future__ import annotations
import json, logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import config
from .types import Option, Question

log = logging.getLogger(__name__)


# ---- Content schema ----
class OptionModel(BaseModel):
    text: str
    score: Dict[str, int] = Field(default_factory=dict)

    @field_validator("score")
    @classmethod
    def _check_score(cls, v: Dict[str, int]) -> Dict[str, int]:
        for stage, pts in v.items():
            if stage not in config.STAGES:
                raise ValueError(f"unknown stage {stage!r} in option score")
            if pts < 0 or pts > config.MAX_OPTION_SCORE:
                raise ValueError(
                    f"score {pts} for {stage} outside 0..{config.MAX_OPTION_SCORE}"
                )
        return v


class QuestionModel(BaseModel):
    id: Union[int, str]
    question: str
    options: List[OptionModel] = Field(min_length=1)


class AssessmentModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    questions: List[QuestionModel] = Field(min_length=1)


class StageModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    title: str
    description: str = ""


class ShareModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    text: Optional[str] = None
    successTitle: Optional[str] = None
    successText: Optional[str] = None
    errorTitle: Optional[str] = None
    errorText: Optional[str] = None


class LocaleContent(BaseModel):
    """Validated question/stage content for one locale.

    Unknown display strings are kept (``extra="allow"``) so callers can render
    whatever the content file ships; only the parts the engine relies on are
    typed.
    """

    model_config = ConfigDict(extra="allow")
    title: str = ""
    assessment: AssessmentModel
    stages: Dict[str, StageModel] = Field(default_factory=dict)
    share: ShareModel = Field(default_factory=ShareModel)

    @field_validator("stages")
    @classmethod
    def _check_stages(cls, v: Dict[str, StageModel]) -> Dict[str, StageModel]:
        unknown = [k for k in v if k not in config.STAGES]
        if unknown:
            raise ValueError(f"unknown stage keys: {unknown}")
        return v

    def to_questions(self) -> List[Question]:
        return [
            Question(
                id=q.id,
                text=q.question,
                options=[Option(text=o.text, score=dict(o.score)) for o in q.options],
            )
            for q in self.assessment.questions
        ]

    def stage_title(self, stage: str) -> str:
        st = self.stages.get(stage)
        return st.title if st else stage


def parse_content(raw: Any) -> LocaleContent:
    return LocaleContent.model_validate(raw)


# ---- Content sources ----
class ContentSource(Protocol):
    async def fetch(self, locale: str) -> Dict[str, Any]: ...


class PackageContentSource:
    """Reads the JSON files bundled under ``journey_core/data/lang``."""

    # resolved from this file; the package has no __init__.py
    DEFAULT_ROOT = Path(__file__).resolve().parent / "data" / "lang"

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else self.DEFAULT_ROOT

    async def fetch(self, locale: str) -> Dict[str, Any]:
        res = self.root / f"{locale}.json"
        if not res.is_file():
            raise FileNotFoundError(f"no bundled content for {locale}")
        return json.loads(res.read_text(encoding="utf-8"))


class HttpContentSource:
    def __init__(self, base_url: str, *, timeout: float = config.CONTENT_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch(self, locale: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{locale}.json"
        resp = await self._client.get(url)
        resp.raise_for_status()
        return resp.json()

    async def aclose(self) -> None:
        await self._client.aclose()


def content_source_from_config() -> ContentSource:
    if config.CONTENT_BASE_URL:
        log.info("content source: %s", config.CONTENT_BASE_URL)
        return HttpContentSource(config.CONTENT_BASE_URL)
    return PackageContentSource()
