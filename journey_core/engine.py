# journey_core/engine.py
from __future__ import annotations
from typing import Dict, List, Optional
import json, logging

from . import config
from .address import AddressBar
from .codec import SharePayload, decode, share_payload
from .content import LocaleContent
from .language import LocaleSignals, resolve_locale
from .scoring import score
from .store import PreferenceStore
from .translations import TranslationCache
from .types import ContentUnavailable, Question, Result

log = logging.getLogger(__name__)


class AssessmentSession:
    """Session context for one user: active locale, answers and last result.

    Locale is resolved once in :meth:`start`; afterwards it only changes
    through :meth:`change_language`. Storage errors are logged and ignored,
    content failures (``ContentUnavailable``) propagate.
    """

    def __init__(
        self,
        cache: TranslationCache,
        store: PreferenceStore,
        address: Optional[AddressBar] = None,
        *,
        supported: Optional[tuple[str, ...]] = None,
        default_locale: Optional[str] = None,
    ):
        self.cache = cache
        self.store = store
        self.address = address or AddressBar()
        self.supported = tuple(supported or config.SUPPORTED_LOCALES)
        self.default_locale = default_locale or config.DEFAULT_LOCALE

        self.locale: str = self.default_locale
        self.questions: List[Question] = []
        self.answers: Dict[int, int] = {}
        self.current_index = 0
        self.last_result: Optional[Result] = None
        self.shared_result: Optional[Result] = None
        self._content: Optional[LocaleContent] = None

    # ---- storage (never fatal) ----
    def _pref_get(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except Exception as exc:
            log.warning("Failed to read %s: %s", key, exc)
            return None

    def _pref_set(self, key: str, value: str) -> bool:
        try:
            self.store.set(key, value)
            return True
        except Exception as exc:
            log.warning("Failed to store %s: %s", key, exc)
            return False

    # ---- lifecycle ----
    def default_signals(self, browser_languages=(), timezone=None) -> LocaleSignals:
        return LocaleSignals(
            query_locale=lambda: self.address.get(config.LOCALE_PARAM),
            stored_locale=lambda: self.store.get(config.PREF_LOCALE_KEY),
            browser_languages=browser_languages,
            timezone=timezone,
        )

    async def start(self, signals: Optional[LocaleSignals] = None) -> str:
        if signals is None:
            signals = self.default_signals()
        locale = resolve_locale(signals, supported=self.supported, default=self.default_locale)
        content = await self.cache.get(locale)
        self.locale = locale
        self._load_questions(content)
        log.info("session started locale=%s questions=%d", locale, len(self.questions))
        await self._consume_shared_result()
        return self.locale

    async def _consume_shared_result(self) -> None:
        token = self.address.get(config.RESULTS_PARAM)
        if token is None:
            return
        shared = decode(token)
        if shared is not None:
            if shared.locale in self.supported and shared.locale != self.locale:
                await self.change_language(shared.locale)
            self.shared_result = shared
        self.address.delete(config.RESULTS_PARAM)

    def _load_questions(self, content: LocaleContent) -> None:
        self._content = content
        self.questions = content.to_questions()

    @property
    def content(self) -> Optional[LocaleContent]:
        return self._content

    # ---- answering ----
    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def is_complete(self) -> bool:
        return bool(self.questions) and all(i in self.answers for i in range(len(self.questions)))

    @property
    def progress(self) -> tuple[int, int]:
        return (min(self.current_index + 1, len(self.questions)), len(self.questions))

    def select_answer(self, question_index: int, option_index: int) -> bool:
        if not (0 <= question_index < len(self.questions)):
            return False
        if not (0 <= option_index < len(self.questions[question_index].options)):
            return False
        self.answers[question_index] = option_index
        return True

    def next_question(self) -> int:
        if self.current_index < len(self.questions) - 1:
            self.current_index += 1
        return self.current_index

    def previous_question(self) -> int:
        if self.current_index > 0:
            self.current_index -= 1
        return self.current_index

    def finish(self) -> Result:
        res = score(self.answers, self.questions, locale=self.locale)
        self.last_result = res
        self._pref_set(config.PREF_RESULTS_KEY, json.dumps(res.to_dict()))
        log.info("Assessment completed: stage=%s language=%s", res.stage, self.locale)
        return res

    def retake(self) -> None:
        self.current_index = 0
        self.answers = {}
        content = self.content
        if content is not None:
            self._load_questions(content)

    # ---- language ----
    async def change_language(self, locale: str) -> bool:
        if locale not in self.supported:
            log.warning("Unsupported language %r", locale)
            return False
        try:
            content = await self.cache.get(locale)
        except ContentUnavailable as exc:
            log.error("Failed to change language: %s", exc)
            return False
        self.locale = locale
        # answer indices stay valid only while the question list keeps its shape
        self._load_questions(content)
        self.address.document_lang = locale
        self._pref_set(config.PREF_LOCALE_KEY, locale)
        self.address.set(config.LOCALE_PARAM, locale)
        return True

    # ---- results ----
    def stored_result(self) -> Optional[Result]:
        raw = self._pref_get(config.PREF_RESULTS_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError as exc:
            log.warning("Failed to retrieve stored results: %s", exc)
            return None
        return Result.from_dict(data)

    def share(self, base_url: str = config.SHARE_BASE_URL) -> Optional[SharePayload]:
        res = self.last_result or self.stored_result()
        if res is None:
            return None
        return share_payload(res, self.cache.peek(res.locale) or self.content, base_url)
