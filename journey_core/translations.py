from __future__ import annotations
import asyncio
import logging
from typing import Dict, Optional

from pydantic import ValidationError

from . import config
from .content import ContentSource, LocaleContent, parse_content
from .types import ContentUnavailable

log = logging.getLogger(__name__)


class TranslationCache:
    """Process-lifetime cache of validated locale content.

    Keeps one shared task per locale while a retrieval is running, so any
    number of concurrent ``get`` calls for the same locale cause a single
    ``source.fetch``. Resolved content is memoized; a failed retrieval is
    forgotten so the next call retries.
    """

    def __init__(self, source: ContentSource, *, default_locale: str = config.DEFAULT_LOCALE):
        self.source = source
        self.default_locale = default_locale
        self._resolved: Dict[str, LocaleContent] = {}
        self._inflight: Dict[str, asyncio.Task] = {}

    def peek(self, locale: str) -> Optional[LocaleContent]:
        return self._resolved.get(locale)

    def is_resolved(self, locale: str) -> bool:
        return locale in self._resolved

    def in_flight(self, locale: str) -> bool:
        return locale in self._inflight

    async def _retrieve(self, locale: str) -> LocaleContent:
        try:
            raw = await self.source.fetch(locale)
            content = parse_content(raw)
        except ValidationError as exc:
            log.error("Malformed %s content: %s", locale, exc)
            raise ContentUnavailable(locale, "malformed content") from exc
        except Exception as exc:
            log.error("Error loading %s translations: %s", locale, exc)
            raise ContentUnavailable(locale, str(exc)) from exc
        finally:
            self._inflight.pop(locale, None)
        self._resolved[locale] = content
        return content

    async def get(self, locale: str) -> LocaleContent:
        hit = self._resolved.get(locale)
        if hit is not None:
            return hit

        task = self._inflight.get(locale)
        if task is None:
            task = asyncio.ensure_future(self._retrieve(locale))
            self._inflight[locale] = task

        try:
            return await asyncio.shield(task)
        except ContentUnavailable:
            fallback = self._resolved.get(self.default_locale)
            if locale != self.default_locale and fallback is not None:
                log.warning("Falling back to %s content for %s", self.default_locale, locale)
                return fallback
            raise
