from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union
import logging

from . import config

log = logging.getLogger(__name__)

Signal = Union[None, str, Callable[[], Optional[str]]]
ListSignal = Union[None, Sequence[str], Callable[[], Optional[Sequence[str]]]]


@dataclass
class LocaleSignals:
    """Inputs to locale resolution.

    Each field holds either a value or a zero-argument callable producing it;
    a callable that raises counts as "no signal" for that step.
    """

    query_locale: Signal = None
    stored_locale: Signal = None
    browser_languages: ListSignal = field(default_factory=tuple)
    timezone: Signal = None


def _read(name: str, signal):
    if not callable(signal):
        return signal
    try:
        return signal()
    except Exception as exc:
        log.debug("locale signal %s unavailable: %s", name, exc)
        return None


def _canonical(tag: str, supported: Sequence[str]) -> Optional[str]:
    low = tag.lower()
    for code in supported:
        if code.lower() == low:
            return code
    return None


def match_browser_language(
    tag: str,
    *,
    supported: Sequence[str] = config.SUPPORTED_LOCALES,
    default: str = config.DEFAULT_LOCALE,
) -> Optional[str]:
    if not isinstance(tag, str) or not tag.strip():
        return None
    tag = tag.strip().replace("_", "-")

    exact = _canonical(tag, supported)
    if exact:
        return exact

    primary = tag.split("-", 1)[0].lower()
    family = config.LANGUAGE_FAMILIES.get(primary)
    if family and family != default and family in supported:
        return family

    base = default.split("-", 1)[0].lower()
    low = tag.lower()
    if low == base or low.startswith(base + "-"):
        return default
    return None


def resolve_locale(
    signals: LocaleSignals,
    *,
    supported: Sequence[str] = config.SUPPORTED_LOCALES,
    default: str = config.DEFAULT_LOCALE,
) -> str:
    query = _read("query_locale", signals.query_locale)
    if isinstance(query, str) and query in supported:
        return query

    stored = _read("stored_locale", signals.stored_locale)
    if isinstance(stored, str) and stored in supported:
        return stored

    langs = _read("browser_languages", signals.browser_languages) or ()
    if isinstance(langs, str):
        langs = (langs,)
    for tag in langs:
        hit = match_browser_language(tag, supported=supported, default=default)
        if hit:
            return hit

    tz = _read("timezone", signals.timezone)
    if isinstance(tz, str):
        hinted = config.TIMEZONE_HINTS.get(tz.strip())
        if hinted and hinted in supported:
            return hinted

    return default


def parse_accept_language(header: Optional[str]) -> List[str]:
    """'zh-TW,zh;q=0.9,en;q=0.8' -> ['zh-TW', 'zh', 'en'] (q-sorted, stable)."""
    if not header:
        return []
    weighted: List[tuple[float, int, str]] = []
    for pos, part in enumerate(header.split(",")):
        bits = [b.strip() for b in part.split(";")]
        tag = bits[0]
        if not tag or tag == "*":
            continue
        q = 1.0
        for b in bits[1:]:
            if b.startswith("q="):
                try:
                    q = float(b[2:])
                except ValueError:
                    q = 0.0
        if q <= 0:
            continue
        weighted.append((-q, pos, tag))
    weighted.sort()
    return [tag for _, _, tag in weighted]
