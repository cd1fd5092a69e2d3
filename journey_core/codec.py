"""Share-token encoding for computed results.

A token is URL-safe base64 over compact JSON of the reduced result
projection. Tokens are not signed: anything decoded here is as trustworthy as
any other user input, and callers should treat a ``None`` from :func:`decode`
exactly like "no shared result".
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

from . import config
from .config import STAGES
from .types import Result

log = logging.getLogger(__name__)

_DEFAULT_SHARE_TEXT = (
    "I'm at Stage {stage}: {title} on my AI Developer Journey!\n\n"
    "Discover your AI development stage!"
)
_DEFAULT_SHARE_TITLE = "AI Developer Journey"


class TokenError(ValueError):
    pass


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def encode(result: Result) -> str:
    payload = {
        "stage": result.stage,
        "percentage": int(result.percentage),
        "scores": {s: int(result.scores.get(s, 0)) for s in STAGES},
        "lang": result.locale,
        "timestamp": int(result.timestamp),
    }
    raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64_to_bytes(token: str) -> bytes:
    t = token.strip()
    if not t:
        raise TokenError("empty token")
    # '+' may arrive as ' ' when a standard-alphabet token was not url-quoted
    t = t.replace(" ", "+")
    t = t.replace("-", "+").replace("_", "/")
    t += "=" * (-len(t) % 4)
    try:
        return base64.b64decode(t, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise TokenError(f"bad base64: {exc}") from exc


def result_from_payload(raw: Mapping[str, Any]) -> Optional[Result]:
    """Validate a decoded payload; ``None`` when stage/percentage are unusable."""

    if not isinstance(raw, Mapping):
        return None
    stage = raw.get("stage")
    pct = raw.get("percentage")
    if not isinstance(stage, str) or stage not in STAGES:
        return None
    if not _is_int(pct) or not (0 <= pct <= 100):
        return None

    scores = {s: 0 for s in STAGES}
    raw_scores = raw.get("scores")
    if raw_scores is not None:
        if not isinstance(raw_scores, Mapping):
            return None
        for s in STAGES:
            v = raw_scores.get(s, 0)
            if not _is_int(v) or v < 0:
                return None
            scores[s] = v

    lang = raw.get("lang", raw.get("language"))
    if not isinstance(lang, str) or not lang:
        lang = config.DEFAULT_LOCALE
    ts = raw.get("timestamp")
    ts = ts if _is_int(ts) else 0
    return Result(stage=stage, scores=scores, percentage=pct, timestamp=ts, locale=lang)


def decode(token: Optional[str]) -> Optional[Result]:
    if not token or not isinstance(token, str):
        return None
    try:
        payload = json.loads(_b64_to_bytes(token).decode("utf-8"))
    except (TokenError, UnicodeDecodeError, ValueError, RecursionError) as exc:
        log.debug("rejected share token: %s", exc)
        return None
    res = result_from_payload(payload)
    if res is None:
        log.debug("rejected share token: missing or malformed stage/percentage")
    return res


@dataclass(frozen=True)
class SharePayload:
    title: str
    text: str
    url: str


def share_url(result: Result, base_url: str) -> str:
    parts = urlsplit(base_url)
    query = urlencode({config.RESULTS_PARAM: encode(result)})
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))


def share_payload(result: Result, content=None, base_url: str = config.SHARE_BASE_URL) -> SharePayload:
    title = _DEFAULT_SHARE_TITLE
    template = _DEFAULT_SHARE_TEXT
    stage_title = result.stage
    if content is not None:
        title = getattr(content, "title", "") or title
        template = getattr(getattr(content, "share", None), "text", None) or template
        stage_title = content.stage_title(result.stage)
    text = template.replace("{stage}", result.stage_number).replace("{title}", stage_title)
    return SharePayload(title=title, text=text, url=share_url(result, base_url))
