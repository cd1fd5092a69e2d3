from __future__ import annotations
import os


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str | None) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    vals = tuple(p.strip() for p in raw.split(",") if p.strip())
    return vals or default


STAGES: tuple[str, ...] = ("stage1", "stage2", "stage3", "stage4")

# highest score a single option may give one stage; percentage denominator is
# question_count * MAX_OPTION_SCORE
MAX_OPTION_SCORE: int = 3

DEFAULT_LOCALE: str = "en"
SUPPORTED_LOCALES: tuple[str, ...] = ("en", "zh-TW")

# primary language subtag -> supported locale for the non-default family
LANGUAGE_FAMILIES: dict[str, str] = {"zh": "zh-TW"}
TIMEZONE_HINTS: dict[str, str] = {
    "Asia/Taipei": "zh-TW",
    "Asia/Hong_Kong": "zh-TW",
    "Asia/Macau": "zh-TW",
}

LOCALE_PARAM: str = "lang"
RESULTS_PARAM: str = "results"
PREF_LOCALE_KEY: str = "preferred-language"
PREF_RESULTS_KEY: str = "assessment-results"

CONTENT_BASE_URL: str | None = None
CONTENT_TIMEOUT: float = 10.0
SHARE_BASE_URL: str = "http://localhost:3000/"
DATA_DIR: str = "data"

# // env overrides for staging/ops
MAX_OPTION_SCORE = _env_int("MAX_OPTION_SCORE", MAX_OPTION_SCORE)
DEFAULT_LOCALE = _env_str("DEFAULT_LOCALE", DEFAULT_LOCALE) or "en"
SUPPORTED_LOCALES = _env_list("SUPPORTED_LOCALES", SUPPORTED_LOCALES)
CONTENT_BASE_URL = _env_str("CONTENT_BASE_URL", CONTENT_BASE_URL)
CONTENT_TIMEOUT = _env_float("CONTENT_TIMEOUT", CONTENT_TIMEOUT)
SHARE_BASE_URL = _env_str("SHARE_BASE_URL", SHARE_BASE_URL) or SHARE_BASE_URL
DATA_DIR = _env_str("DATA_DIR", DATA_DIR) or DATA_DIR


def validate_max_option_score(value: object) -> int:
    """Return ``value`` as a positive int or raise ``ValueError``."""

    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"MAX_OPTION_SCORE must be a positive integer, got {value!r}")
    return value


MAX_OPTION_SCORE = validate_max_option_score(MAX_OPTION_SCORE)

if DEFAULT_LOCALE not in SUPPORTED_LOCALES:
    SUPPORTED_LOCALES = (DEFAULT_LOCALE,) + tuple(SUPPORTED_LOCALES)
