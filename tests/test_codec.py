from __future__ import annotations

import base64
import json

from journey_core.codec import decode, encode, share_payload, share_url
from journey_core.content import parse_content
from journey_core.types import Result

from tests.conftest import build_content


def _result(**over) -> Result:
    base = dict(
        stage="stage3",
        scores={"stage1": 6, "stage2": 0, "stage3": 24, "stage4": 0},
        percentage=80,
        timestamp=1700000000000,
        locale="zh-TW",
    )
    base.update(over)
    return Result(**base)


def test_round_trip_preserves_result_fields():
    for res in (_result(), _result(stage="stage1", scores={"stage1": 0, "stage2": 0, "stage3": 0, "stage4": 0}, percentage=0, locale="en")):
        back = decode(encode(res))
        assert back is not None
        assert back.stage == res.stage
        assert dict(back.scores) == dict(res.scores)
        assert back.percentage == res.percentage
        assert back.locale == res.locale
        assert back.timestamp == res.timestamp


def test_token_is_url_safe():
    token = encode(_result())
    assert all(ch.isalnum() or ch in "-_" for ch in token)


def test_standard_base64_tokens_still_decode():
    payload = {"stage": "stage2", "percentage": 40, "scores": {"stage2": 12}, "lang": "en", "timestamp": 1}
    token = base64.b64encode(json.dumps(payload).encode()).decode()
    res = decode(token)
    assert res is not None and res.stage == "stage2"
    assert res.scores == {"stage1": 0, "stage2": 12, "stage3": 0, "stage4": 0}


def test_corrupted_or_truncated_tokens_are_absent():
    token = encode(_result())
    for bad in (token[:-7], token[: len(token) // 2], "!!!", "", None, "e30", token + "%%", "bm90IGpzb24"):
        assert decode(bad) is None, bad


def test_deeply_nested_payload_is_absent():
    token = base64.urlsafe_b64encode(b"[" * 100000).decode()
    assert decode(token) is None


def test_missing_or_mistyped_required_fields_are_absent():
    def tok(obj) -> str:
        return base64.urlsafe_b64encode(json.dumps(obj).encode()).decode()

    assert decode(tok({"percentage": 50})) is None
    assert decode(tok({"stage": "stage2"})) is None
    assert decode(tok({"stage": "stage9", "percentage": 50})) is None
    assert decode(tok({"stage": "stage2", "percentage": "50"})) is None
    assert decode(tok({"stage": "stage2", "percentage": True})) is None
    assert decode(tok({"stage": "stage2", "percentage": 150})) is None
    assert decode(tok({"stage": "stage2", "percentage": 50, "scores": [1, 2]})) is None
    assert decode(tok(["stage2", 50])) is None


def test_minimal_payload_gets_defaults():
    token = base64.urlsafe_b64encode(json.dumps({"stage": "stage4", "percentage": 0}).encode()).decode()
    res = decode(token)
    assert res is not None
    assert res.percentage == 0
    assert res.locale == "en" and res.timestamp == 0
    assert set(res.scores) == {"stage1", "stage2", "stage3", "stage4"}


def test_share_payload_uses_locale_template():
    content = parse_content(build_content(share_text="Stage {stage}: {title}!"))
    payload = share_payload(_result(), content, "https://example.com/journey/")
    assert payload.text == "Stage 3: Title 3!"
    assert payload.title == "AI Developer Journey"
    assert payload.url.startswith("https://example.com/journey/?results=")
    assert payload.url == share_url(_result(), "https://example.com/journey/")


def test_share_payload_without_content_uses_default_text():
    payload = share_payload(_result(), None, "https://example.com/")
    assert payload.text.startswith("I'm at Stage 3: stage3")
    token = payload.url.split("results=", 1)[1]
    assert decode(token).stage == "stage3"
