from __future__ import annotations
from fastapi import FastAPI, HTTPException, Header, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import uuid, os, json, logging, dataclasses, typing as t

# ---- Engine imports ----
from journey_core import config
from journey_core.address import AddressBar
from journey_core.codec import decode, encode, share_payload
from journey_core.content import content_source_from_config
from journey_core.engine import AssessmentSession
from journey_core.language import LocaleSignals, parse_accept_language, resolve_locale
from journey_core.scoring import score
from journey_core.store import JsonFilePreferenceStore, MemoryPreferenceStore
from journey_core.translations import TranslationCache
from journey_core.types import ContentUnavailable, Result

log = logging.getLogger(__name__)

CACHE = TranslationCache(content_source_from_config())
SESS: dict[str, AssessmentSession] = {}

app = FastAPI(title="AI Journey Assessment API")


@app.get("/")
def root():
    return {"status": "ok", "service": "ai-journey-api"}


ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


# ---- Schemas ----
class LocaleReq(BaseModel):
    client_id: str
    locale: str


class StartReq(BaseModel):
    client_id: str | None = None
    lang: str | None = None
    results: str | None = None
    url: str | None = None


class AnswerReq(BaseModel):
    question_index: int
    option_index: int


class LanguageReq(BaseModel):
    locale: str


class ScoreReq(BaseModel):
    locale: str = config.DEFAULT_LOCALE
    answers: dict[int, int] = Field(default_factory=dict)


class ResultBody(BaseModel):
    stage: str
    scores: dict[str, int] = Field(default_factory=dict)
    percentage: int
    timestamp: int = 0
    lang: str = config.DEFAULT_LOCALE


# ---- Helpers ----
def _result_from_body(body: ResultBody) -> Result:
    res = Result.from_dict(body.model_dump())
    if res is None:
        raise HTTPException(422, "invalid result")
    return res


def _serialize_result(res: Result | None) -> dict[str, t.Any] | None:
    if res is None:
        return None
    return res.to_dict()


def _serialize_question(q) -> dict[str, t.Any] | None:
    if q is None:
        return None
    return {"id": q.id, "question": q.text, "options": [o.text for o in q.options]}


def _session(sid: str) -> AssessmentSession:
    sess = SESS.get(sid)
    if not sess:
        raise HTTPException(404, "session not found")
    return sess


def _session_state(sid: str, sess: AssessmentSession) -> dict[str, t.Any]:
    current, total = sess.progress
    return {
        "session_id": sid,
        "locale": sess.locale,
        "index": sess.current_index,
        "progress": {"current": current, "total": total},
        "complete": sess.is_complete,
        "question": _serialize_question(sess.current_question),
        "url": sess.address.url,
    }


def _store_for(client_id: str | None):
    if not client_id:
        return MemoryPreferenceStore()
    return JsonFilePreferenceStore(client_id)


async def _content(locale: str):
    if locale not in config.SUPPORTED_LOCALES:
        raise HTTPException(404, f"unsupported locale {locale}")
    try:
        return await CACHE.get(locale)
    except ContentUnavailable as exc:
        raise HTTPException(503, str(exc))


# ---- Health ----
@app.get("/health")
def health():
    return {
        "supported_locales": list(config.SUPPORTED_LOCALES),
        "default_locale": config.DEFAULT_LOCALE,
        "content_source": config.CONTENT_BASE_URL or "bundled",
        "resolved_locales": [lc for lc in config.SUPPORTED_LOCALES if CACHE.is_resolved(lc)],
    }


# ---- Locale ----
@app.get("/locale")
def get_locale(
    lang: str | None = None,
    client_id: str | None = None,
    accept_language: str | None = Header(None),
    x_timezone: str | None = Header(None),
):
    store = _store_for(client_id) if client_id else None
    signals = LocaleSignals(
        query_locale=lang,
        stored_locale=(lambda: store.get(config.PREF_LOCALE_KEY)) if store else None,
        browser_languages=parse_accept_language(accept_language),
        timezone=x_timezone,
    )
    return {"locale": resolve_locale(signals)}


@app.put("/locale")
async def put_locale(req: LocaleReq):
    if req.locale not in config.SUPPORTED_LOCALES:
        raise HTTPException(400, f"unsupported locale {req.locale}")
    await _content(req.locale)
    try:
        _store_for(req.client_id).set(config.PREF_LOCALE_KEY, req.locale)
    except OSError as exc:
        log.warning("Failed to store language preference: %s", exc)
    return {"locale": req.locale}


@app.get("/content/{locale}")
async def get_content(locale: str):
    content = await _content(locale)
    return content.model_dump()


# ---- Sessions ----
@app.post("/session/start")
async def start(req: StartReq):
    sid = str(uuid.uuid4())
    address = AddressBar(req.url or config.SHARE_BASE_URL)
    if req.lang:
        address.set(config.LOCALE_PARAM, req.lang)
    if req.results:
        address.set(config.RESULTS_PARAM, req.results)
    sess = AssessmentSession(CACHE, _store_for(req.client_id), address)
    try:
        await sess.start()
    except ContentUnavailable as exc:
        raise HTTPException(503, str(exc))
    SESS[sid] = sess
    out = _session_state(sid, sess)
    out["shared_result"] = _serialize_result(sess.shared_result)
    return out


@app.get("/session/{sid}")
def session_state(sid: str):
    return _session_state(sid, _session(sid))


@app.post("/session/{sid}/answer")
def answer(sid: str, req: AnswerReq):
    sess = _session(sid)
    accepted = sess.select_answer(req.question_index, req.option_index)
    if accepted and req.question_index == sess.current_index:
        sess.next_question()
    out = _session_state(sid, sess)
    out["accepted"] = accepted
    return out


@app.post("/session/{sid}/previous")
def previous(sid: str):
    sess = _session(sid)
    sess.previous_question()
    return _session_state(sid, sess)


@app.post("/session/{sid}/finish")
def finish(sid: str):
    sess = _session(sid)
    res = sess.finish()
    payload = sess.share()
    return {
        "result": _serialize_result(res),
        "token": encode(res),
        "share": dataclasses.asdict(payload) if payload else None,
    }


@app.post("/session/{sid}/retake")
def retake(sid: str):
    sess = _session(sid)
    sess.retake()
    return _session_state(sid, sess)


@app.delete("/session/{sid}")
def end_session(sid: str):
    if SESS.pop(sid, None) is None:
        raise HTTPException(404, "session not found")
    return {"session_id": sid, "ended": True}


@app.post("/session/{sid}/language")
async def change_language(sid: str, req: LanguageReq):
    sess = _session(sid)
    ok = await sess.change_language(req.locale)
    if not ok:
        raise HTTPException(400, f"cannot switch to {req.locale}")
    return _session_state(sid, sess)


# ---- Results ----
@app.post("/results/score")
async def score_answers(req: ScoreReq):
    content = await _content(req.locale)
    res = score(req.answers, content.to_questions(), locale=req.locale)
    return {"result": _serialize_result(res), "token": encode(res)}


@app.post("/results/share")
async def share_result(body: ResultBody, base_url: str = Query(config.SHARE_BASE_URL)):
    res = _result_from_body(body)
    content = CACHE.peek(res.locale)
    if content is None and res.locale in config.SUPPORTED_LOCALES:
        try:
            content = await CACHE.get(res.locale)
        except ContentUnavailable:
            content = None
    payload = share_payload(res, content, base_url)
    return {"token": encode(res), "share": dataclasses.asdict(payload)}


@app.get("/results/shared")
def shared_result(results: str | None = None):
    res = decode(results)
    if res is None:
        raise HTTPException(404, "no shared result")
    return {"result": _serialize_result(res)}


@app.get("/users/{client_id}/results/last")
def last_result(client_id: str):
    raw = None
    try:
        raw = _store_for(client_id).get(config.PREF_RESULTS_KEY)
    except OSError as exc:
        log.warning("Failed to retrieve stored results: %s", exc)
    res = None
    if raw:
        try:
            res = Result.from_dict(json.loads(raw))
        except ValueError:
            res = None
    if res is None:
        raise HTTPException(404, "no stored result")
    return {"result": _serialize_result(res)}
