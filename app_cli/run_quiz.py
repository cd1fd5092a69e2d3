from __future__ import annotations
import argparse, asyncio, logging, os, time
from journey_core import config
from journey_core.address import AddressBar
from journey_core.content import content_source_from_config
from journey_core.engine import AssessmentSession
from journey_core.language import parse_accept_language
from journey_core.store import JsonFilePreferenceStore
from journey_core.translations import TranslationCache
def ask(prompt: str, options) -> int:
    print(prompt)
    for i,opt in enumerate(options): print(f"  [{i}] {opt.text}")
    while True:
        v = input("Your choice (index): ").strip()
        if v.isdigit() and int(v) < len(options): return int(v)
        print("Enter a number index.")
def _browser_languages() -> list[str]:
    raw = os.getenv("LANGUAGE") or os.getenv("LANG") or ""
    tags = [t.split(".")[0].replace("_", "-") for t in raw.split(":") if t]
    tags = [t for t in tags if t not in ("C", "POSIX")]
    return tags or parse_accept_language(os.getenv("ACCEPT_LANGUAGE"))
async def run(args) -> int:
    address = AddressBar(config.SHARE_BASE_URL)
    if args.lang: address.set(config.LOCALE_PARAM, args.lang)
    if args.results: address.set(config.RESULTS_PARAM, args.results)
    session = AssessmentSession(TranslationCache(content_source_from_config()),
                                JsonFilePreferenceStore(args.client), address)
    signals = session.default_signals(browser_languages=_browser_languages,
                                      timezone=lambda: os.environ.get("TZ"))
    locale = await session.start(signals)
    content = session.content
    if session.shared_result is not None:
        res = session.shared_result
        print(f"Shared result: Stage {res.stage_number} ({content.stage_title(res.stage)}) {res.percentage}%")
        return 0
    print(f"{content.title} [{locale}]")
    while True:
        q = session.current_question
        cur, total = session.progress
        t0 = time.perf_counter(); v = ask(f"({cur}/{total}) {q.text}", q.options); rt = time.perf_counter() - t0
        logging.debug("answered q%d in %.1fs", session.current_index, rt)
        session.select_answer(session.current_index, v)
        if cur == total: break
        session.next_question()
    res = session.finish()
    print(f"Stage {res.stage_number}: {content.stage_title(res.stage)} ({res.percentage}%)")
    for stage in config.STAGES: print(f"  {stage}: {res.scores[stage]}")
    share = session.share()
    if share: print(f"Share: {share.url}")
    return 0
def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="AI Developer Journey self-assessment")
    ap.add_argument("--lang", default=None, help="force a locale, e.g. zh-TW")
    ap.add_argument("--results", default=None, help="show a shared result token instead of the quiz")
    ap.add_argument("--client", default="cli", help="preference namespace under DATA_DIR")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="[%(levelname)s] %(message)s")
    return asyncio.run(run(args))
if __name__ == "__main__": raise SystemExit(main())
