from __future__ import annotations
import asyncio, logging, sys
from collections import Counter
from journey_core import config
from journey_core.content import PackageContentSource
from journey_core.translations import TranslationCache
from journey_core.types import ContentUnavailable

# Every locale should ship the same question count and each stage should be
# reachable at full marks.


async def _load_all(cache: TranslationCache) -> dict:
    out = {}
    for locale in config.SUPPORTED_LOCALES:
        try:
            out[locale] = await cache.get(locale)
        except ContentUnavailable as exc:
            out[locale] = exc
    return out


def report(contents: dict) -> int:
    problems = 0
    counts = {}
    for locale, content in contents.items():
        if isinstance(content, Exception):
            print(f"{locale}: ✗ {content}\n")
            problems += 1
            continue
        questions = content.to_questions()
        counts[locale] = len(questions)
        best = Counter()
        for q in questions:
            for stage in config.STAGES:
                best[stage] += max(int(o.score.get(stage, 0)) for o in q.options)
        ceiling = len(questions) * config.MAX_OPTION_SCORE
        print(f"{locale}: questions={len(questions)} max/stage≤{ceiling}")
        for stage in config.STAGES:
            title = content.stage_title(stage)
            print(f"  {stage} ({title}): best possible {best[stage]}")
            if best[stage] == 0:
                print(f"  → {stage} cannot be reached")
                problems += 1
            if stage not in content.stages:
                print(f"  → missing stage text for {stage}")
                problems += 1
        print()
    if len(set(counts.values())) > 1:
        print(f"✗ question counts differ across locales: {counts}")
        problems += 1
    if not problems:
        print("✓ Content OK")
    return 0 if not problems else 2


def main() -> int:
    logging.basicConfig(level=logging.WARNING, format="[%(levelname)s] %(message)s")
    cache = TranslationCache(PackageContentSource())
    return report(asyncio.run(_load_all(cache)))


if __name__ == "__main__":
    sys.exit(main())
