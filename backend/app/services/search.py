# app/services/search.py
# 자연어 "분위기" 검색: 질의 임베딩 → $vectorSearch → 점수(0~1)를 정수 %로

from __future__ import annotations
import logging
import math
from typing import Any, Dict, List

from app.db.repository import RecipeRepository
from app.services.vibe_openai import VibeAI

log = logging.getLogger(__name__)


def vibe_match(score: Any) -> int:
    # round(score * 100), .5는 올림, 0~100 클램프
    try:
        s = float(score)
    except (TypeError, ValueError):
        return 0
    if math.isnan(s):
        return 0
    return max(0, min(100, int(math.floor(s * 100 + 0.5))))


async def search_by_vibe(
    repo: RecipeRepository,
    ai: VibeAI,
    query: str,
    limit: int = 10,
    num_candidates: int = 50,
    explain: bool = False,
) -> List[Dict[str, Any]]:
    log.info("vibe search %r (limit=%d explain=%s)", query, limit, explain)
    vector = await ai.embed(query)
    hits = await repo.vector_search(vector, limit=limit, num_candidates=num_candidates)

    out: List[Dict[str, Any]] = []
    for h in hits:
        h = dict(h)
        h.pop("embedding", None)
        h["vibeMatch"] = vibe_match(h.get("score"))
        h["score"] = float(h.get("score") or 0.0)
        out.append(h)

    if explain and out:
        for h, why in zip(out, await ai.match_explanations(query, out)):
            h["explanation"] = why
    return out
