# app/services/shopping.py
# 여러 레시피 재료를 하나의 장보기 목록으로 합침
# - 중복 제거는 대소문자/공백 무시, 표기는 처음 나온 그대로 유지
# - 카테고리 분류는 LLM (실패 시 평면 목록)

from __future__ import annotations
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from app.db.repository import RecipeNotFound, RecipeRepository, to_object_id
from app.services.vibe_openai import VibeAI

log = logging.getLogger(__name__)


def _key(item: str) -> str:
    return re.sub(r"\s+", " ", item).strip().lower()


def merge_ingredients(recipes: Iterable[Mapping[str, Any]]) -> List[str]:
    seen: set = set()
    out: List[str] = []
    for r in recipes:
        for item in r.get("ingredients") or []:
            if not isinstance(item, str) or not item.strip():
                continue
            k = _key(item)
            if k in seen:
                continue
            seen.add(k)
            out.append(item.strip())
    return out


async def build_shopping_list(
    repo: RecipeRepository,
    ai: VibeAI,
    recipe_ids: Sequence[str],
    organize: bool = True,
) -> Dict[str, Any]:
    # id는 ObjectId 문자열(소문자 hex)로 정규화해서 비교. 형식이 틀린 id는 그대로 missing
    requested = list(dict.fromkeys(i for i in recipe_ids if i))
    oids = {i: to_object_id(i) for i in requested}
    ids = list(dict.fromkeys(str(o) for o in oids.values() if o is not None))
    docs = await repo.find_many(ids)

    by_id = {str(d["_id"]): d for d in docs}
    missing = [i for i, o in oids.items() if o is None or str(o) not in by_id]
    if missing:
        raise RecipeNotFound(f"Recipe not found: {', '.join(missing)}")

    # 요청 순서대로 합친다
    items = merge_ingredients(by_id[i] for i in ids)
    categories = await ai.organize_shopping_list(items) if organize else {}
    log.info("shopping list for %d recipes -> %d items", len(ids), len(items))
    return {"recipeIds": ids, "items": items, "categories": categories}
