# app/services/meal_planner.py
# 분위기 기반 3코스(전채/메인/디저트) 식단
# 1) 무드 임베딩 → 벡터 검색으로 후보 확보 (3개 미만이면 에러, 부분 식단 없음)
# 2) 상위 30개를 번호 목록으로 LLM에 보여주고 코스 번호 선택
# 3) 세 레시피 재료 합쳐 카테고리별 장보기 목록

from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping

from app.db.repository import PLANNER_FIELDS, RecipeRepository
from app.services.prompts import PLANNER_MENU_SIZE
from app.services.search import vibe_match
from app.services.shopping import merge_ingredients
from app.services.vibe_openai import VibeAI

log = logging.getLogger(__name__)

MIN_RECIPES = 3


class NotEnoughRecipes(Exception):
    pass


def _course(doc: Mapping[str, Any]) -> Dict[str, Any]:
    out = {f: doc.get(f) for f in PLANNER_FIELDS if doc.get(f) is not None}
    out["_id"] = doc["_id"]
    out["vibeMatch"] = vibe_match(doc.get("score"))
    return out


def _pick(menu: List[Dict[str, Any]], number: int, fallback: Dict[str, Any]) -> Dict[str, Any]:
    # LLM 번호는 1부터. 범위 밖이면 폴백 레시피
    if 1 <= number <= len(menu):
        return menu[number - 1]
    return fallback


async def generate_meal_plan(
    repo: RecipeRepository,
    ai: VibeAI,
    mood: str,
    limit: int = 50,
    num_candidates: int = 100,
) -> Dict[str, Any]:
    vector = await ai.embed(mood)
    candidates = await repo.vector_search(
        vector, limit=limit, num_candidates=num_candidates, fields=PLANNER_FIELDS
    )
    if len(candidates) < MIN_RECIPES:
        raise NotEnoughRecipes(
            "Not enough recipes in database to create a meal plan. Please add more recipes."
        )

    menu = candidates[:PLANNER_MENU_SIZE]
    selection = await ai.select_courses(mood, menu)

    n = len(candidates)
    appetizer = _pick(menu, selection.appetizer, candidates[0])
    main = _pick(menu, selection.main, candidates[n // 2])
    dessert = _pick(menu, selection.dessert, candidates[n - 1])
    log.info(
        "meal plan for %r: %r / %r / %r",
        mood, appetizer.get("title"), main.get("title"), dessert.get("title"),
    )

    items = merge_ingredients([appetizer, main, dessert])
    shopping = await ai.organize_shopping_list(items)

    return {
        "appetizer": _course(appetizer),
        "main": _course(main),
        "dessert": _course(dessert),
        "explanation": selection.explanation,
        "shoppingList": shopping,
        "moodQuery": mood,
    }
