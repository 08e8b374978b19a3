# app/services/substitutes.py
# 빠진 재료 대체 추천: 같은 분위기 태그를 공유하는 레시피들의 재료를 힌트로 LLM에 묻는다

from __future__ import annotations
import logging

from app.db.repository import RecipeNotFound, RecipeRepository
from app.models.llm import SubstituteSuggestion
from app.services.shopping import merge_ingredients
from app.services.vibe_openai import VibeAI

log = logging.getLogger(__name__)

SIMILAR_LIMIT = 20


async def find_substitute(
    repo: RecipeRepository, ai: VibeAI, recipe_id: str, missing: str
) -> SubstituteSuggestion:
    recipe = await repo.find_by_id(recipe_id)
    if not recipe:
        raise RecipeNotFound("Recipe not found")

    similar = await repo.find_by_tags(
        recipe.get("vibeTags") or [], exclude_id=recipe["_id"], limit=SIMILAR_LIMIT
    )
    pool = merge_ingredients(similar)
    log.info(
        "substitute for %r in %r (pool of %d ingredients from %d recipes)",
        missing, recipe.get("title"), len(pool), len(similar),
    )
    return await ai.suggest_substitute(recipe, missing, pool)
