# app/services/enrichment.py
# 추출된 레시피 → 분위기 태그/풍미 설명 → 임베딩 → 저장용 문서
# 태그 실패는 기본 태그로 강등, 임베딩 실패는 그대로 올려보냄

from __future__ import annotations
import logging

from app.db.models.recipe import ExtractedRecipe, RecipeDoc
from app.services.vibe_openai import VibeAI

log = logging.getLogger(__name__)


async def enrich_recipe(ai: VibeAI, recipe: ExtractedRecipe) -> RecipeDoc:
    log.info("generating vibe tags for %r", recipe.title)
    profile = await ai.generate_vibe_tags(recipe)

    doc = RecipeDoc(
        **recipe.model_dump(),
        vibeTags=profile.vibeTags,
        flavorProfile=profile.flavorProfile,
    )

    log.info("generating embedding for %r", recipe.title)
    doc.embedding = await ai.recipe_embedding(doc)
    return doc
