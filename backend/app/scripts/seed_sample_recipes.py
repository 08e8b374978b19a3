# scripts/seed_sample_recipes.py
# 샘플 레시피 3개를 분위기 태그/임베딩까지 붙여서 저장 (로컬 검색 테스트용)
# 실행: cd backend && python -m app.scripts.seed_sample_recipes

import asyncio
import logging
from typing import List

from app.core.config import get_settings
from app.db.init import Database
from app.db.models.recipe import ExtractedRecipe
from app.services.enrichment import enrich_recipe
from app.services.vibe_openai import VibeAI

log = logging.getLogger("seed")

SAMPLE_RECIPES: List[ExtractedRecipe] = [
    ExtractedRecipe(
        title="Grandma's Chicken Noodle Soup",
        ingredients=[
            "1 whole chicken",
            "8 cups chicken broth",
            "3 carrots, chopped",
            "3 celery stalks, chopped",
            "1 onion, diced",
            "2 cups egg noodles",
            "Fresh dill",
            "Salt and pepper",
        ],
        instructions=(
            "In a large pot, simmer chicken with broth, vegetables, and seasonings for 1 hour. "
            "Remove chicken, shred meat, return to pot. Add noodles and cook until tender. "
            "Garnish with fresh dill."
        ),
        source="Family Recipe",
    ),
    ExtractedRecipe(
        title="Crunchy Asian Slaw with Peanuts",
        ingredients=[
            "1/2 head cabbage, shredded",
            "2 carrots, julienned",
            "1 red pepper, sliced thin",
            "1/2 cup roasted peanuts",
            "3 tbsp rice vinegar",
            "2 tbsp sesame oil",
            "1 tbsp honey",
            "Lime juice",
        ],
        instructions=(
            "Combine all vegetables in a large bowl. Whisk together vinegar, sesame oil, honey, "
            "and lime juice. Toss with vegetables and top with peanuts. Refrigerate for 30 minutes."
        ),
        source="Test Recipe",
    ),
    ExtractedRecipe(
        title="Midnight Chocolate Lava Cake",
        ingredients=[
            "4 oz dark chocolate",
            "1/2 cup butter",
            "2 eggs",
            "2 egg yolks",
            "1/4 cup sugar",
            "2 tbsp flour",
            "Vanilla ice cream",
        ],
        instructions=(
            "Melt chocolate and butter together. Whisk eggs, yolks, and sugar until thick. "
            "Fold in chocolate mixture and flour. Pour into greased ramekins. Bake at 425°F "
            "for 13 minutes. Serve immediately with ice cream."
        ),
        source="Test Recipe",
    ),
]


async def main() -> int:
    settings = get_settings()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    db = Database(settings)
    await db.connect(retries=3)
    ai = VibeAI.from_settings(settings)
    if not ai.ready:
        log.error("OPENAI_API_KEY is required to embed sample recipes")
        await db.close()
        return 1

    inserted = 0
    try:
        for sample in SAMPLE_RECIPES:
            doc = await enrich_recipe(ai, sample)
            stored = await db.recipes.insert_one(doc.model_dump())
            inserted += 1
            log.info("inserted %s %r tags=%s", stored["_id"], doc.title, doc.vibeTags)
    finally:
        await ai.aclose()
        await db.close()

    log.info("done: %d recipes", inserted)
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
