# app/api/routes_recipes.py
# 레시피 등록(URL/PDF) → 분위기 태그/임베딩 → 저장, 분위기 검색, 단건/목록/랜덤 조회,
# 대체 재료, 3코스 식단, 장보기 목록
# 에러: 입력 누락 400 / 없음 404 / 키 없음 503 / 외부·DB 실패 500(원인 메시지 그대로)

from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.deps import get_ai, get_config, get_repo
from app.db.models.recipe import RecipeOut
from app.db.models.schemas import (
    MealPlanIn,
    MealPlanOut,
    ScrapeIn,
    ScrapeOut,
    SearchIn,
    SearchOut,
    ShoppingListIn,
    ShoppingListOut,
    SubstituteIn,
)
from app.db.repository import RecipeNotFound, RecipeRepository
from app.models.llm import SubstituteSuggestion
from app.services.enrichment import enrich_recipe
from app.services.meal_planner import NotEnoughRecipes, generate_meal_plan
from app.services.scraper import InvalidPdfError, extract_recipe_from_pdf, scrape_recipe_from_url
from app.services.search import search_by_vibe
from app.services.shopping import build_shopping_list
from app.services.substitutes import find_substitute
from app.services.vibe_openai import AINotReady, VibeAI

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


def _upstream_error(e: Exception, what: str) -> HTTPException:
    # 키 없음은 503, 나머지는 500 + 원인 메시지
    if isinstance(e, AINotReady):
        log.warning("%s: %s", what, e)
        return HTTPException(status_code=503, detail=str(e))
    log.exception("%s failed", what)
    return HTTPException(status_code=500, detail=str(e))


def _blank(v) -> bool:
    return not (isinstance(v, str) and v.strip())


# ------------------------------
# 등록
# ------------------------------

@router.post("/scrape", response_model=ScrapeOut)
async def scrape_recipe(
    body: ScrapeIn,
    repo: RecipeRepository = Depends(get_repo),
    ai: VibeAI = Depends(get_ai),
    cfg: Settings = Depends(get_config),
):
    if _blank(body.url) and _blank(body.pdfBuffer):
        raise HTTPException(status_code=400, detail="URL or PDF required")

    try:
        if not _blank(body.url):
            log.info("scraping recipe from URL: %s", body.url)
            extracted = await scrape_recipe_from_url(body.url, timeout=cfg.SCRAPE_TIMEOUT)
        else:
            log.info("extracting recipe from PDF")
            # PyMuPDF는 동기 → 스레드풀에서 실행
            extracted = await run_in_threadpool(extract_recipe_from_pdf, body.pdfBuffer)
    except InvalidPdfError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise _upstream_error(e, "recipe extraction")

    try:
        doc = await enrich_recipe(ai, extracted)
        recipe = await repo.insert_one(doc.model_dump())
    except Exception as e:
        raise _upstream_error(e, "recipe enrichment")

    return {"success": True, "recipeId": recipe["_id"], "recipe": recipe}


# ------------------------------
# 검색
# ------------------------------

@router.post("/search", response_model=SearchOut)
async def search_recipes(
    body: SearchIn,
    repo: RecipeRepository = Depends(get_repo),
    ai: VibeAI = Depends(get_ai),
    cfg: Settings = Depends(get_config),
):
    if _blank(body.query):
        raise HTTPException(status_code=400, detail="Query required")
    query = body.query.strip()

    try:
        results = await search_by_vibe(
            repo,
            ai,
            query,
            limit=body.limit,
            num_candidates=max(cfg.SEARCH_CANDIDATES, body.limit),
            explain=body.explain,
        )
    except Exception as e:
        raise _upstream_error(e, "vibe search")
    return {"query": query, "results": results}


# ------------------------------
# 조회 (정적 경로 먼저: /random → /{rid})
# ------------------------------

@router.get("", response_model=List[RecipeOut])
async def list_recipes(
    repo: RecipeRepository = Depends(get_repo),
    cfg: Settings = Depends(get_config),
):
    try:
        return await repo.find_all(limit=cfg.LIST_LIMIT)
    except Exception as e:
        raise _upstream_error(e, "list recipes")


@router.get("/random", response_model=RecipeOut)
async def random_recipe(repo: RecipeRepository = Depends(get_repo)):
    try:
        doc = await repo.find_random()
    except Exception as e:
        raise _upstream_error(e, "random recipe")
    if not doc:
        raise HTTPException(status_code=404, detail="No recipes found")
    return doc


# ------------------------------
# 대체 재료 / 식단 / 장보기
# ------------------------------

@router.post("/substitute", response_model=SubstituteSuggestion)
async def substitute_ingredient(
    body: SubstituteIn,
    repo: RecipeRepository = Depends(get_repo),
    ai: VibeAI = Depends(get_ai),
):
    if _blank(body.recipeId):
        raise HTTPException(status_code=400, detail="recipeId required")
    if _blank(body.missingIngredient):
        raise HTTPException(status_code=400, detail="Missing ingredient required")

    try:
        return await find_substitute(repo, ai, body.recipeId.strip(), body.missingIngredient.strip())
    except RecipeNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise _upstream_error(e, "substitute")


@router.post("/meal-planner", response_model=MealPlanOut)
async def meal_planner(
    body: MealPlanIn,
    repo: RecipeRepository = Depends(get_repo),
    ai: VibeAI = Depends(get_ai),
    cfg: Settings = Depends(get_config),
):
    if _blank(body.mood):
        raise HTTPException(status_code=400, detail="Mood required")

    try:
        return await generate_meal_plan(
            repo,
            ai,
            body.mood.strip(),
            limit=cfg.PLANNER_LIMIT,
            num_candidates=cfg.PLANNER_CANDIDATES,
        )
    except NotEnoughRecipes as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise _upstream_error(e, "meal planner")


@router.post("/shopping-list", response_model=ShoppingListOut)
async def shopping_list(
    body: ShoppingListIn,
    repo: RecipeRepository = Depends(get_repo),
    ai: VibeAI = Depends(get_ai),
):
    ids = [i.strip() for i in body.recipeIds if not _blank(i)]
    if not ids:
        raise HTTPException(status_code=400, detail="recipeIds required")

    try:
        return await build_shopping_list(repo, ai, ids, organize=body.organize)
    except RecipeNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise _upstream_error(e, "shopping list")


@router.get("/{rid}", response_model=RecipeOut)
async def get_recipe(rid: str, repo: RecipeRepository = Depends(get_repo)):
    try:
        doc = await repo.find_by_id(rid)
    except Exception as e:
        raise _upstream_error(e, "get recipe")
    if not doc:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return doc
