# app/api/routes_prefs.py
# 익명 사용자 상태: 즐겨찾기 / 최근 검색어(최대 10) / 테마
# anon_id 쿠키 단위로 user_preferences 컬렉션에 저장. 저장소 오류는 503

from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from app.core.deps import get_or_set_anon_id, get_prefs_store, get_repo
from app.db.models.schemas import (
    FavoriteIn,
    FavoriteToggleOut,
    HistoryIn,
    HistoryOut,
    PreferencesOut,
    ThemeIn,
    ThemeOut,
)
from app.db.repository import RecipeRepository, to_object_id
from app.services.local_store import Favorites, KeyValueStore, SearchHistory, ThemePreference

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


def _store_error(e: Exception) -> HTTPException:
    log.exception("preferences store failed")
    return HTTPException(status_code=503, detail=f"Preferences store error: {e}")


@router.get("", response_model=PreferencesOut)
async def get_preferences(
    anon_id: str = Depends(get_or_set_anon_id),
    store: KeyValueStore = Depends(get_prefs_store),
):
    try:
        return {
            "anonId": anon_id,
            "favorites": await Favorites(store).list(),
            "searchHistory": await SearchHistory(store).list(),
            "theme": await ThemePreference(store).get(),
        }
    except Exception as e:
        raise _store_error(e)


# ------------------------------
# 즐겨찾기
# ------------------------------

@router.post("/favorites", response_model=FavoriteToggleOut)
async def toggle_favorite(
    body: FavoriteIn,
    store: KeyValueStore = Depends(get_prefs_store),
    repo: RecipeRepository = Depends(get_repo),
):
    oid = to_object_id((body.recipeId or "").strip())
    if oid is None:
        raise HTTPException(status_code=400, detail="recipeId required")
    rid = str(oid)
    favorites = Favorites(store)

    try:
        if await favorites.is_favorite(rid):
            added = await favorites.toggle({"_id": rid})
        else:
            recipe = await repo.find_by_id(rid)
            if not recipe:
                raise HTTPException(status_code=404, detail="Recipe not found")
            added = await favorites.toggle(recipe)
        return {"favorite": added, "favorites": await favorites.list()}
    except HTTPException:
        raise
    except Exception as e:
        raise _store_error(e)


@router.delete("/favorites/{rid}", response_model=FavoriteToggleOut)
async def remove_favorite(rid: str, store: KeyValueStore = Depends(get_prefs_store)):
    oid = to_object_id(rid)
    favorites = Favorites(store)
    try:
        if oid is not None:
            await favorites.remove(str(oid))
        return {"favorite": False, "favorites": await favorites.list()}
    except Exception as e:
        raise _store_error(e)


# ------------------------------
# 검색 기록
# ------------------------------

@router.post("/history", response_model=HistoryOut)
async def add_search(body: HistoryIn, store: KeyValueStore = Depends(get_prefs_store)):
    if not (body.query or "").strip():
        raise HTTPException(status_code=400, detail="Query required")
    try:
        items: List[str] = await SearchHistory(store).add(body.query)
    except Exception as e:
        raise _store_error(e)
    return {"searchHistory": items}


@router.delete("/history", response_model=HistoryOut)
async def clear_history(store: KeyValueStore = Depends(get_prefs_store)):
    try:
        await SearchHistory(store).clear()
    except Exception as e:
        raise _store_error(e)
    return {"searchHistory": []}


# ------------------------------
# 테마
# ------------------------------

@router.put("/theme", response_model=ThemeOut)
async def update_theme(body: ThemeIn, store: KeyValueStore = Depends(get_prefs_store)):
    theme = ThemePreference(store)
    if body.theme is not None and body.theme not in ThemePreference.THEMES:
        raise HTTPException(status_code=400, detail="theme must be light or dark")
    try:
        value = await (theme.set(body.theme) if body.theme else theme.toggle())
    except Exception as e:
        raise _store_error(e)
    return {"theme": value}
