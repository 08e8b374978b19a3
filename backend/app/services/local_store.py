# app/services/local_store.py
# 익명 사용자별 상태(즐겨찾기/검색기록/테마)를 키-값 저장소 인터페이스 뒤로 분리
# 운영: MongoStore (user_preferences 컬렉션, anon_id 쿠키 단위) / 테스트: MemoryStore

from __future__ import annotations
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from motor.motor_asyncio import AsyncIOMotorCollection

log = logging.getLogger(__name__)

FAVORITES_KEY = "favoriteRecipes"
HISTORY_KEY = "searchHistory"
THEME_KEY = "theme"

MAX_HISTORY = 10

# 즐겨찾기에는 카드 표시용 필드만 보관
FAVORITE_FIELDS = ("title", "vibeTags", "flavorProfile", "source")


class KeyValueStore(ABC):
    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        # localStorage처럼 JSON 문자열로 보관 → 꺼낼 때마다 새 객체
        self._data: Dict[str, str] = {k: json.dumps(v) for k, v in (initial or {}).items()}

    async def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else default

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class MongoStore(KeyValueStore):
    """user_preferences 문서 하나(anon_id)에 키별 필드로 저장. 첫 저장 때 upsert."""

    def __init__(self, collection: AsyncIOMotorCollection, anon_id: str):
        self.col = collection
        self.anon_id = anon_id

    async def get(self, key: str, default: Any = None) -> Any:
        doc = await self.col.find_one({"anon_id": self.anon_id}, {key: 1})
        if not doc or key not in doc:
            return default
        return doc[key]

    async def set(self, key: str, value: Any) -> None:
        now = datetime.now(timezone.utc)
        await self.col.update_one(
            {"anon_id": self.anon_id},
            {"$set": {key: value, "updated_at": now}, "$setOnInsert": {"created_at": now}},
            upsert=True,
        )

    async def delete(self, key: str) -> None:
        await self.col.update_one({"anon_id": self.anon_id}, {"$unset": {key: ""}})


class Favorites:
    def __init__(self, store: KeyValueStore):
        self.store = store

    async def list(self) -> List[Dict[str, Any]]:
        items = await self.store.get(FAVORITES_KEY, [])
        return items if isinstance(items, list) else []

    async def is_favorite(self, recipe_id: str) -> bool:
        return any(r.get("_id") == recipe_id for r in await self.list())

    async def toggle(self, recipe: Mapping[str, Any]) -> bool:
        """있으면 빼고 없으면 추가. 추가됐으면 True."""
        rid = str(recipe["_id"])
        items = await self.list()
        if any(r.get("_id") == rid for r in items):
            await self.store.set(FAVORITES_KEY, [r for r in items if r.get("_id") != rid])
            return False
        entry = {f: recipe.get(f) for f in FAVORITE_FIELDS if recipe.get(f) is not None}
        entry["_id"] = rid
        items.append(entry)
        await self.store.set(FAVORITES_KEY, items)
        return True

    async def remove(self, recipe_id: str) -> None:
        items = await self.list()
        await self.store.set(FAVORITES_KEY, [r for r in items if r.get("_id") != recipe_id])


class SearchHistory:
    def __init__(self, store: KeyValueStore, limit: int = MAX_HISTORY):
        self.store = store
        self.limit = limit

    async def list(self) -> List[str]:
        items = await self.store.get(HISTORY_KEY, [])
        return items if isinstance(items, list) else []

    async def add(self, query: str) -> List[str]:
        # 최신이 앞, 대소문자 무시 중복 제거, 최대 limit개
        q = (query or "").strip()
        if not q:
            return await self.list()
        rest = [x for x in await self.list() if x.lower() != q.lower()]
        items = ([q] + rest)[: self.limit]
        await self.store.set(HISTORY_KEY, items)
        return items

    async def clear(self) -> None:
        await self.store.delete(HISTORY_KEY)


class ThemePreference:
    THEMES = ("light", "dark")

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get(self) -> str:
        v = await self.store.get(THEME_KEY, "light")
        return v if v in self.THEMES else "light"

    async def set(self, theme: str) -> str:
        if theme not in self.THEMES:
            raise ValueError(f"theme must be one of {', '.join(self.THEMES)}")
        await self.store.set(THEME_KEY, theme)
        return theme

    async def toggle(self) -> str:
        return await self.set("dark" if await self.get() == "light" else "light")
