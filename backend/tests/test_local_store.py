"""
Per-visitor state (favorites / search history / theme) over both store backends.
"""

import pytest

from app.services.local_store import (
    Favorites,
    MemoryStore,
    MongoStore,
    SearchHistory,
    ThemePreference,
)

from conftest import FakePrefsCollection


@pytest.fixture(params=["memory", "mongo"])
def store(request):
    if request.param == "memory":
        return MemoryStore()
    return MongoStore(FakePrefsCollection(), "visitor-1")


@pytest.mark.asyncio
async def test_memory_store_returns_copies():
    s = MemoryStore({"k": [1, 2]})
    got = await s.get("k")
    got.append(3)
    assert await s.get("k") == [1, 2]
    await s.delete("k")
    assert await s.get("k", "gone") == "gone"


@pytest.mark.asyncio
async def test_mongo_store_upserts_one_document_per_visitor():
    col = FakePrefsCollection()
    a, b = MongoStore(col, "a"), MongoStore(col, "b")

    await a.set("theme", "dark")
    await a.set("searchHistory", ["soup"])
    await b.set("theme", "light")

    assert len(col.docs) == 2
    doc = next(d for d in col.docs if d["anon_id"] == "a")
    assert doc["theme"] == "dark"
    assert doc["created_at"] is not None and doc["updated_at"] is not None

    await a.delete("theme")
    assert await a.get("theme", "none") == "none"
    assert await a.get("searchHistory") == ["soup"]
    assert await b.get("theme") == "light"
    assert await MongoStore(col, "nobody").get("theme") is None


@pytest.mark.asyncio
async def test_favorites_toggle(store):
    fav = Favorites(store)
    recipe = {"_id": "abc", "title": "Lemon Tart", "ingredients": ["2 lemons"], "embedding": [0.1]}

    assert await fav.toggle(recipe) is True
    assert await fav.is_favorite("abc")
    assert await fav.list() == [{"_id": "abc", "title": "Lemon Tart"}]

    assert await fav.toggle(recipe) is False
    assert await fav.list() == []


@pytest.mark.asyncio
async def test_favorites_remove(store):
    fav = Favorites(store)
    await fav.toggle({"_id": "a", "title": "A"})
    await fav.toggle({"_id": "b", "title": "B"})
    await fav.remove("a")
    assert [r["_id"] for r in await fav.list()] == ["b"]


@pytest.mark.asyncio
async def test_search_history_most_recent_first_and_capped(store):
    history = SearchHistory(store)
    for i in range(12):
        await history.add(f"query {i}")
    items = await history.list()
    assert len(items) == 10
    assert items[0] == "query 11"
    assert "query 1" not in items


@pytest.mark.asyncio
async def test_search_history_dedupes_case_insensitively(store):
    history = SearchHistory(store)
    await history.add("Cozy Night")
    await history.add("spicy")
    await history.add("cozy night")
    assert await history.list() == ["cozy night", "spicy"]

    await history.add("   ")
    assert await history.list() == ["cozy night", "spicy"]

    await history.clear()
    assert await history.list() == []


@pytest.mark.asyncio
async def test_theme_defaults_to_light_and_toggles(store):
    theme = ThemePreference(store)
    assert await theme.get() == "light"
    assert await theme.toggle() == "dark"
    assert await theme.get() == "dark"
    assert await theme.toggle() == "light"

    with pytest.raises(ValueError):
        await theme.set("neon")
    await store.set("theme", "neon")
    assert await theme.get() == "light"
