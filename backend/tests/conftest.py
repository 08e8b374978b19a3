"""
Shared fixtures
===============

- FakeRecipeRepository: in-memory stand-in for the Mongo repository, including a
  cosine-similarity version of $vectorSearch.
- FakeOpenAI: async stub exposing chat.completions.create / embeddings.create,
  so the real VibeAI parsing and fallback paths run without network.
- FakePrefsCollection: in-memory user_preferences collection behind MongoStore.
- client: TestClient with dependency overrides (lifespan is not started, so no
  MongoDB connection is attempted).
"""

from __future__ import annotations

import copy
import hashlib
import json
import math
import random
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi import Depends
from fastapi.testclient import TestClient

from app.core.deps import get_ai, get_or_set_anon_id, get_prefs_store, get_repo
from app.db.repository import SEARCH_FIELDS, to_object_id
from app.services.local_store import MongoStore
from app.services.vibe_openai import VibeAI

DIM = 16


def fake_vector(text: str, dim: int = DIM) -> List[float]:
    seed = hashlib.sha256((text or "").encode("utf-8")).hexdigest()
    rng = random.Random(int(seed, 16))
    raw = [rng.uniform(-1.0, 1.0) for _ in range(dim)]
    norm = math.sqrt(sum(v * v for v in raw)) or 1.0
    return [v / norm for v in raw]


def _cosine(a: List[float], b: List[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    na = math.sqrt(sum(x * x for x in a)) or 1.0
    nb = math.sqrt(sum(y * y for y in b)) or 1.0
    return dot / (na * nb)


class FakeRecipeRepository:
    def __init__(self):
        self.docs: List[Dict[str, Any]] = []

    @staticmethod
    def _public(doc: Dict[str, Any]) -> Dict[str, Any]:
        out = copy.deepcopy(doc)
        out.pop("embedding", None)
        return out

    def add(self, **fields: Any) -> str:
        doc = {
            "_id": ObjectId(),
            "title": "Untitled",
            "ingredients": [],
            "instructions": "",
            "source": "Test Recipe",
            "vibeTags": [],
            "flavorProfile": "",
            "createdAt": datetime.now(timezone.utc),
        }
        doc.update(fields)
        doc.setdefault("embedding", fake_vector(doc["title"]))
        self.docs.append(doc)
        return str(doc["_id"])

    async def insert_one(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        stored = {**copy.deepcopy(doc), "_id": ObjectId(), "createdAt": datetime.now(timezone.utc)}
        self.docs.append(stored)
        out = self._public(stored)
        out["_id"] = str(stored["_id"])
        return out

    async def find_by_id(self, rid: Any) -> Optional[Dict[str, Any]]:
        oid = to_object_id(rid)
        for d in self.docs:
            if oid is not None and d["_id"] == oid:
                return self._public(d)
        return None

    async def find_all(self, limit: int = 50) -> List[Dict[str, Any]]:
        return [self._public(d) for d in self.docs[:limit]]

    async def find_random(self) -> Optional[Dict[str, Any]]:
        return self._public(random.choice(self.docs)) if self.docs else None

    async def find_many(self, ids) -> List[Dict[str, Any]]:
        oids = {o for o in (to_object_id(i) for i in ids) if o is not None}
        return [self._public(d) for d in self.docs if d["_id"] in oids]

    async def find_by_tags(self, tags, exclude_id=None, limit: int = 20) -> List[Dict[str, Any]]:
        excl = to_object_id(exclude_id)
        out = [
            self._public(d)
            for d in self.docs
            if d["_id"] != excl and set(d.get("vibeTags") or []) & set(tags)
        ]
        return out[:limit]

    async def vector_search(self, vector, limit=10, num_candidates=50, fields=SEARCH_FIELDS):
        scored = []
        for d in self.docs:
            emb = d.get("embedding") or []
            if len(emb) != len(vector):
                continue
            # Atlas cosine score: (1 + cos) / 2
            score = (1.0 + _cosine(vector, emb)) / 2.0
            row = {f: copy.deepcopy(d[f]) for f in fields if f in d}
            row["_id"] = d["_id"]
            row["score"] = score
            scored.append(row)
        scored.sort(key=lambda r: r["score"], reverse=True)
        return scored[:num_candidates][:limit]


def default_responder(kwargs: Dict[str, Any]) -> str:
    prompt = kwargs["messages"][-1]["content"]
    if '"vibeTags"' in prompt:
        return json.dumps({
            "vibeTags": ["Bright", "Zesty", "Afternoon Tea"],
            "flavorProfile": "Tart lemon curd in a buttery shell.",
        })
    if "Suggest the best substitute" in prompt:
        return json.dumps({
            "substitute": "lime juice",
            "reason": "Keeps the bright acidity.",
            "confidence": "high",
        })
    if "3-course meal" in prompt:
        return json.dumps({"appetizer": 1, "main": 2, "dessert": 3, "explanation": "Light to rich."})
    if "Organize this shopping list" in prompt:
        return json.dumps({"Produce": ["2 lemons"], "Pantry": ["1 cup sugar"]})
    return "It fits the mood you asked for."


class FakeCompletions:
    def __init__(self, responder: Callable[[Dict[str, Any]], Any]):
        self.responder = responder
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs: Any):
        self.calls.append(kwargs)
        reply = self.responder(kwargs)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeEmbeddings:
    def __init__(self):
        self.inputs: List[str] = []

    async def create(self, model: str, input: str):
        self.inputs.append(input)
        return SimpleNamespace(data=[SimpleNamespace(embedding=fake_vector(input))])


class FakeOpenAI:
    def __init__(self, responder: Callable[[Dict[str, Any]], Any] = default_responder):
        self.chat = SimpleNamespace(completions=FakeCompletions(responder))
        self.embeddings = FakeEmbeddings()
        self.closed = False

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def repo() -> FakeRecipeRepository:
    return FakeRecipeRepository()


@pytest.fixture
def openai_stub() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def ai(openai_stub) -> VibeAI:
    return VibeAI(openai_stub, chat_model="test-chat", embed_model="test-embed")


@pytest.fixture
def client(repo, ai):
    from app.main import app

    app.dependency_overrides[get_repo] = lambda: repo
    app.dependency_overrides[get_ai] = lambda: ai
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakePrefsCollection:
    """In-memory user_preferences: find_one and update_one with $set / $setOnInsert / $unset / upsert."""

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []

    def _match(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for d in self.docs:
            if all(d.get(k) == v for k, v in query.items()):
                return d
        return None

    async def find_one(self, query: Dict[str, Any], projection: Optional[Dict[str, Any]] = None):
        d = self._match(query)
        if d is None:
            return None
        if projection:
            return copy.deepcopy({k: v for k, v in d.items() if k in projection or k == "_id"})
        return copy.deepcopy(d)

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any], upsert: bool = False):
        d = self._match(query)
        if d is None:
            if not upsert:
                return SimpleNamespace(matched_count=0, upserted_id=None)
            d = {"_id": ObjectId(), **query, **copy.deepcopy(update.get("$setOnInsert", {}))}
            self.docs.append(d)
        d.update(copy.deepcopy(update.get("$set", {})))
        for k in update.get("$unset", {}):
            d.pop(k, None)
        return SimpleNamespace(matched_count=1, upserted_id=d["_id"])


@pytest.fixture
def prefs_collection() -> FakePrefsCollection:
    return FakePrefsCollection()


@pytest.fixture
def prefs_client(client, prefs_collection):
    # real MongoStore and anon_id cookie flow, only the collection is faked
    from app.main import app

    def store(anon_id: str = Depends(get_or_set_anon_id)):
        return MongoStore(prefs_collection, anon_id)

    app.dependency_overrides[get_prefs_store] = store
    return client
