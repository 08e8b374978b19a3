# app/db/repository.py
# recipes 컬렉션 래퍼: 라우터/서비스는 컬렉션을 직접 만지지 않고 이 객체만 사용
# 벡터 검색은 Atlas $vectorSearch에 그대로 위임

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection

log = logging.getLogger(__name__)

# 응답에 절대 싣지 않는 필드 (1536차원이라 크다)
NO_EMBEDDING = {"embedding": 0}

SEARCH_FIELDS = ("title", "vibeTags", "flavorProfile", "ingredients", "source")
PLANNER_FIELDS = ("title", "ingredients", "instructions", "vibeTags", "flavorProfile", "source")


class RecipeNotFound(Exception):
    pass


def to_object_id(rid: Any) -> Optional[ObjectId]:
    # 잘못된 id 문자열은 None → 호출부에서 404 처리
    if isinstance(rid, ObjectId):
        return rid
    if isinstance(rid, str) and ObjectId.is_valid(rid):
        return ObjectId(rid)
    return None


class RecipeRepository:
    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        vector_index: str = "vector_index",
        embed_dimensions: int = 1536,
    ):
        self.col = collection
        self.vector_index = vector_index
        self.embed_dimensions = embed_dimensions

    async def insert_one(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        # 저장된 문서를 embedding 없이 돌려준다 (_id는 문자열, createdAt 포함)
        emb = doc.get("embedding")
        if emb is not None and len(emb) != self.embed_dimensions:
            log.warning(
                "embedding length %d != configured %d; vector search will skip this recipe",
                len(emb), self.embed_dimensions,
            )
        payload = {k: v for k, v in doc.items() if k != "_id"}
        payload["createdAt"] = datetime.now(timezone.utc)
        res = await self.col.insert_one(payload)

        stored = {k: v for k, v in payload.items() if k != "embedding"}
        stored["_id"] = str(res.inserted_id)
        return stored

    async def find_by_id(self, rid: Any) -> Optional[Dict[str, Any]]:
        oid = to_object_id(rid)
        if oid is None:
            return None
        return await self.col.find_one({"_id": oid}, NO_EMBEDDING)

    async def find_all(self, limit: int = 50) -> List[Dict[str, Any]]:
        cur = self.col.find({}, NO_EMBEDDING).limit(limit)
        return await cur.to_list(length=limit)

    async def find_random(self) -> Optional[Dict[str, Any]]:
        pipeline = [{"$sample": {"size": 1}}, {"$project": NO_EMBEDDING}]
        docs = await self.col.aggregate(pipeline).to_list(length=1)
        return docs[0] if docs else None

    async def find_many(self, ids: Iterable[Any]) -> List[Dict[str, Any]]:
        oids = [o for o in (to_object_id(i) for i in ids) if o is not None]
        if not oids:
            return []
        cur = self.col.find({"_id": {"$in": oids}}, NO_EMBEDDING)
        return await cur.to_list(length=len(oids))

    async def find_by_tags(
        self, tags: Sequence[str], exclude_id: Any = None, limit: int = 20
    ) -> List[Dict[str, Any]]:
        # 대체 재료 후보: 같은 분위기 태그를 하나라도 공유하는 다른 레시피
        if not tags:
            return []
        q: Dict[str, Any] = {"vibeTags": {"$in": list(tags)}}
        oid = to_object_id(exclude_id)
        if oid is not None:
            q["_id"] = {"$ne": oid}
        cur = self.col.find(q, NO_EMBEDDING).limit(limit)
        return await cur.to_list(length=limit)

    async def vector_search(
        self,
        vector: List[float],
        limit: int = 10,
        num_candidates: int = 50,
        fields: Sequence[str] = SEARCH_FIELDS,
    ) -> List[Dict[str, Any]]:
        proj: Dict[str, Any] = {f: 1 for f in fields}
        proj["score"] = {"$meta": "vectorSearchScore"}
        pipeline = [
            {
                "$vectorSearch": {
                    "index": self.vector_index,
                    "path": "embedding",
                    "queryVector": vector,
                    "numCandidates": num_candidates,
                    "limit": limit,
                }
            },
            {"$project": proj},
        ]
        return await self.col.aggregate(pipeline).to_list(length=limit)
