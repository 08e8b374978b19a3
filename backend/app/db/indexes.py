# 컬렉션 인덱스 생성
# 앱 스타트업에서 한 번 ensure_indexes()를 await로 호출한다.
# 벡터 인덱스는 Atlas UI/API에서 수동 생성 (여기서는 안내 로그만)

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection

from app.db.repository import RecipeRepository

log = logging.getLogger(__name__)


def vector_index_definition(path: str = "embedding", dimensions: int = 1536) -> dict:
    # Atlas Vector Search 인덱스 정의(JSON 에디터에 그대로 붙여넣기)
    return {
        "fields": [
            {
                "type": "vector",
                "path": path,
                "numDimensions": dimensions,
                "similarity": "cosine",
            }
        ]
    }


async def ensure_indexes(repo: RecipeRepository, prefs: Optional[AsyncIOMotorCollection] = None) -> None:
    await repo.col.create_index([("createdAt", -1)])
    await repo.col.create_index("vibeTags")
    if prefs is not None:
        # 익명 사용자당 문서 하나
        await prefs.create_index("anon_id", unique=True)

    log.info(
        "vector search needs Atlas index %r: %s",
        repo.vector_index,
        vector_index_definition(dimensions=repo.embed_dimensions),
    )
