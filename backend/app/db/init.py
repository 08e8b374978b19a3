# app/db/init.py
# Mongo 연결: motor. 전역 핸들 대신 Database 인스턴스를 만들어 app.state로 내려준다.
# 앱 시작 시 connect(), 종료 시 close()

from __future__ import annotations
import asyncio
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

from app.core.config import Settings
from app.db.repository import RecipeRepository

log = logging.getLogger(__name__)


class Database:
    def __init__(self, settings: Settings):
        self._settings = settings
        self._client: Optional[AsyncIOMotorClient] = None
        self._db: Optional[AsyncIOMotorDatabase] = None
        self._recipes: Optional[RecipeRepository] = None

    async def connect(self, retries: Optional[int] = None, delay: float = 1.0) -> AsyncIOMotorDatabase:
        # 준비 안 됐으면 ping 실패 → 1초 간격 재시도 (도커 기동 순서 대비)
        if self._db is not None:
            return self._db

        retries = retries or self._settings.DB_CONNECT_RETRIES
        client = AsyncIOMotorClient(self._settings.MONGO_URI)
        db = client[self._settings.MONGO_DB]

        last: Optional[Exception] = None
        for i in range(retries):
            try:
                await db.command("ping")
                break
            except Exception as e:
                last = e
                log.warning("db ping retry %d/%d: %s", i + 1, retries, e)
                await asyncio.sleep(delay)
        else:
            client.close()
            raise RuntimeError(f"MongoDB not reachable after {retries} tries: {last}")

        self._client = client
        self._db = db
        self._recipes = RecipeRepository(
            db["recipes"],
            vector_index=self._settings.VECTOR_INDEX,
            embed_dimensions=self._settings.EMBED_DIMENSIONS,
        )
        log.info("connected to MongoDB database %r", self._settings.MONGO_DB)
        return db

    @property
    def recipes(self) -> RecipeRepository:
        if self._recipes is None:
            raise RuntimeError("MongoDB is not initialized yet.")
        return self._recipes

    @property
    def preferences(self) -> AsyncIOMotorCollection:
        # 익명 사용자 상태 (즐겨찾기/검색기록/테마)
        if self._db is None:
            raise RuntimeError("MongoDB is not initialized yet.")
        return self._db["user_preferences"]

    async def ping(self) -> None:
        if self._db is None:
            raise RuntimeError("MongoDB is not initialized yet.")
        await self._db.command("ping")

    async def close(self) -> None:
        if self._client:
            self._client.close()
        self._client = None
        self._db = None
        self._recipes = None
