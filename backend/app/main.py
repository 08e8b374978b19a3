# app/main.py
# FastAPI 앱 초기화 및 라우터 설정
# DB/AI 클라이언트는 lifespan에서 한 번 만들어 app.state로 보관 (시작 시 연결, 종료 시 정리)

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes_prefs import router as prefs_router
from app.api.routes_recipes import router as recipes_router
from app.core.config import get_settings
from app.db.indexes import ensure_indexes
from app.db.init import Database
from app.services.vibe_openai import VibeAI

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = Database(settings)
    await db.connect()
    log.info("[startup] db ready")

    try:
        await ensure_indexes(db.recipes, prefs=db.preferences)
        log.info("[startup] indexes ensured")
    except Exception as e:
        log.warning("[startup] ensure_indexes failed: %s", e)

    ai = VibeAI.from_settings(settings)
    app.state.db = db
    app.state.ai = ai
    try:
        yield
    finally:
        await ai.aclose()
        await db.close()
        log.info("[shutdown] connections closed")


app = FastAPI(title="Recipe Vibe Finder - API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"status": "ok"}


@app.get("/health")
async def health(request: Request):
    ok = {"status": "ok", "message": "Recipe Vibe Finder API is running", "db": "skip"}
    db = getattr(request.app.state, "db", None)
    if db is not None:
        try:
            await db.ping()
            ok["db"] = "ok"
        except Exception as e:
            ok["db"] = f"error: {e}"
    return ok


app.include_router(recipes_router)
app.include_router(prefs_router)
