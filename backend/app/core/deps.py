# 공용 의존성: lifespan에서 만든 인스턴스를 app.state에서 꺼내 라우터에 주입
# 테스트에서는 app.dependency_overrides로 가짜 저장소/AI를 끼운다
import uuid

from fastapi import Depends, Request, Response

from app.core.config import Settings, get_settings
from app.db.repository import RecipeRepository
from app.services.local_store import KeyValueStore, MongoStore
from app.services.vibe_openai import VibeAI

COOKIE = "anon_id"
MAX_AGE = 60 * 60 * 24 * 365 * 2  # 2년


def get_repo(request: Request) -> RecipeRepository:
    return request.app.state.db.recipes


def get_ai(request: Request) -> VibeAI:
    return request.app.state.ai


def get_config() -> Settings:
    return get_settings()


def get_or_set_anon_id(request: Request, response: Response) -> str:
    # 쿠키 없으면 발급, 있으면 그대로 사용
    v = request.cookies.get(COOKIE)
    if not v:
        v = uuid.uuid4().hex
        response.set_cookie(COOKIE, v, max_age=MAX_AGE, httponly=True, samesite="lax")
    return v


def get_prefs_store(
    request: Request, anon_id: str = Depends(get_or_set_anon_id)
) -> KeyValueStore:
    return MongoStore(request.app.state.db.preferences, anon_id)
