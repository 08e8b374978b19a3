# app/core/config.py
# 환경변수 로딩 (.env): 몽고/오픈AI/검색 파라미터를 한 곳에서 관리

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"  # Atlas면 mongodb+srv://...
    MONGO_DB: str = "recipe-vibe-finder"
    DB_CONNECT_RETRIES: int = 20

    OPENAI_API_KEY: Optional[str] = None
    OPENAI_CHAT_MODEL: str = "gpt-4o-mini"
    OPENAI_EMBED_MODEL: str = "text-embedding-3-small"
    EMBED_DIMENSIONS: int = 1536

    # Atlas Vector Search 인덱스 (UI에서 수동 생성)
    VECTOR_INDEX: str = "vector_index"
    SEARCH_LIMIT: int = 10
    SEARCH_CANDIDATES: int = 50
    PLANNER_LIMIT: int = 50
    PLANNER_CANDIDATES: int = 100
    LIST_LIMIT: int = 50

    SCRAPE_TIMEOUT: float = 20.0

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
