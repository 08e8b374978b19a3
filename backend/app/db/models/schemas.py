# app/db/models/schemas.py
# API 입출력 Pydantic 모델
# 필수 필드 검사는 라우터에서 400으로 처리하므로 입력 필드는 대부분 optional
from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models.recipe import RecipeOut


# # 레시피 등록 (URL 또는 base64 PDF)
class ScrapeIn(BaseModel):
    url: Optional[str] = None
    pdfBuffer: Optional[str] = None


class ScrapeOut(BaseModel):
    success: bool = True
    recipeId: str
    recipe: RecipeOut


# # 분위기 검색
class SearchIn(BaseModel):
    query: Optional[str] = None
    explain: bool = False
    limit: int = Field(default=10, ge=1, le=50)


class SearchHit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    title: str = ""
    vibeTags: List[str] = Field(default_factory=list)
    flavorProfile: str = ""
    ingredients: List[str] = Field(default_factory=list)
    source: str = ""
    score: float = 0.0
    vibeMatch: int = Field(default=0, ge=0, le=100)
    explanation: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _v_id(cls, v: Any) -> str:
        return str(v)


class SearchOut(BaseModel):
    query: str
    results: List[SearchHit] = Field(default_factory=list)


# # 대체 재료
class SubstituteIn(BaseModel):
    recipeId: Optional[str] = None
    missingIngredient: Optional[str] = None


# # 3코스 식단
class MealPlanIn(BaseModel):
    mood: Optional[str] = None


class CourseOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    title: str = ""
    ingredients: List[str] = Field(default_factory=list)
    instructions: str = ""
    vibeTags: List[str] = Field(default_factory=list)
    flavorProfile: str = ""
    source: str = ""
    vibeMatch: int = Field(default=0, ge=0, le=100)

    @field_validator("id", mode="before")
    @classmethod
    def _v_id(cls, v: Any) -> str:
        return str(v)


class MealPlanOut(BaseModel):
    appetizer: CourseOut
    main: CourseOut
    dessert: CourseOut
    explanation: str
    shoppingList: Dict[str, List[str]] = Field(default_factory=dict)
    moodQuery: str


# # 장보기 목록
class ShoppingListIn(BaseModel):
    recipeIds: List[str] = Field(default_factory=list)
    organize: bool = True


class ShoppingListOut(BaseModel):
    recipeIds: List[str]
    items: List[str] = Field(default_factory=list)
    categories: Dict[str, List[str]] = Field(default_factory=dict)


# # 익명 사용자 상태 (anon_id 쿠키 단위)
class FavoriteEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    title: str = ""
    vibeTags: List[str] = Field(default_factory=list)
    flavorProfile: str = ""
    source: str = ""


class FavoriteIn(BaseModel):
    recipeId: Optional[str] = None


class FavoriteToggleOut(BaseModel):
    favorite: bool
    favorites: List[FavoriteEntry] = Field(default_factory=list)


class HistoryIn(BaseModel):
    query: Optional[str] = None


class HistoryOut(BaseModel):
    searchHistory: List[str] = Field(default_factory=list)


class ThemeIn(BaseModel):
    # 비워 보내면 light ↔ dark 토글
    theme: Optional[str] = None


class ThemeOut(BaseModel):
    theme: str


class PreferencesOut(BaseModel):
    anonId: str
    favorites: List[FavoriteEntry] = Field(default_factory=list)
    searchHistory: List[str] = Field(default_factory=list)
    theme: str = "light"
