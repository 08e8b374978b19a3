# 레시피 표준 스키마
# 저장 문서(RecipeDoc)와 응답용 뷰(RecipeOut). 응답 모델에는 embedding 필드가 아예 없다.
from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PDF_SOURCE = "PDF Upload"


class ExtractedRecipe(BaseModel):
    # 추출기 결과 (HTML/PDF 공통)
    title: str
    ingredients: List[str] = Field(default_factory=list)
    instructions: str = ""
    source: str = ""


class RecipeDoc(ExtractedRecipe):
    vibeTags: List[str] = Field(default_factory=list)
    flavorProfile: str = ""
    embedding: List[float] = Field(default_factory=list)


class RecipeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    title: str = ""
    ingredients: List[str] = Field(default_factory=list)
    instructions: str = ""
    source: str = ""
    vibeTags: List[str] = Field(default_factory=list)
    flavorProfile: str = ""
    createdAt: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _v_id(cls, v: Any) -> str:
        # ObjectId → str
        return str(v)
