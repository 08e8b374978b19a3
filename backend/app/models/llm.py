# app/models/llm.py
# LLM 응답 스키마: 응답 JSON은 이 모델로 엄격 검증, 실패하면 각 호출부의 폴백 경로로 간다
from __future__ import annotations
import json
import re
from typing import Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

M = TypeVar("M", bound=BaseModel)

MAX_VIBE_TAGS = 7

DEFAULT_VIBE_TAGS = ["Uncategorized"]
DEFAULT_FLAVOR_PROFILE = "No flavor profile available yet."
DEFAULT_MATCH_EXPLANATION = "This recipe matches your vibe perfectly!"
DEFAULT_PLAN_EXPLANATION = (
    "A curated selection of recipes that complement each other and match your mood."
)

FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.I)


class VibeProfile(BaseModel):
    vibeTags: List[str] = Field(min_length=1)
    flavorProfile: str

    @field_validator("vibeTags")
    @classmethod
    def _v_tags(cls, v: List[str]) -> List[str]:
        tags = [t.strip() for t in v if isinstance(t, str) and t.strip()]
        tags = list(dict.fromkeys(tags))[:MAX_VIBE_TAGS]
        if not tags:
            raise ValueError("no usable vibe tags")
        return tags

    @classmethod
    def default(cls) -> "VibeProfile":
        return cls(vibeTags=list(DEFAULT_VIBE_TAGS), flavorProfile=DEFAULT_FLAVOR_PROFILE)


class SubstituteSuggestion(BaseModel):
    substitute: str = Field(min_length=1)
    reason: str
    confidence: Literal["high", "medium", "low"]

    @field_validator("confidence", mode="before")
    @classmethod
    def _v_conf(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class CourseSelection(BaseModel):
    # 목록 번호(1부터)
    appetizer: int
    main: int
    dessert: int
    explanation: str = DEFAULT_PLAN_EXPLANATION


ShoppingCategories = TypeAdapter(Dict[str, List[str]])


def strip_fences(text: str) -> str:
    return FENCE_RE.sub("", (text or "").strip()).strip()


def parse_reply(text: str, model: Type[M]) -> Optional[M]:
    try:
        return model.model_validate_json(strip_fences(text))
    except ValidationError:
        return None


def parse_categories(text: str) -> Optional[Dict[str, List[str]]]:
    try:
        data = ShoppingCategories.validate_python(json.loads(strip_fences(text)))
    except (json.JSONDecodeError, ValidationError):
        return None
    cleaned = {k.strip(): [i for i in v if i.strip()] for k, v in data.items() if k.strip()}
    return {k: v for k, v in cleaned.items() if v} or None
