# app/services/vibe_openai.py
# OpenAI 호출 래퍼 (분위기 태그 / 임베딩 / 매칭 설명 / 대체 재료 / 코스 선택 / 장보기 분류)
# - Chat Completions + response_format=json_object
# - 응답은 app.models.llm 스키마로 엄격 검증, 실패 시 호출별 폴백
# - 재시도/캐시 없음. 앱 시작 시 한 번 만들어 app.state로 내려준다

from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError

from app.core.config import Settings
from app.models.llm import (
    DEFAULT_MATCH_EXPLANATION,
    DEFAULT_PLAN_EXPLANATION,
    CourseSelection,
    SubstituteSuggestion,
    VibeProfile,
    parse_categories,
    parse_reply,
)
from app.services import prompts

log = logging.getLogger(__name__)


class AIError(Exception):
    # OpenAI 호출 실패 (→ 500)
    pass


class AINotReady(AIError):
    # 키 없음 (→ 503)
    pass


class AIResponseError(AIError):
    # 응답이 스키마와 안 맞음
    pass


def _as_dict(recipe: Any) -> Dict[str, Any]:
    if hasattr(recipe, "model_dump"):
        return recipe.model_dump()
    return dict(recipe)


class VibeAI:
    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        chat_model: str = "gpt-4o-mini",
        embed_model: str = "text-embedding-3-small",
    ):
        self.client = client
        self.chat_model = chat_model
        self.embed_model = embed_model

    @classmethod
    def from_settings(cls, settings: Settings) -> "VibeAI":
        key = (settings.OPENAI_API_KEY or "").strip()
        client = AsyncOpenAI(api_key=key) if key else None
        if client is None:
            log.warning("OPENAI_API_KEY not set; AI features will answer 503")
        return cls(client, chat_model=settings.OPENAI_CHAT_MODEL, embed_model=settings.OPENAI_EMBED_MODEL)

    @property
    def ready(self) -> bool:
        return self.client is not None

    def _require(self) -> AsyncOpenAI:
        if self.client is None:
            raise AINotReady("OPENAI_API_KEY not set")
        return self.client

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.close()

    async def _chat(
        self,
        user: str,
        system: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 300,
        json_mode: bool = True,
    ) -> str:
        client = self._require()
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": user})

        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            chat = await client.chat.completions.create(
                model=self.chat_model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except OpenAIError as e:
            raise AIError(f"chat completion failed: {e}") from e

        text = chat.choices[0].message.content if chat and chat.choices else ""
        return (text or "").strip()

    # ------------------------------------------------------------------
    # 임베딩
    # ------------------------------------------------------------------
    async def embed(self, text: str) -> List[float]:
        client = self._require()
        text = (text or "").strip()
        if not text:
            raise AIError("cannot embed empty text")
        try:
            emb = await client.embeddings.create(model=self.embed_model, input=text)
        except OpenAIError as e:
            raise AIError(f"embedding failed: {e}") from e
        return list(emb.data[0].embedding)

    async def recipe_embedding(self, recipe: Any) -> List[float]:
        return await self.embed(prompts.recipe_embedding_text(_as_dict(recipe)))

    # ------------------------------------------------------------------
    # 분위기 태그: 실패해도 요청은 살린다 (기본 태그로 강등)
    # ------------------------------------------------------------------
    async def generate_vibe_tags(self, recipe: Any) -> VibeProfile:
        try:
            text = await self._chat(
                prompts.vibe_tags_prompt(_as_dict(recipe)),
                system=prompts.VIBE_SYSTEM,
                temperature=0.7,
                max_tokens=300,
            )
        except AIError as e:
            log.warning("vibe tags degraded to defaults: %s", e)
            return VibeProfile.default()

        profile = parse_reply(text, VibeProfile)
        if profile is None:
            log.warning("vibe tags reply not valid JSON, using defaults: %.200s", text)
            return VibeProfile.default()
        return profile

    async def match_explanation(self, query: str, recipe: Mapping[str, Any]) -> str:
        try:
            text = await self._chat(
                prompts.match_explanation_prompt(query, recipe),
                system=prompts.CURATOR_SYSTEM,
                temperature=0.8,
                max_tokens=150,
                json_mode=False,
            )
        except AIError as e:
            log.warning("match explanation fallback: %s", e)
            return DEFAULT_MATCH_EXPLANATION
        return text or DEFAULT_MATCH_EXPLANATION

    async def match_explanations(
        self, query: str, recipes: Sequence[Mapping[str, Any]]
    ) -> List[str]:
        return list(await asyncio.gather(*[self.match_explanation(query, r) for r in recipes]))

    async def suggest_substitute(
        self, recipe: Mapping[str, Any], missing: str, pool: Sequence[str]
    ) -> SubstituteSuggestion:
        text = await self._chat(
            prompts.substitute_prompt(recipe, missing, pool),
            system=prompts.SUBSTITUTE_SYSTEM,
            temperature=0.7,
            max_tokens=200,
        )
        suggestion = parse_reply(text, SubstituteSuggestion)
        if suggestion is None:
            raise AIResponseError("Invalid JSON response from OpenAI")
        return suggestion

    async def select_courses(
        self, mood: str, menu: Sequence[Mapping[str, Any]]
    ) -> CourseSelection:
        # 번호 파싱 실패 시: 처음 / 가운데 / 마지막 (1부터)
        n = len(menu)
        fallback = CourseSelection(
            appetizer=1, main=n // 2 + 1, dessert=n, explanation=DEFAULT_PLAN_EXPLANATION
        )
        text = await self._chat(
            prompts.course_selection_prompt(mood, menu),
            system=prompts.PLANNER_SYSTEM,
            temperature=0.7,
            max_tokens=500,
        )
        selection = parse_reply(text, CourseSelection)
        if selection is None:
            log.warning("course selection not parseable, using fallback: %.200s", text)
            return fallback
        return selection

    async def organize_shopping_list(self, items: List[str]) -> Dict[str, List[str]]:
        fallback = {"Shopping List": list(items)}
        if not items:
            return {}
        try:
            text = await self._chat(
                prompts.shopping_list_prompt(items), temperature=0.5, max_tokens=800
            )
        except AINotReady:
            return fallback
        categories = parse_categories(text)
        if categories is None:
            log.warning("shopping list not parseable, returning flat list")
            return fallback
        return categories
