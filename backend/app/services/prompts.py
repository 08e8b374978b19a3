# app/services/prompts.py
# LLM 프롬프트 템플릿 모음: 값 치환만 하고 로직은 없음

from __future__ import annotations
from typing import Any, List, Mapping, Sequence

VIBE_SYSTEM = (
    "You are a culinary expert who understands the emotional and cultural "
    "significance of food. Return only valid JSON."
)

CURATOR_SYSTEM = (
    "You are a warm, knowledgeable food curator who understands the emotional "
    "connections people have with food."
)

SUBSTITUTE_SYSTEM = (
    "You are a culinary expert who understands ingredient substitutions and "
    "recipe compatibility. Return only valid JSON."
)

PLANNER_SYSTEM = "You are a professional meal planner. Return only valid JSON."

# 메뉴 선택 시 LLM에 보여줄 후보 수 상한
PLANNER_MENU_SIZE = 30


def _tags(recipe: Mapping[str, Any]) -> str:
    return ", ".join(recipe.get("vibeTags") or [])


def vibe_tags_prompt(recipe: Mapping[str, Any]) -> str:
    return f"""Given this recipe:

Title: {recipe.get("title") or "Untitled"}
Ingredients: {", ".join(recipe.get("ingredients") or [])}
Instructions: {recipe.get("instructions") or ""}

Generate a JSON response with:
1. "vibeTags": 5-7 descriptive vibe tags that capture the emotional and situational context (e.g., "Cozy", "Energizing", "Nostalgic", "Rainy Day", "Comfort Food", "Celebration", "Quick & Easy")
2. "flavorProfile": A 2-3 sentence description of the flavor profile and mood this recipe evokes

Return ONLY valid JSON in this format:
{{
  "vibeTags": ["tag1", "tag2", "tag3"],
  "flavorProfile": "description here"
}}"""


def match_explanation_prompt(query: str, recipe: Mapping[str, Any]) -> str:
    return f"""A user searched for: "{query}"

We matched them with this recipe:
Title: {recipe.get("title") or ""}
Vibe Tags: {_tags(recipe)}
Flavor Profile: {recipe.get("flavorProfile") or ""}

In 1-2 sentences, explain why this recipe is a great match for their search. Be warm, conversational, and specific about the emotional/situational connection."""


def substitute_prompt(
    recipe: Mapping[str, Any], missing: str, pool: Sequence[str]
) -> str:
    return f"""A user is making this recipe: "{recipe.get("title") or ""}"
Vibe: {_tags(recipe)}
Their ingredients: {", ".join(recipe.get("ingredients") or [])}
They are missing: {missing}

From similar recipes with the same vibe, here are ingredients used: {", ".join(pool) or "none available"}

Suggest the best substitute for "{missing}" in this context. Consider:
1. Similar recipes that share the same vibe
2. Dietary restrictions (if it's vegan, suggest vegan alternatives)
3. The flavor profile and texture match

Return a JSON response:
{{
  "substitute": "ingredient name",
  "reason": "1-2 sentence explanation why this works in this context",
  "confidence": "high/medium/low"
}}"""


def course_selection_prompt(mood: str, menu: Sequence[Mapping[str, Any]]) -> str:
    lines = "\n".join(
        f"{i + 1}. {r.get('title') or ''} - Tags: {_tags(r)} - Flavor: {r.get('flavorProfile') or ''}"
        for i, r in enumerate(menu)
    )
    return f"""Given these recipes with their vibe tags and flavor profiles, select 3 recipes for a cohesive 3-course meal:
- 1 appetizer (light, starter)
- 1 main course (substantial, filling)
- 1 dessert (sweet, concluding)

The recipes should share the vibe: "{mood}"
Consider flavor balance: start light, build to savory, end sweet.

Available recipes:
{lines}

Respond ONLY with JSON in this exact format:
{{
  "appetizer": 5,
  "main": 12,
  "dessert": 8,
  "explanation": "Brief explanation of why these 3 recipes work together as a cohesive meal"
}}

Use the recipe numbers from the list above."""


def shopping_list_prompt(items: List[str]) -> str:
    joined = "\n".join(items)
    return f"""Organize this shopping list by category (Produce, Proteins, Dairy, Pantry, etc.):

{joined}

Respond ONLY with JSON in this exact format:
{{
  "Produce": ["ingredient1", "ingredient2"],
  "Proteins": ["ingredient3"],
  "Dairy": ["ingredient4"],
  "Pantry": ["ingredient5", "ingredient6"],
  "Other": ["ingredient7"]
}}"""


def recipe_embedding_text(recipe: Mapping[str, Any]) -> str:
    # 제목/재료/조리/태그/풍미를 한 문서로 이어붙여 임베딩 입력 생성
    parts: List[str] = [
        recipe.get("title") or "",
        " ".join(recipe.get("ingredients") or []),
        recipe.get("instructions") or "",
        " ".join(recipe.get("vibeTags") or []),
        recipe.get("flavorProfile") or "",
    ]
    return " ".join(p for p in parts if p).strip()
