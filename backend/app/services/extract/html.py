# app/services/extract/html.py
# 레시피 페이지 HTML → {title, ingredients, instructions, source}
# 사이트마다 구조가 달라서 셀렉터 여러 개를 순서대로 시도한다.
# 실패해도 예외 없이 "Unable to extract ..." 자리표시 문자열로 채움

from __future__ import annotations
import json
import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from app.db.models.recipe import ExtractedRecipe
from app.services.extract.chain import Strategy, run_chain

DEFAULT_TITLE = "Untitled Recipe"
NO_INGREDIENTS = "Unable to extract ingredients from this page"
NO_INSTRUCTIONS = "Unable to extract instructions from this page"

MAX_TITLE = 100

INGREDIENT_SELECTORS = [
    '[class*="ingredient"]',
    '[itemprop="recipeIngredient"]',
    ".ingredients li",
    ".ingredient-list li",
    "[data-ingredient]",
    'li[class*="ingredient"]',
]

INSTRUCTION_SELECTORS = [
    '[class*="instruction"]',
    '[itemprop="recipeInstructions"]',
    ".instructions",
    ".directions",
    ".recipe-directions",
    '[class*="direction"]',
    '[class*="step"]',
]

MIN_INGREDIENT = 3      # 2글자 이하는 버림
MIN_BLOCK = 21          # 조리 블록 최소 길이
MIN_BLOCKS_TOTAL = 50   # 셀렉터 결과가 이보다 짧으면 문단 폴백
MIN_PARAGRAPH = 51
MIN_INSTRUCTIONS = 21


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def _clean(t: str) -> str:
    return re.sub(r"\s+", " ", (t or "").strip())


def _text(el) -> str:
    return _clean(el.get_text(" ", strip=True)) if el is not None else ""


# ---------------------------------------------------------------------
# JSON-LD (schema.org Recipe)
# ---------------------------------------------------------------------
def _find_recipe_node(data: Any) -> Optional[Dict[str, Any]]:
    # @graph/중첩 리스트 안까지 재귀 탐색
    if isinstance(data, dict):
        kind = data.get("@type", [])
        if isinstance(kind, str):
            kind = [kind]
        if "Recipe" in kind:
            return data
        for v in data.values():
            found = _find_recipe_node(v)
            if found:
                return found
    elif isinstance(data, list):
        for item in data:
            found = _find_recipe_node(item)
            if found:
                return found
    return None


def json_ld_recipe(soup: BeautifulSoup) -> Optional[Dict[str, Any]]:
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except (json.JSONDecodeError, TypeError):
            continue
        found = _find_recipe_node(data)
        if found:
            return found
    return None


def _ld_steps(v: Any) -> List[str]:
    # 문자열 / HowToStep / HowToSection(itemListElement) 혼합 대응
    if isinstance(v, str):
        return [_clean(BeautifulSoup(v, "lxml").get_text(" "))] if v.strip() else []
    if isinstance(v, list):
        out: List[str] = []
        for x in v:
            out.extend(_ld_steps(x))
        return out
    if isinstance(v, dict):
        if v.get("itemListElement"):
            return _ld_steps(v["itemListElement"])
        return _ld_steps(v.get("text") or v.get("name") or "")
    return []


def title_from_json_ld(soup: BeautifulSoup) -> Optional[str]:
    node = json_ld_recipe(soup)
    name = node.get("name") if node else None
    return _clean(name) if isinstance(name, str) else None


def ingredients_from_json_ld(soup: BeautifulSoup) -> Optional[List[str]]:
    node = json_ld_recipe(soup)
    if not node:
        return None
    raw = node.get("recipeIngredient") or node.get("ingredients") or []
    if isinstance(raw, str):
        raw = [raw]
    out = [_clean(x) for x in raw if isinstance(x, str) and _clean(x)]
    return list(dict.fromkeys(out)) or None


def instructions_from_json_ld(soup: BeautifulSoup) -> Optional[str]:
    node = json_ld_recipe(soup)
    if not node:
        return None
    steps = [s for s in _ld_steps(node.get("recipeInstructions")) if s]
    return "\n\n".join(steps) or None


# ---------------------------------------------------------------------
# 제목
# ---------------------------------------------------------------------
def _first_text(soup: BeautifulSoup, selector: str) -> Optional[str]:
    return _text(soup.select_one(selector)) or None


def title_from_h1(soup: BeautifulSoup) -> Optional[str]:
    return _first_text(soup, "h1")


def title_from_recipe_title_class(soup: BeautifulSoup) -> Optional[str]:
    return _first_text(soup, '[class*="recipe-title"]')


def title_from_itemprop_name(soup: BeautifulSoup) -> Optional[str]:
    return _first_text(soup, '[itemprop="name"]')


def title_from_document_title(soup: BeautifulSoup) -> Optional[str]:
    return _first_text(soup, "title")


TITLE_STRATEGIES = (
    Strategy("json-ld", title_from_json_ld),
    Strategy("h1", title_from_h1),
    Strategy("recipe-title-class", title_from_recipe_title_class),
    Strategy("itemprop-name", title_from_itemprop_name),
    Strategy("document-title", title_from_document_title),
)


def clean_title(title: str, default: str = DEFAULT_TITLE) -> str:
    # "Lemon Tart | Site" / "Lemon Tart - Site" → "Lemon Tart"
    raw = _clean(title)
    t = raw.split("|")[0]
    t = re.split(r"\s+[-–—]\s+", t)[0].strip()
    t = t or raw or default
    return t[:MAX_TITLE] + "..." if len(t) > MAX_TITLE else t


# ---------------------------------------------------------------------
# 재료
# ---------------------------------------------------------------------
def ingredients_from_selectors(soup: BeautifulSoup) -> Optional[List[str]]:
    # 셀렉터 전체 합집합, 순서 보존 + 중복 제거
    out: List[str] = []
    for sel in INGREDIENT_SELECTORS:
        for el in soup.select(sel):
            t = _text(el)
            if len(t) >= MIN_INGREDIENT and t not in out:
                out.append(t)
    return out or None


INGREDIENT_STRATEGIES = (
    Strategy("json-ld", ingredients_from_json_ld),
    Strategy("selector-union", ingredients_from_selectors),
)


# ---------------------------------------------------------------------
# 조리 과정
# ---------------------------------------------------------------------
def instructions_from_selectors(soup: BeautifulSoup) -> Optional[str]:
    blocks: List[str] = []
    for sel in INSTRUCTION_SELECTORS:
        for el in soup.select(sel):
            t = _text(el)
            if len(t) >= MIN_BLOCK and t not in blocks:
                blocks.append(t)
    text = "\n\n".join(blocks)
    return text if len(text) >= MIN_BLOCKS_TOTAL else None


def instructions_from_paragraphs(soup: BeautifulSoup) -> Optional[str]:
    paras = [t for t in (_text(p) for p in soup.select("p")) if len(t) >= MIN_PARAGRAPH]
    return "\n\n".join(paras) or None


INSTRUCTION_STRATEGIES = (
    Strategy("json-ld", instructions_from_json_ld),
    Strategy("selector-blocks", instructions_from_selectors),
    Strategy("long-paragraphs", instructions_from_paragraphs),
)


def extract_from_html(html: str, source: str) -> ExtractedRecipe:
    soup = _soup(html)

    title, _ = run_chain(TITLE_STRATEGIES, DEFAULT_TITLE, soup)
    ingredients, _ = run_chain(INGREDIENT_STRATEGIES, [NO_INGREDIENTS], soup)
    instructions, _ = run_chain(INSTRUCTION_STRATEGIES, NO_INSTRUCTIONS, soup)

    instructions = instructions.strip()
    if len(instructions) < MIN_INSTRUCTIONS:
        instructions = NO_INSTRUCTIONS

    return ExtractedRecipe(
        title=clean_title(title),
        ingredients=ingredients,
        instructions=instructions,
        source=source,
    )
