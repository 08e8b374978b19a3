# app/services/extract/pdf.py
# PDF에서 뽑은 텍스트 → {title, ingredients, instructions, source="PDF Upload"}
# 줄 단위 휴리스틱: 첫 줄 = 제목, "Ingredients:" / "Instructions:" 제목줄로 구간 분리
# 구간 제목이 없으면 계량 단위가 들어간 줄 / 전체 텍스트로 폴백

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from app.db.models.recipe import PDF_SOURCE, ExtractedRecipe
from app.services.extract.chain import Strategy, run_chain

DEFAULT_TITLE = "Untitled PDF Recipe"
NO_INGREDIENTS = "Unable to parse ingredients - please check the PDF manually"
NO_INSTRUCTIONS = "Unable to parse instructions - please check the PDF manually"

MAX_TITLE = 100
MIN_INSTRUCTIONS = 10

INGREDIENTS_HEADING_RE = re.compile(
    r"^(ingredients?|what you need|you will need|materials?)\s*(:|$)", re.I
)
INSTRUCTIONS_HEADING_RE = re.compile(
    r"^(instructions?|directions?|method|steps?|how to make|preparation)\s*(:|$)", re.I
)

UNIT_RE = re.compile(
    r"\d+(?:[./]\d+)?\s*"
    r"(cups?|tbsps?|tsps?|tablespoons?|teaspoons?|oz|ounces?|lbs?|pounds?"
    r"|g|grams?|kg|ml|l|liters?|litres?|pieces?|cloves?|inch(?:es)?|pinch(?:es)?)\b",
    re.I,
)
BULLET_RE = re.compile(r"^[-•*]\s")
NUMBERED_RE = re.compile(r"^\d+\.?\s")


@dataclass(frozen=True)
class PdfText:
    text: str
    lines: List[str]
    ingredients_at: Optional[int]
    instructions_at: Optional[int]


def _index_of(lines: List[str], rx: re.Pattern) -> Optional[int]:
    for i, line in enumerate(lines):
        if rx.search(line):
            return i
    return None


def read_lines(text: str) -> PdfText:
    lines = [ln.strip() for ln in (text or "").splitlines()]
    lines = [ln for ln in lines if ln]
    return PdfText(
        text=text or "",
        lines=lines,
        ingredients_at=_index_of(lines, INGREDIENTS_HEADING_RE),
        instructions_at=_index_of(lines, INSTRUCTIONS_HEADING_RE),
    )


def looks_like_ingredient(line: str) -> bool:
    return bool(UNIT_RE.search(line) or BULLET_RE.search(line) or NUMBERED_RE.search(line))


def _strip_bullet(line: str) -> str:
    return re.sub(r"^[-•*]\s*", "", line).strip()


def _ingredient_block(doc: PdfText) -> List[Tuple[int, str]]:
    # 재료 제목줄 ~ 조리 제목줄(없으면 끝) 사이에서 재료처럼 보이는 줄만 (줄번호, 텍스트)
    if doc.ingredients_at is None:
        return []
    end = len(doc.lines)
    if doc.instructions_at is not None and doc.instructions_at > doc.ingredients_at:
        end = doc.instructions_at
    out: List[Tuple[int, str]] = []
    for i in range(doc.ingredients_at + 1, end):
        line = doc.lines[i]
        if looks_like_ingredient(line):
            out.append((i, _strip_bullet(line)))
    return out


# ---------------------------------------------------------------------
# 재료 전략
# ---------------------------------------------------------------------
def ingredients_from_section(doc: PdfText) -> Optional[List[str]]:
    return [t for _, t in _ingredient_block(doc) if t] or None


def ingredients_from_measurements(doc: PdfText) -> Optional[List[str]]:
    return [ln for ln in doc.lines if UNIT_RE.search(ln)] or None


INGREDIENT_STRATEGIES = (
    Strategy("headed-section", ingredients_from_section),
    Strategy("measurement-lines", ingredients_from_measurements),
)


# ---------------------------------------------------------------------
# 조리 전략
# ---------------------------------------------------------------------
def instructions_after_heading(doc: PdfText) -> Optional[str]:
    if doc.instructions_at is None:
        return None
    return "\n".join(doc.lines[doc.instructions_at + 1:]) or None


def instructions_after_ingredients(doc: PdfText) -> Optional[str]:
    if doc.ingredients_at is None:
        return None
    block = _ingredient_block(doc)
    start = block[-1][0] + 1 if block else doc.ingredients_at + 1
    return "\n".join(doc.lines[start:]) or None


def instructions_whole_text(doc: PdfText) -> Optional[str]:
    return doc.text.strip() or None


INSTRUCTION_STRATEGIES = (
    Strategy("after-instructions-heading", instructions_after_heading),
    Strategy("after-ingredients-block", instructions_after_ingredients),
    Strategy("whole-text", instructions_whole_text),
)


def extract_from_pdf_text(text: str) -> ExtractedRecipe:
    doc = read_lines(text)

    title = doc.lines[0] if doc.lines else DEFAULT_TITLE
    if len(title) > MAX_TITLE:
        title = title[:MAX_TITLE] + "..."

    ingredients, _ = run_chain(INGREDIENT_STRATEGIES, [NO_INGREDIENTS], doc)
    instructions, _ = run_chain(INSTRUCTION_STRATEGIES, NO_INSTRUCTIONS, doc)
    instructions = instructions.strip()
    if len(instructions) < MIN_INSTRUCTIONS:
        instructions = NO_INSTRUCTIONS

    return ExtractedRecipe(
        title=title,
        ingredients=ingredients,
        instructions=instructions,
        source=PDF_SOURCE,
    )
