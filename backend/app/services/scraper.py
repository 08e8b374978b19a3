# 목적: 사용자가 보낸 레시피 URL/PDF를 가져와 추출기에 넘긴다.
# 의존: httpx, beautifulsoup4, lxml, pymupdf
# 실패 정책: 가져오기 실패는 ScrapeError(→500), 깨진 PDF 입력은 InvalidPdfError(→400)

from __future__ import annotations
import base64
import binascii
import logging
import re
from typing import Optional

import fitz  # pymupdf
import httpx

from app.db.models.recipe import ExtractedRecipe
from app.services.extract.html import extract_from_html
from app.services.extract.pdf import extract_from_pdf_text

log = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_3) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/125.0.0.0 Safari/537.36"
    )
}


class ScrapeError(Exception):
    pass


class InvalidPdfError(Exception):
    pass


def normalize_url(url: str) -> str:
    if not url or not isinstance(url, str) or not url.strip():
        raise ScrapeError("Invalid URL provided")
    url = url.strip()
    if not re.match(r"^https?://", url, re.I):
        url = "https://" + url
    return url


async def fetch_html(
    url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 20.0
) -> str:
    own = client is None
    cli = client or httpx.AsyncClient(headers=HEADERS, timeout=timeout, follow_redirects=True)
    try:
        r = await cli.get(url)
    except httpx.HTTPError as e:
        raise ScrapeError(f"Failed to fetch URL: {e}") from e
    finally:
        if own:
            await cli.aclose()

    if r.status_code >= 400:
        raise ScrapeError(f"Failed to fetch URL: {r.status_code} {r.reason_phrase}")
    if not r.text or not r.text.strip():
        raise ScrapeError("URL returned empty content")
    return r.text


async def scrape_recipe_from_url(
    url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 20.0
) -> ExtractedRecipe:
    valid = normalize_url(url)
    try:
        html = await fetch_html(valid, client=client, timeout=timeout)
    except ScrapeError as e:
        raise ScrapeError(f"Failed to scrape recipe from URL: {e}") from e
    recipe = extract_from_html(html, source=valid)
    log.info("scraped %s -> %r (%d ingredients)", valid, recipe.title, len(recipe.ingredients))
    return recipe


def pdf_text_from_bytes(data: bytes) -> str:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise InvalidPdfError(f"Unreadable PDF: {e}") from e
    try:
        return "\n".join(page.get_text("text") or "" for page in doc)
    finally:
        doc.close()


def pdf_text_from_base64(payload: str) -> str:
    # data URL 접두어(data:application/pdf;base64,)가 붙어 와도 허용
    if "," in payload[:100] and payload.lstrip().startswith("data:"):
        payload = payload.split(",", 1)[1]
    try:
        data = base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise InvalidPdfError(f"pdfBuffer is not valid base64: {e}") from e
    if not data:
        raise InvalidPdfError("pdfBuffer is empty")
    return pdf_text_from_bytes(data)


def extract_recipe_from_pdf(payload: str) -> ExtractedRecipe:
    text = pdf_text_from_base64(payload)
    recipe = extract_from_pdf_text(text)
    log.info("pdf -> %r (%d ingredients)", recipe.title, len(recipe.ingredients))
    return recipe
