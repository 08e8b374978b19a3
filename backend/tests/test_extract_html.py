"""
HTML extraction heuristics: each named strategy and the composed chains.
"""

import json

from bs4 import BeautifulSoup

from app.services.extract.chain import Strategy, run_chain
from app.services.extract.html import (
    NO_INGREDIENTS,
    NO_INSTRUCTIONS,
    TITLE_STRATEGIES,
    clean_title,
    extract_from_html,
    ingredients_from_selectors,
    instructions_from_paragraphs,
    instructions_from_selectors,
    title_from_h1,
)

LEMON_TART = """
<html><head><title>Lemon Tart | Example Kitchen</title></head>
<body>
  <h1>Lemon Tart</h1>
  <ul>
    <li itemprop="recipeIngredient">2 lemons</li>
    <li itemprop="recipeIngredient">1 cup sugar</li>
    <li itemprop="recipeIngredient">3 eggs</li>
  </ul>
  <div itemprop="recipeInstructions">
    Whisk the eggs with sugar and lemon juice, pour into the shell and bake for 25 minutes.
  </div>
</body></html>
"""


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def test_lemon_tart_page():
    r = extract_from_html(LEMON_TART, source="https://example.com/good-recipe")
    assert r.title == "Lemon Tart"
    assert r.ingredients == ["2 lemons", "1 cup sugar", "3 eggs"]
    assert r.instructions.startswith("Whisk the eggs")
    assert r.source == "https://example.com/good-recipe"


def test_page_without_any_selector_gets_placeholders():
    r = extract_from_html("<html><body><div>nothing here</div></body></html>", source="x")
    assert r.title == "Untitled Recipe"
    assert r.ingredients == [NO_INGREDIENTS]
    assert r.instructions == NO_INSTRUCTIONS


def test_garbage_input_never_raises():
    for html in ["", "<<<>>>", "\x00\x01", "<p>" * 50]:
        r = extract_from_html(html, source="x")
        assert r.title and r.ingredients and r.instructions


def test_title_chain_order_prefers_h1_over_document_title():
    soup = _soup("<title>Doc Title</title><h1>  Real  Title </h1>")
    title, used = run_chain(TITLE_STRATEGIES, "Untitled Recipe", soup)
    assert (title, used) == ("Real Title", "h1")


def test_title_falls_back_to_document_title():
    soup = _soup("<html><head><title>Pasta Night - My Blog</title></head><body></body></html>")
    title, used = run_chain(TITLE_STRATEGIES, "Untitled Recipe", soup)
    assert used == "document-title"
    assert clean_title(title) == "Pasta Night"


def test_title_from_h1_declines_when_missing():
    assert title_from_h1(_soup("<p>hi</p>")) is None


def test_clean_title_keeps_hyphenated_words_and_truncates():
    assert clean_title("Slow-Cooker Chili | Site") == "Slow-Cooker Chili"
    long = "A" * 150
    assert clean_title(long) == "A" * 100 + "..."


def test_ingredient_selectors_union_dedupes_and_drops_short_text():
    soup = _soup(
        """
        <ul class="ingredients"><li>1 onion</li><li>ok</li></ul>
        <span itemprop="recipeIngredient">1 onion</span>
        <span data-ingredient>2 cloves garlic</span>
        """
    )
    got = ingredients_from_selectors(soup)
    # the container itself matches [class*="ingredient"] first
    assert got[0] == "1 onion ok"
    assert "1 onion" in got and "2 cloves garlic" in got
    assert "ok" not in got
    assert len(got) == len(set(got))


def test_instruction_blocks_need_enough_text():
    short = _soup('<div class="step">Stir well for a minute.</div>')
    assert instructions_from_selectors(short) is None

    soup = _soup(
        '<div class="step">Chop the onions and garlic finely.</div>'
        '<div class="step">Fry everything in olive oil until golden.</div>'
    )
    assert instructions_from_selectors(soup) == (
        "Chop the onions and garlic finely.\n\nFry everything in olive oil until golden."
    )


def test_paragraph_fallback_used_when_no_instruction_selectors():
    para = "Bring a large pot of salted water to a boil and cook the pasta until al dente."
    html = f"<h1>Pasta</h1><p>Short intro.</p><p>{para}</p>"
    assert instructions_from_paragraphs(_soup(html)) == para
    assert extract_from_html(html, source="x").instructions == para


def test_json_ld_recipe_wins_over_selectors():
    ld = {
        "@context": "https://schema.org",
        "@graph": [
            {"@type": "WebPage", "name": "Page"},
            {
                "@type": ["Recipe"],
                "name": "Shakshuka",
                "recipeIngredient": ["4 eggs", "1 can tomatoes"],
                "recipeInstructions": [
                    {"@type": "HowToStep", "text": "Simmer the tomatoes with spices."},
                    {"@type": "HowToStep", "text": "Crack in the eggs and cover."},
                ],
            },
        ],
    }
    html = (
        f'<script type="application/ld+json">{json.dumps(ld)}</script>'
        '<h1>Ignored heading</h1><li class="ingredient">ignored ingredient</li>'
    )
    r = extract_from_html(html, source="x")
    assert r.title == "Shakshuka"
    assert r.ingredients == ["4 eggs", "1 can tomatoes"]
    assert r.instructions == "Simmer the tomatoes with spices.\n\nCrack in the eggs and cover."


def test_broken_json_ld_is_skipped():
    html = '<script type="application/ld+json">{not json</script><h1>Fallback</h1>'
    assert extract_from_html(html, source="x").title == "Fallback"


def test_failing_strategy_does_not_break_chain():
    def boom(_):
        raise RuntimeError("broken heuristic")

    chain = (Strategy("boom", boom), Strategy("ok", lambda _: "value"))
    assert run_chain(chain, "default", None) == ("value", "ok")
    assert run_chain((Strategy("none", lambda _: None),), "default", None) == ("default", "default")
