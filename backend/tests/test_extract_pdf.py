"""
PDF text heuristics (input is text already pulled out of the PDF).
"""

from app.services.extract.pdf import (
    NO_INGREDIENTS,
    NO_INSTRUCTIONS,
    extract_from_pdf_text,
    ingredients_from_measurements,
    instructions_after_ingredients,
    looks_like_ingredient,
    read_lines,
)

HEADED = """
Banana Bread

Ingredients:
- 3 ripe bananas
- 2 cups flour
1 tsp baking soda
Love and patience

Instructions:
Mash the bananas.
Mix in the flour and soda, then bake for 60 minutes.
"""


def test_headed_pdf_sections():
    r = extract_from_pdf_text(HEADED)
    assert r.title == "Banana Bread"
    assert r.ingredients == ["3 ripe bananas", "2 cups flour", "1 tsp baking soda"]
    assert r.instructions == "Mash the bananas.\nMix in the flour and soda, then bake for 60 minutes."
    assert r.source == "PDF Upload"


def test_headings_without_colon_are_recognised():
    doc = read_lines("Soup\nIngredients\n2 cups stock\nMethod\nHeat the stock gently.")
    assert doc.ingredients_at == 1
    assert doc.instructions_at == 3


def test_no_headings_falls_back_to_measurements_and_whole_text():
    text = "Quick Oats\n1 cup oats\n2 cups milk\nSimmer until creamy and serve warm."
    r = extract_from_pdf_text(text)
    assert r.title == "Quick Oats"
    assert r.ingredients == ["1 cup oats", "2 cups milk"]
    assert r.instructions == text.strip()


def test_no_headings_no_measurements_still_populated():
    text = "Mystery Dish\nsome words\nmore words about cooking it slowly"
    r = extract_from_pdf_text(text)
    assert r.title == "Mystery Dish"
    assert r.ingredients == [NO_INGREDIENTS]
    assert r.instructions == text


def test_instructions_after_ingredient_block_when_no_instruction_heading():
    text = "Toast\nIngredients:\n- 2 slices bread\n- 1 tbsp butter\nToast the bread and spread butter."
    doc = read_lines(text)
    assert instructions_after_ingredients(doc) == "Toast the bread and spread butter."
    assert extract_from_pdf_text(text).instructions == "Toast the bread and spread butter."


def test_empty_text_uses_defaults():
    r = extract_from_pdf_text("   \n\n ")
    assert r.title == "Untitled PDF Recipe"
    assert r.ingredients == [NO_INGREDIENTS]
    assert r.instructions == NO_INSTRUCTIONS


def test_long_first_line_is_truncated():
    r = extract_from_pdf_text("T" * 120 + "\n1 cup rice\nBoil the rice for twenty minutes.")
    assert r.title == "T" * 100 + "..."


def test_ingredient_line_detection():
    assert looks_like_ingredient("- salt")
    assert looks_like_ingredient("• pepper")
    assert looks_like_ingredient("2. Chop onions")
    assert looks_like_ingredient("Butter, 1/2 cup")
    assert not looks_like_ingredient("Serves four people")
    assert ingredients_from_measurements(read_lines("no units here")) is None
