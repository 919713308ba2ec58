"""Tests for model output cleanup."""

import pytest

from src.models import NUTRITION_FIELDS, REJECTED_BLURRY, REJECTED_NOT_A_FRIDGE
from src.utils import (
    capitalize_words,
    normalize_item_list,
    normalize_nutrition,
    nutrition_rows,
    split_recipes,
)


# -----------------------------------
# Item list
# -----------------------------------

def test_item_list_strips_markdown():
    raw = "```markdown\n**Fridge items:**\n- Milk\n* Eggs\n\n  - Cheddar cheese  \n\n+ *Butter*\n```"
    result = normalize_item_list(raw)

    assert result.valid
    assert result.items == ("Fridge items:", "Milk", "Eggs", "Cheddar cheese", "Butter")
    for item in result.items:
        assert item
        assert "*" not in item
        assert "`" not in item
        assert not item.startswith("-")
        assert item == item.strip()


def test_item_list_strips_repeated_bullets_and_long_fences():
    result = normalize_item_list("- - Milk\n````\nEggs\n• - Butter\n````text\n+ -\n`")

    assert result.items == ("Milk", "Eggs", "Butter")
    for item in result.items:
        assert item
        assert "`" not in item
        assert not item.startswith(("-", "•", "+"))


def test_item_list_numbered_and_hyphenated_names():
    result = normalize_item_list("1. Sugar-free yogurt\n2) Half-and-half\n3. 1.5L water")
    assert result.items == ("Sugar-free yogurt", "Half-and-half", "1.5L water")


def test_item_list_keeps_order_and_drops_duplicates():
    result = normalize_item_list("Milk\nEggs\nMilk\nCarrots")
    assert result.items == ("Milk", "Eggs", "Carrots")


def test_item_list_not_a_fridge_is_rejected():
    result = normalize_item_list("This is not a fridge")
    assert not result.valid
    assert result.items == ()
    assert result.rejection_reason == REJECTED_NOT_A_FRIDGE


def test_item_list_blurry_with_punctuation_is_rejected():
    result = normalize_item_list("**This image is too blurry.**")
    assert not result.valid
    assert result.rejection_reason == REJECTED_BLURRY


def test_item_list_sentinel_among_items_is_rejected():
    result = normalize_item_list("Milk\nThis is not a fridge")
    assert not result.valid
    assert result.items == ()


def test_item_list_empty_text():
    result = normalize_item_list("")
    assert result.valid
    assert result.items == ()


# -----------------------------------
# Nutrition
# -----------------------------------

def test_nutrition_backfills_missing_fields():
    raw = "## Nutrition\n**Calories:**150cal\nFat:8g\nProtein:   12g\n"
    record = normalize_nutrition(raw, "greek yogurt")

    assert record.fields == {
        "Calories": "150cal",
        "Fat": "8g",
        "Sodium": "N/A",
        "Carbohydrates": "N/A",
        "Fiber": "N/A",
        "Protein": "12g",
    }
    for label in NUTRITION_FIELDS:
        assert record.text.count(f"{label}:") == 1, label
    assert "Calories: 150cal" in record.text
    assert "#" not in record.text and "*" not in record.text


def test_nutrition_empty_response_gives_six_placeholders():
    record = normalize_nutrition("", "milk")
    assert record.text.split("\n") == [f"{label}: N/A" for label in NUTRITION_FIELDS]
    assert list(record.fields) == list(NUTRITION_FIELDS)


def test_nutrition_label_match_is_case_sensitive():
    record = normalize_nutrition("calories: 100", "milk")
    assert record.fields["Calories"] == "N/A"
    assert "Calories: N/A" in record.text


def test_nutrition_display_name_and_rows():
    raw = "Calories: 60cal\nNote: check the label"
    record = normalize_nutrition(raw, "WHOLE milk")

    assert record.display_name == "Whole Milk"
    assert ("Note", "check the label") in record.rows
    assert ("Calories", "60cal") in record.rows
    assert ("Fat", "N/A") in record.rows


def test_nutrition_rows_without_value():
    assert nutrition_rows("Fiber:\n\nProtein: 3g") == [("Fiber", "N/A"), ("Protein", "3g")]


def test_nutrition_record_is_read_only():
    record = normalize_nutrition("Calories: 60cal", "milk")

    with pytest.raises(TypeError):
        record.fields["Fat"] = "1g"
    assert isinstance(record.rows, tuple)
    assert record.to_dict()["fields"]["Fat"] == "N/A"
    assert record.to_dict()["rows"][0] == {"label": "Calories", "value": "60cal"}


def test_capitalize_words():
    assert capitalize_words("cheddar CHEESE") == "Cheddar Cheese"


# -----------------------------------
# Recipes
# -----------------------------------

def test_split_recipes_inline_markers():
    recipes = split_recipes(
        "intro text 1. First recipe text 2. Second recipe text 3. Third recipe text"
    )
    assert [r.text for r in recipes] == [
        "First recipe text",
        "Second recipe text",
        "Third recipe text",
    ]


def test_split_recipes_empty():
    assert split_recipes("") == []


def test_split_recipes_without_markers():
    assert split_recipes("Sorry, I cannot suggest anything.") == []


def test_split_recipes_titles_and_any_count():
    raw = (
        "**1. Veggie Omelette**\nA quick breakfast.\nIngredients: eggs, peppers\n"
        "2. Salad\nChop everything.\n"
        "3. Soup\n4. Smoothie\n5. Toast"
    )
    recipes = split_recipes(raw)

    assert len(recipes) == 5
    assert recipes[0].title == "Veggie Omelette"
    assert "Ingredients: eggs, peppers" in recipes[0].text
    assert recipes[1].to_dict() == {"title": "Salad", "text": "Salad\nChop everything."}
