"""Tests for the validated recipe model and the error types."""

import pydantic
import pytest

from recipe_import.models import (
    FetchError,
    MalformedStructuredDataError,
    ParsedRecipe,
    ParseError,
    SiteSpecificParserError,
    ValidationError,
)

VALID = {
    "title": "  Test   Soup ",
    "ingredients": ["1 cup water", "  2 tsp salt  "],
    "instructions": ["Bring the water to a boil.", "Season with salt and serve."],
}


def test_construction_cleans_text():
    recipe = ParsedRecipe.model_validate(VALID)
    assert recipe.title == "Test Soup"
    assert recipe.ingredients == ("1 cup water", "2 tsp salt")


def test_short_entries_are_dropped():
    recipe = ParsedRecipe.model_validate(
        {
            **VALID,
            "ingredients": ["ab", "abc", "<span></span>"],
            "instructions": ["Stir well.", "Stir it well.", "Simmer for 20 minutes."],
        }
    )
    assert recipe.ingredients == ("abc",)
    # "Stir well." is ten characters
    assert recipe.instructions == ("Stir it well.", "Simmer for 20 minutes.")


def test_empty_optional_text_becomes_none():
    recipe = ParsedRecipe.model_validate({**VALID, "description": "   ", "author": ""})
    assert recipe.description is None
    assert recipe.author is None


def test_relative_image_made_absolute():
    recipe = ParsedRecipe.model_validate(
        {
            **VALID,
            "image_url": "/photos/soup.jpg",
            "source_url": "https://example.com/recipes/soup",
        }
    )
    assert recipe.image_url == "https://example.com/photos/soup.jpg"


def test_blank_title_rejected():
    with pytest.raises(pydantic.ValidationError):
        ParsedRecipe.model_validate({**VALID, "title": "<h1> </h1>"})


def test_no_ingredients_rejected():
    with pytest.raises(pydantic.ValidationError, match="no ingredients"):
        ParsedRecipe.model_validate({**VALID, "ingredients": ["a", ""]})


def test_no_instructions_rejected():
    with pytest.raises(pydantic.ValidationError, match="no instructions"):
        ParsedRecipe.model_validate({**VALID, "instructions": ["Mix."]})


def test_recipe_is_frozen():
    recipe = ParsedRecipe.model_validate(VALID)
    with pytest.raises(pydantic.ValidationError):
        recipe.title = "Other"


# -- Errors --


def test_parse_error():
    err = ParseError("network", "Timed out")
    assert err.error_type == "network"
    assert err.message == "Timed out"
    assert str(err) == "Timed out"


def test_fetch_error_is_parse_error():
    err = FetchError("http", "Page not found.")
    assert isinstance(err, ParseError)
    assert err.error_type == "http"


def test_validation_error_names_fields():
    err = ValidationError(["title", "ingredients"])
    assert err.error_type == "validation"
    assert err.fields == ("title", "ingredients")
    assert "title, ingredients" in err.message


def test_structured_and_site_errors():
    assert MalformedStructuredDataError("bad json").error_type == "structured_data"
    err = SiteSpecificParserError("allrecipes.com", "boom")
    assert err.error_type == "site_parser"
    assert err.site == "allrecipes.com"
