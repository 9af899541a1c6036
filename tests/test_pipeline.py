"""Tests for the extraction pipeline and the fetch boundary."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from recipe_import.culinary.taxonomy import Course, CulinaryClassification
from recipe_import.models import FetchError, ParsedRecipe, ValidationError
from recipe_import.parser.pipeline import (
    fetch_html,
    merge_drafts,
    parse_html,
    parse_recipe,
)
from recipe_import.parser.sites import SiteParserRegistry

# -- Fixtures: sample HTML snippets --

JSONLD_RECIPE_HTML = """
<html><head>
<script type="application/ld+json">
{
    "@context": "https://schema.org",
    "@type": "Recipe",
    "name": "Test Cookies",
    "recipeIngredient": ["1 cup flour", "1/2 cup sugar", "2 eggs"],
    "recipeInstructions": [
        {"@type": "HowToStep", "text": "Mix flour and sugar."},
        {"@type": "HowToStep", "text": "Add eggs and stir."},
        {"@type": "HowToStep", "text": "Bake at 350F for 12 minutes."}
    ],
    "prepTime": "PT10M",
    "cookTime": "PT12M",
    "recipeYield": "24 cookies",
    "image": "/images/cookies.jpg"
}
</script>
</head><body></body></html>
"""

# Structured data with an empty ingredient list; microdata fills the gap.
PARTIAL_JSONLD_HTML = """
<html><head>
<script type="application/ld+json">
{"@type": "Recipe", "name": "Layered Lasagna", "description": "",
 "recipeIngredient": [],
 "recipeInstructions": ["Layer the noodles and sauce.", "Bake for 45 minutes."]}
</script>
</head><body>
<div itemscope itemtype="https://schema.org/Recipe">
    <span itemprop="name">Microdata Lasagna</span>
    <span itemprop="description">Cheesy and rich.</span>
    <span itemprop="recipeIngredient">9 lasagna noodles</span>
    <span itemprop="recipeIngredient">2 cups ricotta</span>
</div>
</body></html>
"""

# HTML that has no structured data but has heuristic-parseable content
HEURISTIC_FALLBACK_HTML = """
<html><body>
<h1>Grandma's Soup</h1>
<h2>Ingredients</h2>
<ul><li>water</li><li>salt</li></ul>
<h2>Directions</h2>
<ol><li>Boil the water.</li><li>Add salt to taste.</li></ol>
</body></html>
"""

DUPLICATE_INGREDIENTS_HTML = """
<html><head>
<script type="application/ld+json">
{"@type": "Recipe", "name": "Salted Caramel",
 "recipeIngredient": ["1 tsp salt", "1 cup sugar", "1 tsp salt"],
 "recipeInstructions": ["Melt the sugar until amber.", "Stir in the salt."]}
</script>
</head><body></body></html>
"""

NO_RECIPE_HTML = """
<html><head></head>
<body><p>No recipe here.</p></body></html>
"""

URL = "https://example.com/recipe"


# -- Tests: merge policy --


def test_merge_first_non_empty_wins():
    merged = merge_drafts(
        [
            {"title": "Strong", "ingredients": [], "description": ""},
            None,
            {"title": "Weak", "ingredients": ["flour"], "description": "Nice."},
        ]
    )
    assert merged == {
        "title": "Strong",
        "ingredients": ["flour"],
        "description": "Nice.",
    }


def test_merge_never_overwrites_with_empty():
    merged = merge_drafts([{"servings": 4}, {"servings": None, "tags": []}])
    assert merged == {"servings": 4}


def test_merge_keeps_zero():
    assert merge_drafts([{"prep_time": 0}, {"prep_time": 15}]) == {"prep_time": 0}


# -- Tests: parse_html --


def test_parse_structured_recipe():
    recipe = parse_html(JSONLD_RECIPE_HTML, URL)
    assert isinstance(recipe, ParsedRecipe)
    assert recipe.title == "Test Cookies"
    assert recipe.ingredients == ("1 cup flour", "1/2 cup sugar", "2 eggs")
    assert len(recipe.instructions) == 3
    assert recipe.prep_time == 10
    assert recipe.cook_time == 12
    assert recipe.servings == 24
    assert recipe.image_url == "https://example.com/images/cookies.jpg"
    assert recipe.source_url == URL
    assert recipe.classification is None


def test_later_stage_fills_empty_fields():
    recipe = parse_html(PARTIAL_JSONLD_HTML, URL)
    assert recipe.title == "Layered Lasagna"
    assert recipe.description == "Cheesy and rich."
    assert recipe.ingredients == ("9 lasagna noodles", "2 cups ricotta")
    assert recipe.instructions == (
        "Layer the noodles and sauce.",
        "Bake for 45 minutes.",
    )


def test_duplicate_ingredients_kept_in_order():
    recipe = parse_html(DUPLICATE_INGREDIENTS_HTML, URL)
    assert recipe.ingredients == ("1 tsp salt", "1 cup sugar", "1 tsp salt")


def test_heuristic_fallback():
    recipe = parse_html(HEURISTIC_FALLBACK_HTML)
    assert recipe.title == "Grandma's Soup"
    assert recipe.ingredients == ("water", "salt")
    assert recipe.source_url is None


def test_no_recipe_names_missing_fields():
    with pytest.raises(ValidationError) as exc_info:
        parse_html(NO_RECIPE_HTML, URL)
    err = exc_info.value
    assert err.error_type == "validation"
    assert set(err.fields) == {"title", "ingredients", "instructions"}


def test_site_specific_stage_runs_for_registered_url():
    registry = SiteParserRegistry()
    registry.register(
        "Example",
        [r"example\.com"],
        lambda html, url: {
            "title": "Site Title",
            "ingredients": ["1 cup flour"],
            "instructions": ["Knead the dough well."],
            "cuisine": "Italian",
        },
    )
    recipe = parse_html(JSONLD_RECIPE_HTML, URL, registry=registry)
    # Structured data outranks the site parser; it only fills gaps
    assert recipe.title == "Test Cookies"
    assert recipe.cuisine == "Italian"


def test_site_specific_stage_skipped_without_url():
    parser = MagicMock(return_value=None)
    registry = SiteParserRegistry()
    registry.register("Anything", [r".*"], parser)

    parse_html(JSONLD_RECIPE_HTML, registry=registry)
    parser.assert_not_called()


# -- Tests: pipeline orchestration (mocked HTTP) --


def _make_mock_response(html: str, status_code: int = 200) -> httpx.Response:
    """Create a mock httpx.Response with the given HTML content."""
    return httpx.Response(
        status_code=status_code, text=html, request=httpx.Request("GET", URL)
    )


@pytest.mark.anyio
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_parse_recipe_success(mock_client_cls):
    mock_client = AsyncMock()
    mock_client.get.return_value = _make_mock_response(JSONLD_RECIPE_HTML)
    mock_client_cls.return_value.__aenter__.return_value = mock_client

    recipe = await parse_recipe(URL)
    assert recipe.title == "Test Cookies"
    assert recipe.source_url == URL
    assert recipe.classification is None


@pytest.mark.anyio
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_parse_recipe_no_recipe_raises_validation(mock_client_cls):
    mock_client = AsyncMock()
    mock_client.get.return_value = _make_mock_response(NO_RECIPE_HTML)
    mock_client_cls.return_value.__aenter__.return_value = mock_client

    with pytest.raises(ValidationError, match="title"):
        await parse_recipe(URL)


@pytest.mark.anyio
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_parse_recipe_timeout(mock_client_cls):
    mock_client = AsyncMock()
    mock_client.get.side_effect = httpx.TimeoutException("timed out")
    mock_client_cls.return_value.__aenter__.return_value = mock_client

    with pytest.raises(FetchError, match="timed out") as exc_info:
        await parse_recipe(URL)
    assert exc_info.value.error_type == "network"


@pytest.mark.anyio
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_parse_recipe_http_error(mock_client_cls):
    mock_client = AsyncMock()
    mock_client.get.return_value = _make_mock_response("", status_code=403)
    mock_client_cls.return_value.__aenter__.return_value = mock_client

    with pytest.raises(FetchError, match="blocked") as exc_info:
        await parse_recipe(URL)
    assert exc_info.value.error_type == "http"


@pytest.mark.anyio
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_parse_recipe_not_found(mock_client_cls):
    mock_client = AsyncMock()
    mock_client.get.return_value = _make_mock_response("", status_code=404)
    mock_client_cls.return_value.__aenter__.return_value = mock_client

    with pytest.raises(FetchError, match="Page not found"):
        await parse_recipe(URL)


@pytest.mark.anyio
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_parse_recipe_server_error(mock_client_cls):
    mock_client = AsyncMock()
    mock_client.get.return_value = _make_mock_response("", status_code=503)
    mock_client_cls.return_value.__aenter__.return_value = mock_client

    with pytest.raises(FetchError, match="HTTP 503") as exc_info:
        await parse_recipe(URL)
    assert exc_info.value.error_type == "http"


@pytest.mark.anyio
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_parse_recipe_connection_error(mock_client_cls):
    mock_client = AsyncMock()
    mock_client.get.side_effect = httpx.ConnectError("connection refused")
    mock_client_cls.return_value.__aenter__.return_value = mock_client

    with pytest.raises(FetchError, match="Could not reach") as exc_info:
        await parse_recipe(URL)
    assert exc_info.value.error_type == "network"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "url", ["file:///etc/passwd", "ftp://example.com/recipe", "example.com/recipe"]
)
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_fetch_rejects_non_http_urls(mock_client_cls, url):
    with pytest.raises(FetchError, match="Only http and https") as exc_info:
        await fetch_html(url)
    assert exc_info.value.error_type == "validation"
    mock_client_cls.assert_not_called()


@pytest.mark.anyio
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_parse_recipe_with_classification(mock_client_cls):
    mock_client = AsyncMock()
    mock_client.get.return_value = _make_mock_response(JSONLD_RECIPE_HTML)
    mock_client_cls.return_value.__aenter__.return_value = mock_client
    tracker = MagicMock()

    recipe = await parse_recipe(URL, with_classification=True, tracker=tracker)

    assert isinstance(recipe.classification, CulinaryClassification)
    tracker.assert_called_once()
    classification, context = tracker.call_args.args
    assert classification == recipe.classification
    assert context["prep_time"] == 10
    assert context["ingredients"] == ["1 cup flour", "1/2 cup sugar", "2 eggs"]


@pytest.mark.anyio
@patch("recipe_import.parser.pipeline.httpx.AsyncClient")
async def test_failing_tracker_does_not_fail_parse(mock_client_cls):
    mock_client = AsyncMock()
    mock_client.get.return_value = _make_mock_response(JSONLD_RECIPE_HTML)
    mock_client_cls.return_value.__aenter__.return_value = mock_client
    tracker = MagicMock(side_effect=RuntimeError("analytics down"))

    recipe = await parse_recipe(URL, with_classification=True, tracker=tracker)

    assert recipe.classification.course == Course.DESSERT


def test_non_string_optional_values_do_not_fail_parse():
    html = """
    <script type="application/ld+json">
    {"@type": "Recipe", "name": "Odd Types Pie",
     "image": {"url": ["https://example.com/a.jpg"]},
     "author": {"name": {"first": "Ada"}},
     "recipeIngredient": ["2 cups flour"],
     "recipeInstructions": ["Roll out the dough."]}
    </script>
    """
    recipe = parse_html(html, URL)
    assert recipe.title == "Odd Types Pie"
    assert recipe.image_url is None
    assert recipe.author is None
