"""Stage 1: Extract a recipe draft from Schema.org JSON-LD via extruct."""

import json
import logging

import extruct
from bs4 import BeautifulSoup

from recipe_import.models import MalformedStructuredDataError
from recipe_import.parser.fields import (
    coerce_instructions,
    coerce_keywords,
    first_text,
    parse_duration,
    parse_nutrition,
    parse_servings,
)

logger = logging.getLogger(__name__)

_SKIPPED_KEYS = {"@context", "@id"}


def extract_structured(html: str) -> dict | None:
    """Return a draft from the first JSON-LD Recipe node in the document.

    Blocks are decoded one at a time so a malformed block only loses itself.
    """
    soup = BeautifulSoup(html, "html.parser")
    blocks = soup.find_all("script", attrs={"type": "application/ld+json"})

    for index, block in enumerate(blocks):
        try:
            items = _load_block(block)
        except MalformedStructuredDataError as e:
            logger.warning("Skipping JSON-LD block %d: %s", index, e.message)
            continue

        recipe_obj = find_recipe_node(items)
        if recipe_obj is not None:
            logger.debug("Found Recipe node in JSON-LD block %d", index)
            return _to_draft(recipe_obj)

    logger.debug("No JSON-LD Recipe node in %d block(s)", len(blocks))
    return None


def _load_block(block) -> list:
    # extruct tolerates comments and trailing commas; a block must be strict JSON
    try:
        json.loads(block.string or "")
    except ValueError as e:
        raise MalformedStructuredDataError(f"invalid JSON ({e})") from e

    try:
        data = extruct.extract(str(block), syntaxes=["json-ld"], errors="strict")
    except ValueError as e:
        raise MalformedStructuredDataError(f"invalid JSON ({e})") from e
    return data.get("json-ld", [])


def _is_recipe(node: dict) -> bool:
    node_type = node.get("@type")
    if isinstance(node_type, list):
        return "Recipe" in node_type
    return node_type == "Recipe"


def find_recipe_node(data) -> dict | None:
    """Depth-first search for a Recipe object through lists, @graph, and nesting."""
    if isinstance(data, list):
        for item in data:
            found = find_recipe_node(item)
            if found is not None:
                return found
        return None

    if not isinstance(data, dict):
        return None

    if _is_recipe(data):
        return data

    if isinstance(data.get("@graph"), list):
        return find_recipe_node(data["@graph"])

    for key, value in data.items():
        if key in _SKIPPED_KEYS:
            continue
        found = find_recipe_node(value)
        if found is not None:
            return found
    return None


def _to_draft(recipe_obj: dict) -> dict:
    ingredients = recipe_obj.get("recipeIngredient") or []
    if not isinstance(ingredients, list):
        ingredients = [ingredients]

    draft = {
        "title": _string(recipe_obj.get("name")),
        "description": _string(recipe_obj.get("description")),
        "ingredients": [str(i).strip() for i in ingredients],
        "instructions": coerce_instructions(recipe_obj.get("recipeInstructions")),
        "prep_time": parse_duration(recipe_obj.get("prepTime")),
        "cook_time": parse_duration(recipe_obj.get("cookTime")),
        "total_time": parse_duration(recipe_obj.get("totalTime")),
        "servings": parse_servings(recipe_obj.get("recipeYield")),
        "cuisine": first_text(recipe_obj.get("recipeCuisine")),
        "course": first_text(recipe_obj.get("recipeCategory")),
        "difficulty": first_text(recipe_obj.get("difficulty")),
        "image_url": _image_url(recipe_obj.get("image")),
        "author": _author_name(recipe_obj.get("author")),
        "nutrition": parse_nutrition(recipe_obj.get("nutrition")),
        "tags": coerce_keywords(recipe_obj.get("keywords")),
    }
    return draft


def _image_url(image) -> str | None:
    # Handle image field (can be string, dict, or list)
    if isinstance(image, str):
        return image
    if isinstance(image, dict):
        return _string(image.get("url")) or _string(image.get("@id")) or None
    if isinstance(image, list) and image:
        first = image[0]
        if isinstance(first, dict):
            return _string(first.get("url")) or None
        return first if isinstance(first, str) else None
    return None


def _author_name(author) -> str | None:
    if isinstance(author, list):
        author = author[0] if author else None
    if isinstance(author, str):
        return author
    if isinstance(author, dict):
        return _string(author.get("name")) or None
    return None


def _string(value) -> str:
    return value if isinstance(value, str) else ""
