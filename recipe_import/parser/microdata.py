"""Stage 2: Extract a recipe draft from itemprop-annotated microdata."""

import logging
import re

from bs4 import BeautifulSoup

from recipe_import.parser.fields import parse_duration, parse_servings
from recipe_import.parser.text import clean_text

logger = logging.getLogger(__name__)

_RECIPE_SCOPE_RE = re.compile(r"schema\.org/Recipe\b", re.IGNORECASE)


def extract_microdata(html: str) -> dict | None:
    """Collect itemprop values, whether or not they sit inside an itemscope."""
    soup = BeautifulSoup(html, "html.parser")
    draft = {}

    scope = soup.find(attrs={"itemtype": _RECIPE_SCOPE_RE}) or soup
    title = _first_value(scope, "name") or _first_value(soup, "name")
    if title:
        draft["title"] = title

    ingredients = _all_values(soup, "recipeIngredient") or _all_values(
        soup, "ingredients"
    )
    if ingredients:
        draft["ingredients"] = ingredients

    instructions = _all_values(soup, "recipeInstructions")
    if instructions:
        draft["instructions"] = instructions

    for field, prop in (
        ("description", "description"),
        ("cuisine", "recipeCuisine"),
        ("course", "recipeCategory"),
    ):
        value = _first_value(scope, prop)
        if value:
            draft[field] = value

    for field, prop in (
        ("prep_time", "prepTime"),
        ("cook_time", "cookTime"),
        ("total_time", "totalTime"),
    ):
        minutes = parse_duration(_first_value(scope, prop))
        if minutes is not None:
            draft[field] = minutes

    servings = parse_servings(_first_value(scope, "recipeYield"))
    if servings is not None:
        draft["servings"] = servings

    image = scope.find(attrs={"itemprop": "image"})
    if image is not None:
        src = image.get("src") or image.get("content") or image.get("href")
        if src:
            draft["image_url"] = src

    if not draft:
        logger.debug("No microdata properties found")
        return None
    logger.debug("Microdata provided fields: %s", ", ".join(sorted(draft)))
    return draft


def _value_of(element) -> str:
    if element.name == "meta":
        return clean_text(element.get("content", ""))
    # <time datetime="PT10M"> carries the machine-readable value
    if element.name == "time" and element.get("datetime"):
        return element["datetime"]
    return clean_text(element.get_text(" "))


def _first_value(root, prop: str) -> str:
    element = root.find(attrs={"itemprop": prop})
    return _value_of(element) if element is not None else ""


def _all_values(root, prop: str) -> list[str]:
    values = []
    for element in root.find_all(attrs={"itemprop": prop}):
        # A container of list items or paragraphs holds one entry per child
        children = []
        if element.name not in ("li", "p"):
            children = element.find_all("li") or element.find_all("p")
        if children:
            values.extend(clean_text(child.get_text(" ")) for child in children)
        else:
            values.append(_value_of(element))
    return [v for v in values if v]
