"""Normalizers for individual recipe fields (durations, yields, nutrition, steps)."""

import math
import re
from urllib.parse import urljoin, urlparse

from recipe_import.parser.text import clean_text

_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?", re.IGNORECASE)
_DIGITS_RE = re.compile(r"\d+")
_NON_NUMERIC_RE = re.compile(r"[^\d.]")
_LINE_BREAKS_RE = re.compile(r"\n+")


def parse_duration(value) -> int | None:
    """Convert an ISO 8601 duration like ``PT1H30M`` to minutes.

    Returns None (never 0) when the value is missing or unrecognized.
    """
    if not value or not isinstance(value, str):
        return None
    match = _DURATION_RE.search(value)
    if match is None:
        return None
    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    return hours * 60 + minutes


def parse_nutrition_value(value) -> float | None:
    """Parse strings like ``"240 kcal"`` or ``"12.5 g"`` into a number."""
    if value is None:
        return None
    digits = _NON_NUMERIC_RE.sub("", str(value))
    try:
        number = float(digits)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_servings(value) -> int | None:
    """Take the first run of digits from a yield like ``"4 servings"``."""
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None:
        return None
    match = _DIGITS_RE.search(str(value))
    return int(match.group()) if match else None


def coerce_instructions(raw) -> list[str]:
    """Normalize recipeInstructions into a flat list of step strings.

    Accepts a single text block (split on newlines), a list of strings, or a
    list of HowToStep/HowToSection objects.
    """
    if isinstance(raw, str):
        steps = _LINE_BREAKS_RE.split(raw)
    elif isinstance(raw, list):
        steps = []
        for item in raw:
            steps.extend(_step_texts(item))
    else:
        return []
    cleaned = (clean_text(step) for step in steps)
    return [step for step in cleaned if step]


def _step_texts(item) -> list[str]:
    if isinstance(item, str):
        return [item]
    if not isinstance(item, dict):
        return []
    if item.get("@type") == "HowToSection" and isinstance(
        item.get("itemListElement"), list
    ):
        texts = []
        for sub in item["itemListElement"]:
            texts.extend(_step_texts(sub))
        return texts
    text = item.get("text") or item.get("name")
    return [str(text)] if text else []


def coerce_keywords(value) -> list[str]:
    """Keywords arrive as a comma-separated string or a list."""
    if isinstance(value, str):
        return [k.strip() for k in value.split(",") if k.strip()]
    if isinstance(value, list):
        return [str(k).strip() for k in value if str(k).strip()]
    return []


def first_text(value) -> str | None:
    """Flatten a string-or-list property (recipeCuisine, recipeCategory)."""
    if isinstance(value, list):
        parts = [str(v).strip() for v in value if isinstance(v, str) and v.strip()]
        return ", ".join(parts) or None
    if isinstance(value, str):
        return value.strip() or None
    return None


def absolutize_image_url(image_url: str | None, source_url: str | None) -> str | None:
    """Resolve a possibly-relative image URL against the page URL.

    The original string is kept whenever resolution isn't possible.
    """
    if not image_url or not source_url:
        return image_url
    try:
        base = urlparse(source_url)
        if not base.scheme or not base.netloc:
            return image_url
        return urljoin(source_url, image_url)
    except ValueError:
        return image_url


NUTRITION_KEYS = {
    "calories": "calories",
    "protein": "proteinContent",
    "carbs": "carbohydrateContent",
    "fat": "fatContent",
    "fiber": "fiberContent",
    "sugar": "sugarContent",
    "sodium": "sodiumContent",
}


def parse_nutrition(nutrition) -> dict | None:
    """Map a Schema.org NutritionInformation object to numeric fields."""
    if not isinstance(nutrition, dict):
        return None
    values = {
        name: parse_nutrition_value(nutrition.get(key))
        for name, key in NUTRITION_KEYS.items()
    }
    values = {name: value for name, value in values.items() if value is not None}
    return values or None
