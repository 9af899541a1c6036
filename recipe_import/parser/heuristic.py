"""Stage 4: Heuristic extraction from unstructured HTML."""

import logging
import re

from bs4 import BeautifulSoup

from recipe_import.models import MIN_INGREDIENT_LENGTH, MIN_INSTRUCTION_LENGTH
from recipe_import.parser.text import clean_text

logger = logging.getLogger(__name__)

_INGREDIENT_CLASS_RE = re.compile(r"ingredient", re.IGNORECASE)
_INSTRUCTION_CLASS_RE = re.compile(r"instruction|direction|step", re.IGNORECASE)
_RECIPE_CLASS_RE = re.compile(r"recipe", re.IGNORECASE)

_INGREDIENT_RE = re.compile(r"ingredients\s*:?", re.IGNORECASE)
_INSTRUCTION_RE = re.compile(
    r"(?:instructions|directions|steps|method)\s*:?", re.IGNORECASE
)
_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
_LABEL_TAGS = [*_HEADING_TAGS, "strong", "b"]
_TITLE_SUFFIX_RE = re.compile(r"[|\-]")


def extract_heuristic(html: str) -> dict:
    """Guess recipe fields from common class names, labels, and page metadata."""
    soup = BeautifulSoup(html, "html.parser")
    draft = {}

    title = _extract_title(soup)
    if title:
        draft["title"] = title

    ingredients = _class_items(
        soup, ["li", "span", "p"], _INGREDIENT_CLASS_RE, MIN_INGREDIENT_LENGTH
    ) or _find_list_after_label(soup, _INGREDIENT_RE, MIN_INGREDIENT_LENGTH)
    if ingredients:
        draft["ingredients"] = ingredients

    instructions = _class_items(
        soup, ["li", "div", "p"], _INSTRUCTION_CLASS_RE, MIN_INSTRUCTION_LENGTH
    ) or _find_list_after_label(soup, _INSTRUCTION_RE, MIN_INSTRUCTION_LENGTH)
    if instructions:
        draft["instructions"] = instructions

    image = _extract_image(soup)
    if image:
        draft["image_url"] = image

    logger.debug(
        "Heuristic found %d ingredients, %d steps", len(ingredients), len(instructions)
    )
    return draft


def _class_items(
    soup: BeautifulSoup, tags: list[str], pattern: re.Pattern, min_length: int
) -> list[str]:
    """Text of the innermost elements whose class attribute matches the pattern."""
    items = []
    for tag in soup.find_all(tags, class_=pattern):
        # Nested matches are collected on their own
        if tag.find(tags, class_=pattern):
            continue
        # A matching wrapper around a plain list contributes its list items
        list_items = tag.find_all("li") if tag.name != "li" else []
        elements = list_items or [tag]
        for element in elements:
            text = clean_text(element.get_text(" "))
            if len(text) >= min_length:
                items.append(text)
    return items


def _find_list_after_label(
    soup: BeautifulSoup, pattern: re.Pattern, min_length: int
) -> list[str]:
    """Find a <ul>/<ol> that follows a label matching the pattern."""
    for tag in soup.find_all(_LABEL_TAGS):
        if not pattern.search(tag.get_text(strip=True)):
            continue

        # The label might be inside a <p> wrapper, so look from the parent
        search_from = tag.parent if tag.parent.name == "p" else tag
        ul = search_from.find_next(["ul", "ol"])
        if ul:
            texts = (clean_text(li.get_text(" ")) for li in ul.find_all("li"))
            items = [text for text in texts if len(text) >= min_length]
            if items:
                return items

    return []


def _extract_title(soup: BeautifulSoup) -> str:
    """Title from the first <h1>, then <title> (site suffix dropped), then og:title."""
    h1 = soup.find("h1")
    if h1:
        text = clean_text(h1.get_text(" "))
        if text:
            return text

    title_tag = soup.find("title")
    if title_tag:
        text = clean_text(title_tag.get_text())
        # Strip suffixes like " | Site Name" or " - Site Name"
        text = _TITLE_SUFFIX_RE.split(text, maxsplit=1)[0].strip()
        if text:
            return text

    og = soup.find("meta", property="og:title")
    if og:
        return clean_text(og.get("content", ""))

    return ""


def _extract_image(soup: BeautifulSoup) -> str | None:
    og = soup.find("meta", property="og:image")
    if og and og.get("content", "").strip():
        return og["content"].strip()

    img = soup.find("img", class_=_RECIPE_CLASS_RE)
    if img and img.get("src"):
        return img["src"]

    return None
