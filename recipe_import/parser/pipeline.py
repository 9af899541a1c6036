"""Orchestrator: fetch a page and run the extraction stages."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx

from recipe_import.culinary.classifier import classify
from recipe_import.culinary.taxonomy import CulinaryClassification
from recipe_import.models import FetchError, ParsedRecipe
from recipe_import.parser.heuristic import extract_heuristic
from recipe_import.parser.microdata import extract_microdata
from recipe_import.parser.sites import (
    DEFAULT_REGISTRY,
    SiteParserRegistry,
    extract_site_specific,
)
from recipe_import.parser.structured import extract_structured
from recipe_import.parser.validation import validate_draft

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
FETCH_TIMEOUT_SECONDS = 10.0

Tracker = Callable[[CulinaryClassification, dict], object]


@dataclass(frozen=True)
class FetchedPage:
    html: str
    final_url: str


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, (str, list, tuple, dict)) and not value)


def merge_drafts(drafts: Iterable[dict | None]) -> dict:
    """Combine partial drafts; the first non-empty value for each field wins."""
    merged = {}
    for draft in drafts:
        if not draft:
            continue
        for field, value in draft.items():
            if _is_empty(merged.get(field)) and not _is_empty(value):
                merged[field] = value
    return merged


def parse_html(
    html: str,
    source_url: str | None = None,
    registry: SiteParserRegistry = DEFAULT_REGISTRY,
) -> ParsedRecipe:
    """Extract and validate a recipe from an HTML document.

    Raises ValidationError when the merged result lacks a title, ingredients,
    or instructions.
    """
    stages = [
        ("structured data", lambda: extract_structured(html)),
        ("microdata", lambda: extract_microdata(html)),
    ]
    if source_url:
        stages.append(
            ("site-specific", lambda: extract_site_specific(html, source_url, registry))
        )

    drafts = [{"source_url": source_url}]
    for name, extract in stages:
        draft = extract()
        if draft:
            logger.debug("%s stage provided: %s", name, ", ".join(sorted(draft)))
            drafts.append(draft)
        else:
            logger.debug("%s stage found nothing", name)

    merged = merge_drafts(drafts)
    if _is_empty(merged.get("title")) or _is_empty(merged.get("ingredients")):
        logger.debug("Running heuristic fallback for %s", source_url or "<html>")
        merged = merge_drafts([merged, extract_heuristic(html)])

    return validate_draft(merged)


_STATUS_MESSAGES = {
    401: "The site requires a login to view this page.",
    403: "The site blocked the request; it may not allow automated access.",
    404: "Page not found. Check that the URL points to a recipe page.",
    410: "Page not found. Check that the URL points to a recipe page.",
    429: "The site is rate limiting requests. Try again later.",
}


def _status_message(status: int) -> str:
    if status in _STATUS_MESSAGES:
        return _STATUS_MESSAGES[status]
    if status >= 500:
        return f"The recipe site had a server error (HTTP {status}). Try again later."
    return f"The recipe site returned HTTP {status}."


async def fetch_html(url: str) -> FetchedPage:
    """Fetch a page, translating every transport failure into FetchError.

    Only http(s) URLs are fetched. Nothing is retried.
    """
    scheme = urlparse(url).scheme
    if scheme not in ("http", "https"):
        logger.warning("Refusing to fetch %r: unsupported scheme %r", url, scheme)
        raise FetchError("validation", "Only http and https URLs can be fetched.")

    try:
        async with httpx.AsyncClient(
            timeout=FETCH_TIMEOUT_SECONDS,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.InvalidURL as e:
        logger.warning("Invalid URL %r: %s", url, e)
        raise FetchError("validation", "That URL is not valid.") from e
    except httpx.TimeoutException as e:
        logger.warning("Timed out after %.0fs fetching %s", FETCH_TIMEOUT_SECONDS, url)
        raise FetchError(
            "network", "Request timed out. The site may be slow or down."
        ) from e
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.warning("HTTP %d from %s", status, url)
        raise FetchError("http", _status_message(status)) from e
    except httpx.RequestError as e:
        logger.warning("Request to %s failed: %s", url, e)
        raise FetchError(
            "network", "Could not reach the site. Check the URL and try again."
        ) from e

    logger.info(
        "Fetched %s (HTTP %d, %d bytes)", url, response.status_code, len(response.text)
    )
    return FetchedPage(html=response.text, final_url=str(response.url))


async def parse_recipe(
    url: str,
    *,
    with_classification: bool = False,
    tracker: Tracker | None = None,
    registry: SiteParserRegistry = DEFAULT_REGISTRY,
) -> ParsedRecipe:
    """Fetch a URL and extract a recipe from it.

    FetchError means the page was unreachable; ValidationError means it was
    reachable but held no recognizable recipe.
    """
    logger.info("Parsing recipe from %s", url)
    page = await fetch_html(url)
    recipe = parse_html(page.html, page.final_url or url, registry=registry)
    logger.info("Parsed recipe %r from %s", recipe.title, url)

    if not with_classification:
        return recipe

    classification = classify(recipe)
    if tracker is not None:
        _report(tracker, classification, recipe)
    return recipe.model_copy(update={"classification": classification})


def _report(
    tracker: Tracker, classification: CulinaryClassification, recipe: ParsedRecipe
) -> None:
    """Best-effort hand-off to an analytics sink; failures stay here."""
    context = {
        "prep_time": recipe.prep_time,
        "cook_time": recipe.cook_time,
        "ingredients": list(recipe.ingredients),
    }
    try:
        tracker(classification, context)
    except Exception:
        logger.warning(
            "Classification tracker failed for %r", recipe.title, exc_info=True
        )
