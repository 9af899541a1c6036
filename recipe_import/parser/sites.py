"""Stage 3: Per-site extraction selected by URL pattern.

Registered sites are handled by the recipe-scrapers library. A site with no
parser, or a URL that matches nothing, simply yields no result.
"""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from urllib.parse import urlparse

from recipe_scrapers import scrape_html

from recipe_import.models import SiteSpecificParserError
from recipe_import.parser.fields import (
    coerce_instructions,
    parse_nutrition,
    parse_servings,
)

logger = logging.getLogger(__name__)

SiteParser = Callable[[str, str], dict | None]


@dataclass(frozen=True)
class SiteEntry:
    name: str
    patterns: tuple[re.Pattern, ...]
    parser: SiteParser | None = None

    def matches(self, url: str) -> bool:
        return any(pattern.search(url) for pattern in self.patterns)


class SiteParserRegistry:
    """Ordered mapping of site name -> URL patterns and optional parser."""

    def __init__(self, entries: Iterable[SiteEntry] = ()):
        self._entries = list(entries)

    def register(
        self,
        name: str,
        patterns: Iterable[str | re.Pattern],
        parser: SiteParser | None = None,
    ) -> SiteEntry:
        entry = SiteEntry(
            name=name,
            patterns=tuple(re.compile(p) for p in patterns),
            parser=parser,
        )
        self._entries.append(entry)
        return entry

    def matching(self, url: str) -> list[SiteEntry]:
        return [entry for entry in self._entries if entry.matches(url)]

    def is_supported(self, url: str) -> bool:
        """Whether a site-specific entry exists for the URL.

        Any URL can still be parsed through the generic stages.
        """
        return bool(self.matching(url))

    def supported_sites(self) -> list[str]:
        return [entry.name for entry in self._entries]


def extract_site_specific(
    html: str, url: str, registry: SiteParserRegistry
) -> dict | None:
    """Run the first registered parser for the URL that produces a result."""
    for entry in registry.matching(url):
        if entry.parser is None:
            continue
        try:
            draft = entry.parser(html, url)
        except Exception:
            logger.warning(
                "Site-specific parser %s failed for %s", entry.name, url, exc_info=True
            )
            continue
        if draft:
            logger.debug("Site-specific parser %s matched %s", entry.name, url)
            return draft
    return None


def scrape_with_recipe_scrapers(html: str, url: str) -> dict | None:
    """Extract a draft using the recipe-scrapers site scraper for the URL."""
    try:
        scraper = scrape_html(html, org_url=url, supported_only=False)
    except Exception as e:
        raise SiteSpecificParserError(
            urlparse(url).hostname or url,
            f"recipe-scrapers failed to initialize: {e}",
        ) from e

    def _safe_get(name):
        try:
            val = getattr(scraper, name)()
            return val if val else None
        except Exception:
            logger.debug("recipe-scrapers %s() failed", name, exc_info=True)
            return None

    instructions = _safe_get("instructions_list")
    if instructions is None:
        instructions = _safe_get("instructions")

    draft = {
        "title": _safe_get("title"),
        "description": _safe_get("description"),
        "ingredients": _safe_get("ingredients"),
        "instructions": coerce_instructions(instructions),
        "prep_time": _minutes(_safe_get("prep_time")),
        "cook_time": _minutes(_safe_get("cook_time")),
        "total_time": _minutes(_safe_get("total_time")),
        "servings": parse_servings(_safe_get("yields")),
        "cuisine": _safe_get("cuisine"),
        "course": _safe_get("category"),
        "image_url": _safe_get("image"),
        "author": _safe_get("author"),
        "nutrition": parse_nutrition(_safe_get("nutrients")),
    }
    draft = {field: value for field, value in draft.items() if value}
    return draft or None


def _minutes(value) -> int | None:
    return value if isinstance(value, int) else None


_KNOWN_SITES = [
    ("AllRecipes", r"allrecipes\.com"),
    ("Food Network", r"foodnetwork\.com"),
    ("Serious Eats", r"seriouseats\.com"),
    ("Bon Appétit", r"bonappetit\.com"),
    ("Epicurious", r"epicurious\.com"),
    ("NYT Cooking", r"cooking\.nytimes\.com"),
    ("BBC Good Food", r"bbcgoodfood\.com"),
    ("Tasty", r"tasty\.co"),
    ("Simply Recipes", r"simplyrecipes\.com"),
    ("Budget Bytes", r"budgetbytes\.com"),
    ("Skinnytaste", r"skinnytaste\.com"),
    ("Delish", r"delish\.com"),
    ("RecipeTin Eats", r"recipetineats\.com"),
    ("Cookie and Kate", r"cookieandkate\.com"),
    ("Minimalist Baker", r"minimalistbaker\.com"),
]


def default_registry() -> SiteParserRegistry:
    registry = SiteParserRegistry()
    for name, pattern in _KNOWN_SITES:
        registry.register(name, [pattern], scrape_with_recipe_scrapers)
    return registry


DEFAULT_REGISTRY = default_registry()
