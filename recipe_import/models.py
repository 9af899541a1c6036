from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from recipe_import.culinary.taxonomy import CulinaryClassification
from recipe_import.parser.fields import absolutize_image_url
from recipe_import.parser.text import clean_text

# Entries at or below these lengths after cleaning are noise, not content.
MIN_INGREDIENT_LENGTH = 3
MIN_INSTRUCTION_LENGTH = 11


class Nutrition(BaseModel):
    model_config = ConfigDict(frozen=True)

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None


class ParsedRecipe(BaseModel):
    """A validated recipe record.

    Construction is validation: text is cleaned, short ingredient and
    instruction entries are dropped, and empty required fields are rejected.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    description: str | None = None
    ingredients: tuple[str, ...]
    instructions: tuple[str, ...]
    prep_time: int | None = None
    cook_time: int | None = None
    total_time: int | None = None
    servings: int | None = None
    cuisine: str | None = None
    course: str | None = None
    difficulty: str | None = None
    image_url: str | None = None
    source_url: str | None = None
    author: str | None = None
    nutrition: Nutrition | None = None
    tags: tuple[str, ...] | None = None
    classification: CulinaryClassification | None = None

    @model_validator(mode="before")
    @classmethod
    def resolve_image_url(cls, data):
        """Make a relative image URL absolute against the source URL."""
        if isinstance(data, dict) and data.get("image_url") and data.get("source_url"):
            data = dict(data)
            data["image_url"] = absolutize_image_url(
                clean_text(data["image_url"]), clean_text(data["source_url"])
            )
        return data

    @field_validator("title", mode="before")
    @classmethod
    def clean_title(cls, value):
        return clean_text(value) if isinstance(value, str) else value

    @field_validator("title")
    @classmethod
    def require_title(cls, value: str) -> str:
        if not value:
            raise ValueError("title is empty")
        return value

    @field_validator(
        "description",
        "cuisine",
        "course",
        "difficulty",
        "image_url",
        "source_url",
        "author",
        mode="before",
    )
    @classmethod
    def clean_optional_text(cls, value):
        if isinstance(value, str):
            return clean_text(value) or None
        return value

    @field_validator("ingredients", mode="before")
    @classmethod
    def clean_ingredients(cls, value):
        kept = _clean_entries(value, MIN_INGREDIENT_LENGTH)
        if not kept:
            raise ValueError("no ingredients found")
        return kept

    @field_validator("instructions", mode="before")
    @classmethod
    def clean_instructions(cls, value):
        kept = _clean_entries(value, MIN_INSTRUCTION_LENGTH)
        if not kept:
            raise ValueError("no instructions found")
        return kept

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, value):
        if value is None:
            return None
        return _clean_entries(value, 1) or None


def _clean_entries(value, min_length: int) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    cleaned = (clean_text(str(entry)) for entry in value)
    return [entry for entry in cleaned if len(entry) >= min_length]


class ParseError(Exception):
    def __init__(self, error_type: str, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(message)


class FetchError(ParseError):
    """The page could not be retrieved; raised before any extraction runs."""


class ValidationError(ParseError):
    """The page was reachable but held no usable recipe."""

    def __init__(self, fields, message: str | None = None):
        self.fields = tuple(fields)
        if message is None:
            message = "Recipe is missing required content: " + ", ".join(self.fields)
        super().__init__("validation", message)


class MalformedStructuredDataError(ParseError):
    def __init__(self, message: str):
        super().__init__("structured_data", message)


class SiteSpecificParserError(ParseError):
    def __init__(self, site: str, message: str):
        self.site = site
        super().__init__("site_parser", message)
