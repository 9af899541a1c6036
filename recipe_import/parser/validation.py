"""Turn a merged draft into a validated ParsedRecipe."""

import logging

import pydantic

from recipe_import.models import ParsedRecipe, ValidationError

logger = logging.getLogger(__name__)


def validate_draft(draft: dict) -> ParsedRecipe:
    """Clean and validate a draft, naming every field that fails."""
    try:
        return ParsedRecipe.model_validate(draft)
    except pydantic.ValidationError as e:
        fields = []
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "recipe"
            if field not in fields:
                fields.append(field)
        logger.debug("Draft rejected: %s", e)
        raise ValidationError(fields) from e
