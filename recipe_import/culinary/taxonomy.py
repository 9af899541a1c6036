"""Closed vocabularies for culinary classification and the classification value."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class _Facet(str, Enum):
    """Base for facet enums: values serialize as their plain strings."""

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self.value, self.value.replace("_", " ").title())


# Declaration order is the matching priority used by the classifier.
class Course(_Facet):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    DESSERT = "dessert"
    APPETIZER = "appetizer"
    SOUP = "soup"
    SALAD = "salad"
    SIDE = "side"
    SNACK = "snack"
    BEVERAGE = "beverage"
    STREET_FOOD = "street_food"
    BRUNCH = "brunch"


class DishForm(_Facet):
    BOWL_MEAL = "bowl_meal"
    HANDHELD = "handheld"
    PLATED_ENTREE = "plated_entree"
    SAUCE_OVER_BASE = "sauce_over_base"
    BAKED_DISH = "baked_dish"
    DUMPLING_STUFFED = "dumpling_stuffed"
    SKEWER = "skewer"
    PANCAKE_FRITTER = "pancake_fritter"
    PASTRY = "pastry"
    SPREAD_DIP = "spread_dip"
    DRINKABLE = "drinkable"


class CookingMethod(_Facet):
    RAW_MARINATED = "raw_marinated"
    BOILED_SIMMERED = "boiled_simmered"
    STEAMED = "steamed"
    SAUTEED_STIRFRIED = "sauteed_stirfried"
    ROASTED_BAKED = "roasted_baked"
    GRILLED_CHARRED = "grilled_charred"
    FRIED_DEEP = "fried_deep"
    FRIED_SHALLOW = "fried_shallow"
    FRIED_AIR = "fried_air"
    BRAISED_STEWED = "braised_stewed"
    FERMENTED_CURED = "fermented_cured"
    BLENDED_EMULSIFIED = "blended_emulsified"
    FROZEN_CHILLED = "frozen_chilled"


class Region(_Facet):
    # Western Europe
    FRENCH = "french"
    ITALIAN = "italian"
    SPANISH = "spanish"
    GERMAN = "german"
    BRITISH = "british"
    GREEK = "greek"
    # Eastern Europe
    EASTERN_EUROPEAN = "eastern_european"
    BALKANS = "balkans"
    RUSSIAN = "russian"
    # Middle East & Africa
    MIDDLE_EASTERN = "middle_eastern"
    LEVANTINE = "levantine"
    NORTH_AFRICAN = "north_african"
    WEST_AFRICAN = "west_african"
    EAST_AFRICAN = "east_african"
    SOUTHERN_AFRICAN = "southern_african"
    # Asia
    SOUTH_ASIAN = "south_asian"
    INDIAN = "indian"
    CHINESE = "chinese"
    JAPANESE = "japanese"
    KOREAN = "korean"
    THAI = "thai"
    VIETNAMESE = "vietnamese"
    FILIPINO = "filipino"
    SOUTHEAST_ASIAN = "southeast_asian"
    # Americas
    MEXICAN = "mexican"
    CENTRAL_AMERICAN = "central_american"
    SOUTH_AMERICAN = "south_american"
    CARIBBEAN = "caribbean"
    CAJUN = "cajun"
    SOUTHWESTERN = "southwestern"
    PACIFIC_NORTHWEST = "pacific_northwest"
    SOUTHERN_US = "southern_us"
    # Modern
    FUSION = "fusion"
    MODERN = "modern"
    GLOBAL_CONTEMPORARY = "global_contemporary"


class FlavorProfile(_Facet):
    SAVORY_UMAMI = "savory_umami"
    BRIGHT_ACIDIC = "bright_acidic"
    SPICY_HOT = "spicy_hot"
    SWEET_RICH = "sweet_rich"
    BITTER_HERBAL = "bitter_herbal"
    SMOKY_EARTHY = "smoky_earthy"
    FERMENTED_TANGY = "fermented_tangy"
    AROMATIC_FLORAL = "aromatic_floral"
    BALANCED_MILD = "balanced_mild"


class DietaryTag(_Facet):
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    GLUTEN_FREE = "gluten_free"
    DAIRY_FREE = "dairy_free"
    LOW_SODIUM = "low_sodium"
    LOW_FAT = "low_fat"
    HIGH_PROTEIN = "high_protein"
    KETO = "keto"
    PALEO = "paleo"
    WHOLE30 = "whole30"
    PESCATARIAN = "pescatarian"


class ContextualTag(_Facet):
    FAMILY_STYLE = "family_style"
    SINGLE_SERVE = "single_serve"
    MEAL_PREP = "meal_prep"
    FREEZER_FRIENDLY = "freezer_friendly"
    PICNIC = "picnic"
    CELEBRATION = "celebration"
    COMFORT = "comfort"
    EVERYDAY = "everyday"
    QUICK = "quick"
    ONE_POT = "one_pot"
    NO_COOK = "no_cook"


class IngredientDomain(_Facet):
    PROTEIN = "protein"
    GRAIN_STARCH = "grain_starch"
    VEGETABLE_FORWARD = "vegetable_forward"
    DAIRY_BASED = "dairy_based"
    FRUIT_BASED = "fruit_based"
    MIXED = "mixed"


# Only names that differ from the title-cased value.
_DISPLAY_NAMES = {
    "side": "Side Dish",
    "soup": "Soup/Stew",
    "street_food": "Street Food",
    "plated_entree": "Plated Entrée",
    "dumpling_stuffed": "Dumpling/Stuffed",
    "skewer": "Skewer/Kebab",
    "pancake_fritter": "Pancake/Fritter",
    "pastry": "Pastry/Pie",
    "spread_dip": "Spread/Dip",
    "southern_us": "Southern US",
    "sauteed_stirfried": "Sautéed/Stir-fried",
    "gluten_free": "Gluten-Free",
    "dairy_free": "Dairy-Free",
    "whole30": "Whole30",
}


Level = Annotated[int, Field(ge=0, le=5)]


class FlavorDimensions(BaseModel):
    """Six independent taste intensities on a 0-5 scale."""

    model_config = ConfigDict(frozen=True)

    spice: Level = 0
    acid: Level = 0
    fat: Level = 0
    umami: Level = 0
    sweet: Level = 0
    bitter: Level = 0


class CulinaryClassification(BaseModel):
    """Taxonomy facets inferred from a recipe's text.

    Every facet may be absent (``None``) or empty; absence is a final answer.
    """

    model_config = ConfigDict(frozen=True)

    course: Course | None = None
    dish_form: DishForm | None = None
    cooking_method: frozenset[CookingMethod] = frozenset()
    region: frozenset[Region] = frozenset()
    flavor_profiles: frozenset[FlavorProfile] = frozenset()
    flavor_dimensions: FlavorDimensions | None = None
    dietary_tags: frozenset[DietaryTag] = frozenset()
    contextual_tags: frozenset[ContextualTag] = frozenset()
    ingredient_domain: IngredientDomain | None = None
