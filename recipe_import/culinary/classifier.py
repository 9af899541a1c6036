"""Rule-based culinary classification of a parsed recipe.

Each facet is inferred independently from the recipe's text with keyword and
regex tables. Facets that find no signal stay empty; nothing is defaulted.
"""

import re

from recipe_import.culinary.taxonomy import (
    ContextualTag,
    CookingMethod,
    Course,
    CulinaryClassification,
    DietaryTag,
    DishForm,
    FlavorDimensions,
    FlavorProfile,
    IngredientDomain,
    Region,
)
from recipe_import.models import ParsedRecipe


MAX_LEVEL = 5


def _patterns(*sources: str) -> list[re.Pattern]:
    return [re.compile(source, re.IGNORECASE) for source in sources]


# Dict order is the match priority.
COURSE_PATTERNS: dict[Course, list[re.Pattern]] = {
    Course.BREAKFAST: _patterns(
        r"breakfast", r"brunch", r"morning", r"pancake", r"waffle", r"omelet",
        r"french toast", r"cereal", r"granola", r"muesli", r"porridge",
    ),
    Course.LUNCH: _patterns(
        r"lunch", r"sandwich", r"\bwraps?\b", r"salad bowl", r"light meal"
    ),
    Course.DINNER: _patterns(
        r"dinner", r"supper", r"main course", r"entrée", r"entree"
    ),
    Course.DESSERT: _patterns(
        r"dessert", r"cakes?\b", r"\bpies?\b", r"(?<!s)tart(?:let)?s?\b", r"cookie",
        r"brownie", r"ice cream", r"pudding", r"custard", r"\bsweet\b",
    ),
    Course.APPETIZER: _patterns(
        r"appetizer", r"starter", r"hors d'oeuvre", r"antipasto", r"tapas"
    ),
    Course.SOUP: _patterns(
        r"soup", r"\bstew\b", r"chowder", r"bisque", r"broth", r"consommé"
    ),
    Course.SALAD: _patterns(r"salad", r"\bslaw\b", r"\bgreens\b"),
    Course.SIDE: _patterns(r"side dish", r"\bsides?\b", r"accompaniment"),
    Course.SNACK: _patterns(r"snack", r"\bbites?\b", r"munchie"),
    Course.BEVERAGE: _patterns(
        r"smoothie", r"\bdrinks?\b", r"beverage", r"cocktail", r"juice",
        r"\btea\b", r"coffee",
    ),
    Course.STREET_FOOD: _patterns(r"street food", r"food truck", r"vendor"),
    Course.BRUNCH: _patterns(r"brunch"),
}

_MORNING_RE = re.compile(r"morning|dawn|sunrise", re.IGNORECASE)
_EVENING_RE = re.compile(r"evening|sunset|night", re.IGNORECASE)

DISH_FORM_PATTERNS: dict[DishForm, list[re.Pattern]] = {
    DishForm.BOWL_MEAL: _patterns(
        r"bowl", r"\bpoke\b", r"bibimbap", r"buddha bowl", r"grain bowl"
    ),
    DishForm.HANDHELD: _patterns(
        r"sandwich", r"\bwraps?\b", r"\btacos?\b", r"burger", r"hot dog",
        r"\bbao\b", r"empanada", r"samosa", r"\brolls?\b", r"burrito",
    ),
    DishForm.PLATED_ENTREE: _patterns(
        r"steak", r"chicken breast", r"salmon", r"pork chop", r"filet"
    ),
    DishForm.SAUCE_OVER_BASE: _patterns(
        r"pasta", r"curry", r"stir.?fry", r"marinara", r"alfredo", r"bolognese"
    ),
    DishForm.BAKED_DISH: _patterns(
        r"casserole", r"lasagna", r"gratin", r"\bbake\b", r"\broast\b"
    ),
    DishForm.DUMPLING_STUFFED: _patterns(
        r"dumpling", r"ravioli", r"pierogi", r"wonton", r"stuffed"
    ),
    DishForm.SKEWER: _patterns(
        r"skewer", r"kebab", r"satay", r"yakitori", r"souvlaki"
    ),
    DishForm.PANCAKE_FRITTER: _patterns(
        r"pancake", r"fritter", r"latke", r"\bpatty\b", r"\bcakes?\s"
    ),
    DishForm.PASTRY: _patterns(
        r"\bpies?\b", r"(?<!s)tart(?:let)?s?\b", r"pastry", r"quiche", r"galette"
    ),
    DishForm.SPREAD_DIP: _patterns(
        r"\bdip\b", r"spread", r"hummus", r"salsa", r"pâté", r"tapenade"
    ),
    DishForm.DRINKABLE: _patterns(r"smoothie", r"\bshake\b", r"juice", r"latte"),
}

# Keywords match at the start of a word, so "boil" covers "boiling".
COOKING_METHOD_KEYWORDS: dict[CookingMethod, list[str]] = {
    CookingMethod.RAW_MARINATED: [
        "raw",
        "marinated",
        "ceviche",
        "carpaccio",
        "tartare",
    ],
    CookingMethod.BOILED_SIMMERED: ["boil", "simmer", "poach", "blanch"],
    CookingMethod.STEAMED: ["steam", "steamer"],
    CookingMethod.SAUTEED_STIRFRIED: ["sauté", "saute", "stir-fry", "pan-fry", "sear"],
    CookingMethod.ROASTED_BAKED: ["roast", "bake", "oven"],
    CookingMethod.GRILLED_CHARRED: ["grill", "barbecue", "bbq", "char"],
    CookingMethod.FRIED_DEEP: ["deep fry", "deep-fry"],
    CookingMethod.FRIED_SHALLOW: ["pan fry", "shallow fry"],
    CookingMethod.FRIED_AIR: ["air fry", "air fryer"],
    CookingMethod.BRAISED_STEWED: ["braise", "stew", "slow cook"],
    CookingMethod.FERMENTED_CURED: ["ferment", "pickle", "cure", "brine"],
    CookingMethod.BLENDED_EMULSIFIED: ["blend", "purée", "puree", "emulsify", "whip"],
    CookingMethod.FROZEN_CHILLED: ["freeze", "chill", "refrigerate"],
}

REGION_KEYWORDS: dict[Region, list[str]] = {
    Region.FRENCH: ["french", "provence", "normandy", "lyon"],
    Region.ITALIAN: ["italian", "tuscan", "sicilian", "roman"],
    Region.SPANISH: ["spanish", "catalan", "andalusian", "basque"],
    Region.GERMAN: ["german", "bavarian"],
    Region.BRITISH: ["british", "english", "scottish", "irish"],
    Region.MEXICAN: ["mexican", "tex-mex", "oaxacan"],
    Region.CHINESE: ["chinese", "szechuan", "sichuan", "cantonese", "hunan"],
    Region.JAPANESE: ["japanese", "sushi", "ramen", "tempura"],
    Region.KOREAN: ["korean"],
    Region.THAI: ["thai", "pad thai", "tom yum", "green curry"],
    Region.VIETNAMESE: ["vietnamese", "pho", "banh mi"],
    Region.INDIAN: ["indian", "tikka", "masala", "biryani", "tandoori"],
    Region.MIDDLE_EASTERN: ["middle eastern", "lebanese", "turkish", "persian"],
    Region.GREEK: ["greek", "mediterranean", "moussaka", "souvlaki"],
    Region.CARIBBEAN: ["caribbean", "jamaican", "cuban"],
    Region.CAJUN: ["cajun", "creole"],
    Region.SOUTHERN_US: ["southern us", "soul food", "lowcountry"],
}

DIETARY_PATTERNS: dict[DietaryTag, list[re.Pattern]] = {
    DietaryTag.VEGETARIAN: _patterns(r"vegetarian", r"veggie", r"meatless"),
    DietaryTag.VEGAN: _patterns(r"vegan", r"plant.?based"),
    DietaryTag.GLUTEN_FREE: _patterns(r"gluten.?free", r"celiac"),
    DietaryTag.DAIRY_FREE: _patterns(r"dairy.?free", r"lactose.?free"),
    DietaryTag.LOW_SODIUM: _patterns(r"low.?sodium", r"low.?salt"),
    DietaryTag.LOW_FAT: _patterns(r"low.?fat", r"\blean\b", r"\blight\b"),
    DietaryTag.HIGH_PROTEIN: _patterns(r"high.?protein", r"protein.?rich"),
    DietaryTag.KETO: _patterns(r"keto", r"ketogenic", r"low.?carb"),
    DietaryTag.PALEO: _patterns(r"paleo"),
    DietaryTag.WHOLE30: _patterns(r"whole30", r"whole 30"),
    DietaryTag.PESCATARIAN: _patterns(r"pescatarian"),
}

# Substring matches, so compounds like "meatballs" and "catfish" count.
_MEAT_RE = re.compile(
    r"chicken|beef|pork|lamb|turkey|bacon|sausage|veal|meat(?!less)", re.IGNORECASE
)
_FISH_RE = re.compile(r"fish|salmon|tuna|shrimp|prawn|seafood", re.IGNORECASE)
_DAIRY_RE = re.compile(r"\b(?:milk|cheese|butter|cream|yogurt)", re.IGNORECASE)
_EGG_RE = re.compile(r"\beggs?\b|\byolks?\b", re.IGNORECASE)

# First match wins, hottest first.
SPICE_LEVELS: list[tuple[re.Pattern, int]] = [
    (re.compile(r"ghost pepper|carolina reaper|habanero", re.IGNORECASE), 5),
    (re.compile(r"thai chil[ie]|scotch bonnet|serrano", re.IGNORECASE), 4),
    (re.compile(r"jalape[nñ]o|cayenne|hot sauce", re.IGNORECASE), 3),
    (re.compile(r"chil[ie] flakes|paprika|black pepper", re.IGNORECASE), 2),
    (re.compile(r"\bmild\b|bell pepper", re.IGNORECASE), 1),
]

# Additive groups per dimension, clamped to MAX_LEVEL.
FLAVOR_LEVELS: dict[str, list[tuple[re.Pattern, int]]] = {
    "acid": [
        (re.compile(r"vinegar|pickle", re.IGNORECASE), 2),
        (re.compile(r"lemon|lime|citrus", re.IGNORECASE), 2),
        (re.compile(r"tomato|yogurt", re.IGNORECASE), 1),
    ],
    "fat": [
        (re.compile(r"butter|cream|cheese", re.IGNORECASE), 2),
        (re.compile(r"\boil\b|avocado|\bnuts?\b", re.IGNORECASE), 1),
        (re.compile(r"bacon|sausage", re.IGNORECASE), 2),
    ],
    "umami": [
        (re.compile(r"soy sauce|miso|fish sauce", re.IGNORECASE), 2),
        (re.compile(r"mushroom|tomato paste", re.IGNORECASE), 2),
        (re.compile(r"parmesan|anchov", re.IGNORECASE), 1),
    ],
    "sweet": [
        (re.compile(r"sugar|honey|maple syrup", re.IGNORECASE), 2),
        (re.compile(r"chocolate|caramel", re.IGNORECASE), 2),
        (re.compile(r"fruit|berries", re.IGNORECASE), 1),
    ],
    "bitter": [
        (re.compile(r"coffee|cocoa|dark chocolate", re.IGNORECASE), 2),
        (re.compile(r"\bkale\b|arugula|endive", re.IGNORECASE), 2),
        (re.compile(r"herbs|greens", re.IGNORECASE), 1),
    ],
}

FLAVOR_PROFILE_PATTERNS: dict[FlavorProfile, re.Pattern] = {
    FlavorProfile.SPICY_HOT: re.compile(
        r"chil[ie]|pepper|hot sauce|jalape[nñ]o|cayenne|sriracha", re.IGNORECASE
    ),
    FlavorProfile.BRIGHT_ACIDIC: re.compile(
        r"lemon|lime|vinegar|citrus|tomato", re.IGNORECASE
    ),
    FlavorProfile.SAVORY_UMAMI: re.compile(
        r"soy sauce|miso|parmesan|mushroom|tomato paste|fish sauce", re.IGNORECASE
    ),
    FlavorProfile.SWEET_RICH: re.compile(
        r"sugar|honey|maple|caramel|chocolate", re.IGNORECASE
    ),
    FlavorProfile.SMOKY_EARTHY: re.compile(
        r"smoked|barbecue|chipotle|\bchar", re.IGNORECASE
    ),
}

# Bucket order breaks ties: the first bucket at the maximum wins.
DOMAIN_PATTERNS: list[tuple[IngredientDomain, re.Pattern]] = [
    (
        IngredientDomain.PROTEIN,
        re.compile(r"chicken|beef|pork|fish|tofu|beans|lentils", re.IGNORECASE),
    ),
    (
        IngredientDomain.GRAIN_STARCH,
        re.compile(r"rice|pasta|bread|flour|oats|quinoa", re.IGNORECASE),
    ),
    (
        IngredientDomain.VEGETABLE_FORWARD,
        re.compile(
            r"carrot|onion|pepper|tomato|lettuce|spinach|broccoli", re.IGNORECASE
        ),
    ),
    (
        IngredientDomain.DAIRY_BASED,
        re.compile(r"milk|cheese|cream|yogurt|butter", re.IGNORECASE),
    ),
    (
        IngredientDomain.FRUIT_BASED,
        re.compile(r"apple|banana|berry|orange|lemon|mango", re.IGNORECASE),
    ),
]

_ONE_POT_RE = re.compile(r"one.?pot|one.?pan|sheet.?pan", re.IGNORECASE)
QUICK_MINUTES = 30
FAMILY_SERVINGS = 6


def _keyword_re(keywords: list[str], word_end: bool = False) -> re.Pattern:
    body = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b(?:{body})" + (r"\b" if word_end else ""), re.IGNORECASE)


_COOKING_METHOD_RES = {
    method: _keyword_re(keywords)
    for method, keywords in COOKING_METHOD_KEYWORDS.items()
}
_REGION_RES = {
    region: _keyword_re(keywords, word_end=True)
    for region, keywords in REGION_KEYWORDS.items()
}


def classify(recipe: ParsedRecipe) -> CulinaryClassification:
    """Infer every taxonomy facet for a validated recipe.

    Pure and deterministic: the same recipe always yields an equal result.
    """
    cooking_methods = infer_cooking_methods(recipe)
    return CulinaryClassification(
        course=infer_course(recipe),
        dish_form=infer_dish_form(recipe),
        cooking_method=cooking_methods,
        region=infer_regions(recipe),
        flavor_profiles=infer_flavor_profiles(recipe),
        flavor_dimensions=infer_flavor_dimensions(recipe),
        dietary_tags=infer_dietary_tags(recipe),
        contextual_tags=infer_contextual_tags(recipe, cooking_methods),
        ingredient_domain=infer_ingredient_domain(recipe),
    )


def searchable_text(recipe: ParsedRecipe) -> str:
    """Title, description, course, cuisine and tags joined for pattern search."""
    parts = [recipe.title, recipe.description, recipe.course, recipe.cuisine]
    parts.extend(recipe.tags or ())
    return " ".join(part for part in parts if part)


def _ingredients_text(recipe: ParsedRecipe) -> str:
    return " ".join(recipe.ingredients).lower()


def _first_match(table: dict, text: str):
    for key, patterns in table.items():
        if any(pattern.search(text) for pattern in patterns):
            return key
    return None


def infer_course(recipe: ParsedRecipe) -> Course | None:
    if recipe.course:
        course = _first_match(COURSE_PATTERNS, recipe.course)
        if course is not None:
            return course

    text = searchable_text(recipe)
    course = _first_match(COURSE_PATTERNS, text)
    if course is not None:
        return course

    if _MORNING_RE.search(text):
        return Course.BREAKFAST
    if _EVENING_RE.search(text):
        return Course.DINNER
    return None


def infer_dish_form(recipe: ParsedRecipe) -> DishForm | None:
    return _first_match(DISH_FORM_PATTERNS, searchable_text(recipe))


def infer_cooking_methods(recipe: ParsedRecipe) -> frozenset[CookingMethod]:
    """Every method with a keyword hit in the instructions (not the title)."""
    text = " ".join(recipe.instructions)
    return frozenset(
        method
        for method, pattern in _COOKING_METHOD_RES.items()
        if pattern.search(text)
    )


def infer_regions(recipe: ParsedRecipe) -> frozenset[Region]:
    regions = set()

    if recipe.cuisine:
        regions.update(
            region
            for region, pattern in _REGION_RES.items()
            if pattern.search(recipe.cuisine)
        )

    ingredients = _ingredients_text(recipe)

    if re.search(r"soy sauce|miso|gochujang|fish sauce|sesame oil", ingredients):
        if re.search(r"gochujang|kimchi", ingredients):
            regions.add(Region.KOREAN)
        if re.search(r"miso|\bsake\b|mirin", ingredients):
            regions.add(Region.JAPANESE)
        if re.search(r"fish sauce|lemongrass|galangal", ingredients):
            regions.add(Region.THAI)

    if re.search(r"olive oil|feta|oregano|lemon", ingredients):
        if re.search(r"feta|tzatziki|phyllo", ingredients):
            regions.add(Region.GREEK)

    if re.search(r"cilantro|lime|jalape[nñ]o|cumin", ingredients):
        context = f"{searchable_text(recipe).lower()} {ingredients}"
        if re.search(r"tortilla|salsa|taco", context):
            regions.add(Region.MEXICAN)

    return frozenset(regions)


def infer_flavor_profiles(recipe: ParsedRecipe) -> frozenset[FlavorProfile]:
    ingredients = _ingredients_text(recipe)
    return frozenset(
        profile
        for profile, pattern in FLAVOR_PROFILE_PATTERNS.items()
        if pattern.search(ingredients)
    )


def infer_flavor_dimensions(recipe: ParsedRecipe) -> FlavorDimensions:
    ingredients = _ingredients_text(recipe)
    levels = {
        dimension: min(
            MAX_LEVEL,
            sum(weight for pattern, weight in groups if pattern.search(ingredients)),
        )
        for dimension, groups in FLAVOR_LEVELS.items()
    }
    return FlavorDimensions(spice=spice_level(ingredients), **levels)


def spice_level(ingredients_text: str) -> int:
    for pattern, level in SPICE_LEVELS:
        if pattern.search(ingredients_text):
            return level
    return 0


def infer_dietary_tags(recipe: ParsedRecipe) -> frozenset[DietaryTag]:
    text = searchable_text(recipe)
    tags = {
        tag
        for tag, patterns in DIETARY_PATTERNS.items()
        if any(pattern.search(text) for pattern in patterns)
    }

    ingredients = _ingredients_text(recipe)
    has_meat = bool(_MEAT_RE.search(ingredients))
    has_fish = bool(_FISH_RE.search(ingredients))
    has_dairy = bool(_DAIRY_RE.search(ingredients))
    has_eggs = bool(_EGG_RE.search(ingredients))

    if not has_meat and not has_fish:
        tags.add(DietaryTag.VEGETARIAN)
        if not has_dairy and not has_eggs:
            tags.add(DietaryTag.VEGAN)
    elif not has_meat and has_fish:
        tags.add(DietaryTag.PESCATARIAN)

    return frozenset(tags)


def infer_contextual_tags(
    recipe: ParsedRecipe, cooking_methods: frozenset[CookingMethod] | None = None
) -> frozenset[ContextualTag]:
    tags = set()

    if recipe.total_time and recipe.total_time <= QUICK_MINUTES:
        tags.add(ContextualTag.QUICK)

    if recipe.servings is not None and recipe.servings >= FAMILY_SERVINGS:
        tags.add(ContextualTag.FAMILY_STYLE)
    elif recipe.servings == 1:
        tags.add(ContextualTag.SINGLE_SERVE)

    if _ONE_POT_RE.search(recipe.title):
        tags.add(ContextualTag.ONE_POT)

    if cooking_methods is None:
        cooking_methods = infer_cooking_methods(recipe)
    if cooking_methods & {CookingMethod.RAW_MARINATED, CookingMethod.FROZEN_CHILLED}:
        tags.add(ContextualTag.NO_COOK)

    return frozenset(tags)


def infer_ingredient_domain(recipe: ParsedRecipe) -> IngredientDomain:
    ingredients = _ingredients_text(recipe)
    counts = [
        (domain, len(pattern.findall(ingredients)))
        for domain, pattern in DOMAIN_PATTERNS
    ]
    highest = max(count for _, count in counts)
    if highest == 0:
        return IngredientDomain.MIXED
    return next(domain for domain, count in counts if count == highest)
