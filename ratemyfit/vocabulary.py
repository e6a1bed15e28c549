"""
Clothing vocabulary used by every extraction stage.

Holds the garment nouns grouped by category, the descriptive adjectives
(colors, materials, fits, patterns, styles) and the forbidden tag words,
plus the small lookup helpers built on top of them.
"""

import re
from typing import Optional


# =============================================================================
# CATEGORIES
# =============================================================================

# Checked in insertion order. Layering pieces sit under outerwear and are
# checked before tops so "cardigan" or "hoodie" is never filed as a top.
CLOTHING_CATEGORIES: dict[str, frozenset] = {
    "outerwear": frozenset(
        {
            "jacket",
            "coat",
            "blazer",
            "cardigan",
            "vest",
            "hoodie",
            "parka",
            "trench",
            "overcoat",
            "raincoat",
            "windbreaker",
            "puffer",
            "bomber",
            "gilet",
            "poncho",
            "overshirt",
            "shacket",
        }
    ),
    "tops": frozenset(
        {
            "shirt",
            "blouse",
            "top",
            "sweater",
            "t-shirt",
            "tee",
            "polo",
            "tank",
            "camisole",
            "tunic",
            "turtleneck",
            "henley",
            "pullover",
            "sweatshirt",
            "jumper",
            "bodysuit",
        }
    ),
    "bottoms": frozenset(
        {
            "pants",
            "jeans",
            "trousers",
            "shorts",
            "skirt",
            "leggings",
            "chinos",
            "slacks",
            "joggers",
            "culottes",
            "capris",
            "sweatpants",
        }
    ),
    "dresses": frozenset(
        {
            "dress",
            "gown",
            "sundress",
            "maxi",
            "midi",
            "romper",
            "jumpsuit",
        }
    ),
    "footwear": frozenset(
        {
            "shoes",
            "sneakers",
            "heels",
            "boots",
            "sandals",
            "flats",
            "loafers",
            "oxfords",
            "pumps",
            "mules",
            "trainers",
            "espadrilles",
            "clogs",
        }
    ),
    "accessories": frozenset(
        {
            "belt",
            "bag",
            "handbag",
            "purse",
            "backpack",
            "hat",
            "cap",
            "scarf",
            "socks",
            "jewelry",
            "necklace",
            "bracelet",
            "earrings",
            "watch",
            "sunglasses",
            "tie",
            "gloves",
            "beanie",
            "clutch",
            "tote",
        }
    ),
}

# Fixed category set a stored tag may carry
CATEGORY_NAMES = frozenset(CLOTHING_CATEGORIES) | {"other"}

GARMENT_NOUNS = frozenset().union(*CLOTHING_CATEGORIES.values())


# =============================================================================
# DESCRIPTIVE ADJECTIVES
# =============================================================================

COLORS = frozenset(
    {
        "black",
        "white",
        "gray",
        "grey",
        "navy",
        "blue",
        "red",
        "green",
        "olive",
        "brown",
        "tan",
        "beige",
        "cream",
        "ivory",
        "camel",
        "khaki",
        "pink",
        "purple",
        "yellow",
        "orange",
        "burgundy",
        "maroon",
        "charcoal",
        "dark",
        "light",
        "neutral",
        "pastel",
    }
)

MATERIALS = frozenset(
    {
        "denim",
        "leather",
        "suede",
        "cotton",
        "linen",
        "silk",
        "satin",
        "wool",
        "cashmere",
        "knit",
        "corduroy",
        "velvet",
        "tweed",
        "fleece",
        "canvas",
        "chiffon",
        "lace",
    }
)

FITS = frozenset(
    {
        "slim",
        "skinny",
        "fitted",
        "tailored",
        "relaxed",
        "loose",
        "oversized",
        "cropped",
        "straight",
        "wide-leg",
        "high-waisted",
        "structured",
        "longline",
    }
)

PATTERNS = frozenset(
    {
        "striped",
        "plaid",
        "checked",
        "floral",
        "printed",
        "polka-dot",
        "solid",
        "graphic",
    }
)

STYLES = frozenset(
    {
        "casual",
        "formal",
        "classic",
        "vintage",
        "sporty",
        "minimal",
        "statement",
        "chunky",
        "ankle",
        "crew-neck",
        "v-neck",
        "button-down",
    }
)

DESCRIPTIVE_ADJECTIVES = COLORS | MATERIALS | FITS | PATTERNS | STYLES


# =============================================================================
# TAG RULE WORDS
# =============================================================================

FORBIDDEN_TAG_WORDS = frozenset(
    {
        "of",
        "with",
        "and",
        "the",
        "a",
        "an",
        "in",
        "on",
        "at",
        "to",
        "for",
        "from",
        "by",
        "against",
        "choice",
        "pairing",
        "providing",
        "contrast",
        "complements",
        "tones",
        "featuring",
        "worn",
        "outfit",
    }
)


# Words ending in a garment noun that are not garments (harvest: vest, address: dress)
NON_GARMENT_WORDS = frozenset(
    {
        "harvest",
        "harvests",
        "invest",
        "invests",
        "address",
        "addresses",
        "redress",
        "wheels",
        "outskirt",
        "outskirts",
        "turncoat",
        "turncoats",
        "reboots",
        "horseshoes",
        "seatbelt",
        "seatbelts",
        "unclogs",
    }
)


# =============================================================================
# LOOKUPS
# =============================================================================


def normalize_phrase(text: str) -> str:
    """Lowercase and collapse whitespace."""
    return re.sub(r"\s+", " ", (text or "").lower()).strip()


def _word_forms_match(word: str, noun: str) -> bool:
    """Exact match allowing a plural suffix on either side (dress/dresses)."""
    if word == noun:
        return True
    return word in (noun + "s", noun + "es") or noun in (word + "s", word + "es")


def _noun_matches(word: str, noun: str) -> bool:
    if _word_forms_match(word, noun):
        return True
    if len(noun) < 4 or word in NON_GARMENT_WORDS:
        return False
    return word.endswith((noun, noun + "s", noun + "es"))


def is_clothing_word(word: str) -> bool:
    """
    True if a single word maps to a known garment noun.

    Short nouns (hat, cap, tee, top, bag) only match by word form so words
    like "that" or "stop" are not mistaken for clothing. Nouns of four or
    more letters also match as the tail of a compound (sweatshirt, raincoat).
    Words listed in NON_GARMENT_WORDS (harvest, address) never match.
    """
    word = word.strip(".,;:!?\"'()").lower()
    if not word:
        return False
    return any(_noun_matches(word, noun) for noun in GARMENT_NOUNS)


def find_garment_noun(phrase: str) -> Optional[str]:
    """Return the last word of a phrase that is a garment noun (the head noun)."""
    for word in reversed(normalize_phrase(phrase).split()):
        if is_clothing_word(word):
            return word.strip(".,;:!?\"'()")
    return None


def categorize_clothing_item(phrase: str) -> str:
    """
    Map a phrase to one of CLOTHING_CATEGORIES by its words.

    Returns "other" when no category keyword matches.
    """
    words = [w.strip(".,;:!?\"'()") for w in normalize_phrase(phrase).split()]
    for category, nouns in CLOTHING_CATEGORIES.items():
        for word in words:
            if any(_noun_matches(word, noun) for noun in nouns):
                return category
    return "other"


def coerce_category(category: Optional[str], item_name: str = "") -> str:
    """Return category if it is one of the fixed set, else categorize item_name."""
    normalized = normalize_phrase(category or "")
    if normalized in CATEGORY_NAMES:
        return normalized
    # Common singular / alternate spellings from external tables
    aliases = {
        "top": "tops",
        "bottom": "bottoms",
        "dress": "dresses",
        "shoes": "footwear",
        "shoe": "footwear",
        "accessory": "accessories",
        "outer": "outerwear",
        "jackets": "outerwear",
    }
    if normalized in aliases:
        return aliases[normalized]
    return categorize_clothing_item(item_name)


def descriptive_words(phrase: str) -> list[str]:
    """Words of a phrase that are known descriptive adjectives, in order."""
    return [
        w for w in normalize_phrase(phrase).split() if w in DESCRIPTIVE_ADJECTIVES
    ]
