"""Ingredient name normalization.

Canonicalizes free-text ingredient names so user input, recognized ingredients
and stored recipe ingredients compare in the same space:

    "  Eggs " -> "egg"
    "Spring   Onions" -> "green onion"

Steps: trim, lowercase, collapse internal whitespace, fold synonyms. Never raises;
unusable input normalizes to "" and is dropped from sets.
"""

import re
from typing import Iterable, Mapping, Optional

_WHITESPACE = re.compile(r"\s+")

# Plural and regional spellings folded onto one canonical name
SYNONYMS: dict[str, str] = {
    "eggs": "egg",
    "tomatoes": "tomato",
    "potatoes": "potato",
    "onions": "onion",
    "carrots": "carrot",
    "mushrooms": "mushroom",
    "lemons": "lemon",
    "limes": "lime",
    "apples": "apple",
    "bananas": "banana",
    "cloves garlic": "garlic",
    "garlic cloves": "garlic",
    "scallion": "green onion",
    "scallions": "green onion",
    "spring onion": "green onion",
    "spring onions": "green onion",
    "green onions": "green onion",
    "courgette": "zucchini",
    "courgettes": "zucchini",
    "aubergine": "eggplant",
    "aubergines": "eggplant",
    "coriander leaves": "cilantro",
    "capsicum": "bell pepper",
    "bell peppers": "bell pepper",
    "chickpeas": "chickpea",
    "garbanzo beans": "chickpea",
    "all-purpose flour": "flour",
    "plain flour": "flour",
    "caster sugar": "sugar",
    "white sugar": "sugar",
    "whole milk": "milk",
    "chicken breasts": "chicken breast",
    "prawns": "shrimp",
    "prawn": "shrimp",
}


def normalize_name(raw: object, extra_synonyms: Optional[Mapping[str, str]] = None) -> str:
    """Normalize a single ingredient name.

    Args:
        raw: Raw ingredient text. Non-strings normalize to "".
        extra_synonyms: Additional synonym mappings (normalized key -> canonical), checked first.

    Returns:
        Canonical lowercase name, or "" if nothing usable remains.
    """
    if not isinstance(raw, str):
        return ""
    name = _WHITESPACE.sub(" ", raw.strip().lower())
    if not name:
        return ""
    if extra_synonyms and name in extra_synonyms:
        return extra_synonyms[name]
    return SYNONYMS.get(name, name)


def normalize(raw_terms: Optional[Iterable[object]], extra_synonyms: Optional[Mapping[str, str]] = None) -> frozenset[str]:
    """Normalize a list of raw ingredient names into a set of ingredient terms.

    Empty entries and duplicates (after normalization) are dropped. An empty result
    is valid output here; callers treat it as an invalid query.
    """
    if not raw_terms:
        return frozenset()
    if isinstance(raw_terms, str):
        raw_terms = [raw_terms]
    try:
        terms = {normalize_name(term, extra_synonyms) for term in raw_terms}
    except TypeError:
        return frozenset()
    terms.discard("")
    return frozenset(terms)
