"""
Waste category normalization.

The raw category string from Gemini is mapped onto the closed Category set,
falling back to keyword inference on the label. A final override forces
labeled/branded items (mentions of "text" or "label") to non_recyclable.
"""

import re
from typing import Callable, List, Optional, Tuple

from wastesnap.models import Category

CATEGORY_SYNONYMS = {
    "landfill": Category.NON_RECYCLABLE,
    "non recyclable": Category.NON_RECYCLABLE,
    "non-recyclable": Category.NON_RECYCLABLE,
    "trash": Category.NON_RECYCLABLE,
    "garbage": Category.NON_RECYCLABLE,
}

_NON_RECYCLABLE_WORDS = re.compile(r"non[\s_-]?recyclable|landfill|trash|garbage")
_TRASH_WORDS = re.compile(r"trash|garbage")
_LABELED_ITEM_WORDS = re.compile(r"text|label")

# (predicate(label, description), category); first match wins
Rule = Tuple[Callable[[str, str], bool], Category]

INFERENCE_RULES: List[Rule] = [
    (lambda label, description: "compost" in label, Category.COMPOSTABLE),
    (lambda label, description: bool(_NON_RECYCLABLE_WORDS.search(label)), Category.NON_RECYCLABLE),
    (lambda label, description: True, Category.RECYCLABLE),
]

OVERRIDE_RULES: List[Rule] = [
    (
        lambda label, description: bool(_LABELED_ITEM_WORDS.search(label) or _LABELED_ITEM_WORDS.search(description)),
        Category.NON_RECYCLABLE,
    ),
]


def canonical_category(raw_category) -> Optional[Category]:
    """Map a raw category value onto Category, or None if out of vocabulary."""
    if not isinstance(raw_category, str):
        return None
    lowered = raw_category.strip().lower()
    if lowered in CATEGORY_SYNONYMS:
        return CATEGORY_SYNONYMS[lowered]
    try:
        return Category(lowered)
    except ValueError:
        return None


def apply_rules(rules: List[Rule], label: str, description: str) -> Optional[Category]:
    for predicate, category in rules:
        if predicate(label, description):
            return category
    return None


def classify(raw_category, label: str, description: str) -> Category:
    """
    Resolve the final category for a detection.

    Args:
        raw_category: Category value as emitted by the model (any type)
        label: Object label text
        description: Object description text

    Returns:
        One of the three canonical categories
    """
    label = label.lower()
    description = description.lower()

    category = canonical_category(raw_category)
    if category is None:
        category = apply_rules(INFERENCE_RULES, label, description)

    override = apply_rules(OVERRIDE_RULES, label, description)
    return override or category


def derive_is_trash(raw_is_trash, category: Category, label: str, description: str) -> bool:
    """Keep an explicit boolean, otherwise derive it from category and keywords."""
    if isinstance(raw_is_trash, bool):
        return raw_is_trash
    if category is Category.NON_RECYCLABLE:
        return True
    return bool(_TRASH_WORDS.search(label.lower()) or _TRASH_WORDS.search(description.lower()))
