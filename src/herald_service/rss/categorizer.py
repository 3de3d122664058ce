"""Keyword based category matching for imported items.

Scoring, per category:

    keyword in title        +2
    keyword in description  +1
    name in feed keywords   +3

Keywords are the category name, the words of its slug (3+ chars) and its
configured ``keywords``. Matching is case-insensitive on word boundaries.
The highest score wins; ties go to the category listed first.
"""

import re
from collections.abc import Iterable, Sequence
from functools import lru_cache

from herald_service.models.category import Category

TITLE_WEIGHT = 2
BODY_WEIGHT = 1
FEED_KEYWORD_BONUS = 3


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)


def category_keywords(category: Category) -> set[str]:
    """All lowercase keywords that identify a category."""
    keywords = {category.name.lower().strip()}
    keywords.update(word for word in category.slug.lower().split("-") if len(word) >= 3)
    keywords.update(k.lower().strip() for k in category.keywords or [] if k and k.strip())
    keywords.discard("")
    return keywords


def score_category(
    category: Category,
    title: str,
    description: str,
    feed_keywords: Iterable[str] = (),
) -> int:
    """Score how well a category fits an item."""
    score = 0
    for keyword in category_keywords(category):
        pattern = _keyword_pattern(keyword)
        if pattern.search(title):
            score += TITLE_WEIGHT
        if pattern.search(description):
            score += BODY_WEIGHT

    if category.name.lower() in {k.lower().strip() for k in feed_keywords}:
        score += FEED_KEYWORD_BONUS

    return score


def find_best_category(
    categories: Sequence[Category],
    title: str,
    description: str | None,
    feed_keywords: Iterable[str] | None = None,
) -> Category | None:
    """Pick the best category for an item, or None when nothing matches.

    Args:
        categories: Candidate categories (order breaks ties)
        title: Item title
        description: Excerpt or description text
        feed_keywords: The source's configured category keywords

    Returns:
        Highest scoring category with a positive score
    """
    keywords = list(feed_keywords or [])
    best: Category | None = None
    best_score = 0

    for category in categories:
        score = score_category(category, title, description or "", keywords)
        if score > best_score:
            best, best_score = category, score

    return best
