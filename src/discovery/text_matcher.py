"""Approximate (fuzzy) text matching of a search query against event fields.

Each field is scored by the smallest edit distance between the query and any
substring of the field, so "consert" finds "Concert Night" while "xyz123" does
not. Divergence = distance / len(query); an item matches when its best field
divergence is within the threshold. Score = 1 - divergence.
"""

import logging
from collections.abc import Iterable, Sequence

from src.core.schemas import Item, MatchResult

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.3

# Neutral score handed out when there is no query to match against.
NEUTRAL_SCORE = 1.0


def substring_edit_distance(pattern: str, text: str) -> int:
    """Minimum edit distance between ``pattern`` and any substring of ``text``.

    Levenshtein with a free start and end position in ``text``.
    """
    m = len(pattern)
    if m == 0:
        return 0
    if pattern in text:
        return 0
    # prev[i] = distance of pattern[:i] against the best substring ending at the current column
    prev = list(range(m + 1))
    best = prev[m]
    for ch in text:
        curr = [0] * (m + 1)
        for i in range(1, m + 1):
            cost = 0 if pattern[i - 1] == ch else 1
            curr[i] = min(prev[i - 1] + cost, prev[i] + 1, curr[i - 1] + 1)
        best = min(best, curr[m])
        prev = curr
    return best


def searchable_fields(item: Item) -> tuple[str, str, str, str]:
    """Fields searched by the matcher, in priority order."""
    return (item.title, item.description, item.venue_name, item.category.value)


class TextMatcher:
    """Scores items against a free-text query.

    Stateless apart from its threshold; safe to share between callers.
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD) -> None:
        if not 0.0 <= threshold <= 1.0:
            msg = f"threshold must be between 0 and 1, got {threshold}"
            raise ValueError(msg)
        self.threshold = threshold

    def score(self, item: Item, query: str) -> float | None:
        """Return a relevance in [0, 1], or None when the item does not match."""
        needle = query.strip().casefold()
        if not needle:
            return NEUTRAL_SCORE

        best: float | None = None
        for field in searchable_fields(item):
            if not field:
                continue
            divergence = substring_edit_distance(needle, field.casefold()) / len(needle)
            if best is None or divergence < best:
                best = divergence
                if best == 0.0:
                    break

        if best is None or best > self.threshold:
            return None
        return 1.0 - best

    def match(self, items: Iterable[Item], query: str) -> list[MatchResult]:
        """Return matching items ordered by score desc; ties keep supplied order."""
        results: list[MatchResult] = []
        for item in items:
            if not isinstance(item, Item):
                continue
            s = self.score(item, query)
            if s is not None:
                results.append(MatchResult(item=item, score=s))
        results.sort(key=lambda r: r.score, reverse=True)
        logger.debug("TextMatcher: %d matches for %r", len(results), query)
        return results

    def matching_items(self, items: Sequence[Item], query: str) -> list[Item]:
        return [r.item for r in self.match(items, query)]
