"""Discovery pipeline: text matcher -> predicate filter -> ranker.

Data flow:
  1. Text match (only for a non-empty query) -> matches in relevance order
  2. Predicate filter -> order preserved
  3. Rank -> full stable sort by the active sort key; with no sort key the
     step-1 order is kept, so relevance only ever orders results then

``discover`` owns no state: call it again whenever the items or the query
state change.
"""

import json
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from src.core.config import Settings
from src.core.schemas import Item, QueryState, as_utc
from src.discovery.filters import PredicateFilter
from src.discovery.ranker import rank
from src.discovery.text_matcher import TextMatcher

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_DEFAULT_FILTER = PredicateFilter()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def discover(
    items: Sequence[Item | None],
    state: QueryState,
    *,
    now: datetime | None = None,
    matcher: TextMatcher | None = None,
    predicate_filter: PredicateFilter | None = None,
) -> list[Item]:
    """Return the ordered subset of ``items`` the user should see.

    Args:
        items: Materialized collection snapshot; never mutated.
        state: Normalized query/filter/sort state.
        now: Evaluation time for date windows (defaults to current UTC time).
        matcher: Text matcher to use (defaults to the 0.3 threshold matcher).
        predicate_filter: Admission filter (defaults to category/price/date).

    Returns:
        A new list referencing the admitted input items.
    """
    now = as_utc(now) if now is not None else utc_now()
    matcher = matcher or TextMatcher()
    predicate_filter = predicate_filter or _DEFAULT_FILTER

    # Step 1: Text match
    if state.has_text_query:
        candidates = matcher.matching_items(items, state.query)
    else:
        candidates = [item for item in items if isinstance(item, Item)]

    # Step 2: Filter
    admitted = predicate_filter(candidates, state, now)

    # Step 3: Rank
    result = rank(admitted, state.sort)

    logger.debug(
        "discover: %d items, %d matched, %d admitted (query=%r, sort=%s)",
        len(items), len(candidates), len(result), state.query,
        state.sort.value if state.sort else "relevance",
    )
    return result


class DiscoveryPipeline:
    """``discover`` bound to a configured matcher and clock.

    Usage::

        pipeline = DiscoveryPipeline.from_settings(settings)
        visible = pipeline.run(items, state)
    """

    def __init__(
        self,
        matcher: TextMatcher | None = None,
        clock: Clock = utc_now,
        predicate_filter: PredicateFilter | None = None,
    ) -> None:
        self._matcher = matcher or TextMatcher()
        self._clock = clock
        self._filter = predicate_filter or _DEFAULT_FILTER

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = utc_now) -> "DiscoveryPipeline":
        return cls(TextMatcher(settings.matcher.threshold), clock)

    def run(self, items: Sequence[Item | None], state: QueryState) -> list[Item]:
        return discover(
            items,
            state,
            now=self._clock(),
            matcher=self._matcher,
            predicate_filter=self._filter,
        )


def export_results_json(items: Sequence[Item]) -> str:
    """Export a ranked result as a JSON string."""
    data = [
        {
            "id": item.id,
            "title": item.title,
            "category": item.category.value,
            "date": item.date.isoformat(),
            "venue_name": item.venue_name,
            "price": item.price,
            "available_capacity": item.available_capacity,
        }
        for item in items
    ]
    return json.dumps(data, indent=2, ensure_ascii=False)
