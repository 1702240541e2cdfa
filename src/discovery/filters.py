"""Predicate filter for discovery results.

Predicate order:
  1. category    — "any" or exact category
  2. price       — inclusive [price_min, price_max]
  3. date window — inclusive [now, window end]; "any" admits everything

Bounds arrive already normalized by QueryState, so predicates never raise.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from src.core.schemas import DateWindow, Item, QueryState, as_utc

logger = logging.getLogger(__name__)

# A predicate decides admission of one item for the given state and clock.
Predicate = Callable[[Item, QueryState, datetime], bool]

_WINDOW_SPANS: dict[DateWindow, timedelta] = {
    DateWindow.NEXT_7_DAYS: timedelta(days=7),
    DateWindow.NEXT_30_DAYS: timedelta(days=30),
}


def window_upper_bound(window: DateWindow, now: datetime) -> datetime | None:
    """Latest admitted date for a window, or None for ``DateWindow.ANY``."""
    if window is DateWindow.ANY:
        return None
    if window is DateWindow.TODAY:
        return now.replace(hour=23, minute=59, second=59, microsecond=999999)
    return now + _WINDOW_SPANS[window]


def category_predicate(item: Item, state: QueryState, now: datetime) -> bool:
    return state.category is None or item.category == state.category


def price_predicate(item: Item, state: QueryState, now: datetime) -> bool:
    return state.price_min <= item.price <= state.price_max


def date_window_predicate(item: Item, state: QueryState, now: datetime) -> bool:
    """Admit items dated between now and the window end, both inclusive.

    The lower bound is the evaluation time even for "today", so events that
    already started earlier today are excluded.
    """
    upper = window_upper_bound(state.date_window, now)
    if upper is None:
        return True
    return now <= item.date <= upper


DEFAULT_PREDICATES: tuple[Predicate, ...] = (
    category_predicate,
    price_predicate,
    date_window_predicate,
)


class PredicateFilter:
    """Conjunction of independent predicates, evaluated with short-circuit."""

    def __init__(self, predicates: Iterable[Predicate] = DEFAULT_PREDICATES) -> None:
        self._predicates = tuple(predicates)

    def admit(self, item: Item | None, state: QueryState, now: datetime) -> bool:
        if not isinstance(item, Item):
            return False
        now = as_utc(now)
        return all(p(item, state, now) for p in self._predicates)

    def __call__(
        self,
        items: Iterable[Item | None],
        state: QueryState,
        now: datetime,
    ) -> list[Item]:
        """Return admitted items, preserving their relative order."""
        items = list(items)
        now = as_utc(now)
        result = [item for item in items if self.admit(item, state, now)]
        removed = len(items) - len(result)
        if removed:
            logger.debug("PredicateFilter: removed %d items", removed)
        return result
