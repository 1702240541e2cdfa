"""Total-order comparators for discovery results.

Every sort key ends its tie-break chain on the item id, so two distinct ids
never compare equal and the final order does not depend on input order.

  date-asc   : date, id
  price-asc  : price, date, id
  price-desc : -price, date, id
"""

from collections.abc import Callable, Iterable
from datetime import datetime

from src.core.schemas import Item, SortKey

SortTuple = tuple[float, datetime, str] | tuple[datetime, str]


def _date_key(item: Item) -> SortTuple:
    return (item.date, item.id)


def _price_asc_key(item: Item) -> SortTuple:
    return (item.price, item.date, item.id)


def _price_desc_key(item: Item) -> SortTuple:
    return (-item.price, item.date, item.id)


_KEYS: dict[SortKey, Callable[[Item], SortTuple]] = {
    SortKey.DATE_ASC: _date_key,
    SortKey.PRICE_ASC: _price_asc_key,
    SortKey.PRICE_DESC: _price_desc_key,
}


def sort_key_for(sort_key: SortKey) -> Callable[[Item], SortTuple]:
    """Key function consistent with ``compare`` for the given sort key."""
    return _KEYS[SortKey(sort_key)]


def compare(a: Item, b: Item, sort_key: SortKey) -> int:
    """Return -1 if ``a`` sorts first, 1 if ``b`` does, 0 if they are equivalent."""
    key = sort_key_for(sort_key)
    ka, kb = key(a), key(b)
    if ka < kb:
        return -1
    if kb < ka:
        return 1
    return 0


def rank(items: Iterable[Item], sort_key: SortKey | None) -> list[Item]:
    """Stable sort by ``sort_key``; ``None`` keeps the supplied order."""
    if sort_key is None:
        return list(items)
    return sorted(items, key=sort_key_for(sort_key))
