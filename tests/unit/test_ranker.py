"""Tests for ranker comparators: tie-breaks and ordering laws."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from src.core.schemas import Item, SortKey
from src.discovery.ranker import compare, rank, sort_key_for

BASE = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def _item(id: str, price: float = 100, days: int = 0) -> Item:
    return Item(
        id=id,
        title=f"Event {id}",
        category="concert",
        date=BASE + timedelta(days=days),
        price=price,
    )


ITEMS = [
    _item("a", price=300, days=2),
    _item("b", price=100, days=2),
    _item("c", price=100, days=1),
    _item("d", price=300, days=1),
    _item("e", price=100, days=1),
]


class TestCompare:
    def test_date_asc(self) -> None:
        assert compare(_item("x", days=1), _item("y", days=2), SortKey.DATE_ASC) == -1
        assert compare(_item("x", days=3), _item("y", days=2), SortKey.DATE_ASC) == 1

    def test_date_tie_broken_by_id(self) -> None:
        assert compare(_item("a"), _item("b"), SortKey.DATE_ASC) == -1

    def test_price_asc_ties_by_date_then_id(self) -> None:
        assert compare(_item("z", days=1), _item("a", days=2), SortKey.PRICE_ASC) == -1
        assert compare(_item("a", days=1), _item("b", days=1), SortKey.PRICE_ASC) == -1

    def test_price_desc_ties_by_date_ascending(self) -> None:
        assert compare(_item("a", price=500), _item("b", price=100), SortKey.PRICE_DESC) == -1
        assert compare(_item("a", days=1), _item("b", days=2), SortKey.PRICE_DESC) == -1

    def test_accepts_string_key(self) -> None:
        assert compare(_item("a", price=1), _item("b", price=2), "price-desc") == 1  # type: ignore[arg-type]

    @pytest.mark.parametrize("key", list(SortKey))
    def test_reflexive_equal(self, key: SortKey) -> None:
        for item in ITEMS:
            assert compare(item, item, key) == 0

    @pytest.mark.parametrize("key", list(SortKey))
    def test_antisymmetric(self, key: SortKey) -> None:
        for a, b in itertools.permutations(ITEMS, 2):
            assert compare(a, b, key) == -compare(b, a, key)

    @pytest.mark.parametrize("key", list(SortKey))
    def test_transitive(self, key: SortKey) -> None:
        for a, b, c in itertools.permutations(ITEMS, 3):
            if compare(a, b, key) < 0 and compare(b, c, key) < 0:
                assert compare(a, c, key) < 0

    @pytest.mark.parametrize("key", list(SortKey))
    def test_key_function_agrees_with_compare(self, key: SortKey) -> None:
        k = sort_key_for(key)
        for a, b in itertools.permutations(ITEMS, 2):
            expected = -1 if k(a) < k(b) else (1 if k(b) < k(a) else 0)
            assert compare(a, b, key) == expected


class TestRank:
    def test_date_asc(self) -> None:
        assert [i.id for i in rank(ITEMS, SortKey.DATE_ASC)] == ["c", "d", "e", "a", "b"]

    def test_price_asc(self) -> None:
        assert [i.id for i in rank(ITEMS, SortKey.PRICE_ASC)] == ["c", "e", "b", "d", "a"]

    def test_price_desc(self) -> None:
        assert [i.id for i in rank(ITEMS, SortKey.PRICE_DESC)] == ["d", "a", "c", "e", "b"]

    @pytest.mark.parametrize("key", list(SortKey))
    def test_independent_of_input_order(self, key: SortKey) -> None:
        expected = rank(ITEMS, key)
        for perm in itertools.permutations(ITEMS):
            assert rank(perm, key) == expected

    def test_none_keeps_supplied_order(self) -> None:
        assert rank(ITEMS, None) == ITEMS

    def test_returns_new_list(self) -> None:
        items = list(ITEMS)
        result = rank(items, SortKey.PRICE_ASC)
        assert result is not items
        assert items == ITEMS
