"""Tests for core schemas: Item, Candidate, QueryState normalization."""

import math
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from src.core.schemas import (
    Candidate,
    Category,
    DateWindow,
    Item,
    QueryState,
    SortKey,
)


def _make_item(**overrides: object) -> Item:
    defaults: dict[str, object] = {
        "id": "1",
        "title": "Concert Night",
        "category": "concert",
        "date": datetime(2026, 6, 3, 19, 0, tzinfo=timezone.utc),
        "price": 500,
    }
    defaults.update(overrides)
    return Item(**defaults)  # type: ignore[arg-type]


class TestItem:
    def test_defaults(self) -> None:
        item = _make_item()
        assert item.description == ""
        assert item.venue_name == ""
        assert item.available_capacity == 0
        assert item.status == "active"
        assert item.category is Category.CONCERT

    def test_numeric_id_coerced_to_str(self) -> None:
        assert _make_item(id=42).id == "42"

    def test_naive_date_treated_as_utc(self) -> None:
        item = _make_item(date=datetime(2026, 6, 3, 19, 0))
        assert item.date.tzinfo is not None
        assert item.date == datetime(2026, 6, 3, 19, 0, tzinfo=timezone.utc)

    def test_iso_string_date(self) -> None:
        item = _make_item(date="2026-06-03T19:00:00+00:00")
        assert item.date.hour == 19

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _make_item(price=-1)

    def test_unknown_category_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _make_item(category="opera")

    def test_frozen_model(self) -> None:
        item = _make_item()
        with pytest.raises(ValidationError):
            item.title = "Other"  # type: ignore[misc]


class TestCandidate:
    def test_display_name_from_names(self) -> None:
        c = Candidate(id="u1", first_name="Anna", last_name="K")
        assert c.display_name == "Anna K"

    def test_display_name_falls_back_to_username_then_id(self) -> None:
        assert Candidate(id="u1", username="anna").display_name == "anna"
        assert Candidate(id="u1").display_name == "u1"

    def test_interests_are_a_set(self) -> None:
        c = Candidate(id="u1", interests=["jazz", "jazz", "techno"])
        assert c.interests == frozenset({"jazz", "techno"})


class TestQueryState:
    def test_defaults(self) -> None:
        s = QueryState()
        assert s.query == ""
        assert s.category is None
        assert s.price_min == 0.0
        assert math.isinf(s.price_max)
        assert s.date_window is DateWindow.ANY
        assert s.sort is SortKey.DATE_ASC

    def test_min_clamped_to_max(self) -> None:
        s = QueryState(price_min=900, price_max=100)
        assert s.price_min == 100
        assert s.price_max == 100

    def test_negative_bounds_clamped_to_zero(self) -> None:
        s = QueryState(price_min=-50, price_max=-10)
        assert s.price_min == 0.0
        assert s.price_max == 0.0

    def test_malformed_bounds_fall_back_to_defaults(self) -> None:
        s = QueryState(price_min="cheap", price_max=float("nan"))
        assert s.price_min == 0.0
        assert math.isinf(s.price_max)

    def test_numeric_strings_accepted(self) -> None:
        s = QueryState(price_min="100", price_max="2500.5")
        assert s.price_min == 100.0
        assert s.price_max == 2500.5

    def test_legacy_aliases(self) -> None:
        s = QueryState(category="all", date_window="week", sort="date")
        assert s.category is None
        assert s.date_window is DateWindow.NEXT_7_DAYS
        assert s.sort is SortKey.DATE_ASC
        assert QueryState(date_window="month").date_window is DateWindow.NEXT_30_DAYS

    def test_relevance_sort_is_none(self) -> None:
        assert QueryState(sort="relevance").sort is None
        assert QueryState(sort=None).sort is None

    def test_with_changes_returns_new_normalized_state(self) -> None:
        s = QueryState(price_max=1000)
        changed = s.with_changes(price_min=5000)
        assert changed is not s
        assert s.price_min == 0.0
        assert changed.price_min == 1000

    def test_has_text_query_ignores_whitespace(self) -> None:
        assert QueryState(query="   ").has_text_query is False
        assert QueryState(query=" jazz ").has_text_query is True

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            QueryState().query = "x"  # type: ignore[misc]
