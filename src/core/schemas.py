"""Core data models for event discovery and the match queue."""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Category(str, Enum):
    CONCERT = "concert"
    PARTY = "party"
    FESTIVAL = "festival"
    EXHIBITION = "exhibition"
    SPORT = "sport"
    THEATER = "theater"


class DateWindow(str, Enum):
    ANY = "any"
    TODAY = "today"
    NEXT_7_DAYS = "next-7-days"
    NEXT_30_DAYS = "next-30-days"


class SortKey(str, Enum):
    DATE_ASC = "date-asc"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"


class Decision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware values are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Item(BaseModel):
    """A discoverable event, as supplied by the data source.

    Frozen — the core never mutates items it is handed.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    title: str
    description: str = ""
    category: Category
    date: datetime
    venue_name: str = ""
    price: float = Field(ge=0.0)
    available_capacity: int = Field(default=0, ge=0)
    status: str = "active"

    @field_validator("date")
    @classmethod
    def date_is_aware(cls, v: datetime) -> datetime:
        return as_utc(v)


class Candidate(BaseModel):
    """A person profile offered in the match queue."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    photo_url: str | None = None
    bio: str | None = None
    interests: frozenset[str] = Field(default_factory=frozenset)

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.username or self.id


class MatchResult(BaseModel):
    """Pairs an item with its text relevance score (1.0 = exact match)."""

    model_config = ConfigDict(frozen=True)

    item: Item
    score: float = Field(ge=0.0, le=1.0)


# Values accepted from older clients (the original filter panel).
_CATEGORY_ALIASES = {"all": None, "any": None, "": None}
_DATE_WINDOW_ALIASES = {
    "all": DateWindow.ANY,
    "week": DateWindow.NEXT_7_DAYS,
    "month": DateWindow.NEXT_30_DAYS,
}
_SORT_ALIASES = {
    "date": SortKey.DATE_ASC,
    "none": None,
    "relevance": None,
}


def _coerce_bound(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(0.0, number)


class QueryState(BaseModel):
    """The user's current search/filter/sort state for the discovery screen.

    Bounds are normalized rather than rejected: malformed numbers fall back to
    their defaults, negatives clamp to zero and ``price_min`` is clamped down
    to ``price_max``. ``category=None`` means "any"; ``sort=None`` keeps text
    relevance order.
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    category: Category | None = None
    price_min: float = 0.0
    price_max: float = math.inf
    date_window: DateWindow = DateWindow.ANY
    sort: SortKey | None = SortKey.DATE_ASC

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if data.get("query") is None:
            data["query"] = ""

        category = data.get("category")
        if isinstance(category, str) and category.lower() in _CATEGORY_ALIASES:
            data["category"] = None

        window = data.get("date_window")
        if window is None:
            data.pop("date_window", None)
        elif isinstance(window, str) and window.lower() in _DATE_WINDOW_ALIASES:
            data["date_window"] = _DATE_WINDOW_ALIASES[window.lower()]

        sort = data.get("sort")
        if isinstance(sort, str) and sort.lower() in _SORT_ALIASES:
            data["sort"] = _SORT_ALIASES[sort.lower()]

        price_min = _coerce_bound(data.get("price_min", 0.0), 0.0)
        price_max = _coerce_bound(data.get("price_max", math.inf), math.inf)
        data["price_min"] = min(price_min, price_max)
        data["price_max"] = price_max
        return data

    def with_changes(self, **changes: Any) -> "QueryState":
        """Return a new, re-normalized state with the given fields replaced."""
        return QueryState.model_validate({**self.model_dump(), **changes})

    @property
    def has_text_query(self) -> bool:
        return bool(self.query.strip())
