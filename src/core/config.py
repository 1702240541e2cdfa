"""Configuration models and YAML loader for the discovery and matching core."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from src.core.schemas import DateWindow, QueryState, SortKey


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/afisha.db"


class MatcherConfig(BaseModel):
    """Fuzzy text matching settings.

    ``threshold`` is the largest tolerated share of edited characters
    (0.0 = exact substring only, 1.0 = anything matches).
    """

    threshold: float = Field(default=0.3, ge=0.0, le=1.0)


class DiscoveryConfig(BaseModel):
    """Defaults applied to a fresh discovery query."""

    default_price_max: float = Field(default=10000.0, ge=0.0)
    default_sort: SortKey | None = SortKey.DATE_ASC
    default_date_window: DateWindow = DateWindow.ANY

    def query_state(self, **overrides: Any) -> QueryState:
        """Build a normalized QueryState from these defaults plus overrides."""
        data: dict[str, Any] = {
            "price_max": self.default_price_max,
            "sort": self.default_sort,
            "date_window": self.default_date_window,
        }
        data.update({k: v for k, v in overrides.items() if v is not None})
        return QueryState.model_validate(data)


class MatchingConfig(BaseModel):
    """Match queue session settings."""

    user_id: str | None = None

    @field_validator("user_id")
    @classmethod
    def user_id_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            msg = "user_id must not be blank"
            raise ValueError(msg)
        return v.strip() if v is not None else None


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
