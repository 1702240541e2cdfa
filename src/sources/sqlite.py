"""SQLite-backed data source."""

import logging
import sqlite3

from src.core.db import (
    fetch_active_events,
    fetch_next_profile,
    get_decided_ids,
    insert_decision,
)
from src.core.schemas import Candidate, Decision, Item
from src.sources.base import DataSource

logger = logging.getLogger(__name__)


class SQLiteDataSource(DataSource):
    """Reads events and profiles from, and writes decisions to, a local database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    async def fetch_collection(self) -> list[Item]:
        items = fetch_active_events(self._conn)
        logger.debug("Loaded %d active events", len(items))
        return items

    async def fetch_next_candidate(self, excluding: frozenset[str]) -> Candidate | None:
        return fetch_next_profile(self._conn, excluding)

    async def persist_decision(
        self,
        decider_id: str,
        candidate_id: str,
        outcome: Decision,
    ) -> None:
        if not insert_decision(self._conn, decider_id, candidate_id, outcome):
            logger.debug("Decision on '%s' by '%s' already stored", candidate_id, decider_id)

    def decided_ids(self, decider_id: str) -> set[str]:
        """Ids decided in earlier sessions, for carrying over into ``start``."""
        return get_decided_ids(self._conn, decider_id)
