"""In-memory data source, for tests and embedding callers that already hold data."""

import logging
from collections.abc import Iterable

from src.core.schemas import Candidate, Decision, Item
from src.sources.base import DataSource

logger = logging.getLogger(__name__)


class InMemoryDataSource(DataSource):
    """Serves pre-loaded items and candidates.

    Candidates are offered in supplied order, skipping excluded ids.
    Persisted decisions are kept in ``decisions`` as (decider, candidate, outcome).
    """

    def __init__(
        self,
        items: Iterable[Item] = (),
        candidates: Iterable[Candidate] = (),
    ) -> None:
        self._items = list(items)
        self._candidates = list(candidates)
        self.decisions: list[tuple[str, str, Decision]] = []

    async def fetch_collection(self) -> list[Item]:
        return list(self._items)

    async def fetch_next_candidate(self, excluding: frozenset[str]) -> Candidate | None:
        for candidate in self._candidates:
            if candidate.id not in excluding:
                return candidate
        return None

    async def persist_decision(
        self,
        decider_id: str,
        candidate_id: str,
        outcome: Decision,
    ) -> None:
        self.decisions.append((decider_id, candidate_id, outcome))
        logger.debug("Stored %s of '%s' by '%s'", outcome.value, candidate_id, decider_id)

    def decided_ids(self, decider_id: str) -> set[str]:
        return {c for d, c, _ in self.decisions if d == decider_id}
