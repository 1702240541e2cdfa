"""Abstract base class for data sources."""

from abc import ABC, abstractmethod

from src.core.schemas import Candidate, Decision, Item


class DataSource(ABC):
    """Base class that every data source must implement.

    Fetch failures are raised as-is; returning None from
    ``fetch_next_candidate`` means "no eligible candidate left".
    """

    @abstractmethod
    async def fetch_collection(self) -> list[Item]:
        """Return the discoverable items, in the source's own order."""

    @abstractmethod
    async def fetch_next_candidate(self, excluding: frozenset[str]) -> Candidate | None:
        """Return one candidate whose id is not in ``excluding``, or None."""

    @abstractmethod
    async def persist_decision(
        self,
        decider_id: str,
        candidate_id: str,
        outcome: Decision,
    ) -> None:
        """Store a decision. The return value is never consumed."""
