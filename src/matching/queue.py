"""Candidate queue: one-at-a-time match candidates with a session exclusion set.

State machine::

    idle --fetch--> loading --candidate--> loaded --decide--> loading --> ...
                       |
                       +--none--> exhausted   (terminal until start())

``loading`` covers every await on the data source; any call made while it is
in flight is rejected with QueueBusyError instead of interleaving.
"""

import logging
from collections.abc import Iterable
from enum import Enum

from src.core.errors import ExcludedCandidateError, IllegalStateError, QueueBusyError
from src.core.schemas import Candidate, Decision
from src.sources.base import DataSource

logger = logging.getLogger(__name__)


class QueueState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    EXHAUSTED = "exhausted"


class CandidateQueue:
    """Session object for the matching screen.

    The exclusion set only grows within a session; ``start`` resets it.
    Not re-entrant: one writer per session.

    Usage::

        queue = CandidateQueue(source, self_id="u1")
        await queue.start(carry_over=source.decided_ids("u1"))
        while queue.state is QueueState.LOADED:
            await queue.decide(Decision.ACCEPT)
    """

    def __init__(self, source: DataSource, self_id: str) -> None:
        self._source = source
        self._self_id = self_id
        self._excluded: set[str] = set()
        self._session_decisions = 0
        self._current: Candidate | None = None
        self._state = QueueState.IDLE

    @property
    def state(self) -> QueueState:
        return self._state

    @property
    def current(self) -> Candidate | None:
        return self._current

    @property
    def exclusions(self) -> frozenset[str]:
        return frozenset(self._excluded)

    @property
    def decided_count(self) -> int:
        """Decisions made since the last ``start``; carried-over ids are not counted."""
        return self._session_decisions

    @property
    def is_exhausted(self) -> bool:
        return self._state is QueueState.EXHAUSTED

    async def start(self, carry_over: Iterable[str] = ()) -> None:
        """Begin a fresh session and load the first candidate.

        Args:
            carry_over: Candidate ids decided in earlier sessions.
        """
        self._guard_not_loading("start")
        self._excluded = set(carry_over)
        self._excluded.discard(self._self_id)
        self._session_decisions = 0
        self._current = None
        self._state = QueueState.IDLE
        logger.info(
            "Match session started for '%s' (%d carried-over exclusions)",
            self._self_id, len(self._excluded),
        )
        await self._request_next()

    async def decide(self, outcome: Decision | str) -> None:
        """Record a decision on the current candidate and load the next one."""
        self._guard_not_loading("decide")
        if self._state is not QueueState.LOADED or self._current is None:
            raise IllegalStateError("decide", self._state.value)
        outcome = Decision(outcome)

        candidate = self._current
        self._excluded.add(candidate.id)
        self._session_decisions += 1
        self._current = None
        self._state = QueueState.LOADING
        try:
            await self._source.persist_decision(self._self_id, candidate.id, outcome)
        except BaseException:
            self._state = QueueState.IDLE
            raise
        logger.debug("Decided %s on '%s'", outcome.value, candidate.id)

        self._state = QueueState.IDLE
        await self._request_next()

    async def fetch_next(self) -> None:
        """Request a candidate from ``idle``, e.g. after a failed fetch."""
        self._guard_not_loading("fetch_next")
        if self._state is not QueueState.IDLE:
            raise IllegalStateError("fetch_next", self._state.value)
        await self._request_next()

    async def _request_next(self) -> None:
        excluding = frozenset(self._excluded | {self._self_id})
        self._state = QueueState.LOADING
        try:
            candidate = await self._source.fetch_next_candidate(excluding)
        except BaseException:
            self._state = QueueState.IDLE
            raise

        if candidate is None:
            self._state = QueueState.EXHAUSTED
            logger.info("No candidates left for '%s' after %d decisions this session",
                        self._self_id, self._session_decisions)
            return

        if candidate.id in excluding:
            self._state = QueueState.IDLE
            logger.warning("Data source re-offered excluded candidate '%s'", candidate.id)
            raise ExcludedCandidateError(candidate.id)

        self._current = candidate
        self._state = QueueState.LOADED

    def _guard_not_loading(self, operation: str) -> None:
        if self._state is QueueState.LOADING:
            raise QueueBusyError(operation, self._state.value)
