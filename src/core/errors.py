"""Programming-error signals raised by the match queue.

Exhaustion is not an error: it is reported through ``QueueState.EXHAUSTED``.
Transport failures belong to the data source and pass through untouched.
"""


class ContractViolation(Exception):
    """A caller or data source broke the queue's contract."""


class IllegalStateError(ContractViolation):
    """An operation was invoked in a state that does not permit it."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"{operation}() is not allowed in state '{state}'")


class QueueBusyError(IllegalStateError):
    """An operation was invoked while a candidate fetch is in flight."""


class ExcludedCandidateError(ContractViolation):
    """The data source offered a candidate that must not be shown again."""

    def __init__(self, candidate_id: str) -> None:
        self.candidate_id = candidate_id
        super().__init__(f"data source returned excluded candidate '{candidate_id}'")
