"""Domain models for cross-list moves."""

from dataclasses import dataclass, field
from enum import Enum

from ingredient_lists.domain.errors import ErrorKind


class MoveOutcome(Enum):
    """Terminal states of a move."""

    MOVED = "moved"
    FAILED = "failed"
    PARTIALLY_RECONCILED = "partially_reconciled"


@dataclass(frozen=True)
class MoveStep:
    """A single backend call made while moving an ingredient."""

    action: str
    list_name: str
    succeeded: bool
    compensation: bool = False


@dataclass
class MoveResult:
    """Outcome of a move with the steps that produced it."""

    outcome: MoveOutcome
    steps: list[MoveStep] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.succeeded

    @property
    def succeeded(self) -> bool:
        return self.outcome is MoveOutcome.MOVED

    @property
    def error(self) -> ErrorKind | None:
        if self.outcome is MoveOutcome.PARTIALLY_RECONCILED:
            return ErrorKind.PARTIAL_RECONCILIATION_FAILURE
        if self.outcome is MoveOutcome.FAILED:
            return ErrorKind.UPSTREAM_FAILURE
        return None
