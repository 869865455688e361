"""Business error kinds and operation results."""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Kinds of expected failures returned by list operations."""

    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    INVALID_INPUT = "invalid_input"
    UPSTREAM_FAILURE = "upstream_failure"
    PARTIAL_RECONCILIATION_FAILURE = "partial_reconciliation_failure"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a list operation."""

    ok: bool
    error: ErrorKind | None = None
    message: str | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> "OperationResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: ErrorKind, message: str | None = None) -> "OperationResult":
        return cls(ok=False, error=error, message=message)
