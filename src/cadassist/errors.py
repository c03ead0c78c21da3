"""
Typed errors and operation results.

Operations that create geometry in a single shot raise one of the
exceptions below. Best-effort operations (extraction, offsets, trims,
projection) return an :class:`OperationResult` that carries the produced
value, or an empty sentinel together with the reason it is empty.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .enums import ErrorKind


class CadAssistError(Exception):
    """Base class for all errors raised by cadassist."""

    kind: ErrorKind = ErrorKind.HOST_REJECTED

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class InvalidInputError(CadAssistError, ValueError):
    """Null, empty or otherwise unusable arguments, rejected before any host call."""

    kind = ErrorKind.INVALID_INPUT


class HostOperationError(CadAssistError, RuntimeError):
    """The host refused or could not perform the requested construction."""

    kind = ErrorKind.HOST_REJECTED

    def __str__(self):
        message = super().__str__()
        if self.operation:
            return f"{self.operation}: {message}"
        return message


class DirectionUnresolvedError(CadAssistError):
    """A direction retry finished without satisfying its keep predicate."""

    kind = ErrorKind.DIRECTION_UNRESOLVED


_ERRORS_BY_KIND = {
    ErrorKind.INVALID_INPUT: InvalidInputError,
    ErrorKind.HOST_REJECTED: HostOperationError,
    ErrorKind.DIRECTION_UNRESOLVED: DirectionUnresolvedError,
}


@dataclass
class OperationResult:
    """Outcome of a best-effort operation.

    Attributes:
        operation: Name of the operation that produced the result
        value: Produced handle(s), or the operation's empty sentinel on failure
        error_kind: ErrorKind.NONE on success
        message: Human-readable status, the host's message on failure
        attempts: Number of commits performed (2 when a direction retry happened)
        satisfied: For direction heuristics, whether the final state passed
            the keep predicate. Always True for other operations.
    """
    operation: str
    value: Any = None
    error_kind: ErrorKind = ErrorKind.NONE
    message: str = ""
    attempts: int = 1
    satisfied: bool = True

    @property
    def ok(self) -> bool:
        """True when a value was produced (possibly with an unresolved direction)."""
        return self.error_kind in (ErrorKind.NONE, ErrorKind.DIRECTION_UNRESOLVED)

    @property
    def retried(self) -> bool:
        return self.attempts > 1

    @classmethod
    def failure(cls, operation: str, kind: ErrorKind, message: str, value: Any = None,
                attempts: int = 0) -> "OperationResult":
        return cls(operation=operation, value=value, error_kind=kind,
                   message=message, attempts=attempts, satisfied=False)

    def unwrap(self) -> Any:
        """Return the value, or raise the typed error matching error_kind."""
        if self.error_kind == ErrorKind.NONE:
            return self.value
        error_class = _ERRORS_BY_KIND[self.error_kind]
        raise error_class(self.message, operation=self.operation)
