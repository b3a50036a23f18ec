"""
Type definitions for bookstore-queries.

Provides the document aliases used as call parameters, the outcome records
the runner produces, and the store error taxonomy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence


# Type aliases for clarity
Document = Mapping[str, Any]
MutableDocument = dict[str, Any]
Filter = Mapping[str, Any]
Update = Mapping[str, Any]
Projection = Mapping[str, Any] | Sequence[str] | None
Sort = list[tuple[str, int]] | None
Pipeline = list[dict[str, Any]]


@dataclass
class StepOutcome:
    """
    Result of one executed operation.

    Attributes:
        step: 1-based position of the operation in the run.
        name: Operation name.
        value: Raw value the store returned (documents, a count, an index
            name or explain statistics).
    """

    step: int
    name: str
    value: Any = None


@dataclass
class RunReport:
    """
    Summary of an OperationRunner run.

    Attributes:
        outcomes: Outcomes of the steps that completed, in order.
        error: The failure that abandoned the run, if any.
        completed: Whether every operation ran.
        closed: Whether the connection was released.
    """

    outcomes: list[StepOutcome] = field(default_factory=list)
    error: StoreError | None = None
    completed: bool = False
    closed: bool = False

    @property
    def ok(self) -> bool:
        """True when the run finished without error."""
        return self.completed and self.error is None

    def value_of(self, name: str) -> Any:
        """
        Return the value recorded for the named operation.

        Raises:
            KeyError: If the operation did not run.
        """
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome.value
        raise KeyError(name)


class StoreError(Exception):
    """Base exception for store operations."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ConnectionError(StoreError):
    """Error raised when the store cannot be reached."""

    pass


class OperationFailure(StoreError):
    """Error raised when an operation fails against the store."""

    def __init__(
        self,
        message: str,
        step: int | None = None,
        operation: str | None = None,
        code: int | None = None,
    ) -> None:
        super().__init__(message, code)
        self.step = step
        self.operation = operation


class UnexpectedCountError(OperationFailure):
    """Error raised when a write affected no document in strict-count mode."""

    pass
