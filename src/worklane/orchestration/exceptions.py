"""Orchestration exceptions — structured error hierarchy.

All orchestration exceptions inherit from ``worklane.core.errors.OrchestrationError``
so that callers can catch the entire family with a single ``except`` clause.

Hierarchy::

    OrchestrationError  (from worklane.core.errors)
      └── WorkError                       ── base for all orchestrator errors
            ├── StepDefinitionError         ── malformed step spec
            │     └── DuplicateStepNameError  ── two steps share a name
            └── StepLookupError             ── result accessor failures
                  ├── UnknownStepNameError    ── name not in the index (KeyError)
                  └── StepIndexError          ── position not processed (IndexError)

Handler failures are not part of this hierarchy: the orchestrator
re-raises whatever the handler raised.
"""

from __future__ import annotations

from worklane.core.errors import ErrorCategory, OrchestrationError


class WorkError(OrchestrationError):
    """Base exception for all orchestrator errors."""

    pass


class StepDefinitionError(WorkError):
    """Raised when a raw step spec cannot be normalized."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        super().__init__(message)
        if position is not None:
            self.with_context(position=position)


class DuplicateStepNameError(StepDefinitionError):
    """Raised when two steps of one run declare the same name."""

    def __init__(self, name: str, first: int, second: int):
        self.name = name
        self.first = first
        super().__init__(
            f"Step name '{name}' is declared at positions {first} and {second}",
            position=second,
        )
        self.with_context(step=name)


class StepLookupError(WorkError, LookupError):
    """Base for result accessor failures."""

    default_category = ErrorCategory.LOOKUP


class UnknownStepNameError(StepLookupError, KeyError):
    """Raised when a result is requested for a name that no step declared."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Named index {name} doesn't exist!")
        self.with_context(step=name)


class StepIndexError(StepLookupError, IndexError):
    """Raised when a position is invalid or has not been processed yet."""

    def __init__(self, position: int, processed: int):
        self.position = position
        self.processed = processed
        super().__init__(f"Index {position} is out of bound!")
        self.with_context(position=position, processed=processed)


__all__ = [
    "WorkError",
    "StepDefinitionError",
    "DuplicateStepNameError",
    "StepLookupError",
    "UnknownStepNameError",
    "StepIndexError",
]
