"""
Structured error types for worklane.

Every error raised by worklane itself extends :class:`WorklaneError` so a
caller can catch the whole family with one ``except`` clause, while still
distinguishing construction problems from lookup problems.

Errors raised by *step handlers* are never wrapped: the orchestrator
re-raises the handler's own exception object so callers see exactly what
the handler produced.

Architecture:
    ::

        WorklaneError  (category, retryable, context, cause)
          ├── ConfigError                     ── invalid settings / CLI refs
          └── OrchestrationError
                └── WorkError                  ── see orchestration.exceptions

Examples:
    >>> error = OrchestrationError("Step failed").with_context(step="fetch", position=0)
    >>> error.context.step
    'fetch'
    >>> error.to_dict()["category"]
    'ORCHESTRATION'

Tags:
    error-handling, exception-hierarchy, error-context, worklane
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    CONFIG = "CONFIG"
    VALIDATION = "VALIDATION"
    ORCHESTRATION = "ORCHESTRATION"
    LOOKUP = "LOOKUP"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set show up in :meth:`to_dict`, so the output can be
    passed straight into a structured log call.

    Attributes:
        run_id: Sequence number of the run that raised the error
        step: Name of the step, when the step is named
        position: Position of the step within the run
        metadata: Additional key-value pairs
    """

    run_id: int | None = None
    step: str | None = None
    position: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["run_id", "step", "position"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class WorklaneError(Exception):
    """
    Base exception for all worklane errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    sensible defaults for their domain.

    Examples:
        >>> error = WorklaneError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> WorklaneError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StepDefinitionError("handler required").with_context(position=3)
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class ConfigError(WorklaneError):
    """Invalid configuration or an unresolvable reference."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class OrchestrationError(WorklaneError):
    """Sequencing error raised by the orchestrator or the queue."""

    default_category = ErrorCategory.ORCHESTRATION
    default_retryable = False


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error, including errors raised by handlers."""
    if isinstance(error, WorklaneError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.VALIDATION
    if isinstance(error, LookupError):
        return ErrorCategory.LOOKUP
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "WorklaneError",
    "ConfigError",
    "OrchestrationError",
    "categorize_error",
]
