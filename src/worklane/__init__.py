"""
Worklane - single-lane sequencing primitives for asyncio.

- ``run`` / ``WorkRunner``: run a list of steps one at a time, with
  conditional skipping, named result lookup and a single completion hook.
- ``WorkQueue``: drain a growing list of items through a handler, one at a
  time, with pause and admission-check backpressure.
"""

__version__ = "0.1.0"

from worklane.core import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    LogContext,
    OrchestrationError,
    WorklaneError,
    WorklaneSettings,
    configure_logging,
    get_logger,
    get_settings,
)
from worklane.execution import WorkQueue
from worklane.orchestration import (
    DuplicateStepNameError,
    StepDefinitionError,
    StepDescriptor,
    StepIndexError,
    StepLookupError,
    UnknownStepNameError,
    Work,
    WorkError,
    WorkOptions,
    WorkRunner,
    get_default_runner,
    normalize_steps,
    reset_default_runner,
    run,
    step,
    works,
)

__all__ = [
    "__version__",
    # Orchestration
    "run",
    "works",
    "step",
    "normalize_steps",
    "StepDescriptor",
    "Work",
    "WorkOptions",
    "WorkRunner",
    "get_default_runner",
    "reset_default_runner",
    # Execution
    "WorkQueue",
    # Errors
    "WorklaneError",
    "ConfigError",
    "OrchestrationError",
    "ErrorCategory",
    "ErrorContext",
    "WorkError",
    "StepDefinitionError",
    "DuplicateStepNameError",
    "StepLookupError",
    "UnknownStepNameError",
    "StepIndexError",
    # Ambient
    "configure_logging",
    "get_logger",
    "LogContext",
    "WorklaneSettings",
    "get_settings",
]
