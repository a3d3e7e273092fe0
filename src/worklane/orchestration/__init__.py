"""
Orchestration — sequential step runner.

A run is a list of steps executed strictly one at a time::

    from worklane.orchestration import run, WorkOptions

    result = await run(
        [
            ("fetch", fetch),
            (store, lambda work: work.result_at("fetch") is not None),
        ],
        WorkOptions(completion_hook=close_connections),
    )

Modules:
    step_types   — StepDescriptor and spec normalization
    work         — Work, the per-run state
    work_runner  — WorkRunner, WorkOptions, module-level run()
    exceptions   — orchestration error hierarchy
"""

from worklane.orchestration.exceptions import (
    DuplicateStepNameError,
    StepDefinitionError,
    StepIndexError,
    StepLookupError,
    UnknownStepNameError,
    WorkError,
)
from worklane.orchestration.step_types import (
    StepDescriptor,
    StepSpec,
    describe_callable,
    normalize_steps,
    step,
)
from worklane.orchestration.work import Work
from worklane.orchestration.work_runner import (
    WorkOptions,
    WorkRunner,
    get_default_runner,
    reset_default_runner,
    run,
    works,
)

__all__ = [
    # Steps
    "StepDescriptor",
    "StepSpec",
    "describe_callable",
    "normalize_steps",
    "step",
    # Run state
    "Work",
    # Runner
    "WorkOptions",
    "WorkRunner",
    "get_default_runner",
    "reset_default_runner",
    "run",
    "works",
    # Errors
    "WorkError",
    "StepDefinitionError",
    "DuplicateStepNameError",
    "StepLookupError",
    "UnknownStepNameError",
    "StepIndexError",
]
