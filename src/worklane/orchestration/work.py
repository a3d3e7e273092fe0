"""Work — per-run state shared with handlers, predicates and hooks.

One :class:`Work` is created for every ``run`` call. Handlers read earlier
results from it; the runner is the only writer.

Example::

    async def total(work: Work) -> int:
        return work.result_at("a") + work.result_at(1)

    await run([("a", fetch_a), fetch_b, total])

Results are recorded positionally (``results``) and, for named steps, by
name (``named_results``). A skipped step records ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from worklane.orchestration.exceptions import StepIndexError, UnknownStepNameError
from worklane.orchestration.step_types import StepDescriptor


@dataclass
class Work:
    """
    Mutable run state.

    Attributes:
        run_id: Sequence number of this run within its runner
        steps: All descriptors in declaration order
        pending: Descriptors not yet started
        names: Name → position index
        results: One entry per processed step (``None`` for skipped steps)
        named_results: Name → result for processed named steps
        last_result: Most recent entry written to ``results``
        previous_result: Entry written before ``last_result``
        last_handler_result: Most recent value produced by a handler
        current: Descriptor being processed
        failure: Exception that stopped the run
    """

    run_id: int
    steps: list[StepDescriptor] = field(default_factory=list)
    pending: list[StepDescriptor] = field(default_factory=list)
    names: dict[str, int] = field(default_factory=dict)
    results: list[Any] = field(default_factory=list)
    named_results: dict[str, Any] = field(default_factory=dict)
    last_result: Any = None
    previous_result: Any = None
    last_handler_result: Any = None
    current: StepDescriptor | None = None
    failure: BaseException | None = None

    @classmethod
    def create(cls, run_id: int, steps: list[StepDescriptor], names: dict[str, int]) -> Work:
        return cls(run_id=run_id, steps=list(steps), pending=list(steps), names=dict(names))

    # =========================================================================
    # Accessors
    # =========================================================================

    def result_at(self, key: int | str) -> Any:
        """Return the result of a processed step by position or name.

        Raises:
            UnknownStepNameError: If ``key`` is a name no step declared.
            StepIndexError: If the position is invalid or not processed yet.
        """
        if isinstance(key, str):
            if key not in self.names:
                raise UnknownStepNameError(key).with_context(run_id=self.run_id)
            key = self.names[key]
        if key < 0 or key >= len(self.results):
            raise StepIndexError(key, len(self.results)).with_context(run_id=self.run_id)
        return self.results[key]

    def name_at(self, position: int) -> str | None:
        """Return the name bound to ``position``, or ``None`` if unnamed."""
        if 0 <= position < len(self.steps):
            return self.steps[position].name
        return None

    def __getitem__(self, key: int | str) -> Any:
        return self.result_at(key)

    @property
    def processed(self) -> int:
        """Number of steps processed so far (run or skipped)."""
        return len(self.results)

    # =========================================================================
    # Recording (runner only)
    # =========================================================================

    def record(self, descriptor: StepDescriptor, value: Any) -> None:
        """Append a processed step's result and shift the last/previous pair."""
        self.results.append(value)
        self.previous_result = self.last_result
        self.last_result = value
        if descriptor.name is not None:
            self.named_results[descriptor.name] = value

    def take_next(self) -> StepDescriptor:
        """Remove the front pending descriptor and mark it current."""
        self.current = self.pending.pop(0)
        return self.current

    def __repr__(self) -> str:
        return (
            f"Work(run_id={self.run_id}, processed={self.processed}/{len(self.steps)}, "
            f"failed={self.failure is not None})"
        )


__all__ = ["Work"]
