"""Step Types — normalization of raw step specs into descriptors.

A run is declared as a plain list. Each entry can take several shapes so
that short pipelines stay short::

    steps = [
        fetch,                                  # bare handler
        (parse,),                               # handler only
        (store, lambda w: w.result_at(1)),      # handler + enabled predicate
        ("notify", notify),                     # name + handler
        ("audit", audit, lambda w: w.failure is None),
    ]

:func:`normalize_steps` resolves every shape once, at construction, into a
:class:`StepDescriptor` carrying a position, an optional name, the handler
and an optional enabled predicate. Anything else is rejected with a
:class:`~worklane.orchestration.exceptions.StepDefinitionError` before any
step runs.

ARCHITECTURE
────────────
::

    raw spec ──► StepDescriptor.create(spec, position)
                   ├── callable           → handler
                   ├── tuple / list       → [name,] handler [, enabled]
                   └── StepDescriptor     → copied with new position

    normalize_steps(specs) ──► (descriptors, name index)

Related modules:
    work.py         — Work state that handlers and predicates receive
    work_runner.py  — drives the descriptors one at a time
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Union

from worklane.orchestration.exceptions import DuplicateStepNameError, StepDefinitionError

if TYPE_CHECKING:
    from worklane.orchestration.work import Work


# Type alias for step handlers
StepHandlerFn = Callable[["Work"], Union[Awaitable[Any], Any]]

# Type alias for enabled predicates
EnabledFn = Callable[["Work"], bool]

# Every accepted raw shape
StepSpec = Union[StepHandlerFn, Sequence[Any], "StepDescriptor"]


def describe_callable(fn: Callable[..., Any]) -> str:
    """Return a short printable description of a handler for debug logs."""
    qualname = getattr(fn, "__qualname__", None)
    if qualname:
        module = getattr(fn, "__module__", None)
        return f"{module}.{qualname}" if module else qualname
    return repr(fn)


@dataclass(frozen=True)
class StepDescriptor:
    """
    A single normalized step.

    Attributes:
        position: Zero-based index in declaration order
        handler: Callable receiving the Work state
        name: Optional unique key for named result lookup
        enabled: Optional predicate; ``None`` means always enabled
    """

    position: int
    handler: StepHandlerFn
    name: str | None = None
    enabled: EnabledFn | None = None

    def is_enabled(self, work: Work) -> bool:
        """Evaluate the enabled predicate against the running Work."""
        if self.enabled is None:
            return True
        return bool(self.enabled(work))

    @property
    def info(self) -> str:
        """Handler description used in log lines."""
        return describe_callable(self.handler)

    @classmethod
    def create(cls, spec: StepSpec, position: int) -> StepDescriptor:
        """Normalize one raw step spec.

        Raises:
            StepDefinitionError: If the spec has no callable handler, a
                non-callable predicate, extra elements, or an unknown shape.
        """
        if isinstance(spec, StepDescriptor):
            return replace(spec, position=position)

        if callable(spec):
            return cls(position=position, handler=spec)

        if not isinstance(spec, (tuple, list)):
            raise StepDefinitionError(
                f"Unsupported step spec {type(spec).__name__}, expected a callable or a tuple",
                position=position,
            )

        parts = list(spec)
        name = None
        if parts and isinstance(parts[0], str):
            name = parts.pop(0)

        if not parts or not callable(parts[0]):
            got = type(parts[0]).__name__ if parts else "nothing"
            raise StepDefinitionError(f"Step handler required, got {got}", position=position)
        handler = parts.pop(0)

        enabled = None
        if parts:
            if not callable(parts[0]):
                raise StepDefinitionError(
                    f"Step enabled predicate must be callable, got {type(parts[0]).__name__}",
                    position=position,
                )
            enabled = parts.pop(0)

        if parts:
            raise StepDefinitionError(
                f"Step spec has {len(parts)} unexpected trailing element(s)",
                position=position,
            )

        return cls(position=position, handler=handler, name=name, enabled=enabled)


def step(
    handler: StepHandlerFn,
    name: str | None = None,
    enabled: EnabledFn | None = None,
) -> tuple[Any, ...]:
    """Build a raw step spec in canonical order.

    Example::

        steps = [step(fetch, name="fetch"), step(store, enabled=has_rows)]
    """
    spec: tuple[Any, ...] = (handler,)
    if name is not None:
        spec = (name, *spec)
    if enabled is not None:
        spec = (*spec, enabled)
    return spec


def normalize_steps(specs: Iterable[StepSpec]) -> tuple[list[StepDescriptor], dict[str, int]]:
    """Normalize raw specs into descriptors and a name → position index.

    Raises:
        StepDefinitionError: On any malformed spec.
        DuplicateStepNameError: When two steps share a name.
    """
    descriptors: list[StepDescriptor] = []
    names: dict[str, int] = {}
    for position, spec in enumerate(specs):
        descriptor = StepDescriptor.create(spec, position)
        if descriptor.name is not None:
            if descriptor.name in names:
                raise DuplicateStepNameError(descriptor.name, names[descriptor.name], position)
            names[descriptor.name] = position
        descriptors.append(descriptor)
    return descriptors, names


__all__ = [
    "StepHandlerFn",
    "EnabledFn",
    "StepSpec",
    "StepDescriptor",
    "describe_callable",
    "step",
    "normalize_steps",
]
