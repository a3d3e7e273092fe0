"""Work Runner — drives a list of steps one at a time.

The runner normalizes the step specs, then advances through them strictly
in order: a step's handler is never called before the previous step has
settled. Each step is either *run* (handler called, its value recorded) or
*skipped* (enabled predicate returned false, ``None`` recorded).

Every exit path funnels through the completion hook exactly once:

::

    run(steps, options)
      │  initializer(options)            runner default, may mutate options
      │  normalize_steps(steps)          StepDefinitionError → raised as-is
      ▼
    ┌──────────── for each pending step (after a loop tick) ────────────┐
    │ enabled? ── no ──► record None                                     │
    │    │ yes                                                           │
    │    ▼                                                               │
    │ handler(work) ── raises ──► failure ──► completion_hook(work, exc) │
    │    │ value                               always_succeed → None     │
    │    ▼                                     else on_failure, raise    │
    │ record value                                                       │
    │ advance_hook(proceed, work) ── wait for proceed() ──┘              │
    └────────────────────────────────────────────────────────────────────┘
      │ all processed
      ▼
    completion_hook(work, None) ──► last value produced by a handler

Example::

    from worklane import run

    async def fetch(work):
        return 10

    async def double(work):
        return work.result_at("fetch") * 2

    result = await run([("fetch", fetch), double])   # 20

Runner-level defaults (initializer, failure handler, debug formatter) live
on a :class:`WorkRunner` instance. The module-level :func:`run` uses a
shared default runner returned by :func:`get_default_runner`.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, fields
from typing import Any, Union

from worklane.core.errors import ConfigError, categorize_error
from worklane.core.logging import LogContext, get_logger
from worklane.orchestration.step_types import StepDescriptor, StepSpec, normalize_steps
from worklane.orchestration.work import Work

logger = get_logger(__name__)


# Type aliases for hooks
ProceedFn = Callable[[], None]
AdvanceHookFn = Callable[[ProceedFn, Work], Union[Awaitable[None], None]]
CompletionHookFn = Callable[[Work, Union[BaseException, None]], Union[Awaitable[None], None]]
FailureHookFn = Callable[[Work], None]
DebugFormatterFn = Callable[[Any], Any]
InitializerFn = Callable[["WorkOptions"], None]


def _identity(value: Any) -> Any:
    return value


@dataclass
class WorkOptions:
    """
    Per-run options.

    Attributes:
        always_succeed: Return ``None`` instead of raising when a step fails
        advance_hook: Called between steps with a ``proceed`` callable; the
            run continues only once ``proceed()`` has been called
        completion_hook: Called once on every exit path with the Work and
            the failure (or ``None``); awaited when it returns an awaitable
        on_failure: Called when the run ends in an unsuppressed failure;
            overrides the runner default
        debug_formatter: Formats values for debug log lines
    """

    always_succeed: bool = False
    advance_hook: AdvanceHookFn | None = None
    completion_hook: CompletionHookFn | None = None
    on_failure: FailureHookFn | None = None
    debug_formatter: DebugFormatterFn | None = None

    @classmethod
    def coerce(cls, options: WorkOptions | Mapping[str, Any] | AdvanceHookFn | None) -> WorkOptions:
        """Resolve the accepted option shapes into a ``WorkOptions``.

        A bare callable is shorthand for ``WorkOptions(advance_hook=fn)``.
        An existing instance is returned as-is so an initializer mutates the
        caller's object.

        Raises:
            ConfigError: On unknown keys or an unsupported type.
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            known = {f.name for f in fields(cls)}
            unknown = sorted(set(options) - known)
            if unknown:
                raise ConfigError(f"Unknown work option(s): {', '.join(unknown)}")
            return cls(**options)
        if callable(options):
            return cls(advance_hook=options)
        raise ConfigError(f"Unsupported work options type: {type(options).__name__}")


class WorkRunner:
    """Executes step lists sequentially with a uniform completion funnel.

    Holds the defaults shared by every run it executes:

    * ``initializer`` — called with each run's resolved options
    * ``on_failure`` — failure handler used when a run supplies none
    * ``debug_formatter`` — formatter used when a run supplies none

    Setters are fluent and accept ``None`` (or any non-callable) to reset::

        runner = WorkRunner().set_on_failure(report).set_debug_formatter(repr)
    """

    def __init__(
        self,
        initializer: InitializerFn | None = None,
        on_failure: FailureHookFn | None = None,
        debug_formatter: DebugFormatterFn | None = None,
    ) -> None:
        self._initializer = initializer if callable(initializer) else None
        self._on_failure = on_failure if callable(on_failure) else None
        self._debug_formatter = debug_formatter if callable(debug_formatter) else None
        self._seq = itertools.count(1)

    # ── Defaults ─────────────────────────────────────────────────────

    @property
    def initializer(self) -> InitializerFn | None:
        return self._initializer

    @property
    def on_failure(self) -> FailureHookFn | None:
        return self._on_failure

    @property
    def debug_formatter(self) -> DebugFormatterFn:
        return self._debug_formatter or _identity

    def set_initializer(self, fn: InitializerFn | None) -> WorkRunner:
        """Set the initializer called with every run's options."""
        self._initializer = fn if callable(fn) else None
        return self

    def set_on_failure(self, fn: FailureHookFn | None) -> WorkRunner:
        """Set the default failure handler."""
        self._on_failure = fn if callable(fn) else None
        return self

    def set_debug_formatter(self, fn: DebugFormatterFn | None) -> WorkRunner:
        """Set the default debug formatter."""
        self._debug_formatter = fn if callable(fn) else None
        return self

    def reset(self) -> WorkRunner:
        """Drop every default."""
        self._initializer = None
        self._on_failure = None
        self._debug_formatter = None
        return self

    # ── Execution ────────────────────────────────────────────────────

    async def run(
        self,
        steps: Iterable[StepSpec],
        options: WorkOptions | Mapping[str, Any] | AdvanceHookFn | None = None,
    ) -> Any:
        """Run ``steps`` one at a time.

        Args:
            steps: Raw step specs (see :mod:`worklane.orchestration.step_types`)
            options: ``WorkOptions``, a mapping of its fields, or an advance hook

        Returns:
            The last value produced by a handler, or ``None`` when the list is
            empty or a failure was suppressed by ``always_succeed``.

        Raises:
            StepDefinitionError: If a step spec is malformed (never suppressed).
            Exception: Whatever the failing handler raised.
        """
        opts = WorkOptions.coerce(options)
        if self._initializer is not None:
            self._initializer(opts)

        descriptors, names = normalize_steps(steps)
        work = Work.create(next(self._seq), descriptors, names)

        async with LogContext(run_id=work.run_id):
            logger.debug("work.start", steps=len(descriptors), named=len(names))
            if not descriptors:
                await self._complete(work, opts, None)
                logger.debug("work.empty")
                return None
            return await self._drive(work, opts)

    async def _drive(self, work: Work, opts: WorkOptions) -> Any:
        fmt = opts.debug_formatter or self.debug_formatter

        while work.pending:
            # deferred: each step starts on a fresh loop iteration
            await asyncio.sleep(0)
            descriptor = work.take_next()
            failure: Exception | None = None
            try:
                await self._process(work, descriptor, opts, fmt)
                if work.pending and opts.advance_hook is not None:
                    await self._wait_for_proceed(work, opts.advance_hook)
            except Exception as exc:
                failure = exc
            if failure is not None:
                return await self._fail(work, opts, descriptor, failure, fmt)

        await self._complete(work, opts, None)
        logger.debug(
            "work.resolved",
            position=work.current.position if work.current else None,
            result=fmt(work.last_handler_result),
        )
        return work.last_handler_result

    async def _process(
        self,
        work: Work,
        descriptor: StepDescriptor,
        opts: WorkOptions,
        fmt: DebugFormatterFn,
    ) -> None:
        if not descriptor.is_enabled(work):
            logger.debug("work.step.skip", position=descriptor.position, handler=descriptor.info)
            work.record(descriptor, None)
            return

        logger.debug(
            "work.step.call",
            position=descriptor.position,
            step=descriptor.name,
            handler=descriptor.info,
        )
        try:
            outcome = descriptor.handler(work)
        except Exception as exc:
            if opts.on_failure is None and self._on_failure is None:
                logger.error(
                    "work.step.raised",
                    position=descriptor.position,
                    handler=descriptor.info,
                    category=categorize_error(exc).value,
                    error=str(exc),
                )
            raise
        value = await outcome if inspect.isawaitable(outcome) else outcome

        logger.debug("work.step.return", position=descriptor.position, result=fmt(value))
        work.last_handler_result = value
        work.record(descriptor, value)

    async def _wait_for_proceed(self, work: Work, hook: AdvanceHookFn) -> None:
        proceed_future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def proceed() -> None:
            if not proceed_future.done():
                proceed_future.set_result(None)

        outcome = hook(proceed, work)
        if inspect.isawaitable(outcome):
            await outcome
        await proceed_future

    async def _complete(self, work: Work, opts: WorkOptions, failure: BaseException | None) -> None:
        if opts.completion_hook is None:
            return
        outcome = opts.completion_hook(work, failure)
        if inspect.isawaitable(outcome):
            await outcome

    async def _fail(
        self,
        work: Work,
        opts: WorkOptions,
        descriptor: StepDescriptor,
        failure: Exception,
        fmt: DebugFormatterFn,
    ) -> None:
        work.failure = failure
        await self._complete(work, opts, failure)

        if opts.always_succeed:
            logger.debug("work.rejected_as_resolved", position=descriptor.position)
            return None

        logger.debug(
            "work.rejected",
            position=descriptor.position,
            category=categorize_error(failure).value,
            error=fmt(failure),
        )
        on_failure = opts.on_failure or self._on_failure
        if on_failure is not None:
            on_failure(work)
        raise failure


# =============================================================================
# Default runner
# =============================================================================

_default_runner = WorkRunner()


def get_default_runner() -> WorkRunner:
    """Return the runner used by the module-level :func:`run`."""
    return _default_runner


def reset_default_runner() -> WorkRunner:
    """Clear the default runner's initializer, failure handler and formatter."""
    return _default_runner.reset()


async def run(
    steps: Iterable[StepSpec],
    options: WorkOptions | Mapping[str, Any] | AdvanceHookFn | None = None,
) -> Any:
    """Run ``steps`` on the default runner. See :meth:`WorkRunner.run`."""
    return await _default_runner.run(steps, options)


works = run


__all__ = [
    "WorkOptions",
    "WorkRunner",
    "get_default_runner",
    "reset_default_runner",
    "run",
    "works",
]
