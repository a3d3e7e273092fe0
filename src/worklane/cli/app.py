"""
Root Typer application for the worklane CLI.

Step lists and item lists are referenced as ``module:attr`` and imported
from the current Python path::

    worklane run myproject.jobs:NIGHTLY_STEPS
    worklane drain myproject.jobs:pending_files myproject.jobs:process_file
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any

import typer
from typer import Typer

from worklane.cli.utils import fail, load_list, output_rows, resolve_ref
from worklane.core.errors import WorklaneError
from worklane.core.logging import configure_logging
from worklane.execution.queue import WorkQueue
from worklane.orchestration.work import Work
from worklane.orchestration.work_runner import WorkOptions, WorkRunner

app = Typer(
    name="worklane",
    help="worklane — run step lists and drain item queues one at a time.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from worklane import __version__

        typer.echo(f"worklane {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR (default from settings)."
    ),
) -> None:
    """worklane CLI — sequential step runs and self-draining queues."""
    try:
        configure_logging(level=log_level)
    except WorklaneError as e:
        fail(e.message)


# ── run ──────────────────────────────────────────────────────────────────


@app.command("run")
def run_steps(
    ref: str = typer.Argument(..., help="Step list as module:attr (list or factory)"),
    always_succeed: bool = typer.Option(False, "--always-succeed", help="Report failures as empty success."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run a step list and print each step's result."""
    captured: list[Work] = []

    def capture(work: Work, failure: BaseException | None) -> None:
        captured.append(work)

    try:
        steps = load_list(ref)
        options = WorkOptions(always_succeed=always_succeed, completion_hook=capture)
        result = asyncio.run(WorkRunner().run(steps, options))
    except WorklaneError as e:
        fail(e.message)
        return
    except Exception as e:
        fail(f"{type(e).__name__}: {e}")
        return

    rows: list[dict[str, Any]] = []
    summary: dict[str, Any] = {"result": result}
    if captured:
        work = captured[0]
        rows = [
            {"position": i, "name": work.name_at(i), "result": value}
            for i, value in enumerate(work.results)
        ]
        if work.failure is not None:
            summary["suppressed"] = f"{type(work.failure).__name__}: {work.failure}"
    output_rows(
        rows,
        columns=["position", "name", "result"],
        as_json=json_out,
        title=f"Run: {ref}",
        summary=summary,
    )


# ── drain ────────────────────────────────────────────────────────────────


async def _drain(items: list[Any], fn: Any) -> tuple[list[dict[str, Any]], int]:
    rows: list[dict[str, Any]] = []
    failed = 0
    queue: WorkQueue[Any]

    async def handle(item: Any) -> None:
        nonlocal failed
        try:
            outcome = fn(item)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            rows.append({"item": item, "status": "completed", "result": outcome})
        except Exception as e:
            failed += 1
            rows.append({"item": item, "status": "failed", "result": f"{type(e).__name__}: {e}"})
        finally:
            queue.advance()

    queue = WorkQueue(items, handle)
    await queue.join()
    return rows, failed


@app.command("drain")
def drain_items(
    items_ref: str = typer.Argument(..., help="Item list as module:attr (list or factory)"),
    handler_ref: str = typer.Argument(..., help="Per-item function as module:attr"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Drain an item list through a per-item function, one item at a time."""
    try:
        items = load_list(items_ref)
        fn = resolve_ref(handler_ref)
    except WorklaneError as e:
        fail(e.message)
        return
    except Exception as e:
        fail(f"{type(e).__name__}: {e}")
        return
    if not callable(fn):
        fail(f"{handler_ref!r} is not callable")
        return

    rows, failed = asyncio.run(_drain(items, fn))
    output_rows(
        rows,
        columns=["item", "status", "result"],
        as_json=json_out,
        title=f"Drain: {items_ref}",
        summary={"handled": len(rows), "failed": failed},
    )
    if failed:
        raise typer.Exit(code=1)
