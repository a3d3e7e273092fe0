"""
Execution — item-level draining.

    from worklane.execution import WorkQueue
"""

from worklane.execution.queue import WorkQueue

__all__ = ["WorkQueue"]
