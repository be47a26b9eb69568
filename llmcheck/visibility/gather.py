"""
Scatter-Gather

Runs a batch of independent async tasks concurrently and reports every
task's outcome individually. One task failing or timing out never cancels
or hides the others; outcomes come back in input order, not completion order.

Usage:
    outcomes = await gather_outcomes(
        [lambda: client.query("a"), lambda: client.query("b")],
        timeout=20.0,
    )
    for outcome in outcomes:
        if outcome.ok:
            use(outcome.value)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskTimeoutError(Exception):
    """A gathered task exceeded its per-task timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"Task timed out after {timeout:.1f}s")
        self.timeout = timeout


@dataclass
class Outcome(Generic[T]):
    """Tagged result of one task: a value or the exception it raised."""

    ok: bool
    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Outcome[T]":
        return cls(ok=False, error=error)


async def _settle(factory: Callable[[], Awaitable[T]], timeout: Optional[float]) -> Outcome[T]:
    try:
        if timeout is None:
            value = await factory()
        else:
            value = await asyncio.wait_for(factory(), timeout=timeout)
    except asyncio.TimeoutError:
        return Outcome.failure(TaskTimeoutError(timeout))
    except Exception as e:
        return Outcome.failure(e)
    return Outcome.success(value)


async def gather_outcomes(
    factories: Sequence[Callable[[], Awaitable[T]]],
    timeout: Optional[float] = None,
) -> List[Outcome[T]]:
    """
    Run all task factories concurrently and collect their outcomes.

    Args:
        factories: Zero-argument callables returning awaitables
        timeout: Per-task timeout in seconds (None = unbounded)

    Returns:
        One Outcome per factory, in the same order as the input
    """
    if not factories:
        return []

    outcomes = await asyncio.gather(*(_settle(f, timeout) for f in factories))

    failed = sum(1 for o in outcomes if not o.ok)
    if failed:
        logger.debug(f"Gathered {len(outcomes)} tasks, {failed} failed")

    return list(outcomes)
