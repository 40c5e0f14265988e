# This project was developed with assistance from AI tools.
"""Sequential saga runner with per-step compensation.

Steps run in order. When a step raises, the compensations of the steps
that have started since the last commit point (the failing one included)
run in reverse order and the original exception is re-raised. A step
marked ``commits=True`` is a commit point: once it succeeds, earlier
writes are durable and are never compensated by later failures.

Compensations are best effort. A failing compensation is logged and does
not mask the error that triggered it.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SagaStep:
    name: str
    action: Callable[[], Awaitable[None]]
    compensation: Callable[[], Awaitable[None]] | None = None
    commits: bool = False


async def _compensate(steps: list[SagaStep]) -> None:
    for step in reversed(steps):
        if step.compensation is None:
            continue
        logger.warning("Compensating saga step '%s'", step.name)
        try:
            await step.compensation()
        except Exception:
            logger.warning("Compensation for saga step '%s' failed", step.name, exc_info=True)


async def run_saga(steps: Sequence[SagaStep]) -> None:
    """Run ``steps`` in order, compensating uncommitted work on the first failure."""
    pending: list[SagaStep] = []
    for step in steps:
        pending.append(step)
        try:
            await step.action()
        except Exception:
            logger.error("Saga step '%s' failed", step.name)
            await _compensate(pending)
            raise
        if step.commits:
            pending.clear()
