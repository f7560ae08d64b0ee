"""Execution resolver: pick the execution the registration step runs in.

The Trails API owns each execution's state machine; the client only
reconstructs one fact from it -- whether the latest execution is still
waiting for step 1.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from basereg.protocol import ExecutionRef, ExecutionStateError
from basereg.protocol.models import Execution
from basereg.protocol.types import REGISTER_STEP_NUMBER

logger = logging.getLogger(__name__)


class ExecutionDirectory(Protocol):
    """Anything that can list the wallet's executions (e.g. ``TrailsClient``)."""

    async def get_executions(self) -> list[Execution]: ...


def latest_execution(executions: Iterable[Execution]) -> Execution | None:
    """Return the most recently updated execution, or None if there are none.

    Ties on ``updated_at`` go to the highest execution id so the pick does
    not depend on response order.
    """
    return max(executions, key=lambda e: (e.updated_at, e.id), default=None)


def resolve_execution(
    executions: Iterable[Execution], step_number: int = REGISTER_STEP_NUMBER
) -> ExecutionRef:
    """Decide which execution reference to use for *step_number*.

    No executions: ``latest`` (the API creates one on first evaluation).
    Otherwise: ``manual(id)`` of the latest execution, provided that its
    next step is *step_number*.

    Raises:
        ExecutionStateError: If the latest execution is on another step.
    """
    latest = latest_execution(executions)
    if latest is None:
        logger.debug("No executions for wallet, using 'latest'")
        return ExecutionRef.latest()

    next_step = latest.next_step_number
    if next_step != step_number:
        raise ExecutionStateError(next_step, expected=step_number)

    logger.debug("Continuing execution %s at step %d", latest.id, next_step)
    return ExecutionRef.manual(latest.id)


class ExecutionResolver:
    """Resolve the execution reference from a live execution directory."""

    def __init__(self, directory: ExecutionDirectory, step_number: int = REGISTER_STEP_NUMBER) -> None:
        self._directory = directory
        self._step_number = step_number

    async def resolve(self) -> ExecutionRef:
        executions = await self._directory.get_executions()
        return resolve_execution(executions, self._step_number)
