"""
First-settled combinator for bounded external calls.

Every call to the identity service is paired with a timer; whichever
settles first decides the outcome. A call that loses keeps running and
its eventual result is dropped.
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from .exceptions import OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Calls that lost their race, held until they settle
_stragglers: set[asyncio.Future] = set()


def _abandon(task: asyncio.Future, operation: str) -> None:
    """Let a losing call finish on its own and collect its outcome."""

    def collect(done: asyncio.Future) -> None:
        _stragglers.discard(done)
        if done.cancelled():
            return
        error = done.exception()
        if error is not None:
            logger.debug("Late %s failure ignored: %s", operation, error)
        else:
            logger.debug("Late %s result ignored", operation)

    _stragglers.add(task)
    task.add_done_callback(collect)


async def first_settled(
    call: Awaitable[T],
    timeout: Optional[float],
    *,
    operation: str,
) -> T:
    """
    Race an awaitable against a timer.

    Args:
        call: The external call to await
        timeout: Seconds to wait; None waits without bound
        operation: Name used in the timeout error

    Returns:
        The call's result if it settles first

    Raises:
        OperationTimeoutError: If the timer fires first. The call is not
            aborted; it runs to completion and its outcome is ignored.
        Exception: Whatever the call raised, if it settles first with an error
    """
    task = asyncio.ensure_future(call)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        # The caller went away; the call itself is left alone
        _abandon(task, operation)
        raise

    if task in done:
        return task.result()

    _abandon(task, operation)
    raise OperationTimeoutError(operation, timeout)
