"""Acquire a mutex, optionally polling until a deadline."""

import logging
import time
from typing import Callable

from .client import MutexClient
from .models import Outcome, OutcomeKind

logger = logging.getLogger(__name__)

POLL_INTERVAL = 5.0


def acquire(
    client: MutexClient,
    name: str,
    timeout: float = 0,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Outcome:
    """Lock ``name``, polling while it is held by someone else.

    One attempt is made immediately. With ``timeout <= 0`` its outcome is
    returned as is. Otherwise the mutex is polled every ``min(5, timeout)``
    seconds until it is acquired or ``timeout`` seconds have passed since the
    call, in which case a TIMED_OUT outcome is returned. A transport failure
    ends polling at once.
    """
    deadline = clock() + timeout

    outcome = client.acquire(name)
    if outcome.kind is not OutcomeKind.CONTENDED or timeout <= 0:
        return outcome

    pause = min(POLL_INTERVAL, timeout)
    logger.info("Mutex %r is held, polling every %ss for up to %ss", name, pause, timeout)

    while True:
        sleep(pause)
        if clock() > deadline:
            logger.warning("Gave up on mutex %r after %ss", name, timeout)
            return Outcome.timed_out()

        outcome = client.acquire(name)
        logger.debug("Poll for mutex %r: %s", name, outcome.kind.value)
        if outcome.kind is not OutcomeKind.CONTENDED:
            return outcome
