"""Waiting on process signals, with timeouts and an external wake-up signal."""

from __future__ import annotations

import logging
import queue
import signal
import time
from datetime import timedelta
from typing import Union

logger = logging.getLogger(__name__)

SIGUSR1 = getattr(signal, "SIGUSR1", None)

Duration = Union[float, int, timedelta]


class Interrupted(Exception):
    """Raised when a terminating signal (such as SIGINT or SIGTERM) arrives."""

    def __init__(self, signum: int) -> None:
        super().__init__(f"Interrupted by signal {signum}")
        self.signum = signum


class Waiter:
    """Receives signals and lets threads sleep until a deadline or a signal.

    SIGUSR1 is a wake-up request (for example from a block-notify hook);
    any other signal ends the wait with :class:`Interrupted`.
    """

    def __init__(self) -> None:
        # SimpleQueue.put is reentrant, so it is safe to call from a signal handler.
        self._signals: "queue.SimpleQueue[int]" = queue.SimpleQueue()

    @classmethod
    def start(cls) -> "Waiter":
        """Create a waiter and route SIGINT, SIGTERM and SIGUSR1 to it."""
        waiter = cls()
        watched = [signal.SIGINT, signal.SIGTERM]
        if SIGUSR1 is not None:
            watched.append(SIGUSR1)
        for signum in watched:
            signal.signal(signum, waiter._handle)
        return waiter

    def _handle(self, signum: int, _frame: object) -> None:
        self.notify(signum)

    def notify(self, signum: int) -> None:
        """Deliver ``signum`` to whoever is waiting."""
        self._signals.put(int(signum))

    def wait(self, duration: Duration, accept_sigusr: bool) -> None:
        """Sleep for ``duration`` seconds or until woken.

        Returns early on SIGUSR1 when ``accept_sigusr`` is true; otherwise
        SIGUSR1 is ignored. Any other signal raises :class:`Interrupted`.
        """
        seconds = duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
        deadline = time.monotonic() + seconds
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            try:
                signum = self._signals.get(timeout=remaining)
            except queue.Empty:
                return
            if SIGUSR1 is not None and signum == SIGUSR1:
                logger.debug("notified via SIGUSR1")
                if accept_sigusr:
                    return
                continue
            raise Interrupted(signum)