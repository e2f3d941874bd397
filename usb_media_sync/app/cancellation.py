"""Cancellation for the blocking wait and retry loops.

Every pause in a device wait or retry loop goes through
``CancellationToken.wait()``, so a SIGINT/SIGTERM turns into an
``OperationCancelledError`` at the next pause instead of killing the process
mid-write.

The token is a plain flag. Setting it takes no lock, so the signal handler
cannot block on a lock the interrupted main thread already holds. Waits
sleep in short slices and check the flag between them.

Usage:
    token = CancellationToken()
    with shutdown_signals(token):
        monitor.wait_until_writable()  # raises OperationCancelledError once cancelled
"""

from __future__ import annotations

import signal
import time
from contextlib import contextmanager
from typing import Generator

from usb_media_sync.storage.exceptions import OperationCancelledError


WAIT_SLICE_SECONDS = 0.1


class CancellationToken:
    def __init__(self) -> None:
        self.requested = False
        self.reason = ""

    @property
    def cancelled(self) -> bool:
        return self.requested

    def cancel(self, reason: str = "cancelled") -> None:
        # Attribute writes only: called from signal handlers
        if not self.requested:
            self.reason = reason
            self.requested = True

    def raise_if_cancelled(self) -> None:
        if self.requested:
            raise OperationCancelledError(self.reason)

    def wait(self, seconds: float) -> None:
        """Pause for ``seconds``, raising as soon as the token is cancelled."""
        deadline = time.monotonic() + seconds
        while True:
            self.raise_if_cancelled()
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            time.sleep(min(remaining, WAIT_SLICE_SECONDS))


@contextmanager
def shutdown_signals(token: CancellationToken) -> Generator[None, None, None]:
    """Route SIGINT/SIGTERM into ``token`` for the duration of the block.

    The handler only flags the token; the cancellation is logged where the
    resulting OperationCancelledError is handled. Previous handlers are
    restored on exit.
    """
    handled = (signal.SIGINT, signal.SIGTERM)
    original = {signum: signal.getsignal(signum) for signum in handled}

    def _handler(signum, _frame) -> None:
        token.cancel(signal.Signals(signum).name)

    for signum in handled:
        signal.signal(signum, _handler)
    try:
        yield
    finally:
        for signum, previous in original.items():
            signal.signal(signum, previous)
