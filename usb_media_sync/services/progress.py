from __future__ import annotations

import sys
from typing import TextIO

from usb_media_sync.domain import ProgressState
from usb_media_sync.logging import EventLogger, LoggerFactory


log = LoggerFactory.for_transfer(job_id="-")

FILLED_CELL = "#"
BLANK_CELL = " "


def render_progress(completed: int, total: int, width: int) -> str:
    """Render a fixed-width bar, e.g. ``[#####     ] 50%``.

    ``total == 0`` renders as 0% with an empty bar. ``completed`` is clamped
    to ``0..total``.
    """
    if width < 1:
        raise ValueError("width must be at least 1")
    completed = max(0, min(completed, total))
    state = ProgressState(completed=completed, total=max(total, 0))
    percent = state.percent
    filled = percent * width // 100
    return f"[{FILLED_CELL * filled}{BLANK_CELL * (width - filled)}] {percent}%"


class ProgressReporter:
    """Draws the progress bar on one terminal line, overwriting it in place."""

    def __init__(self, width: int, stream: TextIO | None = None, label: str = "Progress"):
        self.width = width
        self.stream = stream or sys.stdout
        self.label = label
        self._drawn = False

    def update(self, completed: int, total: int) -> None:
        bar = render_progress(completed, total, self.width)
        self.stream.write(f"\r{self.label}: {bar}")
        self.stream.flush()
        self._drawn = True
        EventLogger.log_transfer_progress(log, completed, total)

    def finish(self) -> None:
        """End the progress line so later output starts on a fresh line."""
        if self._drawn:
            self.stream.write("\n")
            self.stream.flush()
            self._drawn = False
