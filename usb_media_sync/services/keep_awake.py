"""Keep the host awake while a sync runs.

Holds an OS sleep inhibitor for the lifetime of a helper process:

- macOS: ``caffeinate -s -i -w <pid>`` (also exits on its own if we die)
- Linux: ``systemd-inhibit --what=sleep:idle ... sleep infinity``

If neither helper is installed the lock degrades to a logged no-op. Release
is idempotent and also registered with ``atexit`` so the inhibitor is dropped
on every exit path Python gets to run.

Usage:
    with KeepAwake():
        run_sync()
"""

from __future__ import annotations

import atexit
import os
import shutil
import subprocess
import sys
import threading
from typing import Callable, Optional

from usb_media_sync.logging import LoggerFactory
from usb_media_sync.storage.exceptions import KeepAwakeError


log = LoggerFactory.for_system()

INHIBIT_REASON = "usb-media-sync transfer in progress"
RELEASE_TIMEOUT_SECONDS = 5.0


def inhibitor_command(
    platform: str | None = None,
    pid: int | None = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> list[str] | None:
    """Command that holds a sleep inhibitor until it is terminated, or None."""
    platform = platform or sys.platform
    pid = pid if pid is not None else os.getpid()
    if platform == "darwin" and which("caffeinate"):
        return ["caffeinate", "-s", "-i", "-w", str(pid)]
    if platform.startswith("linux") and which("systemd-inhibit"):
        return [
            "systemd-inhibit",
            "--what=sleep:idle",
            "--who=usb-media-sync",
            f"--why={INHIBIT_REASON}",
            "--mode=block",
            "sleep",
            "infinity",
        ]
    return None


class KeepAwake:
    def __init__(
        self,
        enabled: bool = True,
        command: list[str] | None = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        register_exit: Callable[[Callable[[], None]], object] = atexit.register,
    ):
        self.enabled = enabled
        self.command = command if command is not None else inhibitor_command()
        self._popen = popen
        self._register_exit = register_exit
        self._process: subprocess.Popen | None = None
        self._lock = threading.Lock()
        self._acquired = False
        self._released = False
        self._exit_hook_registered = False

    @property
    def active(self) -> bool:
        return self._process is not None and not self._released

    def acquire(self) -> None:
        """Start the inhibitor helper. Failures are logged, never raised."""
        with self._lock:
            if self._acquired:
                return
            self._acquired = True
        if not self._exit_hook_registered:
            self._register_exit(self.release)
            self._exit_hook_registered = True

        if not self.enabled:
            log.debug("Keep-awake disabled by configuration")
            return
        if not self.command:
            log.warning("No sleep inhibitor available; the system may sleep during sync")
            return
        try:
            self._process = self._start(self.command)
        except KeepAwakeError as error:
            log.warning(f"{error}; the system may sleep during sync")
            return
        log.info("System sleep prevented. The machine will stay awake until the sync completes.")

    def release(self) -> bool:
        """Stop the inhibitor helper. Returns True only on the call that released it."""
        with self._lock:
            if not self._acquired or self._released:
                return False
            self._released = True
            process = self._process

        if process is None:
            return True
        process.terminate()
        try:
            process.wait(timeout=RELEASE_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            log.warning("Sleep inhibitor did not exit, killing it")
            process.kill()
            process.wait()
        log.info("System can now enter sleep mode if idle.")
        return True

    def _start(self, command: list[str]) -> subprocess.Popen:
        log.debug(f"Starting sleep inhibitor: {' '.join(command)}")
        try:
            return self._popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as error:
            raise KeepAwakeError(command, str(error)) from error

    def __enter__(self) -> KeepAwake:
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
