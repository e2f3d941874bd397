"""Device availability checks.

A device counts as usable only when its mount point exists as a directory
and a throwaway marker file can be written and removed there. Anything else
(missing mount, read-only mount, I/O error mid-probe) means "not usable" and
is never raised to the caller.

Example:
    monitor = DeviceMonitor(config, token)
    monitor.wait_until_writable()  # blocks until the player is plugged in
"""

from __future__ import annotations

import os
from pathlib import Path

from usb_media_sync.app.cancellation import CancellationToken
from usb_media_sync.config.settings import SyncConfig
from usb_media_sync.domain import Device, DeviceState
from usb_media_sync.logging import EventLogger, LoggerFactory


log = LoggerFactory.for_device()
probe_log = LoggerFactory.for_probe()


class DeviceMonitor:
    def __init__(self, config: SyncConfig, token: CancellationToken | None = None):
        self.config = config
        self.token = token or CancellationToken()
        self.device = Device(name=config.device_name, mount_point=config.mount_point)
        self._last_state: DeviceState | None = None

    @property
    def mount_point(self) -> Path:
        return self.device.mount_point

    def probe(self) -> DeviceState:
        """Check the device once. No state is kept beyond the last-seen value for logging."""
        state = self._probe_once()
        probe_log.trace(f"Probe {self.device.name}: {state.value}")
        if state is not self._last_state:
            if state is DeviceState.PRESENT_READ_ONLY:
                log.warning("Drive detected but not writable. Treating as disconnected.")
            EventLogger.log_device_state(log, self.device.name, state.value)
            self._last_state = state
        return state

    def is_writable(self) -> bool:
        return self.probe().is_writable

    def _probe_once(self) -> DeviceState:
        if not self.mount_point.is_dir():
            return DeviceState.ABSENT
        marker = self.mount_point / self.config.probe_marker
        try:
            fd = os.open(marker, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
            os.close(fd)
        except OSError as error:
            probe_log.debug(f"Write probe failed on {self.mount_point}: {error}")
            return DeviceState.PRESENT_READ_ONLY
        try:
            marker.unlink()
        except FileNotFoundError:
            # Device vanished between create and remove
            return DeviceState.ABSENT
        except OSError as error:
            probe_log.debug(f"Could not remove probe marker {marker}: {error}")
            return DeviceState.PRESENT_READ_ONLY
        return DeviceState.PRESENT_WRITABLE

    def wait_until_writable(self) -> int:
        """Block until the device is present and writable.

        Polls every ``poll_interval`` seconds with no timeout. A progress line
        is logged every ``wait_log_interval`` polls. Returns the number of
        polls spent waiting. Raises OperationCancelledError if the token is
        cancelled while waiting.
        """
        if self.probe().is_writable:
            return 0

        name = self.device.name
        log.info(f"Waiting for drive {name} to be connected and writable...")
        polls = 0
        while True:
            self.token.wait(self.config.poll_interval)
            polls += 1
            if self.probe().is_writable:
                break
            if polls % self.config.wait_log_interval == 0:
                waited = polls * self.config.poll_interval
                log.info(f"Still waiting for drive {name}... ({waited:g} seconds)")
        log.info(f"Drive {name} connected and writable.")
        return polls
