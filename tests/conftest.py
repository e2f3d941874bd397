"""
Pytest configuration and shared fixtures for usb-media-sync tests.

The "device" is a directory under tmp_path. Unplugging renames it away and
plugging renames it back, so probes, copies and deletes see a real mount
point disappear and reappear. Waits go through InstantToken, which never
sleeps and can run hooks (e.g. re-plug the device) on each poll.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import pytest
from loguru import logger

from usb_media_sync.app.cancellation import CancellationToken
from usb_media_sync.config.settings import SyncConfig
from usb_media_sync.storage.device_monitor import DeviceMonitor
from usb_media_sync.storage.exceptions import OperationCancelledError


# ==============================================================================
# Cancellation / Timing Fixtures
# ==============================================================================


class InstantToken(CancellationToken):
    """Cancellation token whose waits return immediately.

    Hooks are called with the running wait count on every wait. A hard limit
    turns a runaway retry loop into a test failure instead of a hang.
    """

    def __init__(self, limit: int = 1000) -> None:
        super().__init__()
        self.waits = 0
        self.waited_seconds: List[float] = []
        self.limit = limit
        self.hooks: List[Callable[[int], None]] = []

    def on_wait(self, hook: Callable[[int], None]) -> None:
        self.hooks.append(hook)

    def wait(self, seconds: float) -> None:
        self.raise_if_cancelled()
        self.waits += 1
        self.waited_seconds.append(seconds)
        for hook in list(self.hooks):
            hook(self.waits)
        if self.waits > self.limit:
            raise OperationCancelledError("wait limit exceeded in test")
        self.raise_if_cancelled()


@pytest.fixture
def token() -> InstantToken:
    return InstantToken()


# ==============================================================================
# Device Fixtures
# ==============================================================================


class FakeDevice:
    """Plug/unplug a tmp_path mount point."""

    def __init__(self, mount_point: Path) -> None:
        self.mount_point = mount_point
        self.parked = mount_point.with_name(f".{mount_point.name}.unplugged")

    @property
    def plugged(self) -> bool:
        return self.mount_point.is_dir()

    def unplug(self) -> None:
        if self.plugged:
            self.mount_point.rename(self.parked)

    def plug(self) -> None:
        if not self.plugged:
            self.parked.rename(self.mount_point)

    def plug_after(self, token: InstantToken, waits: int) -> None:
        """Re-plug once ``token`` has waited ``waits`` times."""

        def hook(count: int) -> None:
            if count >= waits:
                self.plug()

        token.on_wait(hook)


@pytest.fixture
def mount_point(tmp_path) -> Path:
    mount = tmp_path / "Volumes" / "H2OSTREAMDM"
    mount.mkdir(parents=True)
    return mount


@pytest.fixture
def device(mount_point) -> FakeDevice:
    return FakeDevice(mount_point)


@pytest.fixture
def config(mount_point) -> SyncConfig:
    return SyncConfig(
        device_name="H2OSTREAMDM",
        mount_point=mount_point,
        poll_interval=0.0,
        keep_awake=False,
        copy_chunk_size=4,
    )


@pytest.fixture
def monitor(config, token) -> DeviceMonitor:
    return DeviceMonitor(config, token)


# ==============================================================================
# Source Folder Fixtures
# ==============================================================================


@pytest.fixture
def album(tmp_path) -> Path:
    """A local album folder whose discovery order differs from track order."""
    folder = tmp_path / "music" / "Album"
    folder.mkdir(parents=True)
    files = {
        "track_03_of_04.mp3": b"third track data",
        "track_01_of_04.mp3": b"first",
        "track_04_of_04.mp3": b"fourth track, longest of them all",
        "track_02_of_04.mp3": b"second track",
    }
    for name, data in files.items():
        (folder / name).write_bytes(data)
    return folder


# ==============================================================================
# Logging Fixtures
# ==============================================================================


@pytest.fixture
def log_records():
    """Capture loguru records synchronously for assertions."""
    logger.remove()
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def log_messages(log_records) -> Callable[[], List[str]]:
    return lambda: [record["message"] for record in log_records]
