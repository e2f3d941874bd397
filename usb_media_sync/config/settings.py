"""Settings loading for sync configuration."""

from __future__ import annotations

import getpass
import json
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from usb_media_sync.logging import LoggerFactory


log = LoggerFactory.for_system()

SETTINGS_PATH = Path(
    os.environ.get(
        "USB_MEDIA_SYNC_SETTINGS_PATH",
        Path.home() / ".config" / "usb-media-sync" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_DEVICE_NAME = "H2OSTREAMDM"
DEFAULT_WAIT_LOG_INTERVAL = 5
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_PROGRESS_WIDTH = 50
DEFAULT_PROBE_MARKER = ".usb_media_sync_probe"
DEFAULT_COPY_CHUNK_SIZE = 1024 * 1024


def default_mount_point(device_name: str, platform: str | None = None) -> Path:
    """Where the OS automounts a volume with the given label."""
    platform = platform or sys.platform
    if platform == "darwin":
        return Path("/Volumes") / device_name
    return Path("/media") / getpass.getuser() / device_name


@dataclass(frozen=True)
class SyncConfig:
    device_name: str = DEFAULT_DEVICE_NAME
    mount_point: Path | None = None
    wait_log_interval: int = DEFAULT_WAIT_LOG_INTERVAL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    progress_width: int = DEFAULT_PROGRESS_WIDTH
    probe_marker: str = DEFAULT_PROBE_MARKER
    verify_checksums: bool = False
    keep_awake: bool = True
    copy_chunk_size: int = DEFAULT_COPY_CHUNK_SIZE

    def __post_init__(self) -> None:
        if not self.device_name:
            raise ValueError("device_name must not be empty")
        if self.mount_point is None:
            object.__setattr__(
                self, "mount_point", default_mount_point(self.device_name)
            )
        else:
            object.__setattr__(self, "mount_point", Path(self.mount_point))
        if self.wait_log_interval < 1:
            raise ValueError("wait_log_interval must be at least 1")
        if self.poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        if self.progress_width < 1:
            raise ValueError("progress_width must be at least 1")
        if self.copy_chunk_size < 1:
            raise ValueError("copy_chunk_size must be at least 1")
        if not self.probe_marker or "/" in self.probe_marker:
            raise ValueError("probe_marker must be a plain file name")


CONFIG_KEYS = frozenset(f.name for f in fields(SyncConfig))


def read_settings_file(path: Path | None = None) -> dict[str, Any]:
    """Read the JSON settings file, returning {} when absent or unreadable."""
    path = path or SETTINGS_PATH
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        log.warning(f"Ignoring unreadable settings file {path}: {error}")
        return {}
    if not isinstance(data, dict):
        log.warning(f"Ignoring settings file {path}: expected a JSON object")
        return {}
    unknown = sorted(set(data) - CONFIG_KEYS)
    if unknown:
        log.debug(f"Ignoring unknown settings keys: {', '.join(unknown)}")
    return {key: value for key, value in data.items() if key in CONFIG_KEYS}


def load_config(path: Path | None = None, **overrides: Any) -> SyncConfig:
    """Build the config from defaults, the settings file and CLI overrides.

    Later layers win. Overrides set to None are ignored so argparse defaults
    can be passed straight through.
    """
    values = read_settings_file(path)
    values.update({key: value for key, value in overrides.items() if value is not None})
    if "mount_point" in values:
        values["mount_point"] = Path(values["mount_point"]).expanduser()
    return SyncConfig(**values)

