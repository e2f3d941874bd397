"""Top-level folder management on the device.

Both operations loop until they succeed: while the device is unavailable
they wait for it, and a delete that fails on a writable device is logged and
tried again after one poll interval.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from usb_media_sync.config.settings import SyncConfig
from usb_media_sync.domain import DeleteOutcome, FolderEntry
from usb_media_sync.logging import LoggerFactory
from usb_media_sync.storage.device_monitor import DeviceMonitor
from usb_media_sync.storage.exceptions import InvalidFolderNameError


log = LoggerFactory.for_folders()


def validate_folder_name(name: str) -> str:
    """Ensure ``name`` addresses exactly one folder at the device root.

    Raises:
        InvalidFolderNameError: If the name is empty, contains a path
            separator, or is ``.``/``..``
    """
    if not name or not name.strip():
        raise InvalidFolderNameError(name, "name is empty")
    if "/" in name or "\\" in name:
        raise InvalidFolderNameError(name, "must not contain path separators")
    if name in (".", ".."):
        raise InvalidFolderNameError(name, "must name a folder, not a relative path")
    if "\x00" in name:
        raise InvalidFolderNameError(name, "contains a NUL byte")
    return name


class FolderOps:
    def __init__(self, config: SyncConfig, monitor: DeviceMonitor):
        self.config = config
        self.monitor = monitor
        self.token = monitor.token

    def delete_folder(self, name: str) -> DeleteOutcome:
        """Recursively delete ``<mount point>/<name>``.

        Returns NOT_FOUND without retrying when the folder does not exist.
        """
        validate_folder_name(name)
        folder_path = self.monitor.device.folder_path(name)

        while True:
            if not self.monitor.is_writable():
                self.monitor.wait_until_writable()
                continue

            if not folder_path.is_dir():
                log.info(f"Folder {name} does not exist on the drive.")
                return DeleteOutcome.NOT_FOUND

            log.info(f"Deleting folder: {name}")
            try:
                shutil.rmtree(folder_path)
            except OSError as error:
                if not (isinstance(error, FileNotFoundError) and self._gone(folder_path)):
                    log.warning(f"Failed to delete folder. Retrying... ({error})")
                    self.token.wait(self.config.poll_interval)
                    continue
            log.success("Folder deleted successfully.")
            return DeleteOutcome.DELETED

    def _gone(self, folder_path: Path) -> bool:
        # Still mounted, so the folder went away rather than the whole device
        return self.monitor.is_writable() and not folder_path.exists()

    def list_folders(self) -> list[FolderEntry]:
        """Enumerate the directories directly under the mount point, sorted by name."""
        mount_point = self.monitor.mount_point

        while True:
            if not self.monitor.is_writable():
                self.monitor.wait_until_writable()
                continue

            try:
                entries = sorted(
                    (
                        FolderEntry(name=path.name, path=path)
                        for path in mount_point.iterdir()
                        if path.is_dir()
                    ),
                    key=lambda entry: entry.name,
                )
            except OSError as error:
                log.warning(f"Failed to list folders. Retrying... ({error})")
                self.token.wait(self.config.poll_interval)
                continue

            log.info(f"Folders on {self.config.device_name}:")
            for entry in entries:
                log.info(f"- {entry.name}")
            return entries
