"""Disconnect-tolerant copy of a source folder onto the device.

This module copies every file of a local folder into
``<mount point>/<folder name>`` on the device, one file at a time, in the
order given by ``services.ordering``. The device may disappear at any moment:
any failure while creating the destination or writing a file sends the
engine back to waiting for the device, after which the same file is tried
again from the start. There is no retry limit.

A file already on the device with the same name and byte size is treated as
copied and skipped, which makes re-running a copy cheap and lets an
interrupted run resume where it stopped. Partially written files are left
in place; their size will not match, so they are rewritten on the next pass.

States:
    AWAITING_DEVICE -> CREATING_DESTINATION -> COPYING_FILES -> COMPLETE
    (any state falls back to AWAITING_DEVICE on a disconnect)
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

from usb_media_sync.app.cancellation import CancellationToken
from usb_media_sync.config.settings import SyncConfig
from usb_media_sync.domain import (
    TransferItem,
    TransferReport,
    TransferState,
    TransferTask,
)
from usb_media_sync.logging import EventLogger, LoggerFactory
from usb_media_sync.services.ordering import compute_order, discover_files
from usb_media_sync.services.progress import ProgressReporter
from usb_media_sync.storage.device_monitor import DeviceMonitor
from usb_media_sync.storage.exceptions import (
    SourceFileMissingError,
    SourceFileUnreadableError,
    SourceFolderError,
    UserInputError,
)


def build_task(source_folder: Path, mount_point: Path) -> TransferTask:
    """Resolve the source folder and compute the ordered copy list.

    Raises:
        SourceFolderError: If ``source_folder`` is not an existing local directory
    """
    source_folder = Path(source_folder).expanduser()
    if not source_folder.is_dir():
        raise SourceFolderError(source_folder)
    source_folder = source_folder.resolve()

    ordered = compute_order(discover_files(source_folder))
    items = tuple(
        TransferItem(source=path, dest_relative=Path(path.name)) for path in ordered
    )
    return TransferTask(
        source_root=source_folder,
        destination=mount_point / source_folder.name,
        items=items,
    )


def source_error(path: Path, error: OSError) -> UserInputError:
    """Map a local read failure on a source file to a fatal input error."""
    if isinstance(error, FileNotFoundError):
        return SourceFileMissingError(path)
    return SourceFileUnreadableError(path, str(error))


def file_digest(path: Path, chunk_size: int = 1024 * 1024) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


class TransferEngine:
    def __init__(
        self,
        config: SyncConfig,
        monitor: DeviceMonitor,
        reporter: ProgressReporter | None = None,
        token: CancellationToken | None = None,
    ):
        self.config = config
        self.monitor = monitor
        self.reporter = reporter or ProgressReporter(config.progress_width)
        self.token = token or monitor.token
        self.state = TransferState.AWAITING_DEVICE
        self.log = LoggerFactory.for_transfer()

    def run(self, task: TransferTask) -> TransferReport:
        """Wait for the device, create the destination and copy every file."""
        self._transition(TransferState.AWAITING_DEVICE)
        self.monitor.wait_until_writable()
        self.ensure_destination(task)
        self.log_copy_order(task)
        return self.copy_all(task)

    def log_copy_order(self, task: TransferTask) -> None:
        self.log.info("Files will be copied in the following order:")
        names: dict[str, Path] = {}
        for position, item in enumerate(task.items, start=1):
            self.log.info(f"{position}. {item.name}")
            if item.name in names:
                self.log.warning(
                    f"{item.source} has the same name as {names[item.name]}; "
                    "both are copied to the same destination file"
                )
            names.setdefault(item.name, item.source)
        self.log.info(f"Total files to copy: {task.total}")
        self.log.info("---")

    def ensure_destination(self, task: TransferTask) -> None:
        """Create the destination folder, waiting out disconnects. Never gives up."""
        while True:
            self._transition(TransferState.CREATING_DESTINATION)
            try:
                if not self.monitor.is_writable():
                    raise OSError(f"Drive {self.config.device_name} is not writable")
                task.destination.mkdir(parents=True, exist_ok=True)
            except OSError as error:
                self.log.warning(
                    "Unable to create destination folder. Drive may have disconnected. "
                    f"Waiting for reconnection... ({error})"
                )
                self._transition(TransferState.AWAITING_DEVICE)
                self._pause_for_device()
                continue
            self.log.debug(f"Destination folder ready: {task.destination}")
            return

    def copy_all(self, task: TransferTask) -> TransferReport:
        """Copy the task's files in order, retrying each one until it lands."""
        report = TransferReport(total=task.total, state=self.state)
        self._transition(TransferState.COPYING_FILES)

        index = 0
        while index < task.total:
            self.token.raise_if_cancelled()
            item = task.items[index]

            if not self.monitor.is_writable():
                self.log.info("Drive disconnected. Waiting for reconnection...")
                self._recover(task)
                continue

            dest = task.dest_path(item)
            try:
                if self._already_copied(item, dest):
                    self.log.info(f"Skipping: {item.name} (already exists)")
                    EventLogger.log_file_skipped(self.log, item.name, dest.stat().st_size)
                    report.skipped += 1
                else:
                    self.log.info(f"Copying: {item.name}")
                    written = self._copy_file(item.source, dest)
                    EventLogger.log_file_copied(self.log, item.name, written)
                    report.bytes_copied += written
                    report.copied += 1
                    report.copied_names.append(item.name)
            except OSError as error:
                if not item.source.is_file():
                    raise SourceFileMissingError(item.source) from error
                self.log.warning(
                    f"Failed to copy {item.name}. Drive may have disconnected. "
                    f"Retrying... ({error})"
                )
                report.retries += 1
                self._recover(task)
                continue

            index += 1
            self.reporter.update(report.completed, task.total)

        self.reporter.finish()
        self._transition(TransferState.COMPLETE)
        report.state = self.state
        self.log.success(
            f"All files copied successfully. "
            f"({report.copied} copied, {report.skipped} skipped, {report.retries} retries)"
        )
        return report

    def _already_copied(self, item: TransferItem, dest: Path) -> bool:
        try:
            source_size = item.source.stat().st_size
        except OSError as error:
            raise source_error(item.source, error) from error
        try:
            dest_stat = dest.stat()
        except FileNotFoundError:
            return False
        if not dest.is_file() or dest_stat.st_size != source_size:
            return False
        if self.config.verify_checksums:
            try:
                source_digest = file_digest(item.source)
            except OSError as error:
                raise source_error(item.source, error) from error
            return source_digest == file_digest(dest)
        return True

    def _copy_file(self, src: Path, dest: Path) -> int:
        """Copy ``src`` to ``dest`` in chunks and flush it to the device.

        Returns bytes written. Checks for cancellation between chunks. Read
        failures on ``src`` are fatal input errors; only errors on ``dest``
        propagate as OSError for the disconnect handling in ``copy_all``.
        """
        try:
            src_file = open(src, "rb")
        except OSError as error:
            raise source_error(src, error) from error

        bytes_copied = 0
        with src_file, open(dest, "wb") as dest_file:
            while True:
                self.token.raise_if_cancelled()
                try:
                    chunk = src_file.read(self.config.copy_chunk_size)
                except OSError as error:
                    raise source_error(src, error) from error
                if not chunk:
                    break
                dest_file.write(chunk)
                bytes_copied += len(chunk)
            dest_file.flush()
            os.fsync(dest_file.fileno())
        return bytes_copied

    def _recover(self, task: TransferTask) -> None:
        self._transition(TransferState.AWAITING_DEVICE)
        self._pause_for_device()
        self.ensure_destination(task)
        self._transition(TransferState.COPYING_FILES)

    def _pause_for_device(self) -> None:
        # Failures on a device that still probes writable pause one poll
        if self.monitor.wait_until_writable() == 0:
            self.token.wait(self.config.poll_interval)

    def _transition(self, state: TransferState) -> None:
        if state is not self.state:
            self.log.debug(f"Transfer state: {self.state.value} -> {state.value}")
            self.state = state
