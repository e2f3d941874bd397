"""Dispatch one decoded action against the device.

The whole run is wrapped in a keep-awake lock that is released exactly once
whichever way the run ends: success, a user input error, or cancellation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from usb_media_sync.app.cancellation import CancellationToken
from usb_media_sync.config.settings import SyncConfig
from usb_media_sync.domain import (
    Action,
    CopyAction,
    DeleteAction,
    DeleteOutcome,
    FolderEntry,
    ListAction,
    TransferReport,
)
from usb_media_sync.logging import LoggerFactory, operation_context
from usb_media_sync.services.keep_awake import KeepAwake
from usb_media_sync.services.progress import ProgressReporter
from usb_media_sync.services.transfer import TransferEngine, build_task
from usb_media_sync.storage.device_monitor import DeviceMonitor
from usb_media_sync.storage.folders import FolderOps, validate_folder_name


log = LoggerFactory.for_system()


@dataclass
class RunResult:
    action: Action
    report: TransferReport | None = None
    delete_outcome: DeleteOutcome | None = None
    folders: list[FolderEntry] = field(default_factory=list)


class Orchestrator:
    def __init__(
        self,
        config: SyncConfig,
        token: CancellationToken | None = None,
        keep_awake_factory: Callable[[bool], KeepAwake] | None = None,
        reporter: ProgressReporter | None = None,
    ):
        self.config = config
        self.token = token or CancellationToken()
        self.keep_awake_factory = keep_awake_factory or KeepAwake
        self.monitor = DeviceMonitor(config, self.token)
        self.reporter = reporter

    def run(self, action: Action) -> RunResult:
        log.info(f"Sync started with action: {type(action).__name__}")
        with self.keep_awake_factory(self.config.keep_awake):
            if isinstance(action, CopyAction):
                result = self._copy(action)
            elif isinstance(action, DeleteAction):
                result = self._delete(action)
            elif isinstance(action, ListAction):
                result = self._list(action)
            else:
                raise TypeError(f"Unsupported action: {action!r}")
        log.info("Sync execution completed.")
        return result

    def _copy(self, action: CopyAction) -> RunResult:
        # Validate locally before blocking on the device
        task = build_task(action.source_folder, self.config.mount_point)
        with operation_context("copy", source_folder=str(task.source_root)):
            engine = TransferEngine(
                self.config, self.monitor, reporter=self.reporter, token=self.token
            )
            report = engine.run(task)
        return RunResult(action=action, report=report)

    def _delete(self, action: DeleteAction) -> RunResult:
        validate_folder_name(action.folder_name)
        with operation_context("delete", folder=action.folder_name):
            self.monitor.wait_until_writable()
            outcome = FolderOps(self.config, self.monitor).delete_folder(action.folder_name)
        return RunResult(action=action, delete_outcome=outcome)

    def _list(self, action: ListAction) -> RunResult:
        with operation_context("list"):
            folders = FolderOps(self.config, self.monitor).list_folders()
        return RunResult(action=action, folders=folders)
