"""Domain models for USB media sync operations."""

from __future__ import annotations

from .models import (
    Action,
    CopyAction,
    DeleteAction,
    DeleteOutcome,
    Device,
    DeviceState,
    FolderEntry,
    ListAction,
    ProgressState,
    SortKey,
    TransferItem,
    TransferReport,
    TransferState,
    TransferTask,
)


__all__ = [
    "Action",
    "CopyAction",
    "DeleteAction",
    "DeleteOutcome",
    "Device",
    "DeviceState",
    "FolderEntry",
    "ListAction",
    "ProgressState",
    "SortKey",
    "TransferItem",
    "TransferReport",
    "TransferState",
    "TransferTask",
]
