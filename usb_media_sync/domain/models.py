"""Domain model for USB media sync operations.

Type-safe value objects shared by the device monitor, the transfer engine,
the folder operations and the CLI boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union


# ==============================================================================
# Device Domain
# ==============================================================================


class DeviceState(Enum):
    """Result of a single device probe. Never cached between checks."""

    ABSENT = "absent"
    PRESENT_READ_ONLY = "present_read_only"
    PRESENT_WRITABLE = "present_writable"

    @property
    def is_writable(self) -> bool:
        return self is DeviceState.PRESENT_WRITABLE


@dataclass(frozen=True)
class Device:
    """A removable device identified by name and expected mount path."""

    name: str  # e.g., "H2OSTREAMDM"
    mount_point: Path  # e.g., /Volumes/H2OSTREAMDM

    def folder_path(self, folder_name: str) -> Path:
        """Path of a top-level folder on the device."""
        return self.mount_point / folder_name


@dataclass(frozen=True)
class FolderEntry:
    """A directory found at the top level of the device."""

    name: str
    path: Path


# ==============================================================================
# Ordering Domain
# ==============================================================================


@dataclass(frozen=True, order=True)
class SortKey:
    """Sort key derived from a file name.

    Numeric keys (track numbers) order before text keys. Numeric keys compare
    by value, text keys compare lexically.
    """

    rank: int  # 0 for numeric keys, 1 for text keys
    number: int = 0
    text: str = ""

    NUMERIC_RANK = 0
    TEXT_RANK = 1

    @classmethod
    def numeric(cls, number: int) -> SortKey:
        return cls(rank=cls.NUMERIC_RANK, number=number)

    @classmethod
    def textual(cls, text: str) -> SortKey:
        return cls(rank=cls.TEXT_RANK, text=text)

    @property
    def is_numeric(self) -> bool:
        return self.rank == self.NUMERIC_RANK


# ==============================================================================
# Transfer Domain
# ==============================================================================


class TransferState(Enum):
    AWAITING_DEVICE = "awaiting_device"
    CREATING_DESTINATION = "creating_destination"
    COPYING_FILES = "copying_files"
    COMPLETE = "complete"


@dataclass(frozen=True)
class TransferItem:
    """One source file and where it lands relative to the destination root."""

    source: Path
    dest_relative: Path

    @property
    def name(self) -> str:
        return self.dest_relative.name


@dataclass(frozen=True)
class TransferTask:
    """Ordered, immutable list of files to copy into one destination folder."""

    source_root: Path
    destination: Path
    items: tuple[TransferItem, ...]

    @property
    def total(self) -> int:
        return len(self.items)

    def dest_path(self, item: TransferItem) -> Path:
        return self.destination / item.dest_relative


@dataclass(frozen=True)
class ProgressState:
    completed: int
    total: int

    def __post_init__(self) -> None:
        if self.completed < 0 or self.total < 0:
            raise ValueError("Progress counts must be non-negative")
        if self.completed > self.total:
            raise ValueError(
                f"Completed count {self.completed} exceeds total {self.total}"
            )

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return self.completed * 100 // self.total


@dataclass
class TransferReport:
    """Outcome counters for one copy run."""

    total: int = 0
    copied: int = 0
    skipped: int = 0
    bytes_copied: int = 0
    retries: int = 0
    state: TransferState = TransferState.AWAITING_DEVICE
    copied_names: list[str] = field(default_factory=list)

    @property
    def completed(self) -> int:
        return self.copied + self.skipped


# ==============================================================================
# Folder Operations Domain
# ==============================================================================


class DeleteOutcome(Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"


# ==============================================================================
# CLI Actions
# ==============================================================================


@dataclass(frozen=True)
class CopyAction:
    source_folder: Path


@dataclass(frozen=True)
class DeleteAction:
    folder_name: str


@dataclass(frozen=True)
class ListAction:
    pass


Action = Union[CopyAction, DeleteAction, ListAction]
