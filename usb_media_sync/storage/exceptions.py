"""Custom exceptions for sync operations.

Exception Hierarchy:
    SyncError (base)
        ├── UserInputError
        │   ├── UsageError
        │   ├── SourceFolderError
        │   ├── SourceFileMissingError
        │   ├── SourceFileUnreadableError
        │   └── InvalidFolderNameError
        ├── OperationCancelledError
        └── KeepAwakeError

Disconnects surface as plain OSError from the device filesystem. They are
recovered inside the retry loops and never reach the CLI.
UserInputError subclasses are fatal and map to exit status 1.

Usage:
    from usb_media_sync.storage.exceptions import SourceFolderError

    if not source.is_dir():
        raise SourceFolderError(source)
"""

from __future__ import annotations

from pathlib import Path


class SyncError(Exception):
    """Base exception for all sync operations."""


class UserInputError(SyncError):
    """Invalid arguments or local input. Fatal, never retried."""

    exit_code = 1


class UsageError(UserInputError):
    """Command line could not be decoded into an action."""


class SourceFolderError(UserInputError):
    """Local source folder is missing or is not a directory."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Source folder does not exist: {path}")


class SourceFileMissingError(UserInputError):
    """A source file disappeared locally while the copy was running."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Source file disappeared during copy: {path}")


class SourceFileUnreadableError(UserInputError):
    """A source file exists locally but cannot be opened or read."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read source file {path}: {reason}")


class InvalidFolderNameError(UserInputError):
    """Folder name is not a single top-level path component."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid folder name {name!r}: {reason}")


class OperationCancelledError(SyncError):
    """A wait or retry loop was interrupted by cancellation."""

    exit_code = 130

    def __init__(self, reason: str = "cancelled"):
        self.reason = reason
        super().__init__(f"Operation cancelled: {reason}")


class KeepAwakeError(SyncError):
    """Keep-awake helper could not be started."""

    def __init__(self, command: list[str], reason: str):
        self.command = list(command)
        self.reason = reason
        super().__init__(f"Keep-awake helper {command[0]} failed: {reason}")
