"""Tests for sync exception classes."""

from pathlib import Path

import pytest

from usb_media_sync.storage.exceptions import (
    InvalidFolderNameError,
    KeepAwakeError,
    OperationCancelledError,
    SourceFileMissingError,
    SourceFileUnreadableError,
    SourceFolderError,
    SyncError,
    UsageError,
    UserInputError,
)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    @pytest.mark.parametrize(
        "error",
        [
            UsageError("bad"),
            SourceFolderError("/music/missing"),
            SourceFileMissingError("/music/a.mp3"),
            SourceFileUnreadableError("/music/a.mp3", "Permission denied"),
            InvalidFolderNameError("..", "reserved name"),
        ],
    )
    def test_user_input_errors(self, error):
        """Test user input errors share a base and exit status 1."""
        assert isinstance(error, UserInputError)
        assert isinstance(error, SyncError)
        assert error.exit_code == 1

    def test_cancellation_is_not_user_input(self):
        """Test cancellation has its own exit status."""
        error = OperationCancelledError()

        assert isinstance(error, SyncError)
        assert not isinstance(error, UserInputError)
        assert error.exit_code == 130

    def test_keep_awake_error_is_sync_error(self):
        """Test KeepAwakeError inheritance."""
        assert isinstance(KeepAwakeError(["caffeinate"], "missing"), SyncError)


class TestExceptionMessages:
    """Test exception attributes and messages."""

    def test_source_folder_error(self):
        """Test SourceFolderError keeps its path."""
        error = SourceFolderError("/music/missing")

        assert error.path == Path("/music/missing")
        assert str(error) == "Source folder does not exist: /music/missing"

    def test_source_file_missing_error(self):
        """Test SourceFileMissingError keeps its path."""
        error = SourceFileMissingError(Path("/music/a.mp3"))

        assert error.path == Path("/music/a.mp3")
        assert "disappeared" in str(error)

    def test_source_file_unreadable_error(self):
        """Test SourceFileUnreadableError keeps its path and reason."""
        error = SourceFileUnreadableError("/music/a.mp3", "Permission denied")

        assert error.path == Path("/music/a.mp3")
        assert error.reason == "Permission denied"
        assert str(error) == "Cannot read source file /music/a.mp3: Permission denied"

    def test_invalid_folder_name_error(self):
        """Test InvalidFolderNameError reports name and reason."""
        error = InvalidFolderNameError("a/b", "must not contain path separators")

        assert error.name == "a/b"
        assert error.reason == "must not contain path separators"
        assert str(error) == "Invalid folder name 'a/b': must not contain path separators"

    def test_operation_cancelled_error(self):
        """Test cancellation carries its reason."""
        assert str(OperationCancelledError("SIGINT")) == "Operation cancelled: SIGINT"
        assert OperationCancelledError().reason == "cancelled"

    def test_keep_awake_error(self):
        """Test KeepAwakeError names the helper."""
        error = KeepAwakeError(["systemd-inhibit", "sleep"], "not found")

        assert error.command == ["systemd-inhibit", "sleep"]
        assert str(error) == "Keep-awake helper systemd-inhibit failed: not found"
