from __future__ import annotations

import os
import sys
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger

DEFAULT_LOG_DIR = Path(
    os.environ.get(
        "USB_MEDIA_SYNC_LOG_DIR",
        Path.home() / ".local" / "state" / "usb-media-sync" / "logs",
    )
)


def _should_log_probe(record) -> bool:
    """Filter per-poll probe chatter - only show in TRACE mode."""
    tags = record["extra"].get("tags", [])

    # Always log warnings and above
    if record["level"].no >= logger.level("WARNING").no:
        return True

    if "probe" in tags:
        return record["level"].no <= logger.level("TRACE").no

    return True


def _should_log_progress(record) -> bool:
    """Filter progress events from the console - the progress bar covers them."""
    event_type = record["extra"].get("event_type")
    if event_type == "transfer_progress":
        return record["level"].no <= logger.level("TRACE").no
    return True


def _combined_filter(record) -> bool:
    """Combined filter for all console suppression rules."""
    return _should_log_probe(record) and _should_log_progress(record)


def setup_logging(
    *,
    debug: bool = False,
    trace: bool = False,
    log_dir: Path | None = None,
) -> Logger:
    """
    Setup multi-tier logging with separate sinks for different log levels.

    Log Files:
    - operations.log: INFO+ events (7 day retention)
    - debug.log: DEBUG+ events when --debug or --trace is enabled (3 day retention)
    - structured.jsonl: Structured JSON logs for analysis (7 day retention)

    Args:
        debug: Enable DEBUG level logging
        trace: Enable TRACE level logging (every device probe)
        log_dir: Custom log directory (defaults to ~/.local/state/usb-media-sync/logs)
    """
    logger.remove()
    logger.configure(extra={"job_id": "-", "tags": [], "source": "APP"})

    if trace:
        console_level = "TRACE"
    elif debug:
        console_level = "DEBUG"
    else:
        console_level = "INFO"

    # SINK 1: Console (stderr) - User-facing, filtered
    logger.add(
        sys.stderr,
        level=console_level,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        filter=_combined_filter,
        colorize=True,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[source]: <10}</cyan> | "
            "{message}"
        ),
    )

    log_dir = log_dir or DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    # SINK 2: Operations Log - Important events only (INFO+)
    logger.add(
        log_dir / "operations.log",
        level="INFO",
        rotation="5 MB",
        retention="7 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        filter=_should_log_progress,
        format=(
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{extra[source]: <10} | "
            "{extra[job_id]: <15} | "
            "{message}"
        ),
    )

    # SINK 3: Debug Log - Detailed diagnostics (DEBUG+ when debug=True)
    if debug or trace:
        logger.add(
            log_dir / "debug.log",
            level="TRACE" if trace else "DEBUG",
            rotation="10 MB",
            retention="3 days",
            compression="zip",
            enqueue=True,
            backtrace=True,
            diagnose=True,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{extra[source]: <10} | "
                "{extra[job_id]: <15} | "
                "{extra[tags]} | "
                "{message}"
            ),
        )

    # SINK 4: Structured JSON Log - For analysis tools (INFO+)
    logger.add(
        log_dir / "structured.jsonl",
        level="INFO",
        rotation="10 MB",
        retention="7 days",
        compression="zip",
        enqueue=True,
        serialize=True,
        format="{message}",
    )

    return logger


def get_logger(
    *,
    job_id: str | None = None,
    tags: Iterable[str] | None = None,
    source: str | None = None,
) -> Logger:
    """
    Get a logger with bound context.

    Args:
        job_id: Job identifier for tracking operations
        tags: Tags for filtering (e.g., ["transfer", "device"])
        source: Source component (e.g., "device", "transfer", "cli")

    Returns:
        Logger with bound context
    """
    extras: dict[str, object] = {}
    if job_id is not None:
        extras["job_id"] = job_id
    if tags is not None:
        extras["tags"] = list(tags)
    if source is not None:
        extras["source"] = source
    return logger.bind(**extras)


@contextmanager
def operation_context(operation: str, **details):
    """
    Context manager for tracking long-running operations with automatic timing.

    Logs operation start, completion, and failure with duration tracking.

    Args:
        operation: Operation name (e.g., "copy", "delete", "list")
        **details: Operation-specific details to log

    Yields:
        Logger bound with job_id and operation context

    Example:
        with operation_context("copy", source="/music/album") as log:
            log.debug("Building transfer task")
            # ... copy files ...
    """
    job_id = f"{operation}-{uuid.uuid4().hex[:8]}"

    with logger.contextualize(
        job_id=job_id,
        operation=operation,
        **details,
    ):
        start_time = time.time()
        log = logger.bind(source=operation, job_id=job_id, tags=[operation])

        log.info(f"{operation.capitalize()} started", **details)

        try:
            yield log
            duration = time.time() - start_time
            log.success(
                f"{operation.capitalize()} completed", duration_seconds=round(duration, 2)
            )
        except Exception as e:
            duration = time.time() - start_time
            log.error(
                f"{operation.capitalize()} failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=round(duration, 2),
            )
            raise


class LoggerFactory:
    """
    Factory for creating domain-specific loggers with automatic context.

    Each factory method returns a logger pre-configured with appropriate
    source and tags for the domain.
    """

    @staticmethod
    def for_device() -> Logger:
        """Logger for device availability checks and waits."""
        return logger.bind(source="device", tags=["device", "usb"])

    @staticmethod
    def for_probe() -> Logger:
        """Logger for individual probe results (TRACE-level noise)."""
        return logger.bind(source="device", tags=["device", "probe"])

    @staticmethod
    def for_transfer(job_id: str | None = None) -> Logger:
        """Logger for copy operations."""
        if job_id is None:
            job_id = f"copy-{uuid.uuid4().hex[:8]}"
        return logger.bind(job_id=job_id, source="transfer", tags=["transfer", "storage"])

    @staticmethod
    def for_folders() -> Logger:
        """Logger for delete and list operations on the device."""
        return logger.bind(source="folders", tags=["folders", "storage"])

    @staticmethod
    def for_system() -> Logger:
        """Logger for system operations (startup, shutdown, keep-awake)."""
        return logger.bind(source="system", tags=["system"])


class EventLogger:
    """
    Structured event logger using standardized schemas.

    Provides methods for logging common events with consistent structure
    and fields.
    """

    @staticmethod
    def log_device_state(log: Logger, device: str, state: str, **extra) -> None:
        """Log a device availability transition."""
        log.info(
            "Device state changed",
            event_type="device_state",
            device_name=device,
            state=state,
            **extra,
        )

    @staticmethod
    def log_file_copied(log: Logger, name: str, size_bytes: int, **extra) -> None:
        """Log a completed file copy."""
        log.debug(
            "File copied",
            event_type="file_copied",
            file_name=name,
            size_bytes=size_bytes,
            **extra,
        )

    @staticmethod
    def log_file_skipped(log: Logger, name: str, size_bytes: int, **extra) -> None:
        """Log a file skipped because the device already holds a matching copy."""
        log.debug(
            "File skipped",
            event_type="file_skipped",
            file_name=name,
            size_bytes=size_bytes,
            **extra,
        )

    @staticmethod
    def log_transfer_progress(log: Logger, completed: int, total: int, **extra) -> None:
        """Log transfer progress update."""
        log.debug(
            "Transfer progress update",
            event_type="transfer_progress",
            completed=completed,
            total=total,
            **extra,
        )
