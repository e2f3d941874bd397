"""Command line entry point.

    usb-media-sync copy <source_folder>   Copy a local folder onto the device
    usb-media-sync delete <folder_name>   Delete a top-level folder from the device
    usb-media-sync list                   List top-level folders on the device

Exit status: 0 on success, 1 on usage or input errors, 130 when interrupted.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn, Sequence

from usb_media_sync.__version__ import __version__
from usb_media_sync.app.cancellation import CancellationToken, shutdown_signals
from usb_media_sync.app.orchestrator import Orchestrator
from usb_media_sync.config.settings import load_config
from usb_media_sync.domain import Action, CopyAction, DeleteAction, ListAction
from usb_media_sync.logging import LoggerFactory, setup_logging
from usb_media_sync.storage.exceptions import (
    OperationCancelledError,
    UsageError,
    UserInputError,
)


log = LoggerFactory.for_system()

EXIT_OK = 0
EXIT_USAGE = UserInputError.exit_code
EXIT_CANCELLED = OperationCancelledError.exit_code


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with status 2."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="usb-media-sync",
        description="Sync folders to a USB media player that may disconnect at any time",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Log every device probe")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for log files")
    parser.add_argument("--config", type=Path, default=None, help="Path to settings.json")
    parser.add_argument("--device-name", default=None, help="Volume label of the device")
    parser.add_argument("--mount-point", type=Path, default=None, help="Mount path of the device")
    parser.add_argument(
        "--verify-checksums",
        action="store_true",
        default=None,
        help="Compare SHA-256 digests, not just sizes, before skipping a file",
    )
    parser.add_argument(
        "--no-keep-awake",
        dest="keep_awake",
        action="store_false",
        default=None,
        help="Do not inhibit system sleep while running",
    )

    subparsers = parser.add_subparsers(dest="command", parser_class=_Parser)
    copy_parser = subparsers.add_parser("copy", help="Copy files from a local folder to the device")
    copy_parser.add_argument("source_folder", type=Path)
    delete_parser = subparsers.add_parser("delete", help="Delete a folder from the device")
    delete_parser.add_argument("folder_name")
    subparsers.add_parser("list", help="List all folders on the device")
    return parser


def decode_action(args: argparse.Namespace) -> Action:
    """Turn parsed arguments into exactly one action variant."""
    if args.command == "copy":
        return CopyAction(source_folder=args.source_folder)
    if args.command == "delete":
        return DeleteAction(folder_name=args.folder_name)
    if args.command == "list":
        return ListAction()
    raise UsageError("no action given")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        action = decode_action(args)
    except UsageError as error:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: {error}", file=sys.stderr)
        print("  copy <folder_path>: Copy files from the specified folder to the device", file=sys.stderr)
        print("  delete <folder_name>: Delete the specified folder from the device", file=sys.stderr)
        print("  list: List all folders on the device", file=sys.stderr)
        return EXIT_USAGE

    try:
        setup_logging(debug=args.debug, trace=args.trace, log_dir=args.log_dir)
    except OSError as error:
        log.error(f"Cannot set up logging: {error}")
        return EXIT_USAGE

    try:
        config = load_config(
            args.config,
            device_name=args.device_name,
            mount_point=args.mount_point,
            verify_checksums=args.verify_checksums,
            keep_awake=args.keep_awake,
        )
    except (TypeError, ValueError) as error:
        log.error(f"Invalid configuration: {error}")
        return EXIT_USAGE
    except (OSError, KeyError, RuntimeError) as error:
        # No user entry or home directory to derive the mount point from
        log.error(f"Cannot determine the device mount point: {error}")
        return EXIT_USAGE

    token = CancellationToken()
    with shutdown_signals(token):
        try:
            Orchestrator(config, token).run(action)
        except UserInputError as error:
            log.error(str(error))
            return error.exit_code
        except OperationCancelledError as error:
            log.warning(str(error))
            return EXIT_CANCELLED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
