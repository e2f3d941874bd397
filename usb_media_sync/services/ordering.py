"""Copy order for source files.

Cheap MP3 players play files in the order they were written to the FAT
table, so the copy order is the playback order. Files are ordered by track
number when one can be read from the name, otherwise by name.

Key extraction, first match wins:
    1. ``track_<n>_of_<anything>``      -> n
    2. ``_<n>_``                         -> first such numeral
       (the start of the name counts as a leading underscore)
    3. the file name itself

Numeric keys sort before text keys, numerically among themselves. Text keys
sort lexically. Ties keep discovery order.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from usb_media_sync.domain import SortKey


TRACK_OF_PATTERN = re.compile(r"track_(\d+)_of_", re.IGNORECASE)
DELIMITED_NUMBER_PATTERN = re.compile(r"(?:^|_)(\d+)_")


def extract_sort_key(filename: str) -> SortKey:
    """Derive the sort key for a bare file name."""
    match = TRACK_OF_PATTERN.search(filename)
    if match:
        return SortKey.numeric(int(match.group(1)))
    match = DELIMITED_NUMBER_PATTERN.search(filename)
    if match:
        return SortKey.numeric(int(match.group(1)))
    return SortKey.textual(filename)


def compute_order(files: Iterable[Path]) -> list[Path]:
    """Return ``files`` in copy order.

    Deterministic for a given input sequence. Duplicate paths are kept once,
    at their first position.
    """
    seen: set[Path] = set()
    keyed: list[tuple[SortKey, int, Path]] = []
    for index, path in enumerate(files):
        if path in seen:
            continue
        seen.add(path)
        keyed.append((extract_sort_key(path.name), index, path))
    keyed.sort(key=lambda entry: (entry[0], entry[1]))
    return [path for _, _, path in keyed]


def discover_files(source_folder: Path) -> list[Path]:
    """All regular files under ``source_folder``, in a stable walk order."""
    return sorted(path for path in source_folder.rglob("*") if path.is_file())
