"""Decide which directory entries are worth indexing.

Media files are indexed by exact filename. Directories are indexed only when
their name is unusual enough to survive a copy unchanged: longer than
SIGNAL_NAME_MIN_LENGTH characters, or starting with "season". Short generic
folder names ("Extras", "SPs") carry too little information and are skipped.

Listing is best-effort: any OSError reads as an empty directory.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .models import MEDIA_EXTENSIONS, SEASON_PREFIX, SIGNAL_NAME_MIN_LENGTH

log = logger.bind(stage="signal")


@dataclass(frozen=True)
class Entry:
    """One directory listing record."""

    name: str
    path: Path
    is_file: bool = False
    is_dir: bool = False


@dataclass(frozen=True)
class Signal:
    """An indexed name. recurse is set for directories worth descending into."""

    name: str
    recurse: Path | None = None


Lister = Callable[[Path], list[Entry]]


def list_dir(path: Path) -> list[Entry]:
    """List a directory one level deep. Unreadable directories yield []."""
    entries: list[Entry] = []
    try:
        with os.scandir(path) as it:
            for d in it:
                try:
                    is_dir = d.is_dir(follow_symlinks=False)
                    is_file = d.is_file(follow_symlinks=False)
                except OSError as e:
                    log.debug(f"Skip unreadable entry {d.path}: {e}")
                    continue
                entries.append(
                    Entry(name=d.name, path=Path(d.path), is_file=is_file, is_dir=is_dir)
                )
    except OSError as e:
        log.debug(f"Cannot list {path}: {e}")
        return []
    return entries


def classify(entry: Entry) -> Signal | None:
    """Return a Signal for media files and significant folders, else None."""
    name = entry.name
    if entry.is_file:
        if name.endswith(MEDIA_EXTENSIONS):
            return Signal(name)
        return None
    if entry.is_dir:
        if len(name) > SIGNAL_NAME_MIN_LENGTH or name.lower().startswith(SEASON_PREFIX):
            return Signal(name, recurse=entry.path)
    return None


def signal_names(entries: Iterable[Entry]) -> frozenset[str]:
    """Names of every signal entry in a one-level listing."""
    names = set()
    for entry in entries:
        sig = classify(entry)
        if sig is not None:
            names.add(sig.name)
    return frozenset(names)
