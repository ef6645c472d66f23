"""Find new source entries and library targets on disk."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .errors import LibraryError
from .models import PARTIAL_SUFFIX, Action, FileKind, SourceMap
from .signals import Entry, Lister, list_dir
from .state import MapState

log = logger.bind(stage="discover")


def classify_source(
    entry: Entry, lister: Lister = list_dir,
) -> tuple[FileKind, list[SourceMap]]:
    """Work out a source entry's kind, plus child records for nested folders.

    A folder holding only subfolders is a batch of separate releases: each
    subfolder becomes its own record to be matched independently.
    """
    if entry.is_file:
        if entry.name.endswith(PARTIAL_SUFFIX):
            return FileKind.SKIP, []
        return FileKind.FILE, []
    if not entry.is_dir:
        return FileKind.FILE, []

    inner = lister(entry.path)
    if any(not e.is_dir for e in inner):
        return FileKind.DIR, []
    children = [SourceMap(source=e.name, kind=FileKind.DIR) for e in inner]
    return FileKind.NESTED, children


def _renew(record: SourceMap, kind: FileKind, children: list[SourceMap]) -> bool:
    """Re-classify a known record. Returns True if anything changed."""
    if kind == FileKind.NESTED:
        for child in children:
            child.target = record.target
    if record.kind == kind and record.children == children:
        return False
    record.kind = kind
    record.children = children
    return True


def discover_sources(
    state: MapState,
    source_dir: Path,
    action: Action = Action.TEST,
    lister: Lister = list_dir,
) -> list[str]:
    """Append records for new source entries. Returns the new names.

    With Action.RENEW, known records are re-classified in place. Children of
    a record that becomes nested inherit its target.
    """
    if not source_dir.is_dir():
        raise LibraryError(f"Source directory does not exist: {source_dir}")

    known = {r.source: r for r in state.source_maps}
    added: list[str] = []
    for entry in lister(source_dir):
        record = known.get(entry.name)
        if record is not None:
            if action != Action.RENEW:
                continue
            kind, children = classify_source(entry, lister)
            if _renew(record, kind, children):
                log.info(f"Renewed source: {entry.name} ({kind})")
            continue

        kind, children = classify_source(entry, lister)
        state.source_maps.append(
            SourceMap(source=entry.name, kind=kind, children=children)
        )
        added.append(entry.name)
        log.info(f"New source: {entry.name} ({kind})")
    return added


def discover_targets(
    state: MapState, library_dir: Path, lister: Lister = list_dir,
) -> list[str]:
    """Record every library entry name not yet known. Returns the new names."""
    if not library_dir.is_dir():
        raise LibraryError(f"Library directory does not exist: {library_dir}")

    added = [e.name for e in lister(library_dir) if state.add_target(e.name)]
    if added:
        log.debug(f"Found {len(added)} new targets in {library_dir}")
    return added
