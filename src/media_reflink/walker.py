"""Walk the assignment list, resolve targets, and write results back.

Results are collected first and applied in a second pass by path, so the
list is never mutated while it is being iterated.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from loguru import logger

from .models import SourceMap

if TYPE_CHECKING:
    from .matcher import Matcher

log = logger.bind(stage="walker")

T = TypeVar("T")


@dataclass(frozen=True)
class MapPath:
    """Address of a record: maps[outer], or maps[outer].children[inner]."""

    outer: int
    inner: int | None = None

    @property
    def is_nested(self) -> bool:
        return self.inner is not None

    def __str__(self) -> str:
        if self.inner is None:
            return f"[{self.outer}]"
        return f"[{self.outer}][{self.inner}]"


def _resolve_children(parent: SourceMap, matcher: Matcher) -> list[tuple[int, str]]:
    """Resolve a nested record's eligible children, returning (index, target)."""
    found: list[tuple[int, str]] = []
    for i, record in enumerate(parent.children):
        if not record.is_eligible or record.is_nested:
            continue
        if record.target:
            found.append((i, record.target))
            continue
        target = matcher.find_target(record.source, parent=parent.source)
        if target is not None:
            found.append((i, target))
    return found


def resolve_all(maps: list[SourceMap], matcher: Matcher) -> list[tuple[MapPath, str]]:
    """Collect (path, target) for every eligible record with a known target.

    Records that already have a target are queued unchanged so the copy
    stage sees them again. Nested records are resolved through their
    children only; the parent's own target is left alone.
    """
    queue: list[tuple[MapPath, str]] = []
    for i, record in enumerate(maps):
        if not record.is_eligible:
            continue
        if record.is_nested:
            for j, target in _resolve_children(record, matcher):
                queue.append((MapPath(i, j), target))
            continue
        if record.target:
            queue.append((MapPath(i), record.target))
            continue
        target = matcher.find_target(record.source)
        if target is not None:
            queue.append((MapPath(i), target))
    log.info(f"Resolved {len(queue)} mappings")
    return queue


def locate(maps: list[SourceMap], path: MapPath) -> SourceMap:
    """Return the record at path. A nested index on a flat record addresses the record."""
    record = maps[path.outer]
    if path.inner is not None and record.is_nested:
        return record.children[path.inner]
    return record


def apply_batch(
    maps: list[SourceMap],
    updates: Iterable[tuple[MapPath, T]],
    setter: Callable[[SourceMap, T], None],
) -> None:
    for path, value in updates:
        setter(locate(maps, path), value)


def set_targets(maps: list[SourceMap], queue: Iterable[tuple[MapPath, str]]) -> None:
    def _set(record: SourceMap, target: str) -> None:
        record.target = target

    apply_batch(maps, queue, _set)


def set_active(maps: list[SourceMap], paths: Iterable[MapPath], value: bool) -> None:
    def _set(record: SourceMap, active: bool) -> None:
        record.active = active

    apply_batch(maps, ((p, value) for p in paths), _set)
