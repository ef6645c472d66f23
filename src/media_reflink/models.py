"""Core enums, constants, and record types for media-reflink.

Enums:
    Action    -- Run action (test, renew, reflink). Unknown strings fall back
                 to test so a typo never triggers a copy.
    FileKind  -- What a source entry is (file, dir, skip, nested).

Records:
    SourceMap -- One source -> target assignment. Nested records carry their
                 addressable children; the parent's own target is display-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Action(StrEnum):
    TEST = "test"
    RENEW = "renew"
    REFLINK = "reflink"

    @classmethod
    def parse(cls, value: str | None) -> Action:
        """Map a CLI string to an Action, defaulting to TEST."""
        try:
            return cls(value) if value else cls.TEST
        except ValueError:
            return cls.TEST


class FileKind(StrEnum):
    FILE = "file"
    DIR = "dir"
    SKIP = "skip"
    NESTED = "nested"


MEDIA_EXTENSIONS: tuple[str, ...] = (".mkv", ".mp4", ".avi")

# Directory names longer than this are treated as descriptive release folders
SIGNAL_NAME_MIN_LENGTH = 20

SEASON_PREFIX = "season"

# Partial downloads left behind by the download client
PARTIAL_SUFFIX = ".parts"


@dataclass
class SourceMap:
    """Assignment of one source folder (or file) to a library target."""

    source: str
    target: str = ""
    active: bool = True
    kind: FileKind = FileKind.DIR
    children: list[SourceMap] = field(default_factory=list)

    @property
    def is_eligible(self) -> bool:
        """Active and not a skip entry -- the only records the walker visits."""
        return self.active and self.kind != FileKind.SKIP

    @property
    def is_nested(self) -> bool:
        return self.kind == FileKind.NESTED

    @property
    def display_target(self) -> str:
        """Target for display. Nested parents report their active children's."""
        if not self.is_nested:
            return self.target
        seen: list[str] = []
        for child in self.children:
            if child.active and child.target and child.target not in seen:
                seen.append(child.target)
        return ", ".join(seen)
