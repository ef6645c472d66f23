"""YAML mapping state file: source -> target assignments plus known targets.

Format:

    source_maps:
      - source: "[Group] Show Name"
        target: "Show Name [Title]"
        active: true
        kind: dir
      - source: "Batch"
        target: ""
        active: true
        kind: nested
        children:
          - {source: "Show A", target: "", active: true, kind: dir}
    targets:
      - "Show Name [Title]"

Writes are atomic (temp file + os.replace).
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from .errors import StateError
from .models import FileKind, SourceMap

log = logger.bind(stage="state")


def _list_field(data: dict[str, Any], key: str, where: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise StateError(f"'{key}' in {where} must be a list, got {type(value).__name__}")
    return value


def _record_from_dict(data: Any) -> SourceMap:
    if not isinstance(data, dict):
        raise StateError(f"Record must be a mapping, got {data!r}")
    if "source" not in data:
        raise StateError(f"Record without source: {data!r}")
    source = data["source"]
    try:
        kind = FileKind(data.get("kind", FileKind.DIR))
    except (ValueError, TypeError) as exc:
        raise StateError(f"Unknown kind for {source!r}: {exc}") from exc
    active = data.get("active", True)
    if not isinstance(active, bool):
        raise StateError(f"'active' for {source!r} must be true or false, got {active!r}")
    return SourceMap(
        source=str(source),
        target=str(data.get("target") or ""),
        active=active,
        kind=kind,
        children=[
            _record_from_dict(c) for c in _list_field(data, "children", repr(source))
        ],
    )


def _record_to_dict(record: SourceMap) -> dict[str, Any]:
    data: dict[str, Any] = {
        "source": record.source,
        "target": record.target,
        "active": record.active,
        "kind": str(record.kind),
    }
    if record.is_nested:
        data["children"] = [_record_to_dict(c) for c in record.children]
    return data


@dataclass
class MapState:
    """In-memory copy of the mapping file."""

    source_maps: list[SourceMap] = field(default_factory=list)
    targets: list[str] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> MapState:
        """Read state from path. A missing file is an empty state."""
        if not path.exists():
            log.debug(f"No map file at {path}, starting empty")
            return cls()
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (yaml.YAMLError, OSError) as exc:
            log.error(f"Failed to read map file {path}: {exc}")
            raise StateError(f"Failed to read map file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StateError(f"Map file {path} is not a mapping")

        state = cls(
            source_maps=[
                _record_from_dict(d) for d in _list_field(data, "source_maps", str(path))
            ],
            targets=[str(t) for t in _list_field(data, "targets", str(path))],
        )
        log.debug(
            f"Loaded {len(state.source_maps)} mappings, "
            f"{len(state.targets)} targets from {path}"
        )
        return state

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_maps": [_record_to_dict(r) for r in self.source_maps],
            "targets": list(self.targets),
        }

    def save(self, path: Path) -> None:
        """Atomically write state to path, creating the parent directory."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    self.to_dict(), f, allow_unicode=True, sort_keys=False,
                )
            os.replace(tmp_path, path)
            log.debug(f"Wrote map file {path}")
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError as cleanup_err:
                log.warning(f"Failed to cleanup temp file {tmp_path}: {cleanup_err}")
            raise

    # -- Lookups --

    def find(self, source: str) -> SourceMap | None:
        for record in self.source_maps:
            if record.source == source:
                return record
        return None

    def known_sources(self) -> set[str]:
        return {r.source for r in self.source_maps}

    def add_target(self, name: str) -> bool:
        """Record a target name. Returns True if it was new."""
        if name in self.targets:
            return False
        self.targets.append(name)
        return True
