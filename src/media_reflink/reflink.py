"""Copy-on-write duplication of source folders into library targets."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from loguru import logger

from .errors import ExternalToolError, PlatformError, ReflinkError
from .models import SourceMap
from .walker import MapPath, locate

log = logger.bind(stage="reflink")


def _supports_reflink() -> bool:
    return sys.platform.startswith("linux")


def _run_cp(source: Path, target: Path) -> subprocess.CompletedProcess:
    """Run cp with reflink flags."""
    return subprocess.run(
        ["cp", "--archive", "-r", "--reflink=always", str(source), str(target)],
        capture_output=True,
        text=True,
    )


def reflink_dir(source: Path, target: Path, dry_run: bool = False) -> None:
    """Reflink source into the target directory, creating it if needed.

    Only Linux cp supports --reflink. Raises ExternalToolError when cp fails
    (commonly because the filesystem has no copy-on-write support).
    """
    if not _supports_reflink():
        raise PlatformError(
            f"Reflink copy is only supported on Linux. Source: {source}, Target: {target}."
        )
    log.info(f"Reflink {source} -> {target}")
    if dry_run:
        return

    target.mkdir(parents=True, exist_ok=True)
    result = _run_cp(source, target)
    if result.returncode != 0:
        raise ExternalToolError(
            "cp", result.returncode, result.stderr.strip(), command=result.args,
        )


def _source_path(maps: list[SourceMap], path: MapPath, source_dir: Path) -> Path:
    """Nested children live inside their parent's folder."""
    record = locate(maps, path)
    if path.inner is not None and maps[path.outer].is_nested:
        return source_dir / maps[path.outer].source / record.source
    return source_dir / record.source


def reflink_queue(
    maps: list[SourceMap],
    queue: list[tuple[MapPath, str]],
    source_dir: Path,
    library_dir: Path,
    dry_run: bool = False,
) -> list[MapPath]:
    """Reflink every queued record. Returns paths that copied successfully."""
    done: list[MapPath] = []
    for path, target in queue:
        source = _source_path(maps, path, source_dir)
        try:
            reflink_dir(source, library_dir / target, dry_run=dry_run)
        except (ReflinkError, OSError) as e:
            log.error(f"Reflink failed for {source.name}: {e}")
            continue
        done.append(path)
    return done
