"""Run orchestration: discover, match, optionally reflink, persist."""

from __future__ import annotations

import time
from dataclasses import dataclass

import click
from loguru import logger

from .cache import CacheRegistry
from .config import ReflinkConfig
from .discovery import discover_sources, discover_targets
from .errors import ConfigError
from .matcher import Matcher
from .models import Action
from .reflink import reflink_queue
from .signals import Lister, list_dir
from .state import MapState
from .walker import resolve_all, set_active, set_targets

log = logger.bind(stage="runner")


@dataclass
class RunResult:
    """Summary of one run."""

    new_sources: int = 0
    new_targets: int = 0
    resolved: int = 0
    copied: int = 0
    failed: int = 0


class ReflinkRunner:
    """Runs one discover -> match -> copy -> save pass."""

    def __init__(
        self,
        config: ReflinkConfig,
        action: Action = Action.TEST,
        lister: Lister = list_dir,
    ) -> None:
        self.config = config
        self.action = action
        self.lister = lister

    def run(self) -> RunResult:
        start = time.monotonic()
        cfg = self.config
        result = RunResult()
        if cfg.source_dir.resolve() == cfg.library_dir.resolve():
            raise ConfigError(f"Source and library are the same directory: {cfg.source_dir}")

        state = MapState.load(cfg.map_file)
        result.new_sources = len(
            discover_sources(state, cfg.source_dir, self.action, self.lister)
        )
        result.new_targets = len(discover_targets(state, cfg.library_dir, self.lister))

        # Caches live for this pass only
        registry = CacheRegistry(cfg.library_dir, self.lister)
        matcher = Matcher(registry, state.targets, cfg.source_dir, self.lister)
        queue = resolve_all(state.source_maps, matcher)
        set_targets(state.source_maps, queue)
        result.resolved = len(queue)
        log.debug(f"Indexed {len(registry)} of {len(state.targets)} targets")

        if self.action == Action.REFLINK and queue:
            if cfg.dry_run:
                click.echo("[DRY-RUN] No files will be copied")
            done = reflink_queue(
                state.source_maps, queue, cfg.source_dir, cfg.library_dir,
                dry_run=cfg.dry_run,
            )
            result.copied = len(done)
            result.failed = len(queue) - len(done)
            if not cfg.dry_run:
                set_active(state.source_maps, done, False)

        if cfg.dry_run:
            log.info(f"Dry run, not writing {cfg.map_file}")
        else:
            state.save(cfg.map_file)

        elapsed = time.monotonic() - start
        log.info(f"Total time taken to run is {elapsed:.2f}s")
        click.echo(
            f"{self.action}: {result.new_sources} new sources, "
            f"{result.resolved} mapped, {result.copied} copied, "
            f"{result.failed} failed"
        )
        return result
